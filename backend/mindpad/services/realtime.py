"""
MindPad Backend — Realtime Change Feed
=======================================

What:  In-process publish/subscribe of row changes, keyed by (table, user_id).
How:   Every subscriber owns a bounded asyncio.Queue. publish() stamps the
       event with the next sequence number for its key and offers it to each
       queue without waiting.
Who:   NoteService publishes after each commit; GET /realtime/notes streams a
       subscription to the browser as Server-Sent Events.

Delivery rules:
    - Sequence numbers start at 1 per key and increase by exactly one per
      published event, whether or not anyone is listening.
    - A full queue drops the event for that subscriber only. The subscriber
      sees a jump in `seq` and reloads; nobody else is affected.
    - The feed lives in process memory: one worker, no replay after restart.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional, Set, Tuple

from mindpad.schemas.note import NoteResponse
from mindpad.schemas.realtime import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

FeedKey = Tuple[str, uuid.UUID]


class Subscription:
    """
    One listener on a feed key.

    `start_seq` is the key's sequence number at the moment of subscribing;
    the first event delivered is expected to be `start_seq + 1`.
    """

    def __init__(self, key: FeedKey, start_seq: int, max_queue_size: int):
        self.key = key
        self.start_seq = start_seq
        self.queue: "asyncio.Queue[ChangeEvent]" = asyncio.Queue(maxsize=max_queue_size)
        self.dropped = 0

    def offer(self, event: ChangeEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Realtime subscriber on %s/%s is behind; dropped event seq=%d",
                self.key[0],
                self.key[1],
                event.seq,
            )

    async def get(self) -> ChangeEvent:
        return await self.queue.get()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeEvent:
        return await self.get()


class ChangeFeed:
    """Fan-out of committed changes to live subscribers."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._seq: Dict[FeedKey, int] = {}
        self._subscribers: Dict[FeedKey, Set[Subscription]] = {}

    def current_seq(self, table: str, user_id: uuid.UUID) -> int:
        return self._seq.get((table, user_id), 0)

    def subscriber_count(self, table: str, user_id: uuid.UUID) -> int:
        return len(self._subscribers.get((table, user_id), ()))

    def publish(
        self,
        table: str,
        user_id: uuid.UUID,
        event_type: ChangeType,
        record_id: uuid.UUID,
        record: Optional[NoteResponse] = None,
    ) -> ChangeEvent:
        """
        Stamp and deliver one change.

        Returns the published event (also when there are no subscribers).
        """
        key = (table, user_id)
        seq = self._seq.get(key, 0) + 1
        self._seq[key] = seq

        event = ChangeEvent(
            seq=seq,
            table=table,
            event_type=event_type,
            record_id=record_id,
            record=record,
            commit_timestamp=datetime.now(timezone.utc),
        )

        for subscription in list(self._subscribers.get(key, ())):
            subscription.offer(event)
        return event

    @asynccontextmanager
    async def subscribe(self, table: str, user_id: uuid.UUID) -> AsyncIterator[Subscription]:
        """
        Register a subscription for the duration of the `async with` block.

        Example:
            async with change_feed.subscribe("notes", user.id) as sub:
                async for event in sub:
                    ...
        """
        key = (table, user_id)
        subscription = Subscription(key, self.current_seq(table, user_id), self.max_queue_size)
        self._subscribers.setdefault(key, set()).add(subscription)
        logger.debug("Realtime subscribe %s/%s (seq=%d)", table, user_id, subscription.start_seq)
        try:
            yield subscription
        finally:
            subscribers = self._subscribers.get(key)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscribers[key]
            logger.debug("Realtime unsubscribe %s/%s", table, user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
change_feed = ChangeFeed()
