"""
MindPad Backend — Note Service Unit Tests
==========================================

What:  NoteService against a per-test SQLite database.

What we test:
    ✅ Create defaults to "Untitled" / "" and blank titles are normalized
    ✅ List is scoped to the caller and ordered by updated_at descending
    ✅ Another user's note is indistinguishable from a missing one
    ✅ Update is partial and bumps updated_at
    ✅ Delete cascades to AI history
    ✅ Each write publishes one change event with contiguous seq
    ✅ SQLAlchemy failures surface as DatabaseError
"""

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from mindpad.exceptions import DatabaseError, NotFoundError
from mindpad.models.ai_history import AIHistory
from mindpad.schemas.note import NoteCreate, NoteUpdate
from mindpad.services.note_service import NoteService
from mindpad.services.realtime import ChangeFeed


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def service(feed):
    return NoteService(feed=feed)


class TestCreate:

    @pytest.mark.asyncio
    async def test_defaults(self, service, db_session, user_id):
        note = await service.create_note(db_session, user_id)

        assert note.title == "Untitled"
        assert note.content == ""
        assert note.user_id == user_id
        assert note.created_at == note.updated_at
        assert note.created_at.tzinfo is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   "])
    async def test_blank_title_becomes_untitled(self, service, db_session, user_id, title):
        note = await service.create_note(db_session, user_id, NoteCreate(title=title, content="x"))
        assert note.title == "Untitled"
        assert note.content == "x"

    @pytest.mark.asyncio
    async def test_publishes_insert(self, service, feed, db_session, user_id):
        note = await service.create_note(db_session, user_id)
        assert feed.current_seq("notes", user_id) == 1
        assert note.id is not None


class TestListAndGet:

    @pytest.mark.asyncio
    async def test_list_is_scoped_and_ordered(
        self, service, db_session, user_id, other_user_id
    ):
        first = await service.create_note(db_session, user_id, NoteCreate(title="First"))
        await asyncio.sleep(0.002)
        second = await service.create_note(db_session, user_id, NoteCreate(title="Second"))
        await service.create_note(db_session, other_user_id, NoteCreate(title="Not mine"))
        await asyncio.sleep(0.002)
        await service.update_note(db_session, user_id, first.id, NoteUpdate(content="edited"))

        notes = await service.list_notes(db_session, user_id)

        assert [n.id for n in notes] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_get_foreign_note_is_not_found(
        self, service, db_session, user_id, other_user_id
    ):
        note = await service.create_note(db_session, other_user_id)

        with pytest.raises(NotFoundError):
            await service.get_note(db_session, user_id, note.id)

    @pytest.mark.asyncio
    async def test_get_unknown_note_is_not_found(self, service, db_session, user_id):
        with pytest.raises(NotFoundError):
            await service.get_note(db_session, user_id, uuid4())


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_bumps_updated_at(self, service, feed, db_session, user_id):
        note = await service.create_note(db_session, user_id, NoteCreate(title="Plan", content="a"))
        await asyncio.sleep(0.002)

        updated = await service.update_note(db_session, user_id, note.id, NoteUpdate(content="b"))

        assert updated.title == "Plan"
        assert updated.content == "b"
        assert updated.updated_at > note.updated_at
        assert feed.current_seq("notes", user_id) == 2

    @pytest.mark.asyncio
    async def test_blank_title_update_is_untitled(self, service, db_session, user_id):
        note = await service.create_note(db_session, user_id, NoteCreate(title="Plan"))
        updated = await service.update_note(db_session, user_id, note.id, NoteUpdate(title=""))
        assert updated.title == "Untitled"

    @pytest.mark.asyncio
    async def test_update_foreign_note_is_not_found(
        self, service, feed, db_session, user_id, other_user_id
    ):
        note = await service.create_note(db_session, other_user_id)

        with pytest.raises(NotFoundError):
            await service.update_note(db_session, user_id, note.id, NoteUpdate(content="x"))
        assert feed.current_seq("notes", user_id) == 0


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_cascades_history(self, service, feed, db_session, user_id):
        note = await service.create_note(db_session, user_id, NoteCreate(content="text"))
        db_session.add(AIHistory(note_id=note.id, prompt="summarize", ai_response="sum"))
        await db_session.commit()

        await service.delete_note(db_session, user_id, note.id)

        remaining = await db_session.execute(
            select(func.count(AIHistory.id)).where(AIHistory.note_id == note.id)
        )
        assert remaining.scalar_one() == 0
        with pytest.raises(NotFoundError):
            await service.get_note(db_session, user_id, note.id)
        assert feed.current_seq("notes", user_id) == 2

    @pytest.mark.asyncio
    async def test_delete_foreign_note_is_not_found(
        self, service, db_session, user_id, other_user_id
    ):
        note = await service.create_note(db_session, other_user_id)

        with pytest.raises(NotFoundError):
            await service.delete_note(db_session, user_id, note.id)
        assert await service.get_note(db_session, other_user_id, note.id)


class TestHistory:

    @pytest.mark.asyncio
    async def test_newest_first(self, service, db_session, user_id):
        note = await service.create_note(db_session, user_id, NoteCreate(content="text"))
        db_session.add(AIHistory(note_id=note.id, prompt="summarize", ai_response="old"))
        await db_session.commit()
        await asyncio.sleep(0.002)
        db_session.add(AIHistory(note_id=note.id, prompt="generate_ideas", ai_response="new"))
        await db_session.commit()

        history = await service.list_history(db_session, user_id, note.id)

        assert [h.ai_response for h in history] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_foreign_history_is_not_found(
        self, service, db_session, user_id, other_user_id
    ):
        note = await service.create_note(db_session, other_user_id)
        with pytest.raises(NotFoundError):
            await service.list_history(db_session, user_id, note.id)


class TestDatabaseFailures:

    @pytest.mark.asyncio
    async def test_list_failure_is_database_error(self, service, mock_db_session, user_id):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError) as exc_info:
            await service.list_notes(mock_db_session, user_id)
        assert "Could not retrieve notes" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_create_failure_publishes_nothing(self, service, feed, mock_db_session, user_id):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("locked"))

        with pytest.raises(DatabaseError):
            await service.create_note(mock_db_session, user_id)

        mock_db_session.rollback.assert_awaited_once()
        assert feed.current_seq("notes", user_id) == 0
