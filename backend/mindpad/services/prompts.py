"""
MindPad Backend — AI Action Prompt Table
=========================================

What:  The fixed mapping from action name to (system prompt, user prompt).
How:   A static dict keyed by `AssistantAction`; the user prompt is a template
       with a single `{content}` placeholder.
Who:   AssistantService, before any outbound call.

The table is not configurable at runtime.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from mindpad.exceptions import InvalidActionError


class AssistantAction(str, Enum):
    SUMMARIZE = "summarize"
    REWRITE_FORMAL = "rewrite_formal"
    REWRITE_CONCISE = "rewrite_concise"
    GENERATE_IDEAS = "generate_ideas"


@dataclass(frozen=True)
class PromptTemplate:
    system: str
    user: str

    def render(self, content: str) -> List[Dict[str, str]]:
        """Two-message conversation: system, then user."""
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user.format(content=content)},
        ]


PROMPTS: Dict[AssistantAction, PromptTemplate] = {
    AssistantAction.SUMMARIZE: PromptTemplate(
        system="You are a helpful assistant that creates clear, concise summaries.",
        user="Summarize the following note in 2-3 sentences:\n\n{content}",
    ),
    AssistantAction.REWRITE_FORMAL: PromptTemplate(
        system=(
            "You are a professional writing assistant that transforms text "
            "into formal, professional language."
        ),
        user="Rewrite the following text in a formal, professional tone:\n\n{content}",
    ),
    AssistantAction.REWRITE_CONCISE: PromptTemplate(
        system=(
            "You are a writing assistant that makes text more concise "
            "while preserving meaning."
        ),
        user="Rewrite the following text to be more concise:\n\n{content}",
    ),
    AssistantAction.GENERATE_IDEAS: PromptTemplate(
        system=(
            "You are a creative assistant that generates innovative ideas "
            "based on given topics."
        ),
        user="Based on this note, generate 5 creative ideas or next steps:\n\n{content}",
    ),
}


def parse_action(value: object) -> AssistantAction:
    """
    Resolve an action name.

    Raises:
        InvalidActionError: for anything but the four known names.
    """
    try:
        return AssistantAction(value)
    except (ValueError, TypeError):
        raise InvalidActionError(action=value)


def build_messages(action: AssistantAction, content: str) -> List[Dict[str, str]]:
    return PROMPTS[action].render(content)
