"""
Shared models and data structures for chat responses.

The streaming orchestrator yields a tagged union of content and error
events; the API layer flattens both into the same wire shape.
"""

import uuid
from typing import List, Literal, NamedTuple, Optional, Union


class StreamContentEvent(NamedTuple):
    """Content chunk event for streaming chat."""

    type: Literal["content"]
    data: str
    thread_id: uuid.UUID


class StreamErrorEvent(NamedTuple):
    """Terminal error event for streaming chat (error delivered as data)."""

    type: Literal["error"]
    data: str
    thread_id: Optional[uuid.UUID] = None


StreamEvent = Union[StreamContentEvent, StreamErrorEvent]


class ChatResult(NamedTuple):
    """Result of a synchronous chat call."""

    message: str
    thread_id: uuid.UUID


class PromptTurn(NamedTuple):
    """One user turn submitted to the provider."""

    role: Literal["user"]
    content: str


def build_prompt_turns(previous_user_messages: List[str], message: str) -> List[PromptTurn]:
    """Prior user messages in order, then the new message. Assistant replies are not replayed."""
    turns = [PromptTurn("user", previous) for previous in previous_user_messages]
    turns.append(PromptTurn("user", message))
    return turns
