"""Single-pass reconstruction of prompt sessions from one session log.

The accumulator is a two-state machine: IDLE (no prompt to attribute activity
to) or OPEN (a SessionDraft is collecting activity). A genuine user prompt
closes the open draft and opens the next one; everything else only updates
the open draft.
"""

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from prompt_sessions.decode import (
    AssistantMessage,
    EventRecord,
    ToolResultEcho,
    UserPrompt,
)
from prompt_sessions.models import PromptSession, TokenUsage

logger = logging.getLogger("prompt-sessions")


class AccumulatorState(enum.Enum):
    IDLE = "idle"
    OPEN = "open"


@dataclass
class SessionDraft:
    """Mutable state of the prompt session currently being accumulated."""

    prompt_text: str
    timestamp: str
    time_end: str | None = None
    files_touched: set[str] = field(default_factory=set)
    files_written: set[str] = field(default_factory=set)
    tool_call_count: int = 0
    model: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)

    def observe_timestamp(self, timestamp: str):
        if timestamp:
            self.time_end = timestamp

    def apply_assistant(self, message: AssistantMessage):
        self.observe_timestamp(message.timestamp)

        if self.model is None and message.model:
            self.model = message.model

        self.usage = self.usage + message.usage

        for call in message.tool_calls:
            self.tool_call_count += 1
            if call.file_path is None:
                continue
            self.files_touched.add(call.file_path)
            if call.writes:
                self.files_written.add(call.file_path)

    def finalize(self, session_id: str) -> PromptSession:
        return PromptSession(
            session_id=session_id,
            prompt_text=self.prompt_text,
            timestamp=self.timestamp,
            files_touched=tuple(sorted(self.files_touched)),
            files_written=tuple(sorted(self.files_written)),
            tool_call_count=self.tool_call_count,
            model=self.model,
            token_usage=self.usage,
            time_end=self.time_end,
        )


class PromptAccumulator:
    """Fold typed event records from one log file into PromptSessions."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._state = AccumulatorState.IDLE
        self._draft: SessionDraft | None = None

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def draft(self) -> SessionDraft | None:
        return self._draft

    def _open(self, prompt: UserPrompt):
        self._state = AccumulatorState.OPEN
        self._draft = SessionDraft(prompt_text=prompt.text, timestamp=prompt.timestamp)

    def _close(self) -> list[PromptSession]:
        if self._state is AccumulatorState.IDLE:
            return []
        session = self._draft.finalize(self.session_id)
        self._state = AccumulatorState.IDLE
        self._draft = None
        return [session]

    def feed(self, event: EventRecord) -> list[PromptSession]:
        """Apply one event. Returns the sessions it caused to be emitted (0 or 1)."""
        if self._state is AccumulatorState.IDLE:
            return self._feed_idle(event)
        return self._feed_open(event)

    def _feed_idle(self, event: EventRecord) -> list[PromptSession]:
        if isinstance(event, UserPrompt):
            if event.text.strip():
                self._open(event)
        elif isinstance(event, AssistantMessage):
            logger.debug(
                f"Dropping assistant message at {event.timestamp or '?'} in "
                f"{self.session_id}: no open prompt"
            )
        # Echoes and ignored events have nothing to attach to
        return []

    def _feed_open(self, event: EventRecord) -> list[PromptSession]:
        if isinstance(event, UserPrompt):
            emitted = self._close()
            if event.text.strip():
                self._open(event)
            return emitted

        if isinstance(event, ToolResultEcho):
            self._draft.observe_timestamp(event.timestamp)
        elif isinstance(event, AssistantMessage):
            self._draft.apply_assistant(event)
        return []

    def finish(self) -> list[PromptSession]:
        """Close the open session, if any, at end of input."""
        return self._close()


def accumulate(events: Iterable[EventRecord], session_id: str) -> list[PromptSession]:
    """Reconstruct all prompt sessions from an ordered stream of events."""
    accumulator = PromptAccumulator(session_id)
    sessions = []
    for event in events:
        sessions.extend(accumulator.feed(event))
    sessions.extend(accumulator.finish())
    return sessions
