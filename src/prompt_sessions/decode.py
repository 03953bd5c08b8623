"""Decoding of raw JSONL session log lines into typed event records.

Every function here is total: malformed input degrades to a default value or
an IgnoredEvent, never an exception. The accumulator only ever sees the
record types defined below.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from prompt_sessions.models import TokenUsage

logger = logging.getLogger("prompt-sessions")

# Tool name -> (input key holding the path, whether the tool writes the file)
FILE_TOOLS: dict[str, tuple[str, bool]] = {
    "Write": ("file_path", True),
    "Edit": ("file_path", True),
    "Read": ("file_path", False),
    "NotebookEdit": ("notebook_path", True),
}


@dataclass(frozen=True)
class ToolCall:
    """A tool_use block with its file association already resolved."""

    name: str
    file_path: str | None = None
    writes: bool = False


@dataclass(frozen=True)
class UserPrompt:
    """A genuine user prompt. The text may be blank."""

    timestamp: str
    text: str


@dataclass(frozen=True)
class ToolResultEcho:
    """A user-tagged entry carrying tool output back to the assistant."""

    timestamp: str


@dataclass(frozen=True)
class AssistantMessage:
    """An assistant turn: model, usage and any tool calls it issued."""

    timestamp: str
    model: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    tool_calls: tuple[ToolCall, ...] = ()


@dataclass(frozen=True)
class IgnoredEvent:
    """Anything that does not affect prompt reconstruction."""

    kind: str = ""


EventRecord = UserPrompt | ToolResultEcho | AssistantMessage | IgnoredEvent


def decode_line(line: str) -> dict | None:
    """Decode one JSONL line. Returns None for blank or malformed lines."""
    line = line.strip()
    if not line:
        return None

    try:
        raw = json.loads(line)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Skipping malformed line: {e}")
        return None

    if not isinstance(raw, dict):
        logger.debug(f"Skipping non-object line of type {type(raw).__name__}")
        return None
    return raw


def _token_count(value) -> int:
    # bool is an int subclass; treat it as garbage like any other non-count
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def extract_usage(usage) -> TokenUsage:
    """Extract token counts from an assistant usage object, defaulting to 0."""
    if not isinstance(usage, dict):
        return TokenUsage()

    cache_read = usage.get("cache_read_input_tokens")
    if cache_read is None:
        cache_read = usage.get("cache_read_tokens")

    return TokenUsage(
        input_tokens=_token_count(usage.get("input_tokens")),
        output_tokens=_token_count(usage.get("output_tokens")),
        cache_read_tokens=_token_count(cache_read),
    )


def extract_text(content) -> str:
    """Extract prompt text from user message content.

    Plain strings are returned as-is. Lists contribute the text of their
    `text` blocks joined by newlines, in order. Anything else yields "".
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    texts = []
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text")
            if isinstance(text, str):
                texts.append(text)
    return "\n".join(texts)


def extract_tool_call(block: dict) -> ToolCall:
    """Resolve a tool_use block into a ToolCall.

    Only the file tools in FILE_TOOLS carry a path. A missing, empty or
    non-string path argument means the call has no file association.
    """
    name = block.get("name")
    if not isinstance(name, str):
        name = ""

    file_tool = FILE_TOOLS.get(name)
    if file_tool is None:
        return ToolCall(name=name)

    path_key, writes = file_tool
    tool_input = block.get("input")
    path = tool_input.get(path_key) if isinstance(tool_input, dict) else None
    if not isinstance(path, str) or not path:
        return ToolCall(name=name)

    return ToolCall(name=name, file_path=path, writes=writes)


def _is_tool_result_echo(content) -> bool:
    return isinstance(content, list) and any(
        isinstance(block, dict) and block.get("type") == "tool_result" for block in content
    )


def decode_event(raw: dict) -> EventRecord:
    """Classify a decoded log entry into one of the typed event records."""
    entry_type = raw.get("type")
    if entry_type not in ("user", "assistant"):
        return IgnoredEvent(kind=entry_type if isinstance(entry_type, str) else "")

    timestamp = raw.get("timestamp")
    if not isinstance(timestamp, str):
        timestamp = ""

    message = raw.get("message")
    if not isinstance(message, dict):
        return IgnoredEvent(kind=entry_type)

    if entry_type == "user":
        content = message.get("content")

        if isinstance(content, str):
            return UserPrompt(timestamp=timestamp, text=content)

        if isinstance(content, list):
            if _is_tool_result_echo(content):
                return ToolResultEcho(timestamp=timestamp)

            # Structured prompt (e.g. text alongside images)
            text = extract_text(content)
            if not text.strip():
                return IgnoredEvent(kind="user")
            return UserPrompt(timestamp=timestamp, text=text)

        return IgnoredEvent(kind="user")

    model = message.get("model")
    if not isinstance(model, str) or not model:
        model = None

    content = message.get("content")
    tool_calls = ()
    if isinstance(content, list):
        tool_calls = tuple(
            extract_tool_call(block)
            for block in content
            if isinstance(block, dict) and block.get("type") == "tool_use"
        )

    return AssistantMessage(
        timestamp=timestamp,
        model=model,
        usage=extract_usage(message.get("usage")),
        tool_calls=tool_calls,
    )


def iter_events(lines: Iterable[str]) -> Iterator[EventRecord]:
    """Decode a stream of JSONL lines, skipping those that cannot be decoded."""
    for line in lines:
        raw = decode_line(line)
        if raw is not None:
            yield decode_event(raw)
