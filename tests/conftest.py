"""Pytest configuration and shared fixtures."""

import json
import tempfile
from pathlib import Path

import pytest

REPO_PATH = "/test/project"
PROJECT_DIR_NAME = "-test-project"


def write_jsonl(path: Path, entries: list) -> Path:
    """Write entries as JSONL. Strings are written verbatim (for malformed lines)."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(entry if isinstance(entry, str) else json.dumps(entry))
            f.write("\n")
    return path


def user_prompt(text, timestamp="2025-01-01T12:00:00.000Z"):
    """A genuine user prompt entry with plain string content."""
    return {
        "type": "user",
        "uuid": f"user-{timestamp}",
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
    }


def tool_result(timestamp="2025-01-01T12:00:10.000Z", tool_use_id="tool-1"):
    """A tool-result echo entry."""
    return {
        "type": "user",
        "timestamp": timestamp,
        "message": {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": tool_use_id, "content": "ok"}],
        },
    }


def assistant(tool_uses=(), timestamp="2025-01-01T12:00:05.000Z", model="claude-opus-4-5", usage=None):
    """An assistant entry issuing the given (name, input) tool calls."""
    content = [{"type": "text", "text": "Working on it"}]
    for i, (name, tool_input) in enumerate(tool_uses):
        content.append({"type": "tool_use", "id": f"tool-{i}", "name": name, "input": tool_input})

    message = {"role": "assistant", "content": content}
    if model is not None:
        message["model"] = model
    if usage is not None:
        message["usage"] = usage
    return {"type": "assistant", "timestamp": timestamp, "message": message}


@pytest.fixture
def logs_dir():
    """A temporary Claude Code projects root containing one empty project dir."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / PROJECT_DIR_NAME).mkdir()
        yield root


@pytest.fixture
def project_dir(logs_dir):
    """The project directory for REPO_PATH inside logs_dir."""
    return logs_dir / PROJECT_DIR_NAME


@pytest.fixture
def populated_project(project_dir):
    """Project dir with two session logs and an artifact directory.

    - session-a: one prompt (January) that edits and reads files
    - session-b: two prompts (February), the second with a tool-result echo
    """
    write_jsonl(
        project_dir / "session-a.jsonl",
        [
            {"type": "file-history-snapshot", "messageId": "m1"},
            user_prompt("fix the login bug", "2024-01-01T00:00:00Z"),
            assistant(
                [("Read", {"file_path": "/repo/auth.py"}), ("Edit", {"file_path": "/repo/auth.py"})],
                timestamp="2024-01-01T00:00:05Z",
                usage={"input_tokens": 100, "output_tokens": 20, "cache_read_input_tokens": 500},
            ),
            tool_result("2024-01-01T00:00:06Z"),
        ],
    )
    write_jsonl(
        project_dir / "session-b.jsonl",
        [
            user_prompt("add tests", "2024-02-01T00:00:00Z"),
            assistant(
                [("Write", {"file_path": "/repo/test_auth.py"}), ("Bash", {"command": "pytest"})],
                timestamp="2024-02-01T00:00:05Z",
                model="claude-sonnet-4-5",
                usage={"input_tokens": 50, "output_tokens": 10},
            ),
            user_prompt("now commit", "2024-02-01T00:10:00Z"),
            assistant([("Bash", {"command": "git commit"})], timestamp="2024-02-01T00:10:05Z"),
            tool_result("2024-02-01T00:10:06Z"),
        ],
    )
    (project_dir / "session-b").mkdir()
    (project_dir / "session-b" / "subagents.json").write_text("{}")
    (project_dir / "notes.txt").write_text("not a log")
    return project_dir
