"""Claude Prompt Sessions - reconstruct per-prompt activity from Claude Code session logs."""

from importlib.metadata import version

try:
    __version__ = version("claude-prompt-sessions")
except Exception:
    __version__ = "0.1.0"  # Fallback for development

# Re-export public API
from prompt_sessions.accumulator import AccumulatorState, PromptAccumulator, accumulate
from prompt_sessions.ingest import (
    delete_session_logs,
    delete_sessions_for_repo,
    find_project_dir,
    get_sessions_for_repo,
    parse_session_file,
    parse_sessions_dir,
)
from prompt_sessions.models import PromptSession, TokenUsage

__all__ = [
    # Version
    "__version__",
    # Models
    "PromptSession",
    "TokenUsage",
    # Reconstruction
    "AccumulatorState",
    "PromptAccumulator",
    "accumulate",
    "parse_session_file",
    "parse_sessions_dir",
    "get_sessions_for_repo",
    # Maintenance
    "delete_session_logs",
    "delete_sessions_for_repo",
    "find_project_dir",
]
