"""JSONL session log discovery, reconstruction and cleanup."""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from prompt_sessions.accumulator import accumulate
from prompt_sessions.decode import iter_events
from prompt_sessions.models import PromptSession, TokenUsage

logger = logging.getLogger("prompt-sessions")

# Default location for Claude Code session logs
DEFAULT_LOGS_DIR = Path.home() / ".claude" / "projects"

LOG_SUFFIX = ".jsonl"


def get_logs_dir(logs_dir: str | Path | None = None) -> Path:
    """Resolve the logs root: explicit argument, then env var, then default."""
    if logs_dir is None:
        logs_dir = os.environ.get("PROMPT_SESSIONS_LOGS_DIR", str(DEFAULT_LOGS_DIR))
    return Path(logs_dir).expanduser()


def encode_project_path(repo_path: str) -> str:
    """Encode a repository path the way Claude Code names project directories.

    /Users/me/project -> -Users-me-project
    """
    return repo_path.replace("/", "-")


def find_project_dir(repo_path: str, logs_dir: str | Path | None = None) -> Path | None:
    """Find the session log directory for a repository, if one exists."""
    root = get_logs_dir(logs_dir)
    if not root.is_dir():
        logger.debug(f"Logs directory does not exist: {root}")
        return None

    candidates = [encode_project_path(repo_path)]
    trimmed = repo_path.rstrip("/")
    if trimmed and trimmed != repo_path:
        candidates.append(encode_project_path(trimmed))

    for name in candidates:
        project_dir = root / name
        if project_dir.is_dir():
            return project_dir
    return None


def find_log_files(directory: Path) -> list[Path]:
    """List session log files in a directory, sorted by name.

    Returns an empty list if the directory is missing or cannot be listed.
    """
    try:
        entries = list(Path(directory).iterdir())
    except OSError as e:
        logger.debug(f"Could not list {directory}: {e}")
        return []

    return sorted(p for p in entries if p.suffix == LOG_SUFFIX and p.is_file())


def parse_session_file(file_path: Path, session_id: str | None = None) -> list[PromptSession]:
    """Reconstruct the prompt sessions recorded in one JSONL file.

    Args:
        file_path: Path to the JSONL session log
        session_id: Identifier for the emitted sessions (default: file stem)

    Returns:
        Sessions in file order; empty if the file cannot be read
    """
    file_path = Path(file_path)
    if session_id is None:
        session_id = file_path.stem

    try:
        with open(file_path, encoding="utf-8", errors="replace") as f:
            return accumulate(iter_events(f), session_id)
    except OSError as e:
        logger.warning(f"Could not read {file_path}: {e}")
        return []


def parse_sessions_dir(directory: Path, max_workers: int = 1) -> list[PromptSession]:
    """Reconstruct prompt sessions from every log file in a directory.

    Files are independent, so with max_workers > 1 they are parsed on a
    thread pool. Results are merged and sorted newest first by timestamp
    (plain string comparison, ISO-8601 sorts lexicographically).

    Args:
        directory: Directory containing JSONL session logs
        max_workers: Number of files to parse concurrently

    Returns:
        All sessions across all files, newest first
    """
    files = find_log_files(directory)
    if not files:
        return []

    if max_workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            per_file = list(pool.map(parse_session_file, files))
    else:
        per_file = [parse_session_file(f) for f in files]

    sessions = [session for file_sessions in per_file for session in file_sessions]
    sessions.sort(key=lambda s: s.timestamp, reverse=True)

    logger.debug(f"Parsed {len(sessions)} prompt sessions from {len(files)} files in {directory}")
    return sessions


def delete_session_logs(directory: Path) -> int:
    """Delete every session log in a directory, plus per-session artifact dirs.

    Best effort: failures are logged and skipped. Safe to call on a missing
    directory.

    Returns:
        Number of log files deleted
    """
    deleted = 0
    for log_file in find_log_files(directory):
        try:
            log_file.unlink()
            deleted += 1
        except OSError as e:
            logger.warning(f"Could not delete {log_file}: {e}")

        # Some runtimes keep subagent/tool artifacts in a sibling dir
        session_dir = log_file.with_suffix("")
        if session_dir.is_dir():
            shutil.rmtree(session_dir, ignore_errors=True)

    if deleted:
        logger.info(f"Deleted {deleted} session logs from {directory}")
    return deleted


def get_sessions_for_repo(
    repo_path: str,
    logs_dir: str | Path | None = None,
    max_workers: int = 1,
) -> list[PromptSession]:
    """Locate a repository's session logs and reconstruct its prompt sessions."""
    project_dir = find_project_dir(repo_path, logs_dir)
    if project_dir is None:
        logger.info(f"No Claude Code project directory found for: {repo_path}")
        return []
    return parse_sessions_dir(project_dir, max_workers=max_workers)


def delete_sessions_for_repo(repo_path: str, logs_dir: str | Path | None = None) -> int:
    """Delete all session logs recorded for a repository. Returns the count."""
    project_dir = find_project_dir(repo_path, logs_dir)
    if project_dir is None:
        return 0
    return delete_session_logs(project_dir)


def summarize_sessions(sessions: list[PromptSession]) -> dict:
    """Aggregate totals over a list of prompt sessions."""
    usage = TokenUsage()
    files_written = set()
    models = set()
    tool_calls = 0
    for session in sessions:
        usage = usage + session.token_usage
        files_written.update(session.files_written)
        tool_calls += session.tool_call_count
        if session.model:
            models.add(session.model)

    timestamps = [s.timestamp for s in sessions if s.timestamp]
    return {
        "prompt_count": len(sessions),
        "log_count": len({s.session_id for s in sessions}),
        "tool_call_count": tool_calls,
        "files_written_count": len(files_written),
        "token_usage": usage.to_dict(),
        "total_tokens": usage.total,
        "models": sorted(models),
        "earliest_prompt": min(timestamps) if timestamps else None,
        "latest_prompt": max(timestamps) if timestamps else None,
    }


def newest_sessions(sessions: list[PromptSession], limit: int | None = None) -> list[PromptSession]:
    """Return the first `limit` sessions. None, 0 or a negative limit means all."""
    if limit is None or limit <= 0:
        return sessions
    return sessions[:limit]
