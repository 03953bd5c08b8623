"""MCP Prompt Sessions Server.

Provides tools over Claude Code session logs:
- get_status: Logs location and server version
- get_sessions: Prompt sessions for a repository, newest first
- get_session_summary: Token, tool and file totals for a repository
- delete_sessions: Remove a repository's recorded session logs
"""

import logging
import os

from fastmcp import FastMCP

from prompt_sessions import __version__
from prompt_sessions.ingest import (
    delete_sessions_for_repo,
    get_logs_dir,
    get_sessions_for_repo,
    newest_sessions,
    summarize_sessions,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("prompt-sessions")
if os.environ.get("DEV_MODE"):
    logger.setLevel(logging.DEBUG)

# Initialize MCP server
mcp = FastMCP("prompt-sessions")


@mcp.tool()
def get_status() -> dict:
    """Get server status and the session logs location.

    Returns:
        Status info including version and whether the logs directory exists
    """
    logs_dir = get_logs_dir()
    return {
        "status": "ok",
        "version": __version__,
        "logs_dir": str(logs_dir),
        "logs_dir_exists": logs_dir.is_dir(),
    }


@mcp.tool()
def get_sessions(path: str, limit: int | None = None) -> dict:
    """Reconstruct prompt sessions for a repository.

    Args:
        path: Absolute path of the repository
        limit: Optional maximum number of sessions to return (newest first)

    Returns:
        Sessions (one per user prompt) with files touched, tool calls and token usage
    """
    sessions = get_sessions_for_repo(path)
    shown = newest_sessions(sessions, limit)
    return {
        "status": "ok",
        "repo_path": path,
        "session_count": len(sessions),
        "sessions": [s.to_dict() for s in shown],
    }


@mcp.tool()
def get_session_summary(path: str) -> dict:
    """Summarize prompt sessions for a repository.

    Args:
        path: Absolute path of the repository

    Returns:
        Prompt, tool call, file and token totals
    """
    return {"status": "ok", "repo_path": path, **summarize_sessions(get_sessions_for_repo(path))}


@mcp.tool()
def delete_sessions(path: str) -> dict:
    """Delete all recorded session logs for a repository.

    Args:
        path: Absolute path of the repository

    Returns:
        Number of session logs deleted
    """
    deleted = delete_sessions_for_repo(path)
    logger.info(f"delete_sessions({path}) removed {deleted} logs")
    return {"status": "ok", "repo_path": path, "deleted": deleted}


def create_app():
    """Create the ASGI app for uvicorn."""
    # stateless_http=True allows resilience to server restarts
    return mcp.http_app(stateless_http=True)


def main():
    """Run the MCP server."""
    import uvicorn

    port = int(os.environ.get("PORT", 8082))
    host = os.environ.get("HOST", "127.0.0.1")

    print(f"Starting Claude Prompt Sessions on {host}:{port}")
    print(
        f"Add to Claude Code: claude mcp add --transport http --scope user prompt-sessions http://{host}:{port}/mcp"
    )

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
