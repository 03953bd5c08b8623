"""Command-line interface for prompt sessions."""

import argparse
import json
import sys

from prompt_sessions.ingest import (
    delete_sessions_for_repo,
    find_project_dir,
    get_logs_dir,
    get_sessions_for_repo,
    newest_sessions,
    summarize_sessions,
)

# Formatter registry: list of (predicate, formatter) tuples
# Each predicate checks if this formatter can handle the data
# Order matters - first match wins
_FORMATTERS: list[tuple[callable, callable]] = []


def _register_formatter(predicate: callable):
    """Decorator to register a formatter with its predicate."""

    def decorator(formatter: callable):
        _FORMATTERS.append((predicate, formatter))
        return formatter

    return decorator


def _shorten(text: str, width: int = 70) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


@_register_formatter(lambda d: "sessions" in d and "summary" in d)
def _format_sessions(data: dict) -> list[str]:
    summary = data["summary"]
    lines = [
        f"Prompts: {summary['prompt_count']} (showing {len(data['sessions'])})",
        f"Tool calls: {summary['tool_call_count']}",
        "",
    ]
    for sess in data["sessions"]:
        ts = sess["timestamp"][:19] if sess["timestamp"] else "unknown"
        lines.append(f"[{ts}] {sess['session_id'][:8]} {_shorten(sess['prompt_text'])}")
        details = [f"{sess['tool_call_count']} tools"]
        if sess["files_written"]:
            details.append(f"{len(sess['files_written'])} written")
        if sess["model"]:
            details.append(sess["model"])
        lines.append(f"    {', '.join(details)}")
    return lines


@_register_formatter(lambda d: "prompt_count" in d and "token_usage" in d)
def _format_summary(data: dict) -> list[str]:
    usage = data["token_usage"]
    lines = [
        f"Session logs: {data['log_count']}",
        f"Prompts: {data['prompt_count']}",
        f"Tool calls: {data['tool_call_count']}",
        f"Files written: {data['files_written_count']}",
        f"Tokens: {usage['input_tokens']} in / {usage['output_tokens']} out"
        f" / {usage['cache_read_tokens']} cache read ({data['total_tokens']} total)",
    ]
    if data.get("models"):
        lines.append(f"Models: {', '.join(data['models'])}")
    if data.get("earliest_prompt"):
        lines.append(
            f"Date range: {data['earliest_prompt'][:10]} to {data['latest_prompt'][:10]}"
        )
    return lines


@_register_formatter(lambda d: "project_dir" in d)
def _format_locate(data: dict) -> list[str]:
    if data["project_dir"] is None:
        return [f"No session logs found for {data['repo_path']} under {data['logs_dir']}"]
    return [data["project_dir"]]


@_register_formatter(lambda d: "deleted" in d)
def _format_delete(data: dict) -> list[str]:
    return [f"Deleted {data['deleted']} session logs for {data['repo_path']}"]


def format_output(data: dict, json_output: bool = False) -> str:
    """Format output as JSON or human-readable."""
    if json_output:
        return json.dumps(data, indent=2, default=str)

    # Find matching formatter from registry
    for predicate, formatter in _FORMATTERS:
        if predicate(data):
            return "\n".join(formatter(data))

    # Fallback to JSON if no formatter matches
    return json.dumps(data, indent=2, default=str)


def cmd_sessions(args):
    """List prompt sessions for a repository."""
    sessions = get_sessions_for_repo(
        args.repo_path, logs_dir=args.logs_dir, max_workers=args.workers
    )
    shown = newest_sessions(sessions, args.limit)
    result = {
        "repo_path": args.repo_path,
        "summary": summarize_sessions(sessions),
        "sessions": [s.to_dict() for s in shown],
    }
    print(format_output(result, args.json))


def cmd_summary(args):
    """Show aggregate totals for a repository."""
    sessions = get_sessions_for_repo(args.repo_path, logs_dir=args.logs_dir)
    print(format_output(summarize_sessions(sessions), args.json))


def cmd_locate(args):
    """Show the session log directory for a repository."""
    project_dir = find_project_dir(args.repo_path, args.logs_dir)
    result = {
        "repo_path": args.repo_path,
        "logs_dir": str(get_logs_dir(args.logs_dir)),
        "project_dir": str(project_dir) if project_dir else None,
    }
    print(format_output(result, args.json))


def cmd_delete(args):
    """Delete all session logs for a repository."""
    if not args.yes:
        print("Refusing to delete session logs without --yes", file=sys.stderr)
        sys.exit(1)

    deleted = delete_sessions_for_repo(args.repo_path, logs_dir=args.logs_dir)
    print(format_output({"repo_path": args.repo_path, "deleted": deleted}, args.json))


def main():
    """CLI entry point."""
    epilog = """
Examples:
  prompt-sessions sessions ~/code/myrepo           # Prompts, newest first
  prompt-sessions sessions ~/code/myrepo --limit 5 # Five most recent prompts
  prompt-sessions summary ~/code/myrepo            # Token and tool totals
  prompt-sessions delete ~/code/myrepo --yes       # Remove recorded sessions

All commands support --json for machine-readable output.
Log location: ~/.claude/projects (override with PROMPT_SESSIONS_LOGS_DIR)
"""
    parser = argparse.ArgumentParser(
        description="Claude Prompt Sessions CLI - Reconstruct what each prompt did",
        prog="prompt-sessions",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--logs-dir", help="Claude Code projects directory")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # sessions
    sub = subparsers.add_parser("sessions", help="List prompt sessions")
    sub.add_argument("repo_path", help="Repository path")
    sub.add_argument(
        "--limit", type=int, default=20, help="Max prompts (default: 20, 0 or less for all)"
    )
    sub.add_argument("--workers", type=int, default=1, help="Files parsed in parallel")
    sub.set_defaults(func=cmd_sessions)

    # summary
    sub = subparsers.add_parser("summary", help="Show totals across prompt sessions")
    sub.add_argument("repo_path", help="Repository path")
    sub.set_defaults(func=cmd_summary)

    # locate
    sub = subparsers.add_parser("locate", help="Show the session log directory")
    sub.add_argument("repo_path", help="Repository path")
    sub.set_defaults(func=cmd_locate)

    # delete
    sub = subparsers.add_parser("delete", help="Delete all session logs for a repository")
    sub.add_argument("repo_path", help="Repository path")
    sub.add_argument("--yes", action="store_true", help="Confirm deletion")
    sub.set_defaults(func=cmd_delete)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
