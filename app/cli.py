#app/cli.py
"""
ocb — консольный клиент доски для агента (и для человека в терминале).

Ходит в REST API через httpx; все мутации подписываются actor="agent".
Задачи адресуются номером: OCB-42 или просто 42.

Команды:
    list|ls, show, create|new, start, done, review, block, pick, active, comment, todo
"""
import argparse
import json
import re
import sys
from typing import Any, Dict, List, Optional

import httpx
import logging

from app.core.settings import settings

logger = logging.getLogger("OCB.CLI")

AGENT = "agent"
PRIORITY_ORDER = {"CRITICAL": 0, "HIGH": 1, "MEDIUM": 2, "LOW": 3}
PRIORITY_MARKS = {"CRITICAL": "!!!", "HIGH": "!!", "MEDIUM": "!", "LOW": "·"}
STATUS_LABELS = {
    "TODO": "TODO",
    "IN_PROGRESS": "IN PROGRESS",
    "NEEDS_REVIEW": "NEEDS REVIEW",
    "DONE": "DONE",
}


class CLIError(Exception):
    """Ошибка, которую CLI печатает как `Error: <message>` и выходит с кодом 1."""


def parse_task_id(value: str, prefix: str = None) -> int:
    prefix = prefix or settings.TASK_ID_PREFIX
    match = re.match(rf"^(?:{re.escape(prefix)}-)?(\d+)$", value.strip(), re.IGNORECASE)
    if not match:
        raise CLIError(f"Invalid task ID: {value}")
    return int(match.group(1))


def format_task_id(task: Dict[str, Any]) -> str:
    return f"{settings.TASK_ID_PREFIX}-{task['task_number']}"


def format_task(task: Dict[str, Any], verbose: bool = False) -> str:
    status = STATUS_LABELS.get(task.get("status"), task.get("status"))
    active = " ⚡" if task.get("is_active") else ""
    mark = PRIORITY_MARKS.get(task.get("priority"), "")
    line = f"{format_task_id(task)} {status}{active} {mark} {task['title']}"
    if verbose and task.get("description"):
        line += "\n" + "\n".join("    " + l for l in task["description"].splitlines())
    return line


class BoardClient:
    """
    Тонкая обёртка над REST API доски. httpx.Client можно подменить (тесты).
    """

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.base_url = (base_url or settings.OCB_API_URL).rstrip("/")
        self.http = client or httpx.Client(base_url=self.base_url, timeout=httpx.Timeout(10.0, read=30.0))

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            logger.debug(f"{method} {self.base_url}{path}")
            response = self.http.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise CLIError(f"Board API at {self.base_url} timed out")
        except httpx.RequestError as e:
            raise CLIError(f"Cannot reach board API at {self.base_url}: {e}")
        if response.is_error:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise CLIError(f"API error {response.status_code}: {detail}")
        try:
            return response.json()
        except ValueError:
            raise CLIError(f"Invalid response from board API ({response.status_code}): {response.text[:200]}")

    def list_tasks(self, **params) -> List[Dict[str, Any]]:
        params = {k: v for k, v in params.items() if v is not None}
        for key, value in params.items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
        return self._request("GET", "/tasks/", params=params)

    def find_task(self, number: int) -> Dict[str, Any]:
        found = self.list_tasks(task_number=number, include_archived=True)
        if not found:
            raise CLIError(f"Task {settings.TASK_ID_PREFIX}-{number} not found")
        return found[0]

    def create_task(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/tasks/", json=data)

    def update_task(self, task_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}", json={**data, "actor": AGENT})

    def add_comment(self, task_id: str, content: str) -> Dict[str, Any]:
        return self._request("POST", f"/tasks/{task_id}/comments/", json={"content": content, "author": "AI"})


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_tasks(tasks: List[Dict[str, Any]], empty: str) -> None:
    if not tasks:
        print(empty)
        return
    for task in tasks:
        print(format_task(task))


def cmd_list(args: argparse.Namespace, board: BoardClient) -> int:
    status = args.status.upper() if args.status else None
    # BLOCKED не статус: фильтруем по производному is_blocked
    blocked_only = status == "BLOCKED"
    tasks = board.list_tasks(
        status=None if blocked_only else status,
        priority=args.priority.upper() if args.priority else None,
        tag=args.tag,
        include_archived=True if args.all else None,
    )
    if blocked_only:
        tasks = [t for t in tasks if t.get("is_blocked")]
    if args.json:
        _print_json(tasks)
    else:
        _print_tasks(tasks, "No tasks found")
    return 0


def cmd_show(args: argparse.Namespace, board: BoardClient) -> int:
    task = board.find_task(parse_task_id(args.id))
    if args.json:
        _print_json(task)
        return 0
    print(format_task(task, verbose=True))
    if task.get("tags"):
        print(f"Tags: {', '.join(task['tags'])}")
    if task.get("blocked_reason"):
        print(f"Blocked: {task['blocked_reason']}")
    blockers = [t for t in task.get("blocked_by") or [] if t.get("status") != "DONE"]
    if blockers:
        print(f"Waiting on: {', '.join(format_task_id(t) for t in blockers)}")
    if task.get("comments"):
        print("\nComments:")
        for comment in task["comments"]:
            print(f"  {comment['created_at']} {comment['content']}")
    return 0


def cmd_create(args: argparse.Namespace, board: BoardClient) -> int:
    tags = [t.strip() for t in args.tags.split(",") if t.strip()] if args.tags else []
    task = board.create_task({
        "title": args.title,
        "description": args.description or "",
        "priority": args.priority.upper(),
        "tags": tags,
        "origin": "AI",
        "actor": AGENT,
    })
    if args.json:
        _print_json(task)
    else:
        print(f"Created: {format_task(task)}")
    return 0


def _move(board: BoardClient, raw_id: str, changes: Dict[str, Any], label: str) -> int:
    task = board.find_task(parse_task_id(raw_id))
    updated = board.update_task(task["id"], changes)
    print(f"{label}: {format_task(updated)}")
    return 0


def cmd_start(args: argparse.Namespace, board: BoardClient) -> int:
    return _move(board, args.id, {"status": "IN_PROGRESS", "is_active": True}, "Started")


def cmd_done(args: argparse.Namespace, board: BoardClient) -> int:
    return _move(board, args.id, {"status": "DONE", "is_active": False}, "Done")


def cmd_review(args: argparse.Namespace, board: BoardClient) -> int:
    return _move(board, args.id, {"status": "NEEDS_REVIEW", "is_active": False}, "Ready for review")


def cmd_block(args: argparse.Namespace, board: BoardClient) -> int:
    changes = {"blocked_reason": args.reason or "Blocked", "is_active": False}
    return _move(board, args.id, changes, "Blocked")


def cmd_pick(args: argparse.Namespace, board: BoardClient) -> int:
    tasks = board.list_tasks(status="TODO")
    if args.priority:
        tasks = sorted(tasks, key=lambda t: PRIORITY_ORDER.get(t.get("priority"), 99))
    if not tasks:
        print("No TODO tasks available")
        return 0
    updated = board.update_task(tasks[0]["id"], {"status": "IN_PROGRESS", "is_active": True})
    print(f"Picked up: {format_task(updated)}")
    return 0


def cmd_active(args: argparse.Namespace, board: BoardClient) -> int:
    tasks = board.list_tasks(is_active=True)
    if not tasks:
        print("No active task")
        return 0
    if args.json:
        _print_json(tasks[0])
    else:
        print(format_task(tasks[0], verbose=True))
    return 0


def cmd_comment(args: argparse.Namespace, board: BoardClient) -> int:
    task = board.find_task(parse_task_id(args.id))
    board.add_comment(task["id"], args.message)
    print(f"Comment added to {format_task_id(task)}")
    return 0


def cmd_todo(args: argparse.Namespace, board: BoardClient) -> int:
    tasks = board.list_tasks(status="TODO")
    if args.json:
        _print_json(tasks)
    else:
        _print_tasks(tasks, "No TODO tasks")
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ocb", description="CLI for OpenClaw Board")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p = subparsers.add_parser("list", aliases=["ls"], help="List tasks")
    p.add_argument("-s", "--status", help="TODO, IN_PROGRESS, NEEDS_REVIEW, DONE or BLOCKED")
    p.add_argument("-p", "--priority", help="CRITICAL, HIGH, MEDIUM, LOW")
    p.add_argument("-t", "--tag", help="Filter by tag")
    p.add_argument("-a", "--all", action="store_true", help="Include archived tasks")
    p.add_argument("--json", action="store_true", help="Output as JSON")
    p.set_defaults(handler=cmd_list)

    p = subparsers.add_parser("show", help="Show task details")
    p.add_argument("id")
    p.add_argument("--json", action="store_true")
    p.set_defaults(handler=cmd_show)

    p = subparsers.add_parser("create", aliases=["new"], help="Create a new task")
    p.add_argument("title")
    p.add_argument("-d", "--description")
    p.add_argument("-p", "--priority", default="MEDIUM")
    p.add_argument("-t", "--tags", help="Comma-separated tags")
    p.add_argument("--json", action="store_true")
    p.set_defaults(handler=cmd_create)

    for name, handler, help_text in (
        ("start", cmd_start, "Start working on a task (IN_PROGRESS, active)"),
        ("done", cmd_done, "Mark a task as done"),
        ("review", cmd_review, "Move a task to NEEDS_REVIEW"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("id")
        p.set_defaults(handler=handler)

    p = subparsers.add_parser("block", help="Mark a task as blocked (status is kept)")
    p.add_argument("id")
    p.add_argument("reason", nargs="?")
    p.set_defaults(handler=cmd_block)

    p = subparsers.add_parser("pick", help="Pick the next TODO task and start it")
    p.add_argument("--priority", action="store_true", help="Highest priority first")
    p.set_defaults(handler=cmd_pick)

    p = subparsers.add_parser("active", help="Show the currently active task")
    p.add_argument("--json", action="store_true")
    p.set_defaults(handler=cmd_active)

    p = subparsers.add_parser("comment", help="Add a comment to a task")
    p.add_argument("id")
    p.add_argument("message")
    p.set_defaults(handler=cmd_comment)

    p = subparsers.add_parser("todo", help="List TODO tasks")
    p.add_argument("--json", action="store_true")
    p.set_defaults(handler=cmd_todo)

    return parser


def main(argv: Optional[List[str]] = None, client: Optional[BoardClient] = None) -> int:
    args = create_parser().parse_args(argv)
    board = client or BoardClient()
    try:
        return args.handler(args, board)
    except CLIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
