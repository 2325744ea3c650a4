"""Command-line front end for the task API."""

import argparse
import sys
from typing import List, Optional

from .client import TaskApiError, TaskBoard, TaskClient, TaskDraft, TaskEdit
from .config import API_URL
from .schemas.task import Task


def _format_task(task: Task) -> str:
    """One line per task: id, title, optional description and creation time."""
    line = f"[{task.id}] {task.title}"
    if task.description:
        line += f" - {task.description}"
    return f"{line}  ({task.created_at:%Y-%m-%d %H:%M})"


def _print_tasks(board: TaskBoard) -> None:
    if not board.tasks:
        print("No tasks yet. Add one with `task-cli add TITLE`.")
        return
    for task in board.tasks:
        print(_format_task(task))


def _fail(board: TaskBoard) -> int:
    print(board.error, file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="task-cli", description="Manage tasks")
    parser.add_argument("--api-url", default=API_URL, help=f"API base URL (default: {API_URL})")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list all tasks")
    sub.add_parser("health", help="check that the API is up")

    show = sub.add_parser("show", help="show one task")
    show.add_argument("id", type=int)

    add = sub.add_parser("add", help="create a task")
    add.add_argument("title")
    add.add_argument("-d", "--description", default="")

    edit = sub.add_parser("edit", help="replace a task's title and description")
    edit.add_argument("id", type=int)
    edit.add_argument("title")
    edit.add_argument("-d", "--description", default="")

    remove = sub.add_parser("delete", help="delete a task")
    remove.add_argument("id", type=int)
    remove.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    return parser


def main(argv: Optional[List[str]] = None, client: Optional[TaskClient] = None) -> int:
    args = build_parser().parse_args(argv)
    client = client or TaskClient(args.api_url)
    board = TaskBoard(client)

    with client:
        if args.command == "health":
            try:
                print(client.health()["status"])
            except TaskApiError as exc:
                print(f"API unreachable: {exc}", file=sys.stderr)
                return 1
            return 0

        if args.command == "show":
            try:
                print(_format_task(client.get_task(args.id)))
            except TaskApiError as exc:
                print(exc.message, file=sys.stderr)
                return 1
            return 0

        if args.command == "list":
            ok = board.refresh()
        elif args.command == "add":
            board.draft = TaskDraft(title=args.title, description=args.description)
            ok = board.create()
        elif args.command == "edit":
            board.editing = TaskEdit(id=args.id, title=args.title, description=args.description)
            ok = board.update()
        else:
            if not args.yes and input(f"Are you sure you want to delete task {args.id}? [y/N] ").lower() != "y":
                return 0
            ok = board.delete(args.id)

        if not ok:
            return _fail(board)
        _print_tasks(board)
    return 0


if __name__ == "__main__":
    sys.exit(main())
