"""Command-line interface for task-tracker.

This module provides the CLI interface for managing tasks using argparse.
It supports the following commands:
- add: Create a new task with an auto-generated id
- add-with-id: Create a task under a chosen id
- update: Change the description of a task
- delete: Delete a task
- mark-todo, mark-in-progress, mark-done: Change the state of a task
- list: List all tasks, or filter by state name or id

Every invocation loads the database, runs one command and saves the
database back, including for list.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from tasktracker.models import TaskState
from tasktracker.storage import StorageError
from tasktracker.store import TaskStore

DEFAULT_DB_PATH = "./db.json"
DB_PATH_ENV = "TASK_DB_PATH"

logger = logging.getLogger(__name__)

MARK_COMMANDS = {
    "mark-todo": TaskState.TODO,
    "mark-in-progress": TaskState.IN_PROGRESS,
    "mark-done": TaskState.DONE,
}


def configure_logging(verbose: bool = False) -> None:
    """Send tasktracker logs to stderr.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    package_logger = logging.getLogger("tasktracker")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {value}")
    return value


def resolve_db_path(explicit: Optional[str] = None) -> Path:
    """Pick the database file: --db, then $TASK_DB_PATH, then ./db.json."""
    if explicit is not None:
        return Path(explicit)
    return Path(os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH)


def load_store(path: Path, explicit: bool) -> TaskStore:
    """Load the store at path.

    A missing file at the default location gives a new empty store. An
    explicitly chosen file must exist.

    Raises:
        DeserializationError: If the file cannot be loaded
    """
    if not explicit and not path.exists():
        logger.info("No database at %s, starting a new one", path)
        return TaskStore.new()
    return TaskStore.load(path)


def format_listing(pairs, max_id_len: int, padding: int = 0) -> List[str]:
    """Right-align ids to max_id_len and surround them with padding spaces."""
    pad = " " * padding
    return [f"{pad}{task_id.rjust(max_id_len)}{pad}{description}" for task_id, description in pairs]


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="task",
        description="CLI task tracker backed by a JSON file"
    )
    parser.add_argument(
        "-d", "--db",
        help=f"Database file (default: ${DB_PATH_ENV} or {DEFAULT_DB_PATH})"
    )
    parser.add_argument(
        "-p", "--padding",
        type=non_negative_int,
        default=0,
        help="Spaces around task ids in list output (default: 0)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_parser = subparsers.add_parser("add", help="Add a new task")
    add_parser.add_argument("desc", help="Task description")

    add_with_id_parser = subparsers.add_parser("add-with-id", help="Add a task under a chosen id")
    add_with_id_parser.add_argument("id", help="Task ID")
    add_with_id_parser.add_argument("desc", help="Task description")

    update_parser = subparsers.add_parser("update", help="Change a task description")
    update_parser.add_argument("id", help="Task ID")
    update_parser.add_argument("new_desc", help="New task description")

    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("id", help="Task ID")

    for command, state in MARK_COMMANDS.items():
        mark_parser = subparsers.add_parser(command, help=f"Mark a task as {command[len('mark-'):]}")
        mark_parser.add_argument("id", help="Task ID")

    list_parser = subparsers.add_parser("list", help="List tasks")
    list_parser.add_argument(
        "filter",
        nargs="?",
        help="State name (todo, in-progress, done) or a task ID"
    )

    return parser


def cmd_add(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'add' command.

    Args:
        args: Parsed command-line arguments
        store: TaskStore instance

    Returns:
        Exit code (0 for success)
    """
    task_id = store.add(args.desc)
    print(f"Task added: {task_id}")
    return 0


def cmd_add_with_id(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'add-with-id' command.

    Returns:
        Exit code (0 for success, 1 for an empty id)
    """
    if not args.id:
        print("Error: Task id cannot be empty.", file=sys.stderr)
        return 1

    store.add_with_id(args.id, args.desc)
    print(f"Task added: {args.id}")
    return 0


def cmd_update(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'update' command.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if store.update(args.id, args.new_desc) is None:
        print(f"Error: Task '{args.id}' not found.", file=sys.stderr)
        return 1

    print(f"Task {args.id} updated.")
    return 0


def cmd_delete(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'delete' command.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if not store.delete(args.id):
        print(f"Error: Task '{args.id}' not found.", file=sys.stderr)
        return 1

    print("Task removed.")
    return 0


def cmd_mark(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'mark-todo', 'mark-in-progress' and 'mark-done' commands.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    state = MARK_COMMANDS[args.command]
    if store.change_state(args.id, state) is None:
        print(f"Error: Task '{args.id}' not found.", file=sys.stderr)
        return 1

    print(f"Task {args.id} marked as {state.name.lower().replace('_', '-')}.")
    return 0


def cmd_list(args: argparse.Namespace, store: TaskStore) -> int:
    """Handle the 'list' command.

    Returns:
        Exit code (0 for success)
    """
    if args.filter is None:
        pairs, max_id_len = store.all()
    else:
        pairs, max_id_len = store.filter(args.filter)

    if not pairs:
        print("No tasks found.")
        return 0

    for line in format_listing(pairs, max_id_len, args.padding):
        print(line)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    db_path = resolve_db_path(args.db)
    try:
        store = load_store(db_path, explicit=args.db is not None)
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Dispatch to command handlers
    commands = {
        "add": cmd_add,
        "add-with-id": cmd_add_with_id,
        "update": cmd_update,
        "delete": cmd_delete,
        "list": cmd_list,
    }
    commands.update({command: cmd_mark for command in MARK_COMMANDS})

    handler = commands.get(args.command)
    if handler is None:
        print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
        return 1

    exit_code = handler(args, store)

    try:
        store.save(db_path)
    except (StorageError, OSError) as e:
        print(f"Error: Cannot save {db_path}: {e}", file=sys.stderr)
        return 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
