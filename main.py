"""
TransientDB — In-Memory Document Store
======================================
Entry point for the interactive shell and script runner.

Usage:
    python main.py [options]

Options:
    --help              Show help
    --execute CMDS      Execute commands and exit
    --file PATH         Execute a command script and exit
    --verbose           Log engine activity to stderr

Default:
    Interactive REPL over a fresh in-memory store
"""

import logging
import os
import sys

from cli.logging_config import configure_logging


logger = logging.getLogger(__name__)


def print_help():
    print("""
TransientDB — In-Memory Document Store

Usage:
    python main.py                              Interactive REPL
    python main.py --execute 'INSERT {...}; WHERE {...}'
                                                Execute commands and exit
    python main.py --file script.tdb            Execute a command script

Options:
    --help          Show this help
    --execute CMDS  Execute ;-separated commands and exit
    --file PATH     Execute a command script and exit
    --verbose       Log engine activity (DEBUG) to stderr

Commands:
    INSERT {json}   WHERE {json}   REMOVE {json}   GET id   COUNT

Nothing is persisted: every run starts with an empty store.
""")


def run_commands(content: str) -> int:
    """
    Execute ;-separated commands against a fresh store.

    Lines starting with -- are comments. Meta-commands are not supported
    outside the REPL. Errors stop execution.
    Returns the process exit status.
    """
    from cli.session import Session, split_statements
    from cli.renderer import Renderer

    renderer = Renderer()
    renderer.show_timer = False  # Cleaner script output

    with Session() as session:
        for stmt_text in split_statements(content):
            if stmt_text.startswith("."):
                print(f"-- meta-command not supported in script mode: {stmt_text}",
                      file=sys.stderr)
                continue

            try:
                records, message = session.execute(stmt_text)
                if records is not None:
                    renderer.render_records(records)
                else:
                    renderer.render_message(message)
            except Exception as e:
                logger.debug("Command failed: %s", stmt_text, exc_info=True)
                renderer.render_error(e)
                print(f"Error in statement: {stmt_text[:80]}...", file=sys.stderr)
                return 1

    return 0


def execute_script(script_path: str) -> int:
    """Execute a command script file. Returns the process exit status."""
    if not os.path.isfile(script_path):
        print(f"Error: script file not found: {script_path}", file=sys.stderr)
        return 1

    with open(script_path, "r", encoding="utf-8") as f:
        content = f.read()

    return run_commands(content)


def main(argv=None) -> None:
    """Parse CLI arguments and dispatch."""
    args = sys.argv[1:] if argv is None else list(argv)

    if "--help" in args or "-h" in args:
        print_help()
        return

    execute_cmds = None
    script_file = None
    verbose = False

    i = 0
    while i < len(args):
        if args[i] == "--execute" and i + 1 < len(args):
            execute_cmds = args[i + 1]
            i += 2
        elif args[i] == "--file" and i + 1 < len(args):
            script_file = args[i + 1]
            i += 2
        elif args[i] in ("--verbose", "-v"):
            verbose = True
            i += 1
        else:
            print(f"Unknown option: {args[i]}", file=sys.stderr)
            print_help()
            sys.exit(1)

    configure_logging(verbose)

    if execute_cmds:
        status = run_commands(execute_cmds)
    elif script_file:
        status = execute_script(script_file)
    else:
        from cli.repl import REPL
        REPL().run()
        status = 0

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
