"""
TransientDB Interactive REPL
============================
Interactive shell over a single in-memory store.

Features:
  - Multi-line commands with ; terminator, '--' comment lines
  - Meta-commands (dot-prefixed, no ; needed)
  - Ctrl+C: cancel current input
  - Ctrl+D/EOF: exit (the in-memory store is discarded)
  - Persistent readline history (~/.transientdb_history)
"""

import os
import sys
from typing import Optional

from cli.session import Session, find_terminator, strip_comments
from cli.renderer import MODES, Renderer


# ─── History ────────────────────────────────────────────────────────
HISTORY_FILE = os.path.expanduser("~/.transientdb_history")
HISTORY_MAX = 1000

try:
    import readline
    _HAS_READLINE = True
except ImportError:
    try:
        import pyreadline3 as readline
        _HAS_READLINE = True
    except ImportError:
        _HAS_READLINE = False


def _load_history():
    if _HAS_READLINE and os.path.exists(HISTORY_FILE):
        try:
            readline.read_history_file(HISTORY_FILE)
        except OSError:
            pass


def _save_history():
    if _HAS_READLINE:
        try:
            readline.set_history_length(HISTORY_MAX)
            readline.write_history_file(HISTORY_FILE)
        except OSError:
            pass


HELP_TEXT = """\
Commands (end with ;):
  INSERT {json}        Insert a record
  WHERE {json}         Records matching every field of the object
  REMOVE {json}        Remove records matching every field of the object
  GET id               Record with the given id
  COUNT                Number of live records

Meta-commands:
  .help                This text
  .fields              Indexed field names
  .mode table|vertical|json
  .timer on|off        Elapsed time after results
  .headers on|off      Table headers
  .limit N|off         Maximum records shown
  .stats               Store and session counters
  .quit                Exit (aliases: .exit, .q)

Only fields before the first nested object or array are indexed.
An empty query {} matches nothing."""

_ON = ("on", "1", "true")
_OFF = ("off", "0", "false")


class REPL:
    """
    Interactive TransientDB shell.

    Usage:
        REPL().run()
    """

    PROMPT = "transientdb> "
    CONTINUATION = "        ...> "

    def __init__(self, session: Optional[Session] = None, renderer: Optional[Renderer] = None):
        self.session = session if session is not None else Session()
        self.renderer = renderer or Renderer()
        self._running = False
        self._meta = {
            ".help": lambda arg: self._out(HELP_TEXT),
            ".fields": self._cmd_fields,
            ".mode": self._cmd_mode,
            ".timer": lambda arg: self._toggle("show_timer", "Timer", arg),
            ".headers": lambda arg: self._toggle("show_headers", "Headers", arg),
            ".limit": self._cmd_limit,
            ".stats": self._cmd_stats,
        }

    def run(self):
        """Read-eval-print until .quit or EOF."""
        _load_history()
        self._running = True
        print("TransientDB v0.1.0 (in-memory; nothing is saved on exit)")
        print('Type ".help" for usage hints.\n')

        pending = ""
        try:
            while self._running:
                try:
                    line = input(self.CONTINUATION if pending else self.PROMPT)
                except KeyboardInterrupt:
                    print()
                    pending = ""
                    continue
                except EOFError:
                    print()
                    break

                if not pending and line.strip().startswith("."):
                    self.handle_meta_command(line.strip())
                elif line.strip():
                    pending = self.feed(f"{pending}\n{line}" if pending else line)
        finally:
            _save_history()
            self._shutdown()

    def feed(self, text: str) -> str:
        """Execute every complete statement in `text`, return the unterminated rest."""
        idx = find_terminator(text)
        while idx != -1:
            statement = strip_comments(text[:idx])
            if statement:
                self.execute_statement(statement)
            text = text[idx + 1:].strip()
            idx = find_terminator(text)
        return "" if not strip_comments(text) else text

    def execute_statement(self, command: str):
        """Execute a single command, rendering records, message or error."""
        try:
            records, message = self.session.execute(command)
        except Exception as e:
            self.renderer.render_error(e)
            return
        if records is not None:
            self.renderer.render_records(records)
        else:
            self.renderer.render_message(message)

    # ─── Meta-Commands ──────────────────────────────────────────────

    def handle_meta_command(self, line: str):
        """Handle dot-prefixed meta-commands."""
        cmd, _, arg = line.partition(" ")
        cmd = cmd.lower()
        if cmd in (".quit", ".exit", ".q"):
            self._running = False
            return
        handler = self._meta.get(cmd)
        if handler is None:
            self._out(f"Unknown command: {cmd}. Type .help for available commands.")
        else:
            handler(arg.strip())

    def _cmd_fields(self, arg: str):
        fields = self.session.db.fields()
        self._out("\n".join(f"  {f}" for f in fields) if fields else "No indexed fields.")

    def _cmd_mode(self, arg: str):
        if arg.lower() in MODES:
            self.renderer.mode = arg.lower()
        else:
            self._out(f"Usage: .mode {'|'.join(MODES)}")
        self._out(f"Output mode: {self.renderer.mode}")

    def _toggle(self, attr: str, label: str, arg: str):
        if arg.lower() in _ON:
            setattr(self.renderer, attr, True)
        elif arg.lower() in _OFF:
            setattr(self.renderer, attr, False)
        self._out(f"{label} {'ON' if getattr(self.renderer, attr) else 'OFF'}")

    def _cmd_limit(self, arg: str):
        if arg.lower() in ("off", "none", "0"):
            self.renderer.display_limit = None
        elif arg.isdigit():
            self.renderer.display_limit = int(arg)
        else:
            self._out("Usage: .limit N | .limit off")
        self._out(f"Display limit: {self.renderer.display_limit or 'OFF'}")

    def _cmd_stats(self, arg: str):
        counters = [("Store", self.session.db.stats()), ("Session", self.session.stats)]
        for title, values in counters:
            self._out(f"{title}:")
            for name, value in values.items():
                self._out(f"  {name.replace('_', ' '):<22}{value}")

    # ─── Helpers ────────────────────────────────────────────────────

    def _out(self, text: str):
        print(text, file=self.renderer.output)

    def _shutdown(self):
        warning = self.session.close()
        if warning:
            print(warning, file=sys.stderr)
        print("Goodbye.")
