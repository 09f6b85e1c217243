"""
TransientDB Session
===================
Owns one in-memory store and executes shell commands against it.

Commands (keywords are case-insensitive):
  INSERT <json object>    Insert a record
  WHERE <json object>     Records matching every field of the object
  REMOVE <json object>    Remove records matching every field of the object
  GET <id>                Record by id
  COUNT                   Number of live records

Statements end with ';' outside of double-quoted JSON strings. Lines starting
with '--' are comments.
Nothing is persisted: the store lives as long as the session.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from database.transient_db import TransientDB


logger = logging.getLogger(__name__)

ExecuteResult = Tuple[Optional[List[Dict[str, Any]]], str]


class SessionError(Exception):
    """Session-level error (lifecycle, etc.)."""
    pass


class CommandError(Exception):
    """Malformed shell command."""
    pass


# ─── Statement splitting ────────────────────────────────────────────────────

def find_terminator(text: str) -> int:
    """
    Index of the first ';' that ends a statement, or -1.

    Semicolons inside double-quoted strings and on comment lines (lines
    whose first non-blank characters are '--') do not count.
    """
    in_quote = False
    in_comment = False
    escaped = False
    line_start = True
    for i, ch in enumerate(text):
        if ch == "\n" and not in_quote:
            in_comment = False
            line_start = True
            continue
        if in_comment:
            continue
        if escaped:
            escaped = False
        elif in_quote:
            if ch == "\\":
                escaped = True
            elif ch == '"':
                in_quote = False
        elif ch.isspace():
            continue
        elif line_start and text.startswith("--", i):
            in_comment = True
        elif ch == '"':
            in_quote = True
        elif ch == ";":
            return i
        line_start = False
    return -1


def strip_comments(statement: str) -> str:
    """Drop '--' comment lines from a statement and trim it."""
    lines = [line for line in statement.splitlines()
             if not line.lstrip().startswith("--")]
    return "\n".join(lines).strip()


def split_statements(content: str) -> List[str]:
    """Split script content into non-empty, comment-free statements."""
    statements = []
    remaining = content
    while remaining:
        idx = find_terminator(remaining)
        if idx == -1:
            segment, remaining = remaining, ""
        else:
            segment, remaining = remaining[:idx], remaining[idx + 1:]
        statement = strip_comments(segment)
        if statement:
            statements.append(statement)
    return statements


class Session:
    """
    Shell session — one store per session.

    Usage:
        with Session() as session:
            session.execute('INSERT {"name": "a"}')
            rows, _ = session.execute('WHERE {"name": "a"}')
    """

    def __init__(self, db: Optional[TransientDB] = None):
        self.db = db if db is not None else TransientDB()
        self._closed: bool = False

        # ── Statistics ──
        self.stats = {
            "statements_executed": 0,
            "records_inserted": 0,
            "records_removed": 0,
        }

    # ─── Command Execution ──────────────────────────────────────────

    def execute(self, command: str) -> ExecuteResult:
        """
        Execute one shell command.

        Returns: (records_or_None, message)
          - WHERE / GET hit: ([{...}, ...], "")
          - everything else: (None, "Inserted record 0.")
        """
        self._check_closed()

        parts = command.strip().split(None, 1)
        if not parts:
            raise CommandError("Empty command")
        keyword = parts[0].upper()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if keyword == "INSERT":
            result = self._insert(self._parse_object(keyword, arg))
        elif keyword == "WHERE":
            result = self._where(self._parse_object(keyword, arg))
        elif keyword == "REMOVE":
            result = self._remove(self._parse_object(keyword, arg))
        elif keyword == "GET":
            result = self._get(arg)
        elif keyword == "COUNT":
            if arg:
                raise CommandError("COUNT takes no argument")
            result = None, f"{len(self.db)} record(s)."
        else:
            raise CommandError(f"Unknown command: {parts[0]}")

        self.stats["statements_executed"] += 1
        return result

    def _insert(self, record: Dict[str, Any]) -> ExecuteResult:
        self.db.insert(record)
        record_id = self.db.stats()["slots"] - 1
        self.stats["records_inserted"] += 1
        return None, f"Inserted record {record_id}."

    def _where(self, query: Dict[str, Any]) -> ExecuteResult:
        return [dict(record) for record in self.db.where(query)], ""

    def _remove(self, query: Dict[str, Any]) -> ExecuteResult:
        before = len(self.db)
        self.db.remove_where(query)
        removed = before - len(self.db)
        self.stats["records_removed"] += removed
        return None, f"Removed {removed} record(s)."

    def _get(self, arg: str) -> ExecuteResult:
        if not arg.isdigit():
            raise CommandError(f"GET expects a record id, got {arg!r}")
        record = self.db.get(int(arg))
        if record is None:
            return None, f"No record with id {arg}."
        return [dict(record)], ""

    def _parse_object(self, keyword: str, arg: str) -> Dict[str, Any]:
        """Parse the JSON object argument of INSERT / WHERE / REMOVE."""
        if not arg:
            raise CommandError(f"{keyword} expects a JSON object")
        try:
            value = json.loads(arg)
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON after {keyword}: {e}") from e
        if not isinstance(value, dict):
            raise CommandError(
                f"{keyword} expects a JSON object, got {type(value).__name__}"
            )
        return value

    def _check_closed(self):
        if self._closed:
            raise SessionError("Session is closed")

    # ─── Lifecycle ──────────────────────────────────────────────────

    def close(self) -> Optional[str]:
        """
        Close the session. The in-memory store is discarded.
        Returns a warning if live records were discarded.
        """
        if self._closed:
            return None

        warning = None
        if len(self.db):
            warning = f"WARNING: {len(self.db)} record(s) discarded on close"
        logger.debug("Session closed after %d statement(s)",
                     self.stats["statements_executed"])
        self._closed = True
        return warning

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
