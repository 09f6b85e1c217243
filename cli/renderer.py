"""
TransientDB Result Renderer
===========================
Prints records returned by WHERE / GET.

Records are documents: each may carry its own set of fields. Table mode
lays them out under the union of their field names (first-seen order)
and leaves a blank cell where a record lacks a field.

Modes:
  table     aligned grid, one record per row
  vertical  one block per record, one field per line
  json      one JSON object per line
"""

import json
import sys
import time
from itertools import islice
from typing import Any, Iterable, List, Mapping, Optional, TextIO, Tuple


MODES = ("table", "vertical", "json")

# Integral floats beyond this print in exponent form
_INT_FORM_LIMIT = 1e16

_ERROR_PREFIXES = {
    "CommandError": "SyntaxError",
    "SessionError": "SessionError",
}


class Renderer:
    """Formats records and messages onto an output stream."""

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.mode: str = "table"
        self.show_headers: bool = True
        self.show_timer: bool = True
        self.display_limit: Optional[int] = None  # None = no limit
        self.max_col_width: int = 50

    # ─── Public API ─────────────────────────────────────────────────

    def render_records(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Print records in the current mode. Returns the number shown."""
        start = time.perf_counter()
        shown, truncated = self._take(records)

        if self.mode == "json":
            lines = [json.dumps(dict(r), default=str) for r in shown]
        elif self.mode == "vertical":
            lines = self._vertical_lines(shown)
        else:
            lines = self._table_lines(shown)

        for line in lines:
            self._print(line)
        if truncated:
            self._print(f"... (display limit {self.display_limit} reached)")

        footer = f"\n{len(shown)} record(s)"
        if self.show_timer:
            footer += f" ({time.perf_counter() - start:.3f}s)"
        self._print(footer)
        return len(shown)

    def render_message(self, message: str):
        if message:
            self._print(message)

    def render_error(self, error: Exception):
        name = type(error).__name__
        prefix = _ERROR_PREFIXES.get(name, f"Error[{name}]")
        self._print(f"{prefix}: {error}")

    # ─── Layouts ────────────────────────────────────────────────────

    def _take(self, records: Iterable[Mapping[str, Any]]) -> Tuple[List[Mapping[str, Any]], bool]:
        """Apply the display limit; report whether records were left over."""
        if self.display_limit is None:
            return list(records), False
        shown = list(islice(records, self.display_limit + 1))
        if len(shown) > self.display_limit:
            return shown[:self.display_limit], True
        return shown, False

    def _table_lines(self, records: List[Mapping[str, Any]]) -> List[str]:
        fields = list(dict.fromkeys(f for r in records for f in r))
        if not fields:
            return []

        grid = [[self._cell(r, f) for f in fields] for r in records]
        widths = [
            max([len(f)] + [len(row[i]) for row in grid])
            for i, f in enumerate(fields)
        ]
        rule = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

        lines = []
        if self.show_headers:
            lines += [rule, self._grid_line(fields, widths, [False] * len(fields)), rule]
        for record, row in zip(records, grid):
            numeric = [_is_number(record.get(f)) for f in fields]
            lines.append(self._grid_line(row, widths, numeric))
        if self.show_headers:
            lines.append(rule)
        return lines

    def _grid_line(self, cells: List[str], widths: List[int], numeric: List[bool]) -> str:
        padded = [
            c.rjust(w) if right else c.ljust(w)
            for c, w, right in zip(cells, widths, numeric)
        ]
        return "| " + " | ".join(padded) + " |"

    def _cell(self, record: Mapping[str, Any], field: str) -> str:
        if field not in record:
            return ""
        text = self._format_value(record[field])
        if len(text) > self.max_col_width:
            text = text[:self.max_col_width - 3] + "..."
        return text

    def _vertical_lines(self, records: List[Mapping[str, Any]]) -> List[str]:
        lines = []
        for n, record in enumerate(records):
            lines.append(f"-[ record {n + 1} ]-")
            pad = max((len(f) for f in record), default=0)
            lines += [f"  {f.ljust(pad)} : {self._format_value(v)}" for f, v in record.items()]
        return lines

    # ─── Values ─────────────────────────────────────────────────────

    def _format_value(self, value) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if value.is_integer() and abs(value) < _INT_FORM_LIMIT:
                return str(int(value))
            return f"{value:.6g}"
        if isinstance(value, (Mapping, list, tuple)):
            return json.dumps(value, default=str, separators=(",", ":"))
        return str(value)

    def _print(self, text: str):
        print(text, file=self.output)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
