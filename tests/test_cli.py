"""
TransientDB CLI Tests
=====================
Tests for Session, Renderer, REPL meta-commands, statement splitting
and script execution.
"""

import io
import logging
import os
import shutil
import tempfile
import unittest

import pytest

import main
from cli.logging_config import configure_logging
from cli.renderer import Renderer
from cli.repl import REPL
from cli.session import (
    CommandError, Session, SessionError, find_terminator, split_statements,
)


# ═══════════════════════════════════════════════════════════════════════════
# Session Lifecycle
# ═══════════════════════════════════════════════════════════════════════════

class TestSessionLifecycle(unittest.TestCase):

    def test_open_close(self):
        """Session opens and closes cleanly."""
        session = Session()
        self.assertFalse(session._closed)
        session.close()
        self.assertTrue(session._closed)

    def test_context_manager(self):
        """Session works as context manager."""
        with Session() as session:
            self.assertFalse(session._closed)
        self.assertTrue(session._closed)

    def test_close_warns_about_discarded_records(self):
        session = Session()
        session.execute('INSERT {"a": 1}')
        warning = session.close()
        self.assertIn("1 record(s) discarded", warning)

    def test_close_empty_store_no_warning(self):
        session = Session()
        self.assertIsNone(session.close())

    def test_double_close_safe(self):
        """Closing an already-closed session is a no-op."""
        session = Session()
        session.close()
        self.assertIsNone(session.close())

    def test_execute_after_close(self):
        session = Session()
        session.close()
        with self.assertRaises(SessionError):
            session.execute("COUNT")


# ═══════════════════════════════════════════════════════════════════════════
# Command Execution
# ═══════════════════════════════════════════════════════════════════════════

class TestSessionExecution(unittest.TestCase):

    def setUp(self):
        self.session = Session()

    def tearDown(self):
        self.session.close()

    def test_insert_message(self):
        _, msg = self.session.execute('INSERT {"name": "a"}')
        self.assertEqual(msg, "Inserted record 0.")
        _, msg = self.session.execute('insert {"name": "b"}')
        self.assertEqual(msg, "Inserted record 1.")

    def test_where_rows(self):
        self.session.execute('INSERT {"name": "a", "type": "x"}')
        self.session.execute('INSERT {"name": "b", "type": "x"}')
        self.session.execute('INSERT {"name": "c", "type": "y"}')
        rows, msg = self.session.execute('WHERE {"type": "x"}')
        self.assertEqual([r["name"] for r in rows], ["a", "b"])
        self.assertEqual(msg, "")

    def test_remove_reports_count(self):
        self.session.execute('INSERT {"type": "x"}')
        self.session.execute('INSERT {"type": "x"}')
        _, msg = self.session.execute('REMOVE {"type": "x"}')
        self.assertEqual(msg, "Removed 2 record(s).")
        self.assertEqual(self.session.stats["records_removed"], 2)

    def test_remove_empty_query(self):
        self.session.execute('INSERT {"type": "x"}')
        _, msg = self.session.execute("REMOVE {}")
        self.assertEqual(msg, "Removed 0 record(s).")

    def test_get(self):
        self.session.execute('INSERT {"name": "a"}')
        rows, _ = self.session.execute("GET 0")
        self.assertEqual(list(rows), [{"name": "a"}])

    def test_get_missing(self):
        rows, msg = self.session.execute("GET 3")
        self.assertIsNone(rows)
        self.assertEqual(msg, "No record with id 3.")

    def test_get_bad_id(self):
        with self.assertRaises(CommandError):
            self.session.execute("GET abc")

    def test_count(self):
        self.session.execute('INSERT {"a": 1}')
        _, msg = self.session.execute("COUNT")
        self.assertEqual(msg, "1 record(s).")

    def test_count_rejects_argument(self):
        with self.assertRaises(CommandError):
            self.session.execute("COUNT 1")

    def test_unknown_command(self):
        with self.assertRaises(CommandError):
            self.session.execute("SELECT * FROM t")

    def test_invalid_json(self):
        with self.assertRaises(CommandError):
            self.session.execute("INSERT {name: a}")

    def test_json_must_be_object(self):
        with self.assertRaises(CommandError):
            self.session.execute("INSERT [1, 2]")

    def test_missing_argument(self):
        with self.assertRaises(CommandError):
            self.session.execute("WHERE")

    def test_empty_command(self):
        with self.assertRaises(CommandError):
            self.session.execute("   ")

    def test_statements_counted(self):
        self.session.execute('INSERT {"a": 1}')
        self.session.execute("COUNT")
        self.assertEqual(self.session.stats["statements_executed"], 2)


# ═══════════════════════════════════════════════════════════════════════════
# Statement splitting
# ═══════════════════════════════════════════════════════════════════════════

class TestStatementSplitting:

    def test_find_terminator(self):
        assert find_terminator('COUNT; COUNT') == 5
        assert find_terminator('COUNT') == -1

    def test_semicolon_inside_string(self):
        text = 'INSERT {"a": "x;y"};'
        assert find_terminator(text) == len(text) - 1

    def test_escaped_quote_inside_string(self):
        text = r'INSERT {"a": "say \"hi;\""};'
        assert find_terminator(text) == len(text) - 1

    def test_split_statements(self):
        content = 'INSERT {"a": 1};\nWHERE {"a": 1};\nCOUNT'
        assert [s.strip() for s in split_statements(content)] == [
            'INSERT {"a": 1}', 'WHERE {"a": 1}', "COUNT",
        ]

    def test_split_ignores_trailing_whitespace(self):
        assert [s.strip() for s in split_statements("COUNT;\n\n")] == ["COUNT"]

    def test_semicolon_in_comment_line_ignored(self):
        text = '-- insert; then count\nINSERT {"a": 1};'
        assert find_terminator(text) == len(text) - 1

    def test_dashes_inside_string_are_not_comments(self):
        text = 'INSERT {"a": "--x;"};'
        assert find_terminator(text) == len(text) - 1

    def test_split_drops_comment_lines(self):
        content = '-- setup; seed data\nINSERT {"a": 1};\n  -- trailing; note\nCOUNT;\n-- done\n'
        assert split_statements(content) == ['INSERT {"a": 1}', "COUNT"]


# ═══════════════════════════════════════════════════════════════════════════
# Renderer
# ═══════════════════════════════════════════════════════════════════════════

class TestRenderer:

    def _render(self, records, mode="table", limit=None):
        out = io.StringIO()
        renderer = Renderer(output=out)
        renderer.mode = mode
        renderer.show_timer = False
        renderer.display_limit = limit
        count = renderer.render_records(records)
        return count, out.getvalue()

    def test_table_mode(self):
        count, text = self._render([{"name": "a", "n": 1}, {"name": "bb", "n": 22}])
        assert count == 2
        assert "| name | n  |" in text
        assert "| a    |  1 |" in text
        assert "2 record(s)" in text

    def test_table_union_of_fields(self):
        _, text = self._render([{"a": 1}, {"b": 2}])
        assert "| a | b |" in text
        assert "| 1 |   |" in text

    def test_headers_off(self):
        out = io.StringIO()
        renderer = Renderer(output=out)
        renderer.show_headers = False
        renderer.show_timer = False
        renderer.render_records([{"a": 1}])
        assert out.getvalue().splitlines()[0] == "| 1 |"

    def test_null_and_bool(self):
        _, text = self._render([{"a": None, "b": True}])
        assert "NULL" in text
        assert "true" in text

    def test_vertical_mode_nested_as_json(self):
        _, text = self._render([{"a": {"x": [1, 2]}, "bb": 2}], mode="vertical")
        assert "-[ record 1 ]-" in text
        assert '  a  : {"x":[1,2]}' in text
        assert "  bb : 2" in text

    def test_json_mode(self):
        _, text = self._render([{"a": 1, "b": "x"}], mode="json")
        assert '{"a": 1, "b": "x"}' in text

    def test_display_limit(self):
        count, text = self._render([{"a": i} for i in range(5)], limit=2)
        assert count == 2
        assert "display limit 2 reached" in text

    def test_display_limit_not_reached(self):
        _, text = self._render([{"a": 1}], limit=2)
        assert "display limit" not in text

    def test_empty_result(self):
        count, text = self._render([])
        assert count == 0
        assert "0 record(s)" in text

    def test_integral_float_shown_as_int(self):
        _, text = self._render([{"v": 3.0}], mode="vertical")
        assert "v : 3" in text

    def test_huge_integral_float_uses_exponent(self):
        _, text = self._render([{"v": 1e300}], mode="vertical")
        assert "v : 1e+300" in text

    def test_error_classification(self):
        out = io.StringIO()
        Renderer(output=out).render_error(CommandError("bad"))
        assert out.getvalue().strip() == "SyntaxError: bad"

    def test_unknown_error_prefix(self):
        out = io.StringIO()
        Renderer(output=out).render_error(ValueError("boom"))
        assert out.getvalue().strip() == "Error[ValueError]: boom"


# ═══════════════════════════════════════════════════════════════════════════
# REPL
# ═══════════════════════════════════════════════════════════════════════════

class TestREPL:

    @pytest.fixture
    def repl(self):
        out = io.StringIO()
        renderer = Renderer(output=out)
        renderer.show_timer = False
        return REPL(renderer=renderer), out

    def test_feed_executes_complete_statements(self, repl):
        shell, out = repl
        rest = shell.feed('INSERT {"a": 1}; INSERT {"a": 2}; WHERE {"a"')
        assert rest == 'WHERE {"a"'
        assert len(shell.session.db) == 2
        assert "Inserted record 1." in out.getvalue()

    def test_feed_skips_comment_lines(self, repl):
        shell, out = repl
        rest = shell.feed('-- load; two records\nINSERT {"a": 1};')
        assert rest == ""
        assert len(shell.session.db) == 1
        assert "SyntaxError" not in out.getvalue()

    def test_feed_drops_lone_comment(self, repl):
        shell, _ = repl
        assert shell.feed("-- nothing here") == ""

    def test_errors_rendered_not_raised(self, repl):
        shell, out = repl
        shell.feed("BOGUS;")
        assert "SyntaxError" in out.getvalue()

    def test_mode_command(self, repl):
        shell, out = repl
        shell.handle_meta_command(".mode json")
        assert shell.renderer.mode == "json"
        shell.handle_meta_command(".mode bogus")
        assert shell.renderer.mode == "json"

    def test_limit_command(self, repl):
        shell, _ = repl
        shell.handle_meta_command(".limit 3")
        assert shell.renderer.display_limit == 3
        shell.handle_meta_command(".limit off")
        assert shell.renderer.display_limit is None

    def test_fields_command(self, repl):
        shell, out = repl
        shell.feed('INSERT {"name": "a", "tags": [], "late": 1};')
        shell.handle_meta_command(".fields")
        assert "  name" in out.getvalue()
        assert "late" not in out.getvalue().split("Inserted")[-1]

    def test_stats_command(self, repl):
        shell, out = repl
        shell.feed('INSERT {"a": 1}; REMOVE {"a": 1};')
        shell.handle_meta_command(".stats")
        text = out.getvalue()
        assert "  gaps                  1" in text
        assert "  records removed       1" in text

    def test_quit(self, repl):
        shell, _ = repl
        shell._running = True
        shell.handle_meta_command(".quit")
        assert shell._running is False


# ═══════════════════════════════════════════════════════════════════════════
# Script execution
# ═══════════════════════════════════════════════════════════════════════════

class TestScriptExecution(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="transientdb_cli_test_")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_run_commands(self):
        status = main.run_commands(
            '-- people\n'
            'INSERT {"name": "a", "type": "x"};\n'
            'INSERT {"name": "b", "type": "x"};\n'
            'REMOVE {"name": "b"};\n'
            'COUNT;\n'
        )
        self.assertEqual(status, 0)

    def test_run_commands_semicolon_in_comment(self):
        status = main.run_commands('-- insert; then count\nINSERT {"a": 1};\nCOUNT;\n')
        self.assertEqual(status, 0)

    def test_run_commands_stops_on_error(self):
        status = main.run_commands('INSERT {"a": 1}; BOGUS; COUNT;')
        self.assertEqual(status, 1)

    def test_execute_script_file(self):
        path = os.path.join(self.test_dir, "script.tdb")
        with open(path, "w", encoding="utf-8") as f:
            f.write('INSERT {"a": 1};\nWHERE {"a": 1};\n')
        self.assertEqual(main.execute_script(path), 0)

    def test_execute_script_missing_file(self):
        path = os.path.join(self.test_dir, "missing.tdb")
        self.assertEqual(main.execute_script(path), 1)

    def test_main_exit_status(self):
        with self.assertRaises(SystemExit) as ctx:
            main.main(["--execute", "BOGUS"])
        self.assertEqual(ctx.exception.code, 1)

    def test_main_unknown_option(self):
        with self.assertRaises(SystemExit):
            main.main(["--nope"])


def test_configure_logging_verbose():
    configure_logging(verbose=True)
    try:
        assert logging.getLogger("database").level == logging.DEBUG
    finally:
        configure_logging(verbose=False)
    assert logging.getLogger("database").level == logging.WARNING
