"""
MemIndex CLI Tests
==================
Tests for Renderer, the lookup benchmark, and the main.py entry point.
"""

import io
import unittest
from unittest import mock

from cli.bench import BenchConfig, Record, generate_records, run_benchmark
from cli.renderer import Renderer
from indexing.btree import InvalidKeyError
import main


class RendererTestBase(unittest.TestCase):
    """Base with an in-memory output stream."""

    def setUp(self):
        self.out = io.StringIO()
        self.renderer = Renderer(self.out)
        self.renderer.show_timer = False


# ═══════════════════════════════════════════════════════════════════════════
# Renderer
# ═══════════════════════════════════════════════════════════════════════════

class TestRenderer(RendererTestBase):

    def test_table_from_dicts(self):
        count = self.renderer.render_rows([{"id": 1, "name": "a"}, {"id": 22, "name": "bb"}])
        text = self.out.getvalue()
        self.assertEqual(count, 2)
        self.assertIn("| id | name |", text)
        self.assertIn("|  1 | a    |", text)
        self.assertIn("2 row(s) returned", text)

    def test_table_from_dataclasses(self):
        self.renderer.render_rows([Record(7, "Record_7", 42, "C")])
        text = self.out.getvalue()
        self.assertIn("category", text)
        self.assertIn("Record_7", text)

    def test_empty_rows_with_columns(self):
        count = self.renderer.render_rows([], column_names=["id"])
        self.assertEqual(count, 0)
        self.assertIn("| id |", self.out.getvalue())
        self.assertIn("0 row(s) returned", self.out.getvalue())

    def test_null_and_bool_formatting(self):
        self.renderer.mode = "raw"
        self.renderer.render_rows([{"a": None, "b": True, "c": 2.0, "d": 0.25}])
        self.assertIn("NULL|true|2|0.25", self.out.getvalue())

    def test_timer_footer(self):
        self.renderer.show_timer = True
        self.renderer.render_rows([{"x": 1}], elapsed=0.5)
        self.assertIn("1 row(s) returned (0.500000s)", self.out.getvalue())

    def test_error_classification(self):
        self.renderer.render_error(InvalidKeyError(None))
        self.renderer.render_error(ValueError("bad order"))
        self.renderer.render_error(OSError("boom"))
        text = self.out.getvalue()
        self.assertIn("InvalidArgument: Invalid index key: None", text)
        self.assertIn("ConfigError: bad order", text)
        self.assertIn("Error[OSError]: boom", text)


# ═══════════════════════════════════════════════════════════════════════════
# Benchmark
# ═══════════════════════════════════════════════════════════════════════════

class TestBench(unittest.TestCase):

    def test_generate_records(self):
        records = generate_records(25, seed=3)
        self.assertEqual([r.id for r in records], list(range(1, 26)))
        self.assertEqual(records[4].name, "Record_5")
        self.assertTrue(all(0 <= r.value < 10000 for r in records))
        self.assertTrue(all(r.category in "ABCDE" for r in records))
        self.assertEqual(records, generate_records(25, seed=3))

    def test_config_rejects_non_positive(self):
        with self.assertRaises(ValueError):
            BenchConfig(records=0)
        with self.assertRaises(ValueError):
            BenchConfig(queries=-1)

    def test_run_small_benchmark(self):
        result = run_benchmark(BenchConfig(records=50, queries=20, order=4, seed=1))
        self.assertEqual(result.index_size, 50)
        self.assertGreaterEqual(result.index_height, 2)
        self.assertGreaterEqual(result.build_ns, 0)
        self.assertEqual(len(result.rows()), 2)
        self.assertTrue(result.notes)

    def test_bad_order_surfaces(self):
        with self.assertRaises(ValueError):
            run_benchmark(BenchConfig(records=10, queries=5, order=1))


# ═══════════════════════════════════════════════════════════════════════════
# Package Layout
# ═══════════════════════════════════════════════════════════════════════════

class TestLayout(unittest.TestCase):

    def test_cli_is_namespace_package(self):
        """cli/ is a namespace package without an __init__.py."""
        import cli
        self.assertIsNone(getattr(cli, "__file__", None))


# ═══════════════════════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════════════════════

class TestMain(unittest.TestCase):

    def _run(self, *args):
        out = io.StringIO()
        code = main.main(list(args), output=out)
        return code, out.getvalue()

    def test_parse_defaults(self):
        opts = main.parse_args([])
        self.assertEqual(opts["command"], "summary")
        self.assertEqual(opts["order"], 3)

    def test_parse_range(self):
        opts = main.parse_args(["--range", "3", "9", "--order", "5"])
        self.assertEqual(opts["command"], "range")
        self.assertEqual(opts["range"], (3, 9))
        self.assertEqual(opts["order"], 5)

    def test_parse_errors(self):
        with self.assertRaises(ValueError):
            main.parse_args(["--bogus"])
        with self.assertRaises(ValueError):
            main.parse_args(["--order", "x"])
        with self.assertRaises(ValueError):
            main.parse_args(["--get"])
        with self.assertRaises(ValueError):
            main.parse_args(["--records", "0"])

    def test_summary(self):
        code, text = self._run("--records", "30", "--seed", "1")
        self.assertEqual(code, 0)
        self.assertIn("size=30", text)
        self.assertIn("order=3", text)

    def test_get_found(self):
        code, text = self._run("--get", "5", "--records", "20", "--seed", "1")
        self.assertEqual(code, 0)
        self.assertIn("Record_5", text)

    def test_get_missing(self):
        code, text = self._run("--get", "999", "--records", "20")
        self.assertEqual(code, 0)
        self.assertIn("(not found)", text)

    def test_range(self):
        code, text = self._run("--range", "3", "5", "--records", "10")
        self.assertEqual(code, 0)
        self.assertIn("Record_3", text)
        self.assertIn("Record_5", text)
        self.assertNotIn("Record_6", text)
        self.assertIn("3 row(s) returned", text)

    def test_range_footer_times_lookup(self):
        with mock.patch("main.time") as fake_time:
            fake_time.perf_counter.side_effect = [10.0, 10.25]
            code, text = self._run("--range", "1", "2", "--records", "10")
        self.assertEqual(code, 0)
        self.assertIn("2 row(s) returned (0.250000s)", text)

    def test_get_footer_times_lookup(self):
        with mock.patch("main.time") as fake_time:
            fake_time.perf_counter.side_effect = [3.0, 3.5]
            code, text = self._run("--get", "4", "--records", "10")
        self.assertEqual(code, 0)
        self.assertIn("1 row(s) returned (0.500000s)", text)

    def test_check(self):
        code, text = self._run("--check", "--records", "200", "--order", "4")
        self.assertEqual(code, 0)
        self.assertIn("OK: 200 entries", text)

    def test_bench(self):
        code, text = self._run("--bench", "--records", "40", "--queries", "10", "--seed", "2")
        self.assertEqual(code, 0)
        self.assertIn("point lookup", text)
        self.assertIn("range query", text)

    def test_invalid_order_reported(self):
        code, text = self._run("--order", "1", "--records", "5")
        self.assertEqual(code, 1)
        self.assertIn("ConfigError", text)

    def test_unknown_option(self):
        code, _ = self._run("--bogus")
        self.assertEqual(code, 1)

    def test_help(self):
        code, text = self._run("--help")
        self.assertEqual(code, 0)
        self.assertIn("Usage:", text)


if __name__ == "__main__":
    unittest.main()
