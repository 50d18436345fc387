"""
MemIndex: In-Memory B-Tree Index
=================================
Entry point: builds an index over generated records and runs lookups,
structure checks, or the lookup benchmark against it.

Usage:
    python main.py [options]

Default:
    Build an index over generated records and print a summary.
"""

import logging
import sys
import time
from typing import Any, Dict, List, Optional, TextIO

from cli.bench import (
    BenchConfig, DEFAULT_QUERIES, DEFAULT_RECORDS,
    generate_records, run_benchmark,
)
from cli.renderer import Renderer
from indexing.btree import DEFAULT_ORDER
from indexing.loader import build_index_from_records

logger = logging.getLogger(__name__)


HELP_TEXT = """
MemIndex: In-Memory B-Tree Index

Usage:
    python main.py [options]                  Build index, print summary
    python main.py --get ID [options]         Look up one record by id
    python main.py --range LO HI [options]    Records with LO <= id <= HI
    python main.py --bench [options]          Index vs linear scan timings
    python main.py --check [options]          Verify B-Tree structure

Options:
    --help          Show this help
    --order N       B-Tree order, max entries per node is N - 1 (default: 3)
    --records N     Number of generated records (default: 10000)
    --queries N     Lookups per benchmark phase (default: 1000)
    --seed N        Random seed for generated records
    --verbose       Debug logging
"""


def print_help(file: TextIO = None):
    print(HELP_TEXT, file=file or sys.stdout)


def _int_arg(args: List[str], i: int, name: str) -> int:
    if i + 1 >= len(args):
        raise ValueError(f"{name} requires a value")
    try:
        return int(args[i + 1])
    except ValueError:
        raise ValueError(f"{name} expects an integer, got {args[i + 1]!r}")


def parse_args(args: List[str]) -> Dict[str, Any]:
    """
    Parse command-line arguments into an options dict.
    Raises ValueError on unknown options or malformed values.
    """
    opts: Dict[str, Any] = {
        "command": "summary",
        "order": DEFAULT_ORDER,
        "records": DEFAULT_RECORDS,
        "queries": DEFAULT_QUERIES,
        "seed": None,
        "verbose": False,
        "get": None,
        "range": None,
    }

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--help", "-h"):
            opts["command"] = "help"
            i += 1
        elif arg == "--order":
            opts["order"] = _int_arg(args, i, arg)
            i += 2
        elif arg == "--records":
            opts["records"] = _int_arg(args, i, arg)
            i += 2
        elif arg == "--queries":
            opts["queries"] = _int_arg(args, i, arg)
            i += 2
        elif arg == "--seed":
            opts["seed"] = _int_arg(args, i, arg)
            i += 2
        elif arg == "--verbose":
            opts["verbose"] = True
            i += 1
        elif arg == "--get":
            opts["get"] = _int_arg(args, i, arg)
            opts["command"] = "get"
            i += 2
        elif arg == "--range":
            low = _int_arg(args, i, arg)
            high = _int_arg(args, i + 1, arg)
            opts["range"] = (low, high)
            opts["command"] = "range"
            i += 3
        elif arg == "--bench":
            opts["command"] = "bench"
            i += 1
        elif arg == "--check":
            opts["command"] = "check"
            i += 1
        else:
            raise ValueError(f"Unknown option: {arg}")

    if opts["records"] <= 0:
        raise ValueError(f"--records must be positive, got {opts['records']}")
    return opts


def run(opts: Dict[str, Any], renderer: Renderer) -> int:
    """Execute the selected command. Returns the process exit code."""
    command = opts["command"]
    logger.debug("Running %s (order=%d, records=%d)", command, opts["order"], opts["records"])

    if command == "bench":
        config = BenchConfig(records=opts["records"], queries=opts["queries"],
                             order=opts["order"], seed=opts["seed"])
        result = run_benchmark(config)
        renderer.render_message(
            f"records={config.records} queries={config.queries} order={config.order} "
            f"height={result.index_height} build={result.build_ns / 1e6:.3f}ms")
        renderer.render_rows(result.rows())
        for note in result.notes:
            renderer.render_message(f"note: {note}")
        return 0

    records = generate_records(opts["records"], opts["seed"])
    index = build_index_from_records(records, "id", opts["order"])

    if command == "get":
        start = time.perf_counter()
        record = index.get(opts["get"])
        elapsed = time.perf_counter() - start
        if record is None:
            renderer.render_message(f"(not found) ({elapsed:.6f}s)")
        else:
            renderer.render_rows([record], elapsed=elapsed)
        return 0

    if command == "range":
        low, high = opts["range"]
        start = time.perf_counter()
        found = index.range_query(low, high)
        elapsed = time.perf_counter() - start
        renderer.render_rows(found, column_names=["id", "name", "value", "category"],
                             elapsed=elapsed)
        return 0

    if command == "check":
        issues = index.verify_structure()
        for issue in issues:
            renderer.render_message(f"issue: {issue}")
        if issues:
            renderer.render_message(f"{len(issues)} structural issue(s) found")
            return 1
        renderer.render_message(f"OK: {index.size()} entries, height {index.height}")
        return 0

    renderer.render_message(
        f"size={index.size()} height={index.height} order={index.order}")
    return 0


def main(argv: Optional[List[str]] = None, output: TextIO = None) -> int:
    """Parse CLI arguments and dispatch."""
    args = sys.argv[1:] if argv is None else argv
    renderer = Renderer(output)

    try:
        opts = parse_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        print_help(sys.stderr)
        return 1

    if opts["command"] == "help":
        print_help(renderer.output)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if opts["verbose"] else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return run(opts, renderer)
    except Exception as e:
        renderer.render_error(e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
