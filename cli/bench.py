"""
MemIndex Lookup Benchmark
=========================
Compares point and range lookups over generated records:
  - linear scan over a Python list
  - B-Tree index (BTreeIndex)

Everything stays in memory. Each timed index lookup is checked against the
scan result, so a run also doubles as a consistency check.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import List, Optional

from indexing.btree import BTreeIndex, DEFAULT_ORDER
from indexing.loader import build_index_from_records

logger = logging.getLogger(__name__)

DEFAULT_RECORDS = 10000
DEFAULT_QUERIES = 1000
DEFAULT_RANGE_WIDTH = 100

CATEGORIES = ("A", "B", "C", "D", "E")


@dataclass
class Record:
    id: int
    name: str
    value: int
    category: str


def generate_records(count: int, seed: Optional[int] = None) -> List[Record]:
    """Records with ids 1..count, random values in [0, 10000) and categories A-E."""
    rng = random.Random(seed)
    return [
        Record(i, f"Record_{i}", rng.randrange(10000), rng.choice(CATEGORIES))
        for i in range(1, count + 1)
    ]


@dataclass
class BenchConfig:
    records: int = DEFAULT_RECORDS
    queries: int = DEFAULT_QUERIES
    order: int = DEFAULT_ORDER
    seed: Optional[int] = None
    range_width: int = DEFAULT_RANGE_WIDTH

    def __post_init__(self):
        for name in ("records", "queries", "range_width"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


@dataclass
class BenchResult:
    config: BenchConfig
    build_ns: int = 0
    scan_get_ns: float = 0.0
    index_get_ns: float = 0.0
    scan_range_ns: float = 0.0
    index_range_ns: float = 0.0
    index_size: int = 0
    index_height: int = 0
    notes: List[str] = field(default_factory=list)

    @property
    def get_speedup(self) -> float:
        return self.scan_get_ns / self.index_get_ns if self.index_get_ns else 0.0

    @property
    def range_speedup(self) -> float:
        return self.scan_range_ns / self.index_range_ns if self.index_range_ns else 0.0

    def rows(self) -> List[dict]:
        """Result table rows for the renderer."""
        return [
            {"operation": "point lookup", "scan_ns": round(self.scan_get_ns),
             "index_ns": round(self.index_get_ns), "speedup": round(self.get_speedup, 1)},
            {"operation": "range query", "scan_ns": round(self.scan_range_ns),
             "index_ns": round(self.index_range_ns), "speedup": round(self.range_speedup, 1)},
        ]


def _scan_get(records: List[Record], record_id: int) -> Optional[Record]:
    for record in records:
        if record.id == record_id:
            return record
    return None


def _scan_range(records: List[Record], low: int, high: int) -> List[Record]:
    return sorted((r for r in records if low <= r.id <= high), key=lambda r: r.id)


def run_benchmark(config: BenchConfig) -> BenchResult:
    """
    Run the lookup comparison.
    Raises RuntimeError if the index disagrees with the linear scan.
    """
    rng = random.Random(config.seed)
    records = generate_records(config.records, config.seed)
    result = BenchResult(config=config)

    logger.info("Building index over %d records (order %d)", config.records, config.order)
    start = time.perf_counter_ns()
    index: BTreeIndex = build_index_from_records(records, "id", config.order)
    result.build_ns = time.perf_counter_ns() - start
    result.index_size = index.size()
    result.index_height = index.height

    lookup_ids = [rng.randint(1, config.records) for _ in range(config.queries)]

    logger.info("Timing %d point lookups", config.queries)
    scan_total = index_total = 0
    for record_id in lookup_ids:
        start = time.perf_counter_ns()
        expected = _scan_get(records, record_id)
        scan_total += time.perf_counter_ns() - start

        start = time.perf_counter_ns()
        found = index.get(record_id)
        index_total += time.perf_counter_ns() - start

        if found is not expected:
            raise RuntimeError(f"Index lookup mismatch for id {record_id}")
    result.scan_get_ns = scan_total / config.queries
    result.index_get_ns = index_total / config.queries

    logger.info("Timing %d range queries (width %d)", config.queries, config.range_width)
    scan_total = index_total = 0
    for low in lookup_ids:
        high = low + config.range_width - 1
        start = time.perf_counter_ns()
        expected = _scan_range(records, low, high)
        scan_total += time.perf_counter_ns() - start

        start = time.perf_counter_ns()
        found = index.range_query(low, high)
        index_total += time.perf_counter_ns() - start

        if found != expected:
            raise RuntimeError(f"Index range mismatch for [{low}, {high}]")
    result.scan_range_ns = scan_total / config.queries
    result.index_range_ns = index_total / config.queries

    if config.records < 100:
        result.notes.append("Small data set: timings are dominated by call overhead")
    return result
