"""
MemIndex Indexing Module
========================
In-memory B-Tree index for point lookup and ordered range retrieval.

Components:
  - btree: B-Tree with insert, search, range query, structural verification
  - loader: bulk index construction from pairs or records
"""

from indexing.btree import (
    BTreeIndex,
    BTreeNode,
    DEFAULT_ORDER,
    Entry,
    InvalidKeyError,
)
from indexing.loader import build_index, build_index_from_records

__all__ = [
    "BTreeIndex",
    "BTreeNode",
    "DEFAULT_ORDER",
    "Entry",
    "InvalidKeyError",
    "build_index",
    "build_index_from_records",
]
