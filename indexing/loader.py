"""
MemIndex Loader
===============
Bulk construction of a B-Tree index from key/value pairs or records.

NULL (and NaN) keys are not indexed: they are skipped and reported with a warning.
Every other key goes through BTreeIndex.put(), in iteration order.
"""

import logging
from typing import Any, Callable, Iterable, Tuple, Union

from indexing.btree import BTreeIndex, DEFAULT_ORDER, InvalidKeyError

logger = logging.getLogger(__name__)


def build_index(pairs: Iterable[Tuple[Any, Any]],
                order: int = DEFAULT_ORDER) -> BTreeIndex:
    """
    Build a new index from (key, value) pairs.

    1. Creates an empty BTreeIndex of the given order.
    2. Inserts each pair in iteration order (duplicates are kept).
    3. Skips pairs whose key the index rejects (None / NaN).

    Returns the populated index.
    """
    index = BTreeIndex(order)
    skipped = 0
    for key, value in pairs:
        try:
            index.put(key, value)
        except InvalidKeyError:
            skipped += 1

    if skipped:
        logger.warning("Skipped %d entr%s with a null/NaN key",
                       skipped, "y" if skipped == 1 else "ies")
    logger.debug("Built index: %d entries, height %d", index.size(), index.height)
    return index


def build_index_from_records(records: Iterable[Any],
                             key: Union[str, Callable[[Any], Any]],
                             order: int = DEFAULT_ORDER) -> BTreeIndex:
    """
    Build an index over records, storing each record under its key.

    `key` is either a callable, or a field name looked up as a mapping key
    for dict records and as an attribute otherwise.
    """
    extract = _key_extractor(key)
    return build_index(((extract(r), r) for r in records), order)


def _key_extractor(key: Union[str, Callable[[Any], Any]]) -> Callable[[Any], Any]:
    if callable(key):
        return key
    if not isinstance(key, str):
        raise ValueError(f"Record key must be a field name or callable, got {key!r}")

    def extract(record: Any) -> Any:
        if isinstance(record, dict):
            return record.get(key)
        return getattr(record, key)

    return extract
