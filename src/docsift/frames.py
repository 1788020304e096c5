"""
Query support for columnar data.

Rows of a pandas DataFrame, polars DataFrame or pyarrow Table are matched as
documents (one dict per row), and filter_frame() returns a frame of the same
type holding the matching rows:

    >>> df = pd.DataFrame({"city": ["NYC", "SF", "NYC"], "age": [30, 25, 35]})
    >>> filter_frame(df, {"city": "NYC", "age": {"$gt": 31}})
      city  age
    2  NYC   35

pandas stores missing values as NaN/NaT; those cells are left out of the row
dict so that {"field": {"$exists": False}} behaves as for a missing key.
Nested struct/list columns arrive as dicts/lists and work with dotted paths.
"""

import logging
from typing import Any, Dict, Iterator, List, TypeVar

import pandas as pd
import polars as pl
import pyarrow as pa

from docsift.api import QueryOrMatcher, as_matcher

logger = logging.getLogger(__name__)

Frame = TypeVar("Frame", pd.DataFrame, pl.DataFrame, pa.Table)


def _is_missing(value: Any) -> bool:
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def _drop_missing(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in record.items() if not _is_missing(value)}


def iter_records(frame: Any) -> Iterator[Any]:
    """
    Iterate the rows of a frame as dicts.

    Anything that is not a pandas/polars DataFrame or a pyarrow Table is
    iterated as is, so plain lists of documents pass straight through.
    """
    if isinstance(frame, pd.DataFrame):
        for record in frame.to_dict(orient="records"):
            yield _drop_missing(record)
    elif isinstance(frame, pl.DataFrame):
        yield from frame.iter_rows(named=True)
    elif isinstance(frame, pa.Table):
        for batch in frame.to_batches():
            yield from batch.to_pylist()
    else:
        yield from frame


def match_mask(frame: Any, query: QueryOrMatcher) -> List[bool]:
    """One bool per row: does the row match the query."""
    matcher = as_matcher(query)
    return [matcher(record) for record in iter_records(frame)]


def filter_frame(frame: Frame, query: QueryOrMatcher) -> Frame:
    """
    Keep the rows of a frame that match a query, preserving order.

    Args:
        frame: pandas DataFrame, polars DataFrame or pyarrow Table
        query: Query or compiled matcher

    Returns:
        A frame of the same type (pandas keeps the original index)

    Raises:
        TypeError: If frame is not a supported frame type
    """
    if not isinstance(frame, (pd.DataFrame, pl.DataFrame, pa.Table)):
        raise TypeError(
            f"filter_frame expects a pandas/polars DataFrame or pyarrow Table, "
            f"got {type(frame).__name__}"
        )

    mask = match_mask(frame, query)
    logger.debug("Matched %d of %d rows", sum(mask), len(mask))

    if isinstance(frame, pd.DataFrame):
        return frame[pd.Series(mask, index=frame.index, dtype=bool)]
    if isinstance(frame, pl.DataFrame):
        return frame.filter(pl.Series(mask, dtype=pl.Boolean))
    return frame.filter(pa.array(mask, type=pa.bool_()))


def filter_records(frame: Any, query: QueryOrMatcher) -> List[Any]:
    """Matching rows of a frame as dicts, in order."""
    matcher = as_matcher(query)
    return [record for record in iter_records(frame) if matcher(record)]
