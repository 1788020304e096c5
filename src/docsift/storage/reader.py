"""
Parquet file reader for query-aware loading.

This module reads a directory of Parquet files back into documents and runs
docsift queries over them.

DATA FLOW
=========

STEP 1: DISCOVER FILES
----------------------
All *.parquet files in the directory, in name order:

    cache_dir/
        part_0000.parquet
        part_0001.parquet
        ...


STEP 2: STREAM RECORD BATCHES
-----------------------------
Each file is read in record batches (pyarrow) and every row becomes a dict.
Struct columns come back as nested dicts and list columns as lists, so dotted
paths and implicit array traversal work exactly as on the original documents.


STEP 3: DECODE THROUGH THE SCHEMA
---------------------------------
With a schema, every row goes through Schema.decode(). ObjectId fields,
including those inside Struct and List fields, are converted back:

    "507f1f77bcf86cd799439011" -> ObjectId("507f1f77bcf86cd799439011")

so queries such as {"owner_id": ObjectId("507f...")} keep matching.


STEP 4: MATCH
-------------
If a query is given it is compiled once and applied to every document.


OUTPUT: documents, or a DataFrame (pandas or polars)
----------------------------------------------------
    name     age  meta.score
 0  Alice    30   20
 1  Charlie  35   12

"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Union

import pandas as pd
import polars as pl
import pyarrow.parquet as pq
from bson import ObjectId

from docsift.api import QueryOrMatcher, as_matcher
from docsift.constants import DEFAULT_BATCH_SIZE, PATH_SEPARATOR
from docsift.schema import Schema

logger = logging.getLogger(__name__)


class ParquetReader:
    """
    Reads Parquet files from a directory.

    Provides streaming and filtered reading of documents from Parquet files.

    Example:
        >>> reader = ParquetReader(cache_dir=".cache/people")
        >>>
        >>> # Stream matching documents
        >>> for doc in reader.iter_documents(query={"age": {"$gt": 28}}):
        ...     print(doc)
        >>>
        >>> # Or load to DataFrame
        >>> df = reader.to_dataframe(query={"city": "NYC"})
    """

    def __init__(self, cache_dir: Union[str, Path], schema: Optional[Schema] = None):
        """
        Initialize reader for a directory.

        Args:
            cache_dir: Directory containing parquet files
            schema: Optional schema used to decode every document

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        self.cache_dir = Path(cache_dir)
        self.schema = schema

        if not self.cache_dir.exists():
            raise FileNotFoundError(f"Cache directory not found: {cache_dir}")

        # Find all parquet files (may be empty)
        self.parquet_files = sorted(self.cache_dir.glob("*.parquet"))
        logger.info(
            "Opened %s with %d parquet files", self.cache_dir, len(self.parquet_files)
        )

    def iter_documents(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        query: Optional[QueryOrMatcher] = None,
    ) -> Iterator[Dict[str, Any]]:
        """
        Stream documents from all parquet files.

        Reads in batches to avoid loading entire dataset into memory.

        Args:
            batch_size: Number of rows to read per batch
            query: Optional query (or compiled matcher); only matching
                documents are yielded

        Yields:
            Document dictionaries

        Raises:
            CompilationError: If the query cannot be compiled
        """
        matcher = as_matcher(query) if query is not None else None

        for parquet_file in self.parquet_files:
            parquet_file_obj = pq.ParquetFile(parquet_file)

            for batch in parquet_file_obj.iter_batches(batch_size=batch_size):
                for doc in batch.to_pylist():
                    if self.schema is not None:
                        doc = self.schema.decode(doc)
                    if matcher is None or matcher(doc):
                        yield doc

    def filter(self, query: QueryOrMatcher) -> List[Dict[str, Any]]:
        """All documents matching a query, in file order."""
        return list(self.iter_documents(query=query))

    def count(self, query: Optional[QueryOrMatcher] = None) -> int:
        """Number of documents (matching a query, if given)."""
        return sum(1 for _ in self.iter_documents(query=query))

    def to_dataframe(
        self,
        engine: Literal["pandas", "polars"] = "pandas",
        query: Optional[QueryOrMatcher] = None,
        flatten: bool = True,
    ) -> Union[pd.DataFrame, "pl.DataFrame"]:
        """
        Load (matching) documents into a DataFrame.

        Args:
            engine: "pandas" or "polars"
            query: Optional query applied before loading
            flatten: pandas only; nested documents become dotted columns

        Returns:
            DataFrame with one row per document

        Raises:
            ValueError: If engine is not "pandas" or "polars"
        """
        if engine not in ("pandas", "polars"):
            raise ValueError(f"engine must be 'pandas' or 'polars', got {engine!r}")

        documents = list(self.iter_documents(query=query))

        if engine == "polars":
            # Polars has no ObjectId dtype
            return pl.DataFrame(
                [self._stringify_objectids(doc) for doc in documents]
            )

        if flatten:
            # meta: {"score": 20} -> column "meta.score"
            return pd.json_normalize(documents, sep=PATH_SEPARATOR)
        return pd.DataFrame(documents)

    def _stringify_objectids(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._stringify_objectids(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._stringify_objectids(v) for v in value]
        if isinstance(value, ObjectId):
            return str(value)
        return value
