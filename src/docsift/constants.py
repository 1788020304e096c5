"""
Shared constants for docsift.
"""

# Keys starting with this prefix name an operator ("$gt", "$in", ...)
OPERATOR_PREFIX = "$"

# Separator for nested property paths ("user.profile.age")
PATH_SEPARATOR = "."

# Maximum nesting of query mappings/lists accepted by the compiler.
# Compilation recurses once per level, so this also bounds match-time recursion.
DEFAULT_MAX_DEPTH = 64

# Rows per Arrow record batch when streaming Parquet files
DEFAULT_BATCH_SIZE = 10_000

# Below this, handing a chunk to a worker thread costs more than matching it
MIN_CHUNK_SIZE = 1_000
