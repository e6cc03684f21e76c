"""Free-standing collection operations (sync, async and thread-parallel)."""

from collectionkit.operations.async_ops import (
    every_async,
    execute_parallel,
    execute_sequential,
    execute_with_concurrency,
    filter_async,
    find_async,
    for_each_async,
    map_async,
    reduce_async,
    some_async,
)
from collectionkit.operations.iteration import (
    each,
    filter,
    for_each,
    for_each_right,
    map,
    reduce,
    reduce_right,
)
from collectionkit.operations.parallel import (
    every_parallel,
    filter_parallel,
    find_parallel,
    for_each_parallel,
    map_parallel,
    reduce_parallel,
    some_parallel,
)
from collectionkit.operations.query import (
    count_by,
    every,
    find,
    find_last,
    includes,
    partition,
    some,
)
from collectionkit.operations.sampling import sample, sample_size, shuffle, size
from collectionkit.operations.transform import (
    group_by,
    invoke,
    key_by,
    order_by,
    sort_by,
)

__all__ = [
    # Iteration
    "each",
    "for_each",
    "for_each_right",
    "map",
    "filter",
    "reduce",
    "reduce_right",
    # Query
    "find",
    "find_last",
    "includes",
    "every",
    "some",
    "count_by",
    "partition",
    # Transform
    "group_by",
    "key_by",
    "invoke",
    "sort_by",
    "order_by",
    # Sampling
    "size",
    "shuffle",
    "sample",
    "sample_size",
    # Async
    "map_async",
    "filter_async",
    "reduce_async",
    "for_each_async",
    "find_async",
    "every_async",
    "some_async",
    "execute_parallel",
    "execute_sequential",
    "execute_with_concurrency",
    # Parallel
    "map_parallel",
    "filter_parallel",
    "reduce_parallel",
    "for_each_parallel",
    "find_parallel",
    "every_parallel",
    "some_parallel",
]
