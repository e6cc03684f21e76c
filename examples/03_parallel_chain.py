"""
Parallel Chain Example

map/filter/flat_map stages fan out across a thread pool; sort, take, skip,
reverse and custom stages run after all chunks have been merged. Results
are identical to the synchronous chain.
"""

import time

from collectionkit import ChainBuilder, ConfigLoader, ParallelSpec, chain, chain_parallel


def slow_square(x: int) -> int:
    time.sleep(0.001)
    return x * x


def main():
    data = list(range(400))

    start = time.perf_counter()
    sequential = chain(data).map(slow_square).filter(lambda x: x % 3 == 0).collect()
    sequential_time = time.perf_counter() - start

    start = time.perf_counter()
    parallel = (
        chain_parallel(data, spec=ParallelSpec(max_workers=8))
        .map(slow_square)
        .filter(lambda x: x % 3 == 0)
        .collect()
    )
    parallel_time = time.perf_counter() - start

    assert parallel == sequential
    print(f"sequential {sequential_time:.2f}s, parallel {parallel_time:.2f}s")

    # Builder form, optionally driven by a config file
    builder = ChainBuilder.create(data).map(slow_square).sort_by(lambda x: -x).take(5)
    try:
        builder = builder.with_specifications(ConfigLoader.from_yaml("chain.yaml"))
    except FileNotFoundError:
        pass
    result = builder.with_parallel_execution(chunk_size=50).build().execute()
    print(f"Top five squares: {result.value}")
    for stage in result.stats.stages:
        print(f"  {stage.name:<8} in={stage.elements_in:<4} chunks={stage.chunks}")


if __name__ == "__main__":
    main()
