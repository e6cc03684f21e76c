"""
Basic Chain Example

Builds a deferred chain over a list, evaluates it once, and shows the
object-style Collection API on the result.
"""

from collectionkit import chain, configure_logging


def main():
    configure_logging(level="INFO")

    numbers = list(range(1, 11))

    top_even_triples = (
        chain(numbers)
        .filter(lambda x: x % 2 == 0)
        .map(lambda x: x * 3)
        .take(3)
        .reverse()
        .collect()
    )
    print(f"Top even triples: {top_even_triples}")  # [18, 12, 6]

    # Element type can change between stages
    long_labels = chain([1, 2, 3, 10, 20]).map(str).filter(lambda s: len(s) > 1).collect()
    print(f"Two-digit labels: {long_labels}")

    total = chain(numbers).map(lambda x: x * x).reduce(lambda a, b: a + b, 0).value()
    print(f"Sum of squares: {total}")

    # execute() reports errors and stats instead of raising
    result = chain(numbers).map(lambda x: 10 // (x - 5)).execute()
    print(f"Success: {result.success}, error: {result.error}")

    words = chain(["kiwi", "apple", "fig"]).sort_by(len).into_collection()
    print(f"Grouped by length: {words.group_by(len)}")
    print(words.to_pandas(column="word"))


if __name__ == "__main__":
    main()
