"""Public chain API."""

from collectionkit.api.chain import (
    AsyncChain,
    Chain,
    ParallelChain,
    chain,
    chain_async,
    chain_parallel,
)
from collectionkit.api.chain_builder import ChainBuilder

__all__ = [
    "Chain",
    "AsyncChain",
    "ParallelChain",
    "ChainBuilder",
    "chain",
    "chain_async",
    "chain_parallel",
]
