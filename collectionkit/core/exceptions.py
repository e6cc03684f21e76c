"""
Exception hierarchy for collection operations and chain evaluation.

Every error raised by the library derives from CollectionError so callers
can catch the whole taxonomy with one clause. Chain evaluation is
all-or-nothing: a terminal call either returns the full result or raises the
first error encountered in evaluation order.
"""

from typing import Any


class CollectionError(Exception):
    """Base class for all collectionkit errors."""


class InvalidInputError(CollectionError):
    """Invalid input data or parameters."""

    def __init__(self, message: str):
        super().__init__(f"Invalid input: {message}")
        self.message = message


class TypeConversionError(CollectionError):
    """A value could not be converted between types."""

    def __init__(self, from_type: str, to_type: str):
        super().__init__(f"Type conversion failed: {from_type} -> {to_type}")
        self.from_type = from_type
        self.to_type = to_type


class IndexOutOfBoundsError(CollectionError):
    """Index lies outside the collection."""

    def __init__(self, index: int, size: int):
        super().__init__(
            f"Index {index} is out of bounds for collection of size {size}"
        )
        self.index = index
        self.size = size


class EmptyCollectionError(CollectionError):
    """Operation requires a non-empty collection."""

    def __init__(self, message: str = "Operation requires non-empty collection"):
        super().__init__(message)


class InvalidPredicateError(CollectionError):
    """A predicate did not behave like a predicate."""

    def __init__(self, message: str):
        super().__init__(f"Invalid predicate function: {message}")
        self.message = message


class StageClosureFailed(CollectionError):
    """
    A caller-supplied closure raised while a chain stage was running.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, stage: str, index: int | None, cause: BaseException):
        location = f" at element {index}" if index is not None else ""
        super().__init__(f"Stage '{stage}' failed{location}: {cause}")
        self.stage = stage
        self.index = index


class EmptySourceStageFailure(EmptyCollectionError):
    """A reduction-style stage ran over an empty collection with no initial value."""

    def __init__(self, stage: str):
        super().__init__(
            f"Stage '{stage}' requires a non-empty collection or an initial value"
        )
        self.stage = stage


class CancellationRequested(CollectionError):
    """The caller cancelled an asynchronous evaluation."""

    def __init__(self, stage: str | None = None):
        where = f" during stage '{stage}'" if stage else ""
        super().__init__(f"Evaluation cancelled{where}")
        self.stage = stage


class ParallelExecutionError(CollectionError):
    """The worker pool itself failed (not a closure inside it)."""

    def __init__(self, message: str):
        super().__init__(f"Parallel operation failed: {message}")
        self.message = message


class ChainConsumedError(CollectionError):
    """A chain was used after a builder or terminal call took ownership of it."""

    def __init__(self, chain: Any):
        super().__init__(
            f"{type(chain).__name__} was already consumed; "
            "use the chain returned by the last builder call"
        )


def wrap_error(exc: BaseException) -> CollectionError:
    """
    Convert an arbitrary exception into a CollectionError.

    CollectionErrors are returned unchanged; anything else becomes a plain
    CollectionError carrying the original message and chained cause.

    Args:
        exc: Exception to convert

    Returns:
        CollectionError instance
    """
    if isinstance(exc, CollectionError):
        return exc
    wrapped = CollectionError(f"Custom error: {exc}")
    wrapped.__cause__ = exc
    return wrapped
