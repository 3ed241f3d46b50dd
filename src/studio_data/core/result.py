"""
Result type for operations that can either succeed or fail.

Every repository method returns a `Result` instead of raising: callers branch on
`is_success()` / `is_failure()` (or on `isinstance(result, Success)`) and never have
to know which exceptions the underlying store or SDK might throw.

Usage:
    result = await galleries.find_by_slug("kona-wedding")
    if is_success(result):
        gallery = result.value
    else:
        show_error(result.error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeGuard, TypeVar, Union


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=BaseException)
F = TypeVar("F", bound=BaseException)


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    """Failed outcome carrying an error."""

    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure[E]]


# =================================================================================================================
# Constructors / discriminators
# =================================================================================================================

def success(value: T = None) -> Success[T]:
    return Success(value)


def failure(error: E) -> Failure[E]:
    return Failure(error)


def is_success(result: Result[T, E]) -> TypeGuard[Success[T]]:
    return isinstance(result, Success)


def is_failure(result: Result[T, E]) -> TypeGuard[Failure[E]]:
    return isinstance(result, Failure)


# =================================================================================================================
# Combinators
# =================================================================================================================

def map_result(result: Result[T, E], fn: Callable[[T], U]) -> Result[U, E]:
    """Apply `fn` to the value of a success; failures pass through untouched."""
    if isinstance(result, Success):
        return Success(fn(result.value))
    return result


def flat_map(result: Result[T, E], fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
    """Chain another Result-returning step onto a success."""
    if isinstance(result, Success):
        return fn(result.value)
    return result


def map_error(result: Result[T, E], fn: Callable[[E], F]) -> Result[T, F]:
    """Translate the error of a failure; successes pass through untouched."""
    if isinstance(result, Failure):
        return Failure(fn(result.error))
    return result


def unwrap(result: Result[T, E]) -> T:
    """Return the value, or raise the carried error."""
    if isinstance(result, Success):
        return result.value
    raise result.error


def unwrap_or(result: Result[T, E], default: T) -> T:
    if isinstance(result, Success):
        return result.value
    return default


def unwrap_or_else(result: Result[T, E], fn: Callable[[E], T]) -> T:
    if isinstance(result, Success):
        return result.value
    return fn(result.error)


def combine(results: Iterable[Result[Any, E]]) -> Result[list[Any], E]:
    """
    Collapse several results into one.

    Returns the first failure encountered, otherwise a success holding the list of
    values in input order.
    """
    values: list[Any] = []
    for result in results:
        if isinstance(result, Failure):
            return result
        values.append(result.value)
    return Success(values)


# =================================================================================================================
# Exception boundary
# =================================================================================================================

async def try_catch(
    fn: Callable[[], Awaitable[T]],
    map_error: Callable[[Exception], E] | None = None,
) -> Result[T, E]:
    """
    Await `fn()` and capture its outcome as a Result.

    Args:
        fn: Zero-argument coroutine function performing the operation.
        map_error: Converts a raised exception into the failure's error. When omitted the
            exception itself is carried.

    Returns:
        Success(value) when `fn` returns, Failure(map_error(exc)) when it raises.
    """
    try:
        value = await fn()
    except Exception as exc:
        if map_error is None:
            return Failure(exc)  # type: ignore[arg-type]
        return Failure(map_error(exc))
    return Success(value)


def try_catch_sync(
    fn: Callable[[], T],
    map_error: Callable[[Exception], E] | None = None,
) -> Result[T, E]:
    """Synchronous counterpart of `try_catch`."""
    try:
        value = fn()
    except Exception as exc:
        if map_error is None:
            return Failure(exc)  # type: ignore[arg-type]
        return Failure(map_error(exc))
    return Success(value)


__all__ = [
    "Result",
    "Success",
    "Failure",
    "success",
    "failure",
    "is_success",
    "is_failure",
    "map_result",
    "flat_map",
    "map_error",
    "unwrap",
    "unwrap_or",
    "unwrap_or_else",
    "combine",
    "try_catch",
    "try_catch_sync",
]
