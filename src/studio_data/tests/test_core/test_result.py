import pytest

from studio_data.core.result import (
    Failure,
    Success,
    combine,
    failure,
    flat_map,
    is_failure,
    is_success,
    map_error,
    map_result,
    success,
    try_catch,
    try_catch_sync,
    unwrap,
    unwrap_or,
    unwrap_or_else,
)
from studio_data.exceptions import DatabaseError, NotFoundError, to_domain_error


class TestConstructors:
    def test_success_and_failure_discriminate(self):
        ok = success(3)
        err = failure(NotFoundError("Gallery", "x"))

        assert is_success(ok) and not is_failure(ok)
        assert is_failure(err) and not is_success(err)
        assert ok.ok is True
        assert err.ok is False

    def test_success_without_value_holds_none(self):
        assert success() == Success(None)


class TestCombinators:
    def test_map_result_only_touches_success(self):
        assert map_result(success(2), lambda v: v * 10) == Success(20)
        err = failure(ValueError("boom"))
        assert map_result(err, lambda v: v * 10) is err

    def test_flat_map_chains_results(self):
        assert flat_map(success(2), lambda v: success(v + 1)) == Success(3)
        stop = failure(ValueError("stop"))
        assert flat_map(success(2), lambda v: stop) is stop

    def test_map_error_translates_failure(self):
        result = map_error(failure(KeyError("k")), lambda e: DatabaseError("wrapped", cause=e))
        assert isinstance(result, Failure)
        assert isinstance(result.error, DatabaseError)
        assert isinstance(result.error.cause, KeyError)

    def test_unwrap_family(self):
        error = NotFoundError("Photo", "p1")
        assert unwrap(success("v")) == "v"
        with pytest.raises(NotFoundError):
            unwrap(failure(error))
        assert unwrap_or(failure(error), "default") == "default"
        assert unwrap_or_else(failure(error), lambda e: e.code) == "not_found"

    def test_combine_returns_first_failure(self):
        first = failure(ValueError("first"))
        second = failure(ValueError("second"))

        assert combine([success(1), success(2)]) == Success([1, 2])
        assert combine([success(1), first, second]) is first
        assert combine([]) == Success([])


class TestTryCatch:
    async def test_captures_return_value(self):
        async def work():
            return 42

        assert await try_catch(work) == Success(42)

    async def test_captures_exception_with_mapper(self):
        async def work():
            raise RuntimeError("store is down")

        result = await try_catch(work, to_domain_error)

        assert is_failure(result)
        assert isinstance(result.error, DatabaseError)
        assert isinstance(result.error.cause, RuntimeError)

    async def test_domain_errors_pass_through_mapper(self):
        error = NotFoundError("Gallery", "g1")

        async def work():
            raise error

        result = await try_catch(work, to_domain_error)
        assert result.error is error

    def test_sync_variant(self):
        assert try_catch_sync(lambda: 1) == Success(1)
        result = try_catch_sync(lambda: 1 / 0)
        assert isinstance(result.error, ZeroDivisionError)
