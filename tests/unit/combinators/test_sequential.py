"""pipe, sequence and collect_sequence: ordered, short-circuiting chains."""

from __future__ import annotations

import pytest

from composable_functions import (
    CompositionError,
    ErrorValue,
    Failure,
    Success,
    collect_sequence,
    composable,
    pipe,
    sequence,
)

pytestmark = pytest.mark.unit


def increment(n: int) -> int:
    return n + 1


def to_string(n: int) -> str:
    return str(n)


def faulty_increment(n: int) -> int:
    if n == 1:
        raise ValueError("n is 1")
    return n + 1


class TestPipe:
    @pytest.mark.asyncio
    async def test_threads_output_into_next_input(self) -> None:
        fn = pipe(increment, to_string)

        assert await fn(2) == Success("3")

    @pytest.mark.asyncio
    async def test_first_failure_is_returned_and_rest_skipped(self, recorder) -> None:
        fn = pipe(faulty_increment, recorder.step("b"))

        result = await fn(1)

        assert result == Failure((ErrorValue("n is 1"),))
        assert recorder.events == []

    @pytest.mark.asyncio
    async def test_failure_in_later_step(self) -> None:
        def reject(s: str) -> str:
            raise ValueError(f"cannot use {s}")

        result = await pipe(increment, to_string, reject)(2)

        assert [e.message for e in result.errors] == ["cannot use 3"]

    @pytest.mark.asyncio
    async def test_context_reaches_every_step(self) -> None:
        seen: list[tuple[object, object]] = []

        def record(value: int, ctx: dict) -> int:
            seen.append((value, ctx["user"]))
            return value + 1

        ctx = {"user": "ada"}
        result = await pipe(record, record, record)(1, ctx)

        assert result == Success(4)
        assert seen == [(1, "ada"), (2, "ada"), (3, "ada")]

    @pytest.mark.asyncio
    async def test_step_without_context_parameter_fails_when_given_one(self) -> None:
        result = await pipe(increment, increment)(1, {"user": "ada"})

        assert not result.ok
        assert isinstance(result.errors[0].cause, TypeError)

    @pytest.mark.asyncio
    async def test_steps_run_strictly_in_order(self, recorder) -> None:
        fn = pipe(
            recorder.step("a", delay=0.02),
            recorder.step("b"),
            recorder.step("c", delay=0.01),
        )

        await fn(0)

        assert recorder.events == ["start:a", "end:a", "start:b", "end:b", "start:c", "end:c"]

    @pytest.mark.asyncio
    async def test_accepts_steps_and_plain_callables(self) -> None:
        fn = pipe(composable(increment), lambda n: n * 10)

        assert await fn(2) == Success(30)

    def test_requires_at_least_one_step(self) -> None:
        with pytest.raises(CompositionError, match="pipe"):
            pipe()

    def test_rejects_non_callables(self) -> None:
        with pytest.raises(CompositionError, match=r"pipe\(\) argument 1"):
            pipe(increment, "not a step")

    def test_name_lists_its_steps(self) -> None:
        assert pipe(increment, to_string).name == "pipe(increment, to_string)"


class TestSequence:
    @pytest.mark.asyncio
    async def test_collects_every_intermediate_value(self) -> None:
        fn = sequence(increment, to_string, lambda s: s + "!")

        assert await fn(2) == Success([3, "3", "3!"])

    @pytest.mark.asyncio
    async def test_single_step(self) -> None:
        assert await sequence(increment)(2) == Success([3])

    @pytest.mark.asyncio
    async def test_short_circuits_like_pipe(self, recorder) -> None:
        fn = sequence(recorder.step("a"), recorder.failing("b", "stop"), recorder.step("c"))

        result = await fn(1)

        assert not result.ok
        assert result.errors[0].message == "stop"
        assert "start:c" not in recorder.events

    @pytest.mark.asyncio
    async def test_pipe_equals_last_of_sequence(self) -> None:
        steps = (increment, to_string, len)

        seq = await sequence(*steps)(99)
        piped = await pipe(*steps)(99)

        assert seq == Success([100, "100", 3])
        assert piped == Success(seq.value[-1])


class TestCollectSequence:
    @pytest.mark.asyncio
    async def test_keys_follow_mapping_order(self) -> None:
        fn = collect_sequence({"next": increment, "text": to_string, "size": len})

        assert await fn(22) == Success({"next": 23, "text": "23", "size": 2})

    @pytest.mark.asyncio
    async def test_failure_propagates(self) -> None:
        fn = collect_sequence({"next": faulty_increment, "text": to_string})

        result = await fn(1)

        assert result.errors[0].message == "n is 1"

    def test_requires_a_mapping(self) -> None:
        with pytest.raises(CompositionError, match="mapping"):
            collect_sequence([increment])  # type: ignore[arg-type]
