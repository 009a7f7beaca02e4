"""Tests for the fan-out helper."""

from __future__ import annotations

import threading

import pytest

from remark_mongo.utils.concurrency import run_concurrently


def test_returns_results_in_order() -> None:
    assert run_concurrently(lambda: 1, lambda: "two", lambda: None) == [1, "two", None]
    assert run_concurrently() == []


def test_all_steps_run_before_first_failure_is_raised() -> None:
    finished = threading.Event()

    def fail() -> None:
        raise RuntimeError("boom")

    def slow() -> None:
        finished.wait(0.05)
        finished.set()

    def fail_later() -> None:
        raise ValueError("later")

    with pytest.raises(RuntimeError, match="boom"):
        run_concurrently(fail, slow, fail_later)

    assert finished.is_set()
