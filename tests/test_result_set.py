"""Tests for result sets and retry policies."""

from __future__ import annotations

import pytest

from measurement.result_set import ResultSet
from measurement.retry import AUTH_EXPIRED_MESSAGE, RetryCondition, RetryPolicy


def test_result_set_counts_failures_in_order() -> None:
    results = ResultSet()
    for at, success in enumerate([False, True, False, False]):
        results.record(success, at=float(at))

    assert results.failure_count() == 3
    assert results.success_count() == 1
    assert results.total() == 4
    assert [success for _, success in results.outcomes()] == [False, True, False, False]
    assert results.last_failure_at == 3.0


def test_result_set_failure_count_never_decreases() -> None:
    results = ResultSet()
    seen = []
    for success in [False, True, True, False, True]:
        results.record(success)
        seen.append(results.failure_count())

    assert seen == sorted(seen)


def test_empty_result_set() -> None:
    results = ResultSet()

    assert results.failure_count() == 0
    assert results.last_failure_at is None


def test_auth_expired_matches_either_stream() -> None:
    assert RetryCondition.AUTH_EXPIRED.matches(f"FAILED\n{AUTH_EXPIRED_MESSAGE}\n", "")
    assert RetryCondition.AUTH_EXPIRED.matches("", AUTH_EXPIRED_MESSAGE)
    assert not RetryCondition.AUTH_EXPIRED.matches("FAILED", "Server error")


def test_never_policy_retries_nothing() -> None:
    assert not RetryPolicy.never().should_retry(AUTH_EXPIRED_MESSAGE, AUTH_EXPIRED_MESSAGE)


def test_policy_from_names() -> None:
    policy = RetryPolicy.from_names(["auth_expired"])

    assert policy == RetryPolicy.auth_expired()
    assert policy.matching("", AUTH_EXPIRED_MESSAGE) is RetryCondition.AUTH_EXPIRED


def test_policy_from_unknown_name_raises() -> None:
    with pytest.raises(ValueError):
        RetryPolicy.from_names(["network_blip"])
