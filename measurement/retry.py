"""Known transient failure conditions and the policy built from them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

AUTH_EXPIRED_MESSAGE = "Authentication has expired.  Please log back in to re-authenticate."


class RetryCondition(str, Enum):
    """Transient conditions a probe failure may be attributed to."""

    AUTH_EXPIRED = "auth_expired"

    def matches(self, stdout: str, stderr: str) -> bool:
        if self is RetryCondition.AUTH_EXPIRED:
            return AUTH_EXPIRED_MESSAGE in stdout or AUTH_EXPIRED_MESSAGE in stderr
        raise NotImplementedError(f"No matcher for retry condition {self.value!r}")


@dataclass(frozen=True)
class RetryPolicy:
    """Set of transient conditions whose failures are retried instead of counted."""

    conditions: frozenset[RetryCondition] = frozenset()

    @classmethod
    def never(cls) -> "RetryPolicy":
        return cls()

    @classmethod
    def auth_expired(cls) -> "RetryPolicy":
        return cls(frozenset({RetryCondition.AUTH_EXPIRED}))

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "RetryPolicy":
        """Build a policy from condition values, raising ``ValueError`` on unknown names."""

        return cls(frozenset(RetryCondition(str(name)) for name in names))

    def matching(self, stdout: str, stderr: str) -> RetryCondition | None:
        for condition in sorted(self.conditions, key=lambda item: item.value):
            if condition.matches(stdout, stderr):
                return condition
        return None

    def should_retry(self, stdout: str, stderr: str) -> bool:
        return self.matching(stdout, stderr) is not None
