"""Outcome of cross-entity back-reference writes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SideEffectFailure:
    """One write that did not succeed."""

    action: str
    target_id: str
    reason: str


@dataclass
class SideEffectReport:
    """Writes attempted by the assignment coordinator and those that failed."""

    attempted: list[str] = field(default_factory=list)
    failures: list[SideEffectFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record(self, action: str, target_id: str) -> None:
        self.attempted.append(f"{action}:{target_id}")

    def fail(self, action: str, target_id: str, reason: str) -> None:
        self.failures.append(SideEffectFailure(action, target_id, reason))

    def merge(self, other: "SideEffectReport") -> "SideEffectReport":
        self.attempted.extend(other.attempted)
        self.failures.extend(other.failures)
        return self
