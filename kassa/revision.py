"""Generation counter that discards superseded asynchronous loads."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LoadToken:
    """Captured revision of one load request."""

    guard: "RevisionGuard"
    revision: int

    @property
    def is_current(self) -> bool:
        return self.guard.revision == self.revision


class RevisionGuard:
    """
    Hands out a token per load; any later begin() or invalidate() makes older
    tokens stale, so the last started load wins regardless of finish order.
    """

    def __init__(self) -> None:
        self.revision = 0

    def begin(self) -> LoadToken:
        self.revision += 1
        return LoadToken(self, self.revision)

    def invalidate(self) -> int:
        self.revision += 1
        return self.revision
