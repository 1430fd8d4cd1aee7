from __future__ import annotations

from kassa.revision import RevisionGuard


def test_token_is_current_until_superseded() -> None:
    guard = RevisionGuard()
    token = guard.begin()
    assert token.is_current
    guard.invalidate()
    assert not token.is_current


def test_last_started_load_wins() -> None:
    guard = RevisionGuard()
    first = guard.begin()
    second = guard.begin()
    assert not first.is_current
    assert second.is_current


def test_revision_is_monotonic() -> None:
    guard = RevisionGuard()
    seen = [guard.begin().revision, guard.invalidate(), guard.begin().revision]
    assert seen == sorted(seen)
    assert len(set(seen)) == 3
