from __future__ import annotations

import threading
import time
from datetime import UTC, datetime, timedelta

import pytest

from qrmenu_api.features.verification import CodePurpose, CodeStore, InMemoryCodeStore, PendingCode


def _entry(code: str = "123456") -> PendingCode:
    issued = datetime(2025, 1, 1, tzinfo=UTC)
    return PendingCode(
        recipient_key="a@example.com",
        code=code,
        purpose=CodePurpose.VERIFICATION,
        issued_at=issued,
        expires_at=issued + timedelta(minutes=15),
    )


def test_in_memory_store_satisfies_protocol() -> None:
    assert isinstance(InMemoryCodeStore(), CodeStore)


def test_get_set_delete() -> None:
    store = InMemoryCodeStore()
    key = (CodePurpose.VERIFICATION, "a@example.com")

    assert store.get(key) is None
    store.set(key, _entry())
    assert store.get(key) == _entry()
    assert len(store) == 1

    store.set(key, _entry("654321"))
    assert store.get(key).code == "654321"
    assert len(store) == 1

    store.delete(key)
    store.delete(key)
    assert store.get(key) is None
    assert len(store) == 0


def test_purposes_do_not_share_keys() -> None:
    store = InMemoryCodeStore()
    store.set((CodePurpose.VERIFICATION, "a@example.com"), _entry())

    assert store.get((CodePurpose.PASSWORD_RESET, "a@example.com")) is None


def test_pending_code_expires_strictly_after_deadline() -> None:
    entry = _entry()

    assert not entry.is_expired(entry.expires_at)
    assert entry.is_expired(entry.expires_at + timedelta(microseconds=1))


def test_lock_serializes_read_modify_write_per_key() -> None:
    store = InMemoryCodeStore()
    key = (CodePurpose.VERIFICATION, "a@example.com")
    counter = {"value": 0}

    def bump() -> None:
        for _ in range(50):
            with store.lock(key):
                current = counter["value"]
                time.sleep(0)
                counter["value"] = current + 1

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter["value"] == 400
    assert store._slots == {}


def test_distinct_keys_do_not_contend() -> None:
    store = InMemoryCodeStore()
    held = (CodePurpose.VERIFICATION, "a@example.com")
    other = (CodePurpose.VERIFICATION, "b@example.com")
    acquired = threading.Event()

    def take_other() -> None:
        with store.lock(other):
            acquired.set()

    with store.lock(held):
        worker = threading.Thread(target=take_other)
        worker.start()
        assert acquired.wait(timeout=2)
        worker.join()


def _entry_for(recipient: str, issued: datetime) -> PendingCode:
    return PendingCode(
        recipient_key=recipient,
        code="123456",
        purpose=CodePurpose.VERIFICATION,
        issued_at=issued,
        expires_at=issued + timedelta(minutes=15),
    )


def test_set_sweeps_entries_past_retention() -> None:
    store = InMemoryCodeStore()
    start = datetime(2025, 1, 1, tzinfo=UTC)
    for index in range(1000):
        recipient = f"user{index}@example.com"
        store.set((CodePurpose.VERIFICATION, recipient), _entry_for(recipient, start))
    assert len(store) == 1000

    later = start + timedelta(days=30)
    store.set((CodePurpose.VERIFICATION, "late@example.com"), _entry_for("late@example.com", later))

    assert len(store) == 1
    assert store.get((CodePurpose.VERIFICATION, "late@example.com")) is not None


def test_recently_expired_entries_survive_the_sweep() -> None:
    store = InMemoryCodeStore(retention=timedelta(hours=1), sweep_interval=timedelta(0))
    start = datetime(2025, 1, 1, tzinfo=UTC)
    store.set((CodePurpose.VERIFICATION, "a@example.com"), _entry_for("a@example.com", start))

    soon = start + timedelta(minutes=30)
    store.set((CodePurpose.VERIFICATION, "b@example.com"), _entry_for("b@example.com", soon))

    assert store.get((CodePurpose.VERIFICATION, "a@example.com")) is not None
    assert len(store) == 2


def test_sweep_waits_for_the_interval() -> None:
    store = InMemoryCodeStore(retention=timedelta(0), sweep_interval=timedelta(hours=1))
    start = datetime(2025, 1, 1, tzinfo=UTC)
    store.set((CodePurpose.VERIFICATION, "a@example.com"), _entry_for("a@example.com", start))

    within = start + timedelta(minutes=20)
    store.set((CodePurpose.VERIFICATION, "b@example.com"), _entry_for("b@example.com", within))
    assert len(store) == 2

    after = start + timedelta(hours=1)
    store.set((CodePurpose.VERIFICATION, "c@example.com"), _entry_for("c@example.com", after))
    assert len(store) == 1


def test_purge_expired_reports_removed_count() -> None:
    store = InMemoryCodeStore(retention=timedelta(0))
    start = datetime(2025, 1, 1, tzinfo=UTC)
    store.set((CodePurpose.VERIFICATION, "a@example.com"), _entry_for("a@example.com", start))
    store.set((CodePurpose.PASSWORD_RESET, "a@example.com"), _entry_for("a@example.com", start))

    assert store.purge_expired(start + timedelta(minutes=15)) == 0
    assert store.purge_expired(start + timedelta(minutes=16)) == 2
    assert len(store) == 0


@pytest.mark.parametrize(
    "overrides",
    [{"retention": timedelta(seconds=-1)}, {"sweep_interval": timedelta(seconds=-1)}],
)
def test_negative_windows_are_rejected(overrides: dict[str, timedelta]) -> None:
    with pytest.raises(ValueError):
        InMemoryCodeStore(**overrides)
