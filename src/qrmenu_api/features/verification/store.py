"""Pending-code storage with per-key atomic read-modify-write."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol, runtime_checkable


class CodePurpose(str, Enum):
    """Flow a code belongs to; purposes never share a store key."""

    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"


CodeKey = tuple[CodePurpose, str]


@dataclass(frozen=True, slots=True)
class PendingCode:
    recipient_key: str
    code: str
    purpose: CodePurpose
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@runtime_checkable
class CodeStore(Protocol):
    """Keyed storage for pending codes.

    ``lock(key)`` must serialize every read-modify-write sequence against the
    same key. Distinct keys never contend.
    """

    def get(self, key: CodeKey) -> PendingCode | None: ...

    def set(self, key: CodeKey, entry: PendingCode) -> None: ...

    def delete(self, key: CodeKey) -> None: ...

    def lock(self, key: CodeKey) -> AbstractContextManager[None]: ...


@dataclass(slots=True)
class _LockSlot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


DEFAULT_RETENTION = timedelta(hours=1)
DEFAULT_SWEEP_INTERVAL = timedelta(minutes=1)


class InMemoryCodeStore:
    """Process-local code store backed by a dict and per-key locks.

    Lock slots are reference counted and dropped once nobody holds or waits
    on them, so the lock table does not grow with every recipient ever seen.

    Entries that were never validated are swept from ``set``: anything that
    expired more than ``retention`` before the incoming entry's ``issued_at``
    is dropped. Within the retention window an expired code still reads back
    so validation can report it as expired. Sweeps run at most once per
    ``sweep_interval``.
    """

    def __init__(
        self,
        *,
        retention: timedelta = DEFAULT_RETENTION,
        sweep_interval: timedelta = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        if retention < timedelta(0) or sweep_interval < timedelta(0):
            raise ValueError("retention and sweep_interval must not be negative")
        self._retention = retention
        self._sweep_interval = sweep_interval
        self._next_sweep: datetime | None = None
        self._entries: dict[CodeKey, PendingCode] = {}
        self._entries_guard = threading.Lock()
        self._slots: dict[CodeKey, _LockSlot] = {}
        self._slots_guard = threading.Lock()

    def get(self, key: CodeKey) -> PendingCode | None:
        with self._entries_guard:
            return self._entries.get(key)

    def set(self, key: CodeKey, entry: PendingCode) -> None:
        with self._entries_guard:
            self._entries[key] = entry
            if self._next_sweep is None or entry.issued_at >= self._next_sweep:
                self._sweep(entry.issued_at)
                self._next_sweep = entry.issued_at + self._sweep_interval

    def delete(self, key: CodeKey) -> None:
        with self._entries_guard:
            self._entries.pop(key, None)

    def purge_expired(self, now: datetime) -> int:
        """Drop entries past the retention window; return how many went."""

        with self._entries_guard:
            return self._sweep(now)

    def _sweep(self, now: datetime) -> int:
        cutoff = now - self._retention
        stale = [key for key, entry in self._entries.items() if entry.expires_at < cutoff]
        for key in stale:
            del self._entries[key]
        return len(stale)

    @contextmanager
    def lock(self, key: CodeKey) -> Iterator[None]:
        with self._slots_guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _LockSlot()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._slots_guard:
                slot.holders -= 1
                if slot.holders == 0:
                    self._slots.pop(key, None)

    def __len__(self) -> int:
        with self._entries_guard:
            return len(self._entries)


__all__ = [
    "CodeKey",
    "CodePurpose",
    "CodeStore",
    "InMemoryCodeStore",
    "PendingCode",
]
