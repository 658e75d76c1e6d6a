"""Append-only, on-disk event log keyed by time-ordered identifiers."""

from __future__ import annotations

import json
import os
import secrets
import sqlite3
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODE = {ch: value for value, ch in enumerate(_ALPHABET)}
_ID_LENGTH = 26
_RANDOM_BITS = 80
_RANDOM_LIMIT = 1 << _RANDOM_BITS
_TIMESTAMP_LIMIT = 1 << 48

_id_lock = threading.Lock()
_last_ms = -1
_last_random = 0


class StorageError(Exception):
    """Raised when the event log cannot be read or written."""


@dataclass(frozen=True)
class LogEntry:
    """One event together with the identifier the log assigned to it."""

    id: str
    event: Any


def _encode(value: int) -> str:
    chars = []
    for _ in range(_ID_LENGTH):
        value, digit = divmod(value, 32)
        chars.append(_ALPHABET[digit])
    return "".join(reversed(chars))


def _decode(event_id: str) -> int:
    if len(event_id) != _ID_LENGTH:
        raise ValueError(f"identifier must be {_ID_LENGTH} characters: {event_id!r}")
    value = 0
    for ch in event_id.upper():
        try:
            value = value * 32 + _DECODE[ch]
        except KeyError:
            raise ValueError(f"invalid character {ch!r} in identifier {event_id!r}") from None
    if value >> 128:
        raise ValueError(f"identifier out of range: {event_id!r}")
    return value


def new_id() -> str:
    """Return a fresh 26-character identifier that sorts in creation order.

    The first 48 bits hold the creation time in milliseconds, the remaining
    80 bits are random. Identifiers created in the same millisecond are made
    strictly increasing so lexicographic order always matches creation order.
    """
    global _last_ms, _last_random
    with _id_lock:
        ms = time.time_ns() // 1_000_000
        if ms <= _last_ms:
            ms = _last_ms
            rand = _last_random + 1
            if rand >= _RANDOM_LIMIT:
                ms += 1
                rand = secrets.randbits(_RANDOM_BITS)
        else:
            rand = secrets.randbits(_RANDOM_BITS)
        if ms >= _TIMESTAMP_LIMIT:
            raise ValueError("clock is beyond the identifier's time range")
        _last_ms, _last_random = ms, rand
        return _encode((ms << _RANDOM_BITS) | rand)


def id_timestamp_ms(event_id: str) -> int:
    """Return the creation time, in unix milliseconds, embedded in an identifier."""
    return _decode(event_id) >> _RANDOM_BITS


class EventLog:
    """A durable, append-only log of JSON-serialisable events.

    Entries are keyed by identifiers from :func:`new_id`, so reading the log
    back yields events in the order they were appended.
    """

    FILE_NAME = "events.sqlite3"

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                self.path / self.FILE_NAME, check_same_thread=False
            )
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS events "
                    "(id TEXT PRIMARY KEY, body TEXT NOT NULL)"
                )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(str(exc)) from exc
        self._closed = False

    def __enter__(self) -> EventLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("event log is closed")

    def append(self, event: Any) -> str:
        """Append an event and return the identifier it was stored under."""
        try:
            body = json.dumps(event)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"event cannot be serialised: {exc}") from exc
        with self._lock:
            self._check_open()
            event_id = new_id()
            try:
                with self._conn:
                    self._conn.execute(
                        "INSERT INTO events (id, body) VALUES (?, ?)", (event_id, body)
                    )
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc
        return event_id

    def read_from(self, after: str | None = None) -> list[LogEntry]:
        """Return every entry, or only those strictly after the given identifier."""
        with self._lock:
            self._check_open()
            try:
                if after is None:
                    rows = self._conn.execute(
                        "SELECT id, body FROM events ORDER BY id"
                    ).fetchall()
                else:
                    rows = self._conn.execute(
                        "SELECT id, body FROM events WHERE id > ? ORDER BY id",
                        (after.upper(),),
                    ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc
        entries = []
        for event_id, body in rows:
            try:
                entries.append(LogEntry(event_id, json.loads(body)))
            except ValueError as exc:
                raise StorageError(f"corrupt entry {event_id}: {exc}") from exc
        return entries

    def close(self) -> None:
        """Close the underlying store; further use raises :class:`StorageError`."""
        with self._lock:
            if not self._closed:
                self._conn.close()
                self._closed = True