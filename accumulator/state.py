"""
Accumulator state: accepted roots and consumed nullifiers.

This is the only long-lived, shared mutable part of the core. It holds two
sets of field elements:

  • RootSet       append-only; registering a known root is a no-op.
  • NullifierSet  insert-once; inserting a present nullifier fails.

Two implementations are provided:

  • MemoryAccumulatorState: in-process sets guarded by a re-entrant lock.
  • SQLiteAccumulatorState: tables in a SQLite database; transaction()
    opens a `BEGIN IMMEDIATE` transaction so concurrent writers (threads or
    processes) are serialized by the database.

Both expose:

    has_root(root) -> bool
    add_root(root) -> bool              # True if newly inserted
    has_nullifier(nullifier) -> bool
    add_nullifier(nullifier) -> None    # raises NullifierAlreadyUsed if present
    root_count() / nullifier_count() -> int
    transaction() -> context manager    # check-then-insert must run inside one

Values are canonical field elements; they are stored as 32-byte big-endian
keys in the SQLite backend.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol, Set, Union

from poseidon import field

from .errors import NullifierAlreadyUsed

log = logging.getLogger("accumulator.state")


class AccumulatorState(Protocol):
    def has_root(self, root: int) -> bool: ...
    def add_root(self, root: int) -> bool: ...
    def has_nullifier(self, nullifier: int) -> bool: ...
    def add_nullifier(self, nullifier: int) -> None: ...
    def root_count(self) -> int: ...
    def nullifier_count(self) -> int: ...
    def transaction(self): ...


# -----------------------------------------------------------------------------
# In-memory implementation
# -----------------------------------------------------------------------------


class MemoryAccumulatorState:
    """
    In-process RootSet / NullifierSet.

    Every method takes the same RLock, and transaction() holds it for the
    whole block, so a check-then-insert sequence run inside transaction() is
    atomic with respect to every other caller of this instance.
    """

    __slots__ = ("_roots", "_nullifiers", "_lock")

    def __init__(self) -> None:
        self._roots: Set[int] = set()
        self._nullifiers: Set[int] = set()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["MemoryAccumulatorState"]:
        with self._lock:
            yield self

    def has_root(self, root: int) -> bool:
        with self._lock:
            return root in self._roots

    def add_root(self, root: int) -> bool:
        field.validate(root)
        with self._lock:
            if root in self._roots:
                return False
            self._roots.add(root)
            return True

    def has_nullifier(self, nullifier: int) -> bool:
        with self._lock:
            return nullifier in self._nullifiers

    def add_nullifier(self, nullifier: int) -> None:
        field.validate(nullifier)
        with self._lock:
            if nullifier in self._nullifiers:
                raise NullifierAlreadyUsed(nullifier)
            self._nullifiers.add(nullifier)

    def root_count(self) -> int:
        with self._lock:
            return len(self._roots)

    def nullifier_count(self) -> int:
        with self._lock:
            return len(self._nullifiers)


# -----------------------------------------------------------------------------
# SQLite implementation
# -----------------------------------------------------------------------------

_SCHEMA = """
CREATE TABLE IF NOT EXISTS roots (
    value BLOB PRIMARY KEY
) WITHOUT ROWID;
CREATE TABLE IF NOT EXISTS nullifiers (
    value BLOB PRIMARY KEY
) WITHOUT ROWID;
"""


def _key(x: int) -> bytes:
    return field.to_bytes32(x)


class SQLiteAccumulatorState:
    """
    RootSet / NullifierSet persisted in SQLite.

    Layout:
      roots(value BLOB PRIMARY KEY)        32-byte big-endian root
      nullifiers(value BLOB PRIMARY KEY)   32-byte big-endian nullifier

    The connection runs in autocommit mode; single statements are atomic on
    their own and transaction() wraps multi-statement sequences in
    BEGIN IMMEDIATE ... COMMIT (ROLLBACK on any exception). Nested
    transaction() blocks join the outermost one.
    """

    def __init__(self, path: Union[str, Path] = ":memory:", *, timeout: float = 5.0) -> None:
        self.path = str(path)
        self._conn = sqlite3.connect(
            self.path,
            timeout=timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        self._lock = threading.RLock()
        self._depth = 0
        with self._lock:
            self._conn.executescript(_SCHEMA)
        log.debug("opened accumulator state at %s", self.path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLiteAccumulatorState":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["SQLiteAccumulatorState"]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._conn.execute("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._conn.execute("ROLLBACK")
                raise
            else:
                self._depth -= 1
                if outermost:
                    self._conn.execute("COMMIT")

    def _exists(self, table: str, x: int) -> bool:
        # Non-canonical values can never have been stored.
        if not field.is_canonical(x):
            return False
        with self._lock:
            row = self._conn.execute(f"SELECT 1 FROM {table} WHERE value = ?", (_key(x),)).fetchone()
        return row is not None

    def _count(self, table: str) -> int:
        with self._lock:
            (n,) = self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
        return int(n)

    def has_root(self, root: int) -> bool:
        return self._exists("roots", root)

    def add_root(self, root: int) -> bool:
        with self._lock:
            cur = self._conn.execute("INSERT OR IGNORE INTO roots(value) VALUES (?)", (_key(root),))
            return cur.rowcount == 1

    def has_nullifier(self, nullifier: int) -> bool:
        return self._exists("nullifiers", nullifier)

    def add_nullifier(self, nullifier: int) -> None:
        with self._lock:
            try:
                self._conn.execute("INSERT INTO nullifiers(value) VALUES (?)", (_key(nullifier),))
            except sqlite3.IntegrityError as e:
                raise NullifierAlreadyUsed(nullifier) from e

    def root_count(self) -> int:
        return self._count("roots")

    def nullifier_count(self) -> int:
        return self._count("nullifiers")


__all__ = [
    "AccumulatorState",
    "MemoryAccumulatorState",
    "SQLiteAccumulatorState",
]
