"""SQLite interval log: the single durable source of truth for the tracker."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence, Union

from ..errors import CorruptRecordError, StoreUnavailableError
from ..logging.config import get_store_logger
from ..state.models import Interval
from ..utils.time import ensure_aware, format_timestamp, parse_timestamp

# Same layout as the databases written by earlier tempo releases.
SCHEMA = """
    CREATE TABLE IF NOT EXISTS missions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT
    )
"""

_REQUIRED_COLUMNS = {"id", "name", "start_date", "end_date"}


class IntervalStore:
    """
    Ordered, durable sequence of interval records.

    Append order is the ``id`` order of the ``missions`` table. ``save``
    replaces the whole table inside one transaction, so a reader sees
    either the previous history or the new one, never a mix.
    """

    def __init__(
        self,
        db_path: Union[str, Path] = "tempo.db",
        create_dirs: bool = False,
        timeout: float = 30.0,
    ):
        self.db_path = Path(db_path).expanduser()
        self.create_dirs = create_dirs
        self.timeout = timeout
        self.logger = get_store_logger(__name__).bind(db_path=str(self.db_path))

    @contextmanager
    def _get_connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Open a connection in autocommit mode; transactions are explicit."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise self._translate_error(e, operation) from e
        try:
            conn.row_factory = sqlite3.Row
            yield conn
        finally:
            conn.close()

    def _translate_error(self, error: sqlite3.Error, operation: str) -> Exception:
        """Map a sqlite3 failure onto the store's error taxonomy."""
        self.logger.debug("Interval store failure", operation=operation, error=str(error))
        if isinstance(error, sqlite3.OperationalError):
            return StoreUnavailableError(
                f"Cannot {operation} interval log {self.db_path}: {error}",
                operation=operation,
                target=str(self.db_path),
                cause=error,
            )
        if isinstance(error, sqlite3.DatabaseError):
            return CorruptRecordError(
                f"Interval log {self.db_path} is not readable: {error}",
                context={"operation": operation},
            )
        return StoreUnavailableError(
            f"Cannot {operation} interval log {self.db_path}: {error}",
            operation=operation,
            target=str(self.db_path),
            cause=error,
        )

    def _ensure_parent(self, operation: str) -> None:
        parent = self.db_path.parent
        if parent.is_dir():
            return
        if not self.create_dirs:
            raise StoreUnavailableError(
                f"Cannot {operation} interval log {self.db_path}: directory {parent} does not exist",
                operation=operation,
                target=str(self.db_path),
            )
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(
                f"Cannot create directory {parent}: {e}",
                operation=operation,
                target=str(self.db_path),
                cause=e,
            ) from e

    def load(self) -> list[Interval]:
        """
        Read the full history in append order.

        A log that has never been written yields an empty list.

        Raises:
            StoreUnavailableError: The log cannot be read
            CorruptRecordError: A record cannot be decoded into an interval
        """
        if not self.db_path.exists():
            if not self.db_path.parent.is_dir() and not self.create_dirs:
                raise StoreUnavailableError(
                    f"Cannot load interval log {self.db_path}: "
                    f"directory {self.db_path.parent} does not exist",
                    operation="load",
                    target=str(self.db_path),
                )
            self.logger.debug("Interval log not created yet")
            return []

        with self._get_connection("load") as conn:
            try:
                columns = {row["name"] for row in conn.execute("PRAGMA table_info(missions)")}
                if not columns:
                    return []
                missing = _REQUIRED_COLUMNS - columns
                if missing:
                    raise CorruptRecordError(
                        f"Interval log {self.db_path} is missing columns: {', '.join(sorted(missing))}"
                    )
                rows = conn.execute(
                    "SELECT id, name, start_date, end_date FROM missions ORDER BY id"
                ).fetchall()
            except sqlite3.Error as e:
                raise self._translate_error(e, "load") from e

        intervals = [self._row_to_interval(row, position) for position, row in enumerate(rows)]
        self.logger.debug("Interval log loaded", interval_count=len(intervals))
        return intervals

    def save(self, intervals: Sequence[Interval]) -> None:
        """
        Replace the entire history with ``intervals``.

        Raises:
            StoreUnavailableError: The log cannot be written; the previous
                history is left in place
        """
        rows = [
            (position, *self._interval_to_row(interval))
            for position, interval in enumerate(intervals, start=1)
        ]
        self._ensure_parent("save")

        with self._get_connection("save") as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    conn.execute(SCHEMA)
                    conn.execute("DELETE FROM missions")
                    conn.executemany(
                        "INSERT INTO missions (id, name, start_date, end_date) VALUES (?, ?, ?, ?)",
                        rows,
                    )
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
            except sqlite3.Error as e:
                raise self._translate_error(e, "save") from e

        self.logger.debug("Interval log saved", interval_count=len(rows))

    def append(self, interval: Interval) -> None:
        """
        Append a single interval to the end of the history.

        Raises:
            StoreUnavailableError: The log cannot be written
        """
        row = self._interval_to_row(interval)
        self._ensure_parent("append")

        with self._get_connection("append") as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    conn.execute(SCHEMA)
                    conn.execute(
                        "INSERT INTO missions (name, start_date, end_date) VALUES (?, ?, ?)",
                        row,
                    )
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
            except sqlite3.Error as e:
                raise self._translate_error(e, "append") from e

        self.logger.debug("Interval appended", mission=interval.mission)

    def _interval_to_row(self, interval: Interval) -> tuple[str, str, Optional[str]]:
        start = ensure_aware(interval.start, "interval start")
        end = ensure_aware(interval.end, "interval end") if interval.end is not None else None
        return (
            interval.mission,
            format_timestamp(start),
            format_timestamp(end) if end is not None else None,
        )

    def _row_to_interval(self, row: sqlite3.Row, position: int) -> Interval:
        """Convert database row to Interval object."""
        record: dict[str, Any] = dict(row)
        name = record["name"]
        if not isinstance(name, str) or not name.strip():
            raise CorruptRecordError(
                f"Record {record['id']} has a blank mission name",
                record=record,
                position=position,
            )

        try:
            start = parse_timestamp(record["start_date"])
            end = parse_timestamp(record["end_date"]) if record["end_date"] is not None else None
        except (TypeError, ValueError) as e:
            raise CorruptRecordError(
                f"Record {record['id']} has an unreadable timestamp: {e}",
                record=record,
                position=position,
            ) from e

        if end is not None and end < start:
            raise CorruptRecordError(
                f"Record {record['id']} ends before it starts",
                record=record,
                position=position,
            )

        return Interval(mission=name, start=start, end=end)
