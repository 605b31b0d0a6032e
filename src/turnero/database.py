"""SQLite store for bookings and the service catalog."""

from __future__ import annotations

import logging
import secrets
import sqlite3
import threading
from datetime import datetime
from pathlib import Path

from .errors import ConflictError, NotFoundError, StoreUnavailableError
from .models import Booking, Service
from .store import SlotStore

logger = logging.getLogger(__name__)

DB_SCHEMA = """
CREATE TABLE IF NOT EXISTS bookings (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    service TEXT NOT NULL,
    date TEXT NOT NULL,
    time TEXT NOT NULL,
    phone TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS services (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    description TEXT DEFAULT '',
    duration_minutes INTEGER,
    price REAL,
    created_at TEXT NOT NULL
);
"""

MIGRATIONS = [
    # Migration 1: one booking per (service, date, time)
    [
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_bookings_slot ON bookings(service, date, time)",
    ],
    # Migration 2: index for the (date, time) listing order
    [
        "CREATE INDEX IF NOT EXISTS idx_bookings_order ON bookings(date, time)",
    ],
]


class Database(SlotStore):
    def __init__(self, db_path: str | Path = "turnero.db"):
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def connect(self) -> None:
        # Autocommit; multi-statement writes open their own transaction.
        self._conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(DB_SCHEMA)
        self._run_migrations()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def _run_migrations(self) -> None:
        for migration_stmts in MIGRATIONS:
            for stmt in migration_stmts:
                try:
                    self._conn.execute(stmt)
                except sqlite3.OperationalError:
                    pass  # Already applied

    @property
    def conn(self) -> sqlite3.Connection:
        if not self._conn:
            self.connect()
        return self._conn

    def _fetch(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Store read failed: {e}")
                raise StoreUnavailableError("Store read failed") from e

    def _rollback(self) -> None:
        if self._conn is not None and self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    # --- Bookings ---

    def _row_to_booking(self, row: sqlite3.Row) -> Booking:
        return Booking(
            id=row["id"],
            name=row["name"],
            service=row["service"],
            date=row["date"],
            time=row["time"],
            phone=row["phone"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def find_booking(self, service: str, date: str, time: str) -> Booking | None:
        rows = self._fetch(
            "SELECT * FROM bookings WHERE service = ? AND date = ? AND time = ? LIMIT 1",
            (service, date, time),
        )
        return self._row_to_booking(rows[0]) if rows else None

    def insert_booking(self, booking: Booking) -> str:
        """Check + insert inside one immediate transaction.

        The unique index backs the check: a constraint violation is reported
        the same way as a conflict read inside the transaction.
        """
        booking_id = secrets.token_urlsafe(16)
        with self._lock:
            try:
                self.conn.execute("BEGIN IMMEDIATE")
                taken = self.conn.execute(
                    "SELECT id FROM bookings WHERE service = ? AND date = ? AND time = ?",
                    (booking.service, booking.date, booking.time),
                ).fetchone()
                if taken is None:
                    self.conn.execute(
                        """INSERT INTO bookings
                        (id, name, service, date, time, phone, created_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?)""",
                        (
                            booking_id,
                            booking.name,
                            booking.service,
                            booking.date,
                            booking.time,
                            booking.phone,
                            booking.created_at.isoformat(),
                        ),
                    )
                self.conn.execute("COMMIT" if taken is None else "ROLLBACK")
            except sqlite3.IntegrityError:
                self._rollback()
                taken = True
            except sqlite3.Error as e:
                self._rollback()
                logger.error(f"Failed to insert booking: {e}")
                raise StoreUnavailableError("Store write failed") from e

        if taken is not None:
            raise ConflictError(
                f"Slot already booked: {booking.service} {booking.date} {booking.time}"
            )
        return booking_id

    def update_booking(self, booking: Booking) -> None:
        conflict = False
        missing = False
        with self._lock:
            try:
                self.conn.execute("BEGIN IMMEDIATE")
                other = self.conn.execute(
                    "SELECT id FROM bookings WHERE service = ? AND date = ? AND time = ? AND id != ?",
                    (booking.service, booking.date, booking.time, booking.id),
                ).fetchone()
                if other is not None:
                    conflict = True
                else:
                    cursor = self.conn.execute(
                        """UPDATE bookings SET name=?, service=?, date=?, time=?, phone=?
                        WHERE id=?""",
                        (
                            booking.name,
                            booking.service,
                            booking.date,
                            booking.time,
                            booking.phone,
                            booking.id,
                        ),
                    )
                    missing = cursor.rowcount == 0
                self.conn.execute("ROLLBACK" if conflict or missing else "COMMIT")
            except sqlite3.IntegrityError:
                self._rollback()
                conflict = True
            except sqlite3.Error as e:
                self._rollback()
                logger.error(f"Failed to update booking {booking.id}: {e}")
                raise StoreUnavailableError("Store write failed") from e

        if missing:
            raise NotFoundError(f"Booking not found: {booking.id}")
        if conflict:
            raise ConflictError(
                f"Slot already booked: {booking.service} {booking.date} {booking.time}"
            )

    def list_bookings(self) -> list[Booking]:
        rows = self._fetch("SELECT * FROM bookings ORDER BY date, time, id")
        return [self._row_to_booking(row) for row in rows]

    def get_booking(self, booking_id: str) -> Booking | None:
        rows = self._fetch("SELECT * FROM bookings WHERE id = ?", (booking_id,))
        return self._row_to_booking(rows[0]) if rows else None

    def delete_booking(self, booking_id: str) -> None:
        with self._lock:
            try:
                cursor = self.conn.execute("DELETE FROM bookings WHERE id = ?", (booking_id,))
            except sqlite3.Error as e:
                logger.error(f"Failed to delete booking {booking_id}: {e}")
                raise StoreUnavailableError("Store write failed") from e
        if cursor.rowcount == 0:
            raise NotFoundError(f"Booking not found: {booking_id}")

    # --- Services ---

    def _row_to_service(self, row: sqlite3.Row) -> Service:
        return Service(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            duration_minutes=row["duration_minutes"],
            price=row["price"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def list_services(self) -> list[Service]:
        rows = self._fetch("SELECT * FROM services ORDER BY name COLLATE NOCASE")
        return [self._row_to_service(row) for row in rows]

    def find_service_by_name(self, name: str, case_insensitive: bool = True) -> Service | None:
        wanted = name.strip()
        if not wanted:
            return None
        # SQLite NOCASE only folds ASCII, so "clásico" vs "CLÁSICO" is compared here
        if case_insensitive:
            wanted = wanted.casefold()
        for service in self.list_services():
            candidate = service.name.strip()
            if case_insensitive:
                candidate = candidate.casefold()
            if candidate == wanted:
                return service
        return None

    def add_service(self, service: Service) -> str:
        if self.find_service_by_name(service.name) is not None:
            raise ConflictError(f"Service already exists: {service.name}")
        service_id = secrets.token_urlsafe(16)
        with self._lock:
            try:
                self.conn.execute(
                    """INSERT INTO services
                    (id, name, description, duration_minutes, price, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        service_id,
                        service.name.strip(),
                        service.description,
                        service.duration_minutes,
                        service.price,
                        service.created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError:
                raise ConflictError(f"Service already exists: {service.name}") from None
            except sqlite3.Error as e:
                logger.error(f"Failed to add service {service.name}: {e}")
                raise StoreUnavailableError("Store write failed") from e
        return service_id

    def delete_service(self, service_id: str) -> None:
        with self._lock:
            try:
                cursor = self.conn.execute("DELETE FROM services WHERE id = ?", (service_id,))
            except sqlite3.Error as e:
                logger.error(f"Failed to delete service {service_id}: {e}")
                raise StoreUnavailableError("Store write failed") from e
        if cursor.rowcount == 0:
            raise NotFoundError(f"Service not found: {service_id}")

    def seed_services(self, services: list[Service]) -> int:
        """Add catalog entries whose names are not stored yet. Returns count added."""
        added = 0
        for service in services:
            if self.find_service_by_name(service.name) is not None:
                continue
            self.add_service(service)
            added += 1
        if added:
            logger.info(f"Seeded {added} service(s) into the catalog")
        return added
