"""Abstract base for booking/service stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Booking, Service


class SlotStore(ABC):
    """Persistence for bookings and the service catalog.

    insert_booking and update_booking are the only writes that touch the
    exclusive-slot invariant; implementations must check it inside their
    own write path and raise ConflictError, never rely on a prior read.
    """

    @abstractmethod
    def find_booking(self, service: str, date: str, time: str) -> Booking | None:
        ...

    @abstractmethod
    def insert_booking(self, booking: Booking) -> str:
        """Persist a booking and return its store-assigned id.

        Raises ConflictError if (service, date, time) is already booked.
        """
        ...

    @abstractmethod
    def update_booking(self, booking: Booking) -> None:
        """Overwrite an existing booking, re-checking slot exclusivity.

        Raises NotFoundError or ConflictError.
        """
        ...

    @abstractmethod
    def list_bookings(self) -> list[Booking]:
        """All bookings ordered by (date, time, id)."""
        ...

    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking | None:
        ...

    @abstractmethod
    def delete_booking(self, booking_id: str) -> None:
        """Remove a booking. Raises NotFoundError if it does not exist."""
        ...

    @abstractmethod
    def find_service_by_name(self, name: str, case_insensitive: bool = True) -> Service | None:
        ...

    @abstractmethod
    def list_services(self) -> list[Service]:
        ...

    @abstractmethod
    def add_service(self, service: Service) -> str:
        """Add a catalog entry. Raises ConflictError on a duplicate name."""
        ...

    @abstractmethod
    def delete_service(self, service_id: str) -> None:
        ...
