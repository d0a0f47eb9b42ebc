from abc import ABC, abstractmethod

from invite_site.guests.dtos import GuestRecord


class GuestStore(ABC):
    """
    Persistence for the flat guest collection.

    Callers serialize writes through the write queue. Implementations only
    guard what a read may write on its own, such as first-use initialization.
    """

    @abstractmethod
    async def read_all(self) -> list[GuestRecord]:
        """Every stored guest, in storage order."""
        raise NotImplementedError

    async def find_by_phone(self, phone: str) -> GuestRecord | None:
        """First guest whose canonical phone equals ``phone`` exactly."""
        for guest in await self.read_all():
            if guest.phone == phone:
                return guest
        return None

    @abstractmethod
    async def insert(self, record: GuestRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update(self, record: GuestRecord) -> None:
        """Overwrite the stored guest carrying ``record.id``."""
        raise NotImplementedError

    @abstractmethod
    async def delete_by_id(self, guest_id: str) -> bool:
        """Remove the guest with ``guest_id``. Returns False when there is none."""
        raise NotImplementedError

    @abstractmethod
    async def confirm_identity(self, record: GuestRecord, durable_id: str) -> GuestRecord:
        """
        Persist ``durable_id`` for a guest that was read with a transient id.

        The transient id must come from the most recent ``read_all`` with no
        write in between. Returns the record carrying its new id.
        """
        raise NotImplementedError
