import logging
from asyncio import Lock
from typing import Dict, Iterable, List, Optional
from uuid import UUID


class ParentReservationManager:
    def __init__(self):
        self.reservations: Dict[UUID, UUID] = {}  # dragon_id -> owning request_id
        self.lock = Lock()  # reservationsへのアクセスを保護

    async def acquire(self, request_id: UUID, parent_ids: Iterable[UUID]) -> bool:
        """Reserve every parent for the request, or none of them

        Args:
            request_id (UUID): ID to identify the breeding request
            parent_ids (Iterable[UUID]): Dragons to reserve

        Returns:
            bool: True if all parents are now reserved by request_id
        """
        parent_ids = set(parent_ids)
        async with self.lock:
            for dragon_id in parent_ids:
                owner = self.reservations.get(dragon_id)
                if owner is not None and owner != request_id:
                    logging.info(f"Dragon {dragon_id} is reserved by request {owner}")
                    return False
            for dragon_id in parent_ids:
                self.reservations[dragon_id] = request_id
            return True

    async def release(self, request_id: UUID) -> List[UUID]:
        """Release every dragon reserved by the request

        Args:
            request_id (UUID): ID to identify the breeding request

        Returns:
            List[UUID]: Dragons that were released
        """
        async with self.lock:
            released = [
                dragon_id for dragon_id, owner in self.reservations.items() if owner == request_id
            ]
            for dragon_id in released:
                del self.reservations[dragon_id]
            return released

    async def owner_of(self, dragon_id: UUID) -> Optional[UUID]:
        async with self.lock:
            return self.reservations.get(dragon_id)
