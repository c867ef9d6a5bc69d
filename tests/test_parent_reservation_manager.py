import asyncio

import pytest
from uuid6 import uuid7

from dragon_farm.parent_reservation_manager import ParentReservationManager


class TestParentReservationManager:
    """Reservation map: dragon id -> owning breeding request."""

    @pytest.mark.asyncio
    async def test_acquire_both_parents(self):
        manager = ParentReservationManager()
        request_id, dragon_a, dragon_b = uuid7(), uuid7(), uuid7()

        assert await manager.acquire(request_id, [dragon_a, dragon_b])
        assert await manager.owner_of(dragon_a) == request_id
        assert await manager.owner_of(dragon_b) == request_id

    @pytest.mark.asyncio
    async def test_both_or_neither(self):
        """A request that finds one parent taken reserves neither of them."""
        manager = ParentReservationManager()
        first, second = uuid7(), uuid7()
        shared, free = uuid7(), uuid7()
        await manager.acquire(first, [shared, uuid7()])

        assert not await manager.acquire(second, [free, shared])
        assert await manager.owner_of(free) is None
        assert await manager.owner_of(shared) == first

    @pytest.mark.asyncio
    async def test_reacquire_by_same_owner(self):
        manager = ParentReservationManager()
        request_id, dragon_id = uuid7(), uuid7()
        assert await manager.acquire(request_id, [dragon_id])
        assert await manager.acquire(request_id, [dragon_id])

    @pytest.mark.asyncio
    async def test_release(self):
        manager = ParentReservationManager()
        first, second = uuid7(), uuid7()
        dragon_a, dragon_b, dragon_c = uuid7(), uuid7(), uuid7()
        await manager.acquire(first, [dragon_a, dragon_b])
        await manager.acquire(second, [dragon_c])

        released = await manager.release(first)

        assert set(released) == {dragon_a, dragon_b}
        assert await manager.owner_of(dragon_a) is None
        assert await manager.owner_of(dragon_c) == second
        assert await manager.acquire(uuid7(), [dragon_a, dragon_b])

    @pytest.mark.asyncio
    async def test_release_unknown_request(self):
        manager = ParentReservationManager()
        assert await manager.release(uuid7()) == []

    @pytest.mark.asyncio
    async def test_concurrent_acquire_single_winner(self):
        manager = ParentReservationManager()
        shared = uuid7()
        requests = [uuid7() for _ in range(10)]

        results = await asyncio.gather(*(manager.acquire(request_id, [shared, uuid7()]) for request_id in requests))

        assert results.count(True) == 1
        assert await manager.owner_of(shared) == requests[results.index(True)]
