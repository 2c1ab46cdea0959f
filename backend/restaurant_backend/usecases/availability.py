from datetime import date

from ..domain.capacity import ResolvedCapacity, SlotAvailability
from ..domain.repositories import CapacityGateway


async def day_availability(
    gateway: CapacityGateway,
    *,
    booking_date: date,
) -> tuple[ResolvedCapacity, list[SlotAvailability]]:
    return await gateway.day(booking_date)


async def list_open_slots(
    gateway: CapacityGateway,
    *,
    booking_date: date,
) -> tuple[ResolvedCapacity, list[SlotAvailability]]:
    """Slots of the day that still have at least one free seat."""
    resolved, items = await gateway.day(booking_date)
    return resolved, [item for item in items if item.remaining > 0]


def summarize(items: list[SlotAvailability], *, party_size: int) -> dict[str, int]:
    return {
        "total_slots": len(items),
        "available_slots": sum(1 for item in items if item.fits(party_size)),
        "full_slots": sum(1 for item in items if item.remaining <= 0),
        "insufficient_slots": sum(1 for item in items if 0 < item.remaining < party_size),
    }
