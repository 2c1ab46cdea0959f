from types import SimpleNamespace

import pytest
from restaurant_backend.domain.capacity import (
    DEFAULT_CAPACITY,
    CapacityTier,
    ResolvedCapacity,
    SlotAvailability,
    day_availability,
    default_capacity,
    from_record,
    slot_availability,
)


def test_default_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        DEFAULT_CAPACITY["19:00"] = 99  # type: ignore[index]
    assert DEFAULT_CAPACITY["19:00"] == 25
    assert DEFAULT_CAPACITY["14:00"] == 30
    assert "22:00" not in DEFAULT_CAPACITY


def test_default_capacity_descriptions() -> None:
    assert default_capacity().description == "Configuración estándar"
    assert default_capacity(fallback=True).description == "Configuración estándar (fallback)"
    assert default_capacity().tier == CapacityTier.DEFAULT


def test_from_record_copies_table_and_tier() -> None:
    record = SimpleNamespace(capacity_by_slot={"19:00": "12", "22:00": 8}, description="Evento")
    resolved = from_record(record, CapacityTier.SPECIFIC_DATE)
    assert resolved.table["19:00"] == 12
    assert resolved.table["22:00"] == 8
    assert resolved.tier == "fecha_especifica"
    record.capacity_by_slot["19:00"] = 1
    assert resolved.capacity_for("19:00") == 12


def test_zero_capacity_slot_is_not_offered() -> None:
    record = SimpleNamespace(capacity_by_slot={"19:00": 0, "19:30": 10}, description="x")
    resolved = from_record(record, CapacityTier.WEEKDAY)
    assert resolved.capacity_for("19:00") is None
    assert resolved.capacity_for("19:30") == 10
    assert resolved.capacity_for("23:00") is None


def test_partial_override_keeps_default_slots() -> None:
    record = SimpleNamespace(capacity_by_slot={"19:00": 40, "20:00": None}, description="Evento")
    resolved = from_record(record, CapacityTier.SPECIFIC_DATE)
    assert resolved.capacity_for("19:00") == 40
    assert resolved.capacity_for("20:00") == 30
    assert resolved.capacity_for("13:00") == 25
    assert len(resolved.table) == len(DEFAULT_CAPACITY)


@pytest.mark.parametrize("table", [["19:00", 40], {"19:00": "muchos"}, {"19:00": True}])
def test_from_record_rejects_malformed_tables(table: object) -> None:
    with pytest.raises((TypeError, ValueError)):
        from_record(SimpleNamespace(capacity_by_slot=table, description="x"), CapacityTier.WEEKDAY)


def test_slot_availability_sums_party_sizes() -> None:
    availability = slot_availability(default_capacity(), "19:00", [4, 6, 2])
    assert availability == SlotAvailability(slot="19:00", max_capacity=25, already_booked=12)
    assert availability.remaining == 13
    assert availability.occupancy_percentage == 48.0


def test_slot_availability_unknown_slot_is_none() -> None:
    assert slot_availability(default_capacity(), "23:00", [1]) is None


def test_occupancy_rounds_to_one_decimal() -> None:
    availability = SlotAvailability(slot="10:00", max_capacity=30, already_booked=7)
    assert availability.occupancy_percentage == 23.3


@pytest.mark.parametrize(
    ("booked", "party", "expected"),
    [(25, 1, "lleno"), (22, 4, "insuficiente"), (21, 4, "disponible"), (0, 25, "disponible")],
)
def test_status_labels(booked: int, party: int, expected: str) -> None:
    availability = SlotAvailability(slot="19:00", max_capacity=25, already_booked=booked)
    assert availability.status(party) == expected


def test_fits_on_exact_fill() -> None:
    availability = SlotAvailability(slot="19:00", max_capacity=25, already_booked=20)
    assert availability.fits(5) is True
    assert availability.fits(6) is False


def test_with_pending_adds_unsaved_sizes() -> None:
    availability = SlotAvailability(slot="19:00", max_capacity=25, already_booked=20)
    assert availability.with_pending(0) is availability
    assert availability.with_pending(3).remaining == 2


def test_day_availability_lists_offered_slots_in_order() -> None:
    resolved = ResolvedCapacity(
        table={"20:00": 10, "13:00": 5, "21:00": 0},
        tier=CapacityTier.SPECIFIC_DATE,
        description="x",
    )
    items = day_availability(resolved, {"20:00": 4, "18:00": 3})
    assert [item.slot for item in items] == ["13:00", "20:00"]
    assert items[0].already_booked == 0
    assert items[1].remaining == 6
