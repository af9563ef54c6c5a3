"""Tests for turning generated text into slots."""

from datetime import UTC, datetime

from meal_planner.domain.plans import LocationType
from meal_planner.services.plan_generator import PlanGenerator, per_slot_budget
from tests.conftest import make_blob, make_record


def test_single_home_record_becomes_one_slot() -> None:
    slots = PlanGenerator().generate(make_blob(make_record()))

    assert len(slots) == 1
    slot = slots[0]
    assert slot.location_type is LocationType.HOME
    assert slot.menu_item is not None
    assert slot.menu_item.restaurant_name == ""
    assert slot.menu_item.calories == 500
    assert slot.time == ""
    assert slot.notify is False
    assert slot.alternatives == []
    assert slot.logged is False


def test_missing_protein_still_produces_slot() -> None:
    record = "\n".join(
        line for line in make_record().splitlines() if not line.startswith("**Protein**")
    )

    slots = PlanGenerator().generate(make_blob(record))

    assert len(slots) == 1
    assert slots[0].menu_item is not None
    assert slots[0].menu_item.protein == 0


def test_missing_calories_produces_no_slots() -> None:
    record = "\n".join(
        line
        for line in make_record().splitlines()
        if not line.startswith("**Calories**")
    )

    assert PlanGenerator().generate(make_blob(record)) == []


def test_two_records_keep_source_order_with_distinct_ids() -> None:
    blob = make_blob(
        make_record(meal="Breakfast", dish="Kaya Toast"),
        make_record(
            meal="Lunch",
            dish="Fish Soup",
            restaurant="Canteen 2",
            address="35 Students Walk",
        ),
    )

    slots = PlanGenerator().generate(blob)

    assert [slot.name for slot in slots] == ["Breakfast", "Lunch"]
    assert slots[0].id != slots[1].id
    assert slots[1].location_type is LocationType.RESTAURANT
    assert slots[1].menu_item is not None
    assert slots[1].menu_item.restaurant_address == "35 Students Walk"


def test_malformed_records_are_skipped_in_order() -> None:
    blob = make_blob(
        make_record(meal="Breakfast"),
        make_record(meal="Lunch", calories="n/a"),
        make_record(meal="Snack"),
        "**Meal**: Dinner",
        make_record(meal="Supper"),
    )

    slots = PlanGenerator().generate(blob)

    assert [slot.name for slot in slots] == ["Breakfast", "Snack", "Supper"]


def test_swapping_input_records_swaps_output_slots() -> None:
    first = make_record(meal="Breakfast", dish="Oats")
    second = make_record(meal="Dinner", dish="Laksa")
    generator = PlanGenerator()

    forward = generator.generate(make_blob(first, second))
    backward = generator.generate(make_blob(second, first))

    assert [slot.name for slot in forward] == ["Breakfast", "Dinner"]
    assert [slot.name for slot in backward] == ["Dinner", "Breakfast"]


def test_slot_ids_use_generation_timestamp_and_position() -> None:
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    millis = int(stamp.timestamp() * 1000)

    slots = PlanGenerator().generate(
        make_blob(make_record(), make_record(meal="Dinner")),
        generated_at=stamp,
    )

    assert [slot.id for slot in slots] == [f"{millis}-0", f"{millis}-1"]


def test_budget_is_copied_to_every_slot() -> None:
    slots = PlanGenerator().generate(
        make_blob(make_record(), make_record(meal="Dinner")), budget=360
    )

    assert {slot.budget for slot in slots} == {360}


def test_per_slot_budget_floors_and_guards() -> None:
    assert per_slot_budget(1800, 5) == 360
    assert per_slot_budget(1001, 5) == 200
    assert per_slot_budget(-50, 5) == 0
    assert per_slot_budget(500, 0) == 0


def test_parse_first_returns_first_valid_record() -> None:
    blob = make_blob(make_record(calories="none"), make_record(dish="Nasi Lemak"))

    parsed = PlanGenerator().parse_first(blob)

    assert parsed is not None
    assert parsed.dish == "Nasi Lemak"
    assert PlanGenerator().parse_first("no records here") is None
