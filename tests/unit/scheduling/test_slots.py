from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from src.bookme_engine.scheduling.slots import generate_slots, has_all_day_block
from src.bookme_engine.scheduling.types import TenantSettings
from src.bookme_engine.services.calendar.types import BusyPeriod

WEDNESDAY = date(2026, 11, 4)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def early_new_york():
    """Every day, 00:00-06:00 hourly slots in America/New_York."""
    return TenantSettings(
        calendar_id="primary",
        duration=60,
        start_hour=0,
        end_hour=6,
        timezone="America/New_York",
        available_days=[0, 1, 2, 3, 4, 5, 6],
    )


@pytest.mark.unit
class TestGenerateSlots:
    """Test cases for slot enumeration and classification."""

    def test_hourly_weekday_in_tokyo(self, tokyo_settings, fixed_now):
        slots = generate_slots(WEDNESDAY, [], tokyo_settings, now=fixed_now)

        assert len(slots) == 8
        assert [(slot.start_hour, slot.end_hour) for slot in slots] == [(h, h + 1) for h in range(9, 17)]
        assert slots[0].start == _utc(2026, 11, 4, 0, 0)
        assert slots[-1].end == _utc(2026, 11, 4, 8, 0)
        assert all(slot.available for slot in slots)

    def test_slots_are_contiguous(self, new_york_settings, fixed_now):
        slots = generate_slots(date(2026, 11, 10), [], new_york_settings, now=fixed_now)
        assert len(slots) == 16
        for previous, following in zip(slots, slots[1:]):
            assert previous.end == following.start

    def test_partial_trailing_slot_is_dropped(self, tokyo_settings, fixed_now):
        settings = replace(tokyo_settings, duration=90)
        slots = generate_slots(WEDNESDAY, [], settings, now=fixed_now)

        assert len(slots) == 5
        assert (slots[-1].start_hour, slots[-1].start_minute) == (15, 0)
        assert (slots[-1].end_hour, slots[-1].end_minute) == (16, 30)

    def test_unavailable_weekday(self, tokyo_settings, fixed_now):
        assert generate_slots(date(2026, 11, 7), [], tokyo_settings, now=fixed_now) == []
        assert generate_slots(date(2026, 11, 8), [], tokyo_settings, now=fixed_now) == []

    def test_busy_period_uses_half_open_overlap(self, tokyo_settings, fixed_now):
        busy = [BusyPeriod(start=_utc(2026, 11, 4, 1, 0), end=_utc(2026, 11, 4, 2, 0))]
        slots = generate_slots(WEDNESDAY, busy, tokyo_settings, now=fixed_now)

        busy_hours = [slot.start_hour for slot in slots if slot.is_busy]
        assert busy_hours == [10]

    def test_short_busy_period_blocks_containing_slot(self, tokyo_settings, fixed_now):
        busy = [BusyPeriod(start=_utc(2026, 11, 4, 5, 15), end=_utc(2026, 11, 4, 5, 20))]
        slots = generate_slots(WEDNESDAY, busy, tokyo_settings, now=fixed_now)
        assert [slot.start_hour for slot in slots if slot.is_busy] == [14]

    def test_all_day_event_blocks_every_slot(self, tokyo_settings, fixed_now):
        busy = [BusyPeriod(start=_utc(2026, 11, 3, 15, 0), end=_utc(2026, 11, 4, 15, 0), is_all_day=True)]
        slots = generate_slots(WEDNESDAY, busy, tokyo_settings, now=fixed_now)

        assert len(slots) == 8
        assert all(slot.is_busy and not slot.available for slot in slots)

    def test_all_day_event_on_next_day_does_not_block(self, tokyo_settings, fixed_now):
        busy = [BusyPeriod(start=_utc(2026, 11, 4, 15, 0), end=_utc(2026, 11, 5, 15, 0), is_all_day=True)]
        slots = generate_slots(WEDNESDAY, busy, tokyo_settings, now=fixed_now)
        assert not any(slot.is_busy for slot in slots)

    def test_past_slots(self, tokyo_settings):
        now = _utc(2026, 11, 4, 3, 30)  # 12:30 in Tokyo
        slots = generate_slots(WEDNESDAY, [], tokyo_settings, now=now)

        assert [slot.start_hour for slot in slots if slot.is_past] == [9, 10, 11, 12]
        assert [slot.start_hour for slot in slots if slot.available] == [13, 14, 15, 16]

    def test_busy_and_past_are_independent(self, tokyo_settings):
        busy = [BusyPeriod(start=_utc(2026, 11, 4, 0, 0), end=_utc(2026, 11, 4, 1, 0))]
        slots = generate_slots(WEDNESDAY, busy, tokyo_settings, now=_utc(2026, 11, 4, 3, 30))
        assert slots[0].is_busy and slots[0].is_past

    def test_spring_forward_day_has_fewer_slots(self, early_new_york, fixed_now):
        slots = generate_slots(date(2026, 3, 8), [], early_new_york, now=_utc(2026, 3, 1, 0, 0))

        assert len(slots) == 5
        assert [slot.start_hour for slot in slots] == [0, 1, 3, 4, 5]
        assert slots[0].start == _utc(2026, 3, 8, 5, 0)
        assert slots[-1].start == _utc(2026, 3, 8, 9, 0)

    def test_fall_back_day_has_more_slots(self, early_new_york):
        slots = generate_slots(date(2026, 11, 1), [], early_new_york, now=_utc(2026, 10, 1, 0, 0))

        assert len(slots) == 7
        assert [slot.start_hour for slot in slots] == [0, 1, 1, 2, 3, 4, 5]
        assert len({slot.start for slot in slots}) == 7

    def test_to_dict(self, tokyo_settings, fixed_now):
        slot = generate_slots(WEDNESDAY, [], tokyo_settings, now=fixed_now)[0]
        assert slot.to_dict() == {
            "start": "2026-11-04T00:00:00.000Z",
            "end": "2026-11-04T01:00:00.000Z",
            "startHour": 9,
            "startMinute": 0,
            "endHour": 10,
            "endMinute": 0,
            "available": True,
            "isPast": False,
            "isBusy": False,
        }


@pytest.mark.unit
class TestHasAllDayBlock:

    def test_timed_period_is_not_an_all_day_block(self):
        busy = [BusyPeriod(start=_utc(2026, 11, 3, 15, 0), end=_utc(2026, 11, 4, 15, 0))]
        assert has_all_day_block(WEDNESDAY, busy, "Asia/Tokyo") is False

    def test_multi_day_all_day_event(self):
        busy = [BusyPeriod(start=_utc(2026, 11, 2, 15, 0), end=_utc(2026, 11, 5, 15, 0), is_all_day=True)]
        assert has_all_day_block(WEDNESDAY, busy, "Asia/Tokyo") is True


@pytest.mark.unit
@pytest.mark.parametrize("duration, start_hour, end_hour", [
    (15, 9, 17),
    (20, 8, 12),
    (30, 0, 23),
    (45, 9, 18),
    (60, 6, 7),
    (120, 10, 16),
    (180, 8, 20),
    (240, 0, 8),
])
def test_slot_count_for_evenly_dividing_durations(tokyo_settings, fixed_now, duration, start_hour, end_hour):
    settings = replace(tokyo_settings, duration=duration, start_hour=start_hour, end_hour=end_hour)
    slots = generate_slots(WEDNESDAY, [], settings, now=fixed_now)

    window_end = _utc(2026, 11, 4, 0, 0) + timedelta(hours=end_hour - 9)
    assert len(slots) == (end_hour - start_hour) * 60 // duration
    assert all(slot.end <= window_end for slot in slots)
    assert slots[-1].end == window_end
    assert all(slot.end - slot.start == timedelta(minutes=duration) for slot in slots)
