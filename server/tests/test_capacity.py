"""Tests for the event capacity gate"""

import pytest

from school_portal.models.event import Event
from school_portal.services.capacity import (
    CapacityStatus,
    capacity_summary,
    evaluate_capacity,
    is_registration_open,
    spots_left,
)


@pytest.mark.parametrize(
    "max_participants,current_participants,expected",
    [
        (0, 0, CapacityStatus.UNLIMITED),
        (0, 500, CapacityStatus.UNLIMITED),
        (30, 12, CapacityStatus.OPEN),
        (2, 1, CapacityStatus.OPEN),
        (2, 2, CapacityStatus.FULL),
        (2, 3, CapacityStatus.FULL),
    ],
)
def test_evaluate_capacity(max_participants, current_participants, expected):
    assert evaluate_capacity(max_participants, current_participants) == expected


def test_full_event_is_closed():
    assert is_registration_open(2, 2) is False
    assert is_registration_open(2, 1) is True


def test_unlimited_event_never_closes():
    assert is_registration_open(0, 500) is True
    assert spots_left(0, 500) is None


def test_spots_left_never_negative():
    assert spots_left(30, 12) == 18
    assert spots_left(2, 5) == 0


def test_capacity_summary_reads_event_counters():
    event = Event(title="Minga", max_participants=2, current_participants=2)

    summary = capacity_summary(event)

    assert summary == {"capacity_status": "full", "is_full": True, "spots_left": 0}
