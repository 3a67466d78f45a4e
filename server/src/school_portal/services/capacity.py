"""Capacity gate: decides whether an event still accepts registrations.

Always evaluated from the latest fetched event row; never cached.
"""

from enum import Enum
from typing import Any, Dict, Optional


class CapacityStatus(str, Enum):
    UNLIMITED = "unlimited"
    OPEN = "open"
    FULL = "full"


def evaluate_capacity(max_participants: int, current_participants: int) -> CapacityStatus:
    """Classify an event's (max, current) participant pair.

    - max == 0: unlimited, always open
    - max > 0 and current >= max: full
    - otherwise: open
    """
    if max_participants == 0:
        return CapacityStatus.UNLIMITED
    if current_participants >= max_participants:
        return CapacityStatus.FULL
    return CapacityStatus.OPEN


def is_registration_open(max_participants: int, current_participants: int) -> bool:
    return evaluate_capacity(max_participants, current_participants) != CapacityStatus.FULL


def spots_left(max_participants: int, current_participants: int) -> Optional[int]:
    """Remaining slots, None when unlimited. Never negative."""
    if max_participants == 0:
        return None
    return max(max_participants - current_participants, 0)


def capacity_summary(event) -> Dict[str, Any]:
    """Derived capacity fields attached to every public event payload"""
    status = evaluate_capacity(event.max_participants, event.current_participants)
    return {
        "capacity_status": status.value,
        "is_full": status == CapacityStatus.FULL,
        "spots_left": spots_left(event.max_participants, event.current_participants),
    }
