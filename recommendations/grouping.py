# SPDX-License-Identifier: AGPL-3.0-only

"""
Category and time-of-day views over a turn's recommendations.
"""

from typing import Any, Dict, List, Sequence

from .models import Category, RecommendationRecord, TimeSlot

DAY_PLAN_SLOTS = [
    {"id": TimeSlot.MORNING.value, "name": "Morning", "time": "9AM - 12PM"},
    {"id": TimeSlot.AFTERNOON.value, "name": "Afternoon", "time": "1PM - 5PM"},
    {"id": TimeSlot.EVENING.value, "name": "Evening", "time": "6PM - 9PM"},
]


def _field(record: Any, name: str, alias: str = None):
    if isinstance(record, RecommendationRecord):
        return getattr(record, name)
    if isinstance(record, dict):
        return record.get(alias or name, record.get(name))
    return None


def group_by_category(records: Sequence[Any]) -> Dict[str, List[Any]]:
    """Records keyed by category in display order; empty categories are left out."""
    groups: Dict[str, List[Any]] = {c.value: [] for c in Category}
    for record in records:
        category = _field(record, "category")
        if category not in groups:
            category = Category.ATTRACTION.value
        groups[category].append(record)
    return {category: items for category, items in groups.items() if items}


def group_by_time_slot(
    records: Sequence[Any], default: str = TimeSlot.AFTERNOON.value
) -> Dict[str, List[Any]]:
    """Records keyed by time slot; records without a slot go to the default one."""
    groups: Dict[str, List[Any]] = {t.value: [] for t in TimeSlot}
    for record in records:
        slot = _field(record, "time_slot", "timeSlot")
        groups[slot if slot in groups else default].append(record)
    return groups


def build_day_plan(records: Sequence[Any]) -> List[Dict[str, Any]]:
    by_slot = group_by_time_slot(records)
    return [dict(slot, recommendations=by_slot[slot["id"]]) for slot in DAY_PLAN_SLOTS]
