from datetime import date
from enum import Enum

from planty.models.plant import PlantRecord
from planty.tools.arguments import DEFAULT_DAYS_AHEAD


class WateringStatus(str, Enum):
    NEVER_WATERED = "never watered"
    OVERDUE = "overdue"
    DUE_SOON = "due soon"


class ScheduleEntry(PlantRecord):
    days_until_due: int | None
    status: WateringStatus


def days_until_due(plant: PlantRecord, today: date) -> int | None:
    if plant.last_watered is None:
        return None
    days_elapsed = (today - plant.last_watered).days
    return plant.watering_frequency - days_elapsed


def watering_schedule(
        plants: list[PlantRecord],
        today: date,
        days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> list[ScheduleEntry]:
    """
    Plants that are due within ``days_ahead`` days, in the order given.

    A plant that was never watered is always due. Otherwise it is overdue
    once ``watering_frequency`` days have passed since it was last watered,
    and due soon when that point falls inside the look-ahead window.
    """
    entries: list[ScheduleEntry] = []
    for plant in plants:
        remaining = days_until_due(plant, today)
        if remaining is None:
            status = WateringStatus.NEVER_WATERED
        elif remaining > days_ahead:
            continue
        elif remaining <= 0:
            status = WateringStatus.OVERDUE
        else:
            status = WateringStatus.DUE_SOON

        entries.append(ScheduleEntry(
            **plant.model_dump(),
            days_until_due=remaining,
            status=status,
        ))
    return entries
