import datetime

from pydantic import Field

from planty.models.camel_model import CamelModel

DEFAULT_DAYS_AHEAD = 3


class PlantRef(CamelModel):
    plant_id: str = Field(min_length=1)


class ImageRef(CamelModel):
    image_id: str = Field(min_length=1)


class PlantFilter(CamelModel):
    location: str | None = None
    species: str | None = None


class WaterArgs(CamelModel):
    plant_id: str = Field(min_length=1)
    watered_date: datetime.date | None = Field(default=None, alias="date")
    notes: str | None = None


class ScheduleArgs(CamelModel):
    days_ahead: int = Field(default=DEFAULT_DAYS_AHEAD, ge=0)
