from datetime import date, datetime

from pydantic import Field

from planty.models.camel_model import CamelModel
from planty.models.tables.growth_log import MeasureType, MeasureUnit


class GrowthLogCreate(CamelModel):
    plant_id: str = Field(min_length=1)
    log_date: date
    measure_type: MeasureType
    measure_unit: MeasureUnit
    value: float
    notes: str | None = None


class GrowthLogRecord(CamelModel):
    id: str
    plant_id: str
    log_date: date
    measure_type: MeasureType
    measure_unit: MeasureUnit
    value: float
    notes: str | None
    created_at: datetime
