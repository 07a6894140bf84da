import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from planty.core.exceptions import StorageError
from planty.core.store import PlantStore
from planty.models.growth_log import GrowthLogCreate
from planty.models.plant import PlantCreate, PlantUpdate
from planty.models.plant_image import PlantImageCreate
from planty.tools.arguments import ImageRef, PlantFilter, PlantRef, ScheduleArgs, WaterArgs
from planty.tools.catalogue import REQUIRED_ARGUMENTS
from planty.tools.results import ErrorKind, ToolError, ToolOk, ToolResult
from planty.tools.schedule import watering_schedule

logger = logging.getLogger(__name__)

Arguments = dict[str, Any]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _dump(records: list[BaseModel]) -> str:
    return json.dumps(
        [record.model_dump(mode="json", by_alias=True) for record in records],
        indent=2,
    )


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    )


def _plant_not_found(plant_id: str) -> ToolError:
    return ToolError(ErrorKind.NOT_FOUND, f"Plant with ID {plant_id} not found.")


class ToolDispatcher:
    """
    Runs catalogue tools for one user.

    The user id is fixed when the dispatcher is built by the transport and is
    never taken from tool arguments. Every outcome, including bad input and
    storage failures, comes back as a :data:`ToolResult`.
    """

    def __init__(
            self,
            store: PlantStore,
            user_id: str,
            today: Callable[[], date] = utc_today,
    ):
        self.store = store
        self.user_id = user_id
        self.today = today
        self._handlers: dict[str, Callable[[Arguments], ToolResult]] = {
            "add_plant": self.add_plant,
            "list_plants": self.list_plants,
            "get_plant": self.get_plant,
            "update_plant": self.update_plant,
            "delete_plant": self.delete_plant,
            "water_plant": self.water_plant,
            "get_watering_history": self.get_watering_history,
            "get_watering_schedule": self.get_watering_schedule,
            "add_growth_log": self.add_growth_log,
            "get_growth_logs": self.get_growth_logs,
            "add_plant_image": self.add_plant_image,
            "get_plant_images": self.get_plant_images,
            "get_plant_image": self.get_plant_image,
        }

    def dispatch(self, name: str, arguments: Arguments | None) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            return ToolError(ErrorKind.UNSUPPORTED, f"Unknown tool: {name}")

        arguments = arguments or {}
        missing = [arg for arg in REQUIRED_ARGUMENTS.get(name, []) if _is_missing(arguments.get(arg))]
        if missing:
            return ToolError(
                ErrorKind.VALIDATION,
                f"Missing required arguments for {name}: {', '.join(missing)}",
            )

        try:
            return handler(arguments)
        except ValidationError as e:
            return ToolError(ErrorKind.VALIDATION, f"Invalid arguments for {name}: {_describe(e)}")
        except StorageError as e:
            logger.error(f"tool {name} failed for user {self.user_id}: {e}")
            return ToolError(ErrorKind.STORAGE, f"Storage error: {e}")

    # plants

    def add_plant(self, arguments: Arguments) -> ToolResult:
        plant_in = PlantCreate.model_validate(
            {key: value for key, value in arguments.items() if value is not None}
        )
        plant = self.store.add_plant(self.user_id, plant_in)
        return ToolOk(f'Successfully added plant "{plant.name}" with ID {plant.id}.')

    def list_plants(self, arguments: Arguments) -> ToolResult:
        plant_filter = PlantFilter.model_validate(arguments)
        plants = self.store.list_plants(
            self.user_id,
            location=plant_filter.location,
            species=plant_filter.species,
        )
        return ToolOk(_dump(plants))

    def get_plant(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        plant = self.store.get_plant(self.user_id, ref.plant_id)
        if plant is None:
            return _plant_not_found(ref.plant_id)
        return ToolOk(json.dumps(plant.to_json_dict(), indent=2))

    def update_plant(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        update = PlantUpdate.model_validate(arguments)
        plant = self.store.update_plant(self.user_id, ref.plant_id, update)
        if plant is None:
            return _plant_not_found(ref.plant_id)
        return ToolOk(f'Successfully updated plant "{plant.name}".')

    def delete_plant(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        if not self.store.delete_plant(self.user_id, ref.plant_id):
            return _plant_not_found(ref.plant_id)
        return ToolOk("Plant deleted successfully.")

    # watering

    def water_plant(self, arguments: Arguments) -> ToolResult:
        water = WaterArgs.model_validate(arguments)
        event = self.store.water_plant(
            self.user_id,
            water.plant_id,
            water.watered_date or self.today(),
            water.notes,
        )
        if event is None:
            return _plant_not_found(water.plant_id)
        return ToolOk(f"Plant watered successfully on {event.watered_date.isoformat()}.")

    def get_watering_history(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        history = self.store.get_watering_history(self.user_id, ref.plant_id)
        if history is None:
            return _plant_not_found(ref.plant_id)
        return ToolOk(_dump(history))

    def get_watering_schedule(self, arguments: Arguments) -> ToolResult:
        schedule_args = ScheduleArgs.model_validate(
            {key: value for key, value in arguments.items() if value is not None}
        )
        plants = self.store.list_plants(self.user_id)
        return ToolOk(_dump(watering_schedule(plants, self.today(), schedule_args.days_ahead)))

    # growth logs

    def add_growth_log(self, arguments: Arguments) -> ToolResult:
        log_in = GrowthLogCreate.model_validate({
            "plantId": arguments.get("plantId"),
            "logDate": arguments.get("date"),
            "measureType": arguments.get("measureType"),
            "measureUnit": arguments.get("measureUnit"),
            "value": arguments.get("value"),
            "notes": arguments.get("notes"),
        })
        log = self.store.add_growth_log(self.user_id, log_in)
        if log is None:
            return _plant_not_found(log_in.plant_id)
        return ToolOk(f"Growth log added: {log.measure_type.value} = {log.value:g} {log.measure_unit.value}")

    def get_growth_logs(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        logs = self.store.get_growth_logs(self.user_id, ref.plant_id)
        if logs is None:
            return _plant_not_found(ref.plant_id)
        return ToolOk(_dump(logs))

    # images

    def add_plant_image(self, arguments: Arguments) -> ToolResult:
        image_in = PlantImageCreate.model_validate(arguments)
        image = self.store.add_plant_image(self.user_id, image_in)
        if image is None:
            return _plant_not_found(image_in.plant_id)
        return ToolOk(f"Image added: {image.filename}")

    def get_plant_images(self, arguments: Arguments) -> ToolResult:
        ref = PlantRef.model_validate(arguments)
        images = self.store.get_plant_images(self.user_id, ref.plant_id)
        if images is None:
            return _plant_not_found(ref.plant_id)
        return ToolOk(_dump(images))

    def get_plant_image(self, arguments: Arguments) -> ToolResult:
        ref = ImageRef.model_validate(arguments)
        image = self.store.get_plant_image(self.user_id, ref.image_id)
        if image is None:
            return ToolError(ErrorKind.NOT_FOUND, f"Image with ID {ref.image_id} not found.")
        return ToolOk(json.dumps(image.to_json_dict(), indent=2))
