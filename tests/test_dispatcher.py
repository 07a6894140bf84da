import json
import re
from datetime import date

from planty.core.exceptions import StorageError
from planty.tools.catalogue import REQUIRED_ARGUMENTS, TOOLS
from planty.tools.dispatcher import ToolDispatcher
from planty.tools.results import ErrorKind, ToolError, ToolOk

from tests.conftest import TODAY

PLANT_ARGS = {
    "name": "Monstera",
    "species": "Monstera deliciosa",
    "location": "Living Room",
    "acquiredDate": "2025-01-01",
    "wateringFrequency": 7,
    "notes": "Bright indirect light",
}


def add_plant(dispatcher, **overrides) -> str:
    result = dispatcher.dispatch("add_plant", {**PLANT_ARGS, **overrides})
    assert isinstance(result, ToolOk), result
    return re.search(r"with ID (\S+)\.$", result.text).group(1)


def loads(result) -> object:
    assert isinstance(result, ToolOk), result
    return json.loads(result.text)


class TestCatalogue:
    def test_every_tool_has_a_handler(self, dispatcher):
        for tool in TOOLS:
            result = dispatcher.dispatch(tool.name, {})
            assert not (isinstance(result, ToolError) and result.kind == ErrorKind.UNSUPPORTED)

    def test_tools_carry_object_schemas(self):
        for tool in TOOLS:
            assert tool.inputSchema["type"] == "object", tool.name
            assert set(REQUIRED_ARGUMENTS[tool.name]) <= set(tool.inputSchema["properties"]), tool.name

    def test_required_arguments(self):
        assert REQUIRED_ARGUMENTS["add_plant"] == [
            "name", "species", "location", "acquiredDate", "wateringFrequency",
        ]
        assert REQUIRED_ARGUMENTS["list_plants"] == []
        assert REQUIRED_ARGUMENTS["get_plant_image"] == ["imageId"]

    def test_unknown_tool(self, dispatcher):
        result = dispatcher.dispatch("prune_plant", {"plantId": "x"})
        assert result == ToolError(ErrorKind.UNSUPPORTED, "Unknown tool: prune_plant")


class TestValidation:
    def test_missing_required_arguments(self, dispatcher):
        result = dispatcher.dispatch("add_plant", {"name": "Fern"})
        assert isinstance(result, ToolError)
        assert result.kind == ErrorKind.VALIDATION
        assert "species" in result.message
        assert "wateringFrequency" in result.message

    def test_missing_arguments_when_none_given(self, dispatcher):
        result = dispatcher.dispatch("get_plant", None)
        assert result.kind == ErrorKind.VALIDATION

    def test_empty_string_counts_as_missing(self, dispatcher):
        result = dispatcher.dispatch("get_plant", {"plantId": ""})
        assert result.kind == ErrorKind.VALIDATION

    def test_malformed_date(self, dispatcher):
        result = dispatcher.dispatch("add_plant", {**PLANT_ARGS, "acquiredDate": "last spring"})
        assert isinstance(result, ToolError)
        assert result.kind == ErrorKind.VALIDATION
        assert "acquiredDate" in result.message

    def test_non_positive_watering_frequency(self, dispatcher):
        result = dispatcher.dispatch("add_plant", {**PLANT_ARGS, "wateringFrequency": -2})
        assert result.kind == ErrorKind.VALIDATION

    def test_unknown_measure_type(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("add_growth_log", {
            "plantId": plant_id,
            "date": "2025-06-01",
            "measureType": "weight",
            "measureUnit": "cm",
            "value": 3,
        })
        assert result.kind == ErrorKind.VALIDATION

    def test_negative_lookahead(self, dispatcher):
        result = dispatcher.dispatch("get_watering_schedule", {"daysAhead": -1})
        assert result.kind == ErrorKind.VALIDATION


class TestPlantTools:
    def test_add_and_get(self, dispatcher):
        plant_id = add_plant(dispatcher)
        plant = loads(dispatcher.dispatch("get_plant", {"plantId": plant_id}))

        assert plant["id"] == plant_id
        assert plant["acquiredDate"] == "2025-01-01"
        assert plant["wateringFrequency"] == 7
        assert plant["lastWatered"] is None
        assert "createdAt" in plant and "updatedAt" in plant

    def test_add_without_notes(self, dispatcher):
        args = dict(PLANT_ARGS)
        del args["notes"]
        plant_id = re.search(r"with ID (\S+)\.$", dispatcher.dispatch("add_plant", args).text).group(1)

        plant = loads(dispatcher.dispatch("get_plant", {"plantId": plant_id}))
        assert plant["notes"] == ""

    def test_list_with_filter(self, dispatcher):
        add_plant(dispatcher, name="Pothos", location="Kitchen")
        add_plant(dispatcher, name="Basil", location="Kitchen")
        add_plant(dispatcher, name="Aloe", location="Bedroom")

        plants = loads(dispatcher.dispatch("list_plants", {"location": "Kitchen"}))
        assert [plant["name"] for plant in plants] == ["Basil", "Pothos"]

    def test_update(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("update_plant", {"plantId": plant_id, "name": "Big Monstera"})
        assert result == ToolOk('Successfully updated plant "Big Monstera".')

        plant = loads(dispatcher.dispatch("get_plant", {"plantId": plant_id}))
        assert plant["name"] == "Big Monstera"
        assert plant["species"] == PLANT_ARGS["species"]

    def test_delete(self, dispatcher):
        plant_id = add_plant(dispatcher)
        assert dispatcher.dispatch("delete_plant", {"plantId": plant_id}) == ToolOk("Plant deleted successfully.")
        assert dispatcher.dispatch("delete_plant", {"plantId": plant_id}).kind == ErrorKind.NOT_FOUND

    def test_other_users_plant_is_not_found(self, dispatcher, store, other_user_id):
        plant_id = add_plant(dispatcher)
        intruder = ToolDispatcher(store, other_user_id, today=lambda: TODAY)

        for name in ("get_plant", "delete_plant", "water_plant", "get_watering_history",
                     "get_growth_logs", "get_plant_images"):
            result = intruder.dispatch(name, {"plantId": plant_id})
            assert result == ToolError(ErrorKind.NOT_FOUND, f"Plant with ID {plant_id} not found."), name

        assert dispatcher.dispatch("get_plant", {"plantId": plant_id}).__class__ is ToolOk


class TestWateringTools:
    def test_water_defaults_to_today(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("water_plant", {"plantId": plant_id})
        assert result == ToolOk(f"Plant watered successfully on {TODAY.isoformat()}.")

        plant = loads(dispatcher.dispatch("get_plant", {"plantId": plant_id}))
        assert plant["lastWatered"] == TODAY.isoformat()

    def test_history(self, dispatcher):
        plant_id = add_plant(dispatcher)
        dispatcher.dispatch("water_plant", {"plantId": plant_id, "date": "2025-06-01", "notes": "light"})
        dispatcher.dispatch("water_plant", {"plantId": plant_id, "date": "2025-06-08"})

        history = loads(dispatcher.dispatch("get_watering_history", {"plantId": plant_id}))
        assert [event["wateredDate"] for event in history] == ["2025-06-08", "2025-06-01"]
        assert history[1]["notes"] == "light"

    def test_schedule(self, dispatcher):
        thirsty = add_plant(dispatcher, name="Fern", wateringFrequency=3)
        add_plant(dispatcher, name="Aloe", wateringFrequency=30)
        relaxed = add_plant(dispatcher, name="Cactus", wateringFrequency=60)
        dispatcher.dispatch("water_plant", {"plantId": thirsty, "date": "2025-06-10"})
        dispatcher.dispatch("water_plant", {"plantId": relaxed, "date": "2025-06-14"})

        schedule = loads(dispatcher.dispatch("get_watering_schedule", {}))
        assert [(entry["name"], entry["status"], entry["daysUntilDue"]) for entry in schedule] == [
            ("Aloe", "never watered", None),
            ("Fern", "overdue", -2),
        ]


class TestGrowthAndImageTools:
    def test_growth_log(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("add_growth_log", {
            "plantId": plant_id,
            "date": "2025-06-01",
            "measureType": "leafCount",
            "measureUnit": "count",
            "value": 12,
        })
        assert result == ToolOk("Growth log added: leafCount = 12 count")

        logs = loads(dispatcher.dispatch("get_growth_logs", {"plantId": plant_id}))
        assert logs[0]["measureType"] == "leafCount"
        assert logs[0]["logDate"] == "2025-06-01"
        assert logs[0]["value"] == 12.0

    def test_value_zero_is_accepted(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("add_growth_log", {
            "plantId": plant_id,
            "date": "2025-06-01",
            "measureType": "other",
            "measureUnit": "other",
            "value": 0,
        })
        assert isinstance(result, ToolOk)

    def test_growth_log_on_foreign_plant(self, dispatcher, store, other_user_id):
        plant_id = add_plant(dispatcher)
        intruder = ToolDispatcher(store, other_user_id)
        result = intruder.dispatch("add_growth_log", {
            "plantId": plant_id,
            "date": "2025-06-01",
            "measureType": "height",
            "measureUnit": "cm",
            "value": 10,
        })
        assert result.kind == ErrorKind.NOT_FOUND

    def test_images(self, dispatcher):
        plant_id = add_plant(dispatcher)
        result = dispatcher.dispatch("add_plant_image", {
            "plantId": plant_id,
            "filename": "monstera.jpg",
            "caption": "first split leaf",
            "takenAt": "2025-05-20",
        })
        assert result == ToolOk("Image added: monstera.jpg")

        images = loads(dispatcher.dispatch("get_plant_images", {"plantId": plant_id}))
        assert images[0]["caption"] == "first split leaf"
        assert images[0]["takenAt"] == "2025-05-20"

        image = loads(dispatcher.dispatch("get_plant_image", {"imageId": images[0]["id"]}))
        assert image["filename"] == "monstera.jpg"

    def test_unknown_image(self, dispatcher):
        result = dispatcher.dispatch("get_plant_image", {"imageId": "nope"})
        assert result == ToolError(ErrorKind.NOT_FOUND, "Image with ID nope not found.")


class TestStorageFailures:
    def test_storage_error_becomes_tool_error(self, dispatcher, monkeypatch):
        def fail(*_args, **_kwargs):
            raise StorageError("connection refused")

        monkeypatch.setattr(dispatcher.store, "list_plants", fail)
        result = dispatcher.dispatch("list_plants", {})
        assert result == ToolError(ErrorKind.STORAGE, "Storage error: connection refused")


def test_identity_is_not_taken_from_arguments(dispatcher, store, other_user_id):
    plant_id = add_plant(dispatcher, userId=other_user_id)
    assert store.get_plant(other_user_id, plant_id) is None
    assert store.get_plant(dispatcher.user_id, plant_id) is not None


def test_today_default(store, user_id):
    assert isinstance(ToolDispatcher(store, user_id).today(), date)
