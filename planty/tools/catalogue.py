from mcp.types import Tool

_PLANT_ID = {"type": "string", "description": "The plant ID"}


def _plant_only(name: str, description: str) -> Tool:
    return Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": {"plantId": _PLANT_ID},
            "required": ["plantId"],
        },
    )


TOOLS: list[Tool] = [
    Tool(
        name="add_plant",
        description="Add a new plant to your collection",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Plant name"},
                "species": {"type": "string", "description": "Plant species"},
                "location": {"type": "string", "description": "Where the plant is located"},
                "acquiredDate": {"type": "string", "description": "Date acquired (ISO format YYYY-MM-DD)"},
                "wateringFrequency": {"type": "number", "description": "How often to water (in days)"},
                "notes": {"type": "string", "description": "Care notes"},
            },
            "required": ["name", "species", "location", "acquiredDate", "wateringFrequency"],
        },
    ),
    Tool(
        name="list_plants",
        description="List all your plants, optionally filtered by location or species",
        inputSchema={
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "Filter by location (optional)"},
                "species": {"type": "string", "description": "Filter by species (optional)"},
            },
        },
    ),
    _plant_only("get_plant", "Get detailed information about a specific plant"),
    Tool(
        name="update_plant",
        description="Update plant information",
        inputSchema={
            "type": "object",
            "properties": {
                "plantId": _PLANT_ID,
                "name": {"type": "string", "description": "New plant name"},
                "species": {"type": "string", "description": "New species"},
                "location": {"type": "string", "description": "New location"},
                "acquiredDate": {"type": "string", "description": "New acquisition date (ISO format YYYY-MM-DD)"},
                "wateringFrequency": {"type": "number", "description": "New watering frequency (in days)"},
                "notes": {"type": "string", "description": "New care notes"},
            },
            "required": ["plantId"],
        },
    ),
    _plant_only("delete_plant", "Delete a plant from your collection, with its history, logs and images"),
    Tool(
        name="water_plant",
        description="Record that a plant was watered",
        inputSchema={
            "type": "object",
            "properties": {
                "plantId": _PLANT_ID,
                "date": {"type": "string", "description": "Date watered (ISO format YYYY-MM-DD, defaults to today)"},
                "notes": {"type": "string", "description": "Optional notes about watering"},
            },
            "required": ["plantId"],
        },
    ),
    _plant_only("get_watering_history", "Get watering history for a specific plant"),
    Tool(
        name="get_watering_schedule",
        description="Get plants that need watering soon or are overdue",
        inputSchema={
            "type": "object",
            "properties": {
                "daysAhead": {"type": "number", "description": "Look ahead this many days (default 3)"},
            },
        },
    ),
    Tool(
        name="add_growth_log",
        description="Log a growth measurement for a plant",
        inputSchema={
            "type": "object",
            "properties": {
                "plantId": _PLANT_ID,
                "date": {"type": "string", "description": "Date of measurement (ISO format YYYY-MM-DD)"},
                "measureType": {
                    "type": "string",
                    "description": "Type of measurement",
                    "enum": ["height", "width", "leafCount", "other"],
                },
                "measureUnit": {
                    "type": "string",
                    "description": "Unit of measurement",
                    "enum": ["cm", "inches", "count", "other"],
                },
                "value": {"type": "number", "description": "Measurement value"},
                "notes": {"type": "string", "description": "Optional notes"},
            },
            "required": ["plantId", "date", "measureType", "measureUnit", "value"],
        },
    ),
    _plant_only("get_growth_logs", "Get all growth logs for a specific plant"),
    Tool(
        name="add_plant_image",
        description="Add an image reference for a plant",
        inputSchema={
            "type": "object",
            "properties": {
                "plantId": _PLANT_ID,
                "filename": {"type": "string", "description": "Image filename"},
                "caption": {"type": "string", "description": "Optional caption"},
                "takenAt": {"type": "string", "description": "Date photo was taken (ISO format YYYY-MM-DD)"},
            },
            "required": ["plantId", "filename", "takenAt"],
        },
    ),
    _plant_only("get_plant_images", "Get all images for a specific plant"),
    Tool(
        name="get_plant_image",
        description="Get a single plant image reference by its ID",
        inputSchema={
            "type": "object",
            "properties": {
                "imageId": {"type": "string", "description": "The image ID"},
            },
            "required": ["imageId"],
        },
    ),
]

REQUIRED_ARGUMENTS: dict[str, list[str]] = {
    tool.name: list(tool.inputSchema.get("required", [])) for tool in TOOLS
}
