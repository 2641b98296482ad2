"""Schema definitions for the structured segmentation output."""

from typing import Any, Dict

SCHEMA_NAME = "storyboard_scenes"

SCENES_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "scenes": {
            "type": "array",
            "items": {
                "type": "string",
                "description": "A detailed visual description for a single storyboard scene.",
            },
        },
    },
    "required": ["scenes"],
    "additionalProperties": False,
}

TEXT_FORMAT: Dict[str, Any] = {
    "format": {
        "type": "json_schema",
        "name": SCHEMA_NAME,
        "schema": SCENES_SCHEMA,
        "strict": True,
    }
}
