"""Schema definition for the structured story output."""

from typing import Any, Dict

SCHEMA_NAME = "story_and_prompt"

STORY_KEYS = ("story", "regenerate_prompt")

STORY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "story": {
            "type": "string",
            "description": (
                "An engaging opening paragraph for a story, inspired by the image. "
                "It should establish a compelling mood and setting in about 150-200 words."
            ),
        },
        "regenerate_prompt": {
            "type": "string",
            "description": (
                "A detailed and descriptive prompt that could be used with an image generation AI "
                "to recreate the provided image. Include details about style, composition, lighting, and subject."
            ),
        },
    },
    "required": list(STORY_KEYS),
    "additionalProperties": False,
}

TEXT_FORMAT: Dict[str, Any] = {
    "format": {
        "type": "json_schema",
        "name": SCHEMA_NAME,
        "schema": STORY_SCHEMA,
        "strict": True,
    }
}
