"""Helpers to parse Responses API and Images API outputs."""

import json
from typing import Any, Dict, List, Optional


def extract_text(response: Any) -> str:
    """Return the aggregated output text of a Responses API result."""
    text = getattr(response, "output_text", None)
    if text:
        return text
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "output_text":
                return getattr(content, "text", "") or ""
    return ""


def parse_scenes(response: Any) -> List[str]:
    """Extract the ordered scene descriptions from a structured response.

    Raises:
        ValueError: If the output is not JSON shaped as ``{"scenes": [str, ...]}``.
    """
    raw = extract_text(response).strip()
    if not raw:
        raise ValueError("Segmentation response did not include any text.")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Segmentation response was not valid JSON.") from exc

    scenes = payload.get("scenes") if isinstance(payload, dict) else None
    if not isinstance(scenes, list) or not all(isinstance(scene, str) for scene in scenes):
        raise ValueError("Segmentation response did not contain a list of scene descriptions.")
    return scenes


def first_image_b64(response: Any) -> Optional[str]:
    """Return the base64 payload of the first generated image, if any."""
    data = getattr(response, "data", None) or []
    if not data:
        return None
    return getattr(data[0], "b64_json", None) or None


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
