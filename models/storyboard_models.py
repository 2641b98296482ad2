from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

SceneStatus = Literal["pending", "generating", "done", "error"]

# Allowed forward moves of the per-scene state machine.
SCENE_TRANSITIONS: Dict[str, frozenset] = {
    "pending": frozenset({"generating"}),
    "generating": frozenset({"done", "error"}),
    "done": frozenset(),
    "error": frozenset(),
}


class InvalidSceneTransition(ValueError):
    """Raised when a scene would move backwards or skip a state."""


@dataclass
class Scene:
    """In-memory representation of one storyboard panel.

    Attributes:
        id: Stable identifier (``scene-<epoch ms>-<run>-<index>``), never reused.
        description: One-sentence visual description returned by segmentation.
        image: ``data:`` URI of the synthesized panel; None until synthesis succeeds.
        status: Generation state, one of pending, generating, done, error.
    """

    id: str
    description: str
    image: Optional[str] = None
    status: SceneStatus = "pending"

    def to_dict(self, image_url: Optional[str] = None) -> Dict[str, Any]:
        """Serialize the scene; `image_url`, when given, stands in for the inline data URI."""
        image = image_url if image_url and self.image else self.image
        return {
            "id": self.id,
            "description": self.description,
            "image": image,
            "status": self.status,
        }
