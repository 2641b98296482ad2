"""In-memory storyboard state for one workspace."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

from models.storyboard_models import SCENE_TRANSITIONS, InvalidSceneTransition, Scene

LOGGER = logging.getLogger(__name__)

Listener = Callable[[], None]


class StoryboardStore:
    """Hold the ordered scenes, the run-level error, and the segmenting flag.

    Scene updates are keyed by id. Updates for ids that are no longer on the
    board (a newer run replaced the scenes) are dropped and reported as False.
    """

    def __init__(self) -> None:
        self._scenes: List[Scene] = []
        self._index: Dict[str, Scene] = {}
        self.error: Optional[str] = None
        self.is_segmenting: bool = False
        self._listeners: List[Listener] = []
        self._runs = 0

    @property
    def scenes(self) -> List[Scene]:
        return list(self._scenes)

    def get(self, scene_id: str) -> Scene:
        """Return a scene or raise KeyError if missing."""
        scene = self._index.get(scene_id)
        if scene is None:
            raise KeyError(f"Scene {scene_id} not found")
        return scene

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def begin_run(self) -> None:
        """Clear prior scenes and error and enter the segmenting phase."""
        self._scenes = []
        self._index = {}
        self.error = None
        self.is_segmenting = True
        self._notify()

    def fail_run(self, message: str) -> None:
        """Record a run-level error; no scenes are kept."""
        self._scenes = []
        self._index = {}
        self.error = message
        self.is_segmenting = False
        self._notify()

    def populate(self, descriptions: Sequence[str]) -> List[Scene]:
        """Create one pending scene per description, in order, all at once."""
        # The run counter keeps ids distinct when two runs populate in the same millisecond.
        self._runs += 1
        stamp = int(time.time() * 1000)
        scenes = [Scene(id=f"scene-{stamp}-{self._runs}-{i}", description=desc) for i, desc in enumerate(descriptions)]
        self._scenes = scenes
        self._index = {scene.id: scene for scene in scenes}
        self.is_segmenting = False
        self._notify()
        return list(scenes)

    def _transition(self, scene_id: str, status: str, image: Optional[str] = None) -> bool:
        scene = self._index.get(scene_id)
        if scene is None:
            LOGGER.debug("Dropping %s update for stale scene %s", status, scene_id)
            return False
        if status not in SCENE_TRANSITIONS[scene.status]:
            raise InvalidSceneTransition(f"Scene {scene_id} cannot move from {scene.status} to {status}")
        scene.status = status
        scene.image = image
        self._notify()
        return True

    def mark_generating(self, scene_id: str) -> bool:
        return self._transition(scene_id, "generating")

    def mark_done(self, scene_id: str, image: str) -> bool:
        """Attach the synthesized image and finish the scene."""
        if not image:
            raise ValueError("A finished scene requires an image.")
        return self._transition(scene_id, "done", image)

    def mark_error(self, scene_id: str) -> bool:
        return self._transition(scene_id, "error")

    def snapshot(self, image_base: Optional[str] = None) -> Dict[str, Any]:
        """Return a JSON-serializable view for the presentation layer.

        With `image_base`, finished scenes carry `<image_base>/<scene id>/image`
        instead of their inline data URI.
        """
        return {
            "scenes": [
                scene.to_dict(f"{image_base}/{scene.id}/image" if image_base else None) for scene in self._scenes
            ],
            "error": self.error,
            "is_segmenting": self.is_segmenting,
        }
