"""Scene generation pipeline: segment a script, then render panels one by one."""

from __future__ import annotations

import logging

from services.openai.errors import GatewayError
from services.openai.gateway import StoryboardGateway
from services.openai.prompts import build_synthesis_prompt
from services.storyboard.storyboard_store import StoryboardStore

LOGGER = logging.getLogger(__name__)
UNKNOWN_ERROR = "An unknown error occurred."


class StoryboardOrchestrator:
    """Drive one workspace's storyboard runs against the gateway."""

    def __init__(self, gateway: StoryboardGateway, store: StoryboardStore) -> None:
        if gateway is None:
            raise ValueError("Storyboard gateway is required.")
        self.gateway = gateway
        self.store = store

    def can_start(self, script: str) -> bool:
        """Return True when `generate_storyboard` would start a new run."""
        return bool(script and script.strip()) and not self.store.is_segmenting

    async def generate_storyboard(self, script: str) -> None:
        """Run the full pipeline; results are observable only through the store.

        Segmentation failures become a single run-level error. Synthesis failures
        are confined to the scene they happened on and never stop the run.
        """
        if not self.can_start(script):
            return

        self.store.begin_run()
        try:
            descriptions = await self.gateway.segment(script)
        except GatewayError as exc:
            LOGGER.error("Storyboard run aborted during segmentation: %s", exc)
            self.store.fail_run(str(exc) or UNKNOWN_ERROR)
            return
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Unexpected segmentation failure")
            self.store.fail_run(UNKNOWN_ERROR)
            return

        scenes = self.store.populate(descriptions)
        LOGGER.info("Generating %d storyboard panels", len(scenes))

        for scene in scenes:
            self.store.mark_generating(scene.id)
            try:
                image = await self.gateway.synthesize(build_synthesis_prompt(scene.description))
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("Failed to generate image for scene: %s (%s)", scene.id, exc)
                self.store.mark_error(scene.id)
                continue
            self.store.mark_done(scene.id, image)
