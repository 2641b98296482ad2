"""Simple in-memory store for storyboard workspaces."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Coroutine, Dict, List, Optional, Set
from uuid import uuid4

from services.chat.chat_manager import ChatSessionManager
from services.openai.gateway import StoryboardGateway
from services.storyboard.orchestrator import StoryboardOrchestrator
from services.storyboard.storyboard_store import StoryboardStore

LOGGER = logging.getLogger(__name__)
# Seconds a workspace may sit untouched before `create` evicts it.
DEFAULT_IDLE_TTL = float(os.getenv("STORYBOARD_WORKSPACE_TTL", "3600"))


def _log_task_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        LOGGER.error("Background task %s failed", task.get_name(), exc_info=exc)


@dataclass
class Workspace:
    """One hosting context: a storyboard, its orchestrator, and the assistant."""

    workspace_id: str
    storyboard: StoryboardStore
    orchestrator: StoryboardOrchestrator
    chat: ChatSessionManager
    tasks: Set[asyncio.Task] = field(default_factory=set)
    connections: int = 0
    last_seen: float = field(default_factory=time.monotonic)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine in the background and keep a reference until it finishes.

        A task that ends with an exception has it logged.
        """
        task = asyncio.create_task(coro)
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        task.add_done_callback(_log_task_failure)
        return task

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def is_idle(self, now: float, ttl: float) -> bool:
        """True when nothing runs or listens and the workspace was last used over `ttl` seconds ago."""
        return not self.tasks and self.connections == 0 and now - self.last_seen > ttl


class WorkspaceStore:
    """Create, look up, and discard workspaces sharing one gateway.

    Workspaces that are never discarded are evicted once idle for longer than
    `idle_ttl` seconds; eviction runs whenever a new workspace is created.
    """

    def __init__(self, gateway: StoryboardGateway, idle_ttl: Optional[float] = None) -> None:
        self.gateway = gateway
        self.idle_ttl = DEFAULT_IDLE_TTL if idle_ttl is None else idle_ttl
        self._workspaces: Dict[str, Workspace] = {}

    def create(self) -> Workspace:
        """Create a new workspace with an empty storyboard and no chat session."""
        self.prune_idle()
        workspace_id = uuid4().hex
        storyboard = StoryboardStore()
        workspace = Workspace(
            workspace_id=workspace_id,
            storyboard=storyboard,
            orchestrator=StoryboardOrchestrator(self.gateway, storyboard),
            chat=ChatSessionManager(self.gateway),
        )
        self._workspaces[workspace_id] = workspace
        LOGGER.info("Workspace %s created", workspace_id)
        return workspace

    def get(self, workspace_id: str) -> Workspace:
        """Return a workspace or raise KeyError if missing."""
        workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise KeyError(f"Workspace {workspace_id} not found")
        workspace.touch()
        return workspace

    def discard(self, workspace_id: str) -> Workspace:
        """Forget a workspace; its chat session goes with it."""
        workspace = self.get(workspace_id)
        del self._workspaces[workspace_id]
        LOGGER.info("Workspace %s discarded (%d background tasks still running)", workspace_id, len(workspace.tasks))
        return workspace

    def prune_idle(self, now: Optional[float] = None) -> List[str]:
        """Drop idle workspaces and return their ids."""
        now = time.monotonic() if now is None else now
        expired = [wid for wid, ws in self._workspaces.items() if ws.is_idle(now, self.idle_ttl)]
        for workspace_id in expired:
            del self._workspaces[workspace_id]
            LOGGER.info("Workspace %s evicted after %.0fs idle", workspace_id, self.idle_ttl)
        return expired

    def __len__(self) -> int:
        return len(self._workspaces)
