"""Dispatch workspace websocket commands and push state snapshots."""
from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List

from fastapi import WebSocket

from services.workspace_store import Workspace


class WorkspaceSocketHandler:
	"""Route websocket messages for one workspace and mirror its state changes."""

	def __init__(self, workspace: Workspace) -> None:
		self.workspace = workspace
		self.updates: asyncio.Queue = asyncio.Queue()
		self._unsubscribers: List[Callable[[], None]] = []

	@property
	def image_base(self) -> str:
		"""Route prefix for panel images; pushes reference panels instead of inlining them."""
		return f"/workspaces/{self.workspace.workspace_id}/scenes"

	def attach(self) -> None:
		"""Queue a snapshot after every storyboard or transcript mutation."""
		board = self.workspace.storyboard
		chat = self.workspace.chat
		self.workspace.connections += 1
		self._unsubscribers = [
			board.subscribe(lambda: self.updates.put_nowait({"type": "storyboard.updated", "storyboard": board.snapshot(self.image_base)})),
			chat.subscribe(lambda: self.updates.put_nowait({"type": "chat.updated", "chat": chat.snapshot()})),
		]

	def detach(self) -> None:
		if self._unsubscribers:
			self.workspace.connections -= 1
			self.workspace.touch()
		for unsubscribe in self._unsubscribers:
			unsubscribe()
		self._unsubscribers = []

	def initial_state(self) -> Dict[str, Any]:
		return {
			"type": "workspace.state",
			"workspace_id": self.workspace.workspace_id,
			"storyboard": self.workspace.storyboard.snapshot(self.image_base),
			"chat": self.workspace.chat.snapshot(),
		}

	async def pump(self, websocket: WebSocket) -> None:
		"""Forward queued snapshots to the client until cancelled."""
		while True:
			update = await self.updates.get()
			await self._send(websocket, update)

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		self.workspace.touch()
		message_type = payload.get("type")
		try:
			if message_type == "storyboard.generate":
				result = self._generate(payload)
			elif message_type == "chat.activate":
				result = self._activate_chat()
			elif message_type == "chat.send":
				result = self._send_chat(payload)
			else:
				raise ValueError("Unsupported message type.")
			result["request_id"] = request_id
			await self._send(websocket, result)
		except Exception as exc:
			await self._send_error(websocket, request_id, str(exc))

	def _generate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		script = payload.get("script") or ""
		if not script.strip():
			raise ValueError("Script text is required.")
		orchestrator = self.workspace.orchestrator
		if not orchestrator.can_start(script):
			raise RuntimeError("A script is already being analyzed.")
		self.workspace.spawn(orchestrator.generate_storyboard(script))
		return {"type": "storyboard.generate.ack"}

	def _activate_chat(self) -> Dict[str, Any]:
		opened = self.workspace.chat.activate()
		return {"type": "chat.activate.ack", "opened": opened}

	def _send_chat(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		"""Start a send in the background; the reply arrives as a chat.updated push."""
		text = payload.get("text") or ""
		chat = self.workspace.chat
		chat.activate()
		submitted = chat.try_begin(text)
		if submitted:
			self.workspace.spawn(chat.complete(text))
		return {"type": "chat.send.ack", "submitted": submitted}

	async def _send_error(self, websocket: WebSocket, request_id: Any, detail: str) -> None:
		await self._send(websocket, {"type": "error", "request_id": request_id, "detail": detail})

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		await websocket.send_text(json.dumps(payload))
