"""WebSocket endpoint for live storyboard and assistant updates."""

from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.realtime.ws_workspace import WorkspaceSocketHandler
from services.workspace_store import WorkspaceStore

router = APIRouter()


def _require_workspace_store(websocket: WebSocket) -> WorkspaceStore:
	store = websocket.app.state.workspace_store
	if store is None:
		raise HTTPException(status_code=500, detail="Workspace store unavailable")
	return store


@router.websocket("/ws/workspaces/{workspace_id}")
async def workspace_socket(websocket: WebSocket, workspace_id: str, store: WorkspaceStore = Depends(_require_workspace_store)):
	"""Push a snapshot after every state change and accept generate/chat commands."""
	await websocket.accept()
	try:
		workspace = store.get(workspace_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Workspace not found"}))
		await websocket.close()
		return

	handler = WorkspaceSocketHandler(workspace)
	await websocket.send_text(json.dumps(handler.initial_state()))
	handler.attach()
	pump = asyncio.create_task(handler.pump(websocket))
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			try:
				payload = json.loads(raw)
			except json.JSONDecodeError:
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
				continue
			if not isinstance(payload, dict):
				await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be a JSON object"}))
				continue
			await handler.handle(websocket, payload)
	finally:
		handler.detach()
		pump.cancel()
		try:
			await pump
		except (asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
			pass
