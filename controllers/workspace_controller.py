"""Workspace lifecycle helpers."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.workspace_store import Workspace, WorkspaceStore


def require_workspace(request: Request, workspace_id: str) -> Workspace:
	"""Return the workspace or translate a missing id into a 404."""
	store: WorkspaceStore = request.app.state.workspace_store
	try:
		return store.get(workspace_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def create_workspace(request: Request) -> Dict[str, Any]:
	"""Create a workspace and return its id with the initial state."""
	store: WorkspaceStore = request.app.state.workspace_store
	workspace = store.create()
	return {
		"workspace_id": workspace.workspace_id,
		"storyboard": workspace.storyboard.snapshot(),
		"chat": workspace.chat.snapshot(),
	}


async def discard_workspace(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Drop a workspace, ending its chat session."""
	store: WorkspaceStore = request.app.state.workspace_store
	try:
		store.discard(workspace_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"workspace_id": workspace_id, "discarded": True}
