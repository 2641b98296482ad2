"""Assistant chat helpers."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from controllers.workspace_controller import require_workspace
from services.openai.errors import GatewayConfigError
from services.workspace_store import Workspace


def _activate(workspace: Workspace) -> bool:
	try:
		return workspace.chat.activate()
	except GatewayConfigError as exc:
		raise HTTPException(status_code=503, detail=str(exc)) from exc


async def activate_chat(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Open the assistant, creating its session on first use."""
	workspace = require_workspace(request, workspace_id)
	opened = _activate(workspace)
	return {"opened": opened, "chat": workspace.chat.snapshot()}


async def deactivate_chat(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Hide the assistant without closing its session."""
	workspace = require_workspace(request, workspace_id)
	workspace.chat.deactivate()
	return workspace.chat.snapshot()


async def send_chat_message(request: Request, workspace_id: str, text: str) -> Dict[str, Any]:
	"""Send a message, activating the assistant first if needed.

	Returns `accepted: False` when the send was dropped (blank text or a send
	already in flight).
	"""
	workspace = require_workspace(request, workspace_id)
	_activate(workspace)
	reply = await workspace.chat.send(text)
	return {
		"accepted": reply is not None,
		"reply": reply.to_dict() if reply else None,
		"chat": workspace.chat.snapshot(),
	}


async def get_chat(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Return the assistant transcript and flags."""
	workspace = require_workspace(request, workspace_id)
	return workspace.chat.snapshot()
