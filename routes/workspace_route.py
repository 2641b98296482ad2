"""FastAPI routes for workspaces, storyboards, and the assistant."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.chat_controller import activate_chat, deactivate_chat, get_chat, send_chat_message
from controllers.storyboard_controller import (
	get_scene_image,
	get_scene_thumbnail,
	get_storyboard,
	start_storyboard,
	upload_script,
)
from controllers.workspace_controller import create_workspace, discard_workspace

router = APIRouter(prefix="/workspaces")


class StoryboardPayload(BaseModel):
	script: str


class ChatPayload(BaseModel):
	text: str


@router.post("", status_code=201)
async def create_workspace_route(request: Request):
	try:
		return await create_workspace(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{workspace_id}")
async def discard_workspace_route(request: Request, workspace_id: str):
	try:
		return await discard_workspace(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/storyboard", status_code=202)
async def start_storyboard_route(request: Request, workspace_id: str, payload: StoryboardPayload):
	"""Start segmenting the script and rendering its panels."""
	try:
		return await start_storyboard(request, workspace_id, payload.script)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{workspace_id}/storyboard")
async def get_storyboard_route(request: Request, workspace_id: str):
	try:
		return await get_storyboard(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/script")
async def upload_script_route(request: Request, workspace_id: str, file: UploadFile = File(...)):
	"""Return the text of an uploaded .txt or .md script."""
	try:
		return await upload_script(request, workspace_id, file)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{workspace_id}/scenes/{scene_id}/image")
async def get_scene_image_route(request: Request, workspace_id: str, scene_id: str):
	"""Return the full panel image for a finished scene."""
	try:
		return await get_scene_image(request, workspace_id, scene_id)
	except HTTPException:
		raise
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{workspace_id}/scenes/{scene_id}/thumbnail")
async def get_scene_thumbnail_route(request: Request, workspace_id: str, scene_id: str):
	"""Return the PNG thumbnail for a finished scene."""
	try:
		return await get_scene_thumbnail(request, workspace_id, scene_id)
	except HTTPException:
		raise
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/chat/activate")
async def activate_chat_route(request: Request, workspace_id: str):
	try:
		return await activate_chat(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/chat/deactivate")
async def deactivate_chat_route(request: Request, workspace_id: str):
	try:
		return await deactivate_chat(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/chat/messages")
async def post_chat_message_route(request: Request, workspace_id: str, payload: ChatPayload):
	"""Send a message to the assistant and wait for its reply."""
	try:
		return await send_chat_message(request, workspace_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{workspace_id}/chat")
async def get_chat_route(request: Request, workspace_id: str):
	try:
		return await get_chat(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
