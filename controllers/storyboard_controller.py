from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response
from typing import Dict, Any

from controllers.workspace_controller import require_workspace
from models.storyboard_models import Scene
from services.panel_images import PanelImageEncoder
from utils.media_validation import read_script_upload


async def start_storyboard(request: Request, workspace_id: str, script: str) -> Dict[str, Any]:
    """Kick off a storyboard run in the background.

    Args:
        request: FastAPI Request object (used to access app.state for the workspace store).
        workspace_id: Id of the workspace whose storyboard is regenerated.
        script: Script text to segment.

    Returns:
        A dict with `accepted` and the storyboard snapshot at submission time.

    Raises:
        HTTPException(400) if the script is blank, 409 if a run is still analysing a script.
    """
    workspace = require_workspace(request, workspace_id)

    if not script or not script.strip():
        raise HTTPException(status_code=400, detail="Script text is required.")
    if not workspace.orchestrator.can_start(script):
        raise HTTPException(status_code=409, detail="A script is already being analyzed.")

    workspace.spawn(workspace.orchestrator.generate_storyboard(script))

    return {"accepted": True, "storyboard": workspace.storyboard.snapshot()}


async def get_storyboard(request: Request, workspace_id: str) -> Dict[str, Any]:
    """Return the current storyboard snapshot."""
    workspace = require_workspace(request, workspace_id)
    return workspace.storyboard.snapshot()


async def upload_script(request: Request, workspace_id: str, file: UploadFile) -> Dict[str, Any]:
    """Read an uploaded .txt/.md script and hand its text back to the client.

    The upload only fills the script input; it does not start a run.
    """
    require_workspace(request, workspace_id)
    script = await read_script_upload(file)
    return {"filename": file.filename, "script": script}


def _finished_scene(request: Request, workspace_id: str, scene_id: str) -> Scene:
    workspace = require_workspace(request, workspace_id)
    try:
        scene = workspace.storyboard.get(scene_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    if scene.status != "done" or not scene.image:
        raise HTTPException(status_code=404, detail="Image not available for this scene")
    return scene


async def get_scene_image(request: Request, workspace_id: str, scene_id: str) -> Response:
    """Controller to serve the full synthesized panel of a finished scene.

    Websocket pushes reference this route rather than inlining the panel.

    Raises:
        HTTPException(404) if the scene does not exist or has no image yet.
    """
    scene = _finished_scene(request, workspace_id, scene_id)
    mime, raw = PanelImageEncoder().from_data_uri(scene.image)
    return Response(content=raw, media_type=mime)


async def get_scene_thumbnail(request: Request, workspace_id: str, scene_id: str) -> Response:
    """Controller to render a PNG thumbnail of a finished scene.

    Raises:
        HTTPException(404) if the scene does not exist or has no image yet.
    """
    scene = _finished_scene(request, workspace_id, scene_id)
    thumbnail = PanelImageEncoder().thumbnail_from_data_uri(scene.image)
    return Response(content=thumbnail, media_type="image/png")
