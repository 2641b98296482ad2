"""Validation helpers for uploaded script files."""

from fastapi import HTTPException, UploadFile

ALLOWED_SCRIPT_TYPES = {
    "text/plain",
    "text/markdown",
    "text/x-markdown",
}

ALLOWED_SCRIPT_EXTENSIONS = (".txt", ".md")


def validate_script_file(script_file: UploadFile) -> None:
    """Validate that the uploaded file is plain text or markdown.

    The content type wins when the browser sends one; otherwise the
    filename extension must be one of the accepted script extensions.
    """
    if not script_file.filename:
        raise HTTPException(status_code=400, detail="Script file must have a filename.")
    content_type = (script_file.content_type or "").lower().split(";", 1)[0].strip()
    if content_type and content_type != "application/octet-stream":
        if content_type not in ALLOWED_SCRIPT_TYPES:
            raise HTTPException(status_code=415, detail=f"Unsupported script content type: {script_file.content_type}")
        return
    if not script_file.filename.lower().endswith(ALLOWED_SCRIPT_EXTENSIONS):
        raise HTTPException(status_code=415, detail="Scripts must be .txt or .md files.")


async def read_script_upload(script_file: UploadFile) -> str:
    """Read a validated script upload as UTF-8 text."""
    validate_script_file(script_file)
    raw = await script_file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded script file is empty.")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail="Script file must be UTF-8 text.") from exc
