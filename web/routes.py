"""
web/routes.py -- Static files and single-page-app fallback for the browser client.

The browser client is a prebuilt single-page app living in Settings.public_dir.
Its router owns every non-API path, so any GET that no API route claimed is
answered here:
  - an existing file under public_dir is served as-is (scripts, styles, images)
  - anything else gets public_dir/index.html and the client routes it

This router is mounted by asgi.py after every API route. Its catch-all path
would otherwise shadow them.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from core.config import get_settings

logger = logging.getLogger("carshop.web")

router = APIRouter()


def _resolve_public_file(public_dir: Path, path: str) -> Path | None:
    """Return the file under public_dir that path names, or None.

    Resolves symlinks and ".." before checking containment, so a request such
    as /../../etc/passwd can never escape public_dir.
    """
    if not path:
        return None
    root = public_dir.resolve()
    candidate = (root / path).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


@router.get("/{path:path}", include_in_schema=False)
async def spa_fallback(path: str) -> FileResponse:
    public_dir = get_settings().public_dir
    found = _resolve_public_file(public_dir, path)
    if found is not None:
        return FileResponse(found)
    index = public_dir / "index.html"
    if not index.is_file():
        logger.error("Static entry page missing: %s", index)
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(index)
