"""
Root-scoped PWA files: the service worker and the web app manifest.

They are served outside ``/api/v1`` because a service worker only controls
pages under its own path.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from fupa.api.v1.deps import get_shell_manifest
from fupa.core.config import settings
from fupa.offline.manifest import ShellManifest
from fupa.offline.service_worker import render_service_worker

router = APIRouter(tags=["shell"])


@router.get("/service-worker.js", include_in_schema=False)
async def service_worker(manifest: ShellManifest = Depends(get_shell_manifest)) -> Response:
    return Response(
        content=render_service_worker(manifest),
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache", "Service-Worker-Allowed": "/"},
    )


@router.get("/manifest.webmanifest", include_in_schema=False)
async def web_manifest() -> JSONResponse:
    return JSONResponse(
        {
            "name": settings.PROJECT_NAME,
            "short_name": "FUPA Snack",
            "start_url": "/",
            "scope": "/",
            "display": "standalone",
            "background_color": "#ffffff",
            "theme_color": "#d32f2f",
        },
        media_type="application/manifest+json",
    )
