"""FastAPI application serving a built site for local preview."""

from __future__ import annotations

import socket
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import FileResponse, HTMLResponse

from ..errors import SetupError
from ..logging import get_logger

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
_PORT_SEARCH_SPAN = 10

_FALLBACK_404 = """<!DOCTYPE html>
<html>
<head>
    <title>404 - Page Not Found</title>
    <style>
        body { font-family: Arial, sans-serif; text-align: center; margin-top: 100px; }
        h1 { color: #333; }
        p { color: #666; }
    </style>
</head>
<body>
    <h1>404 - Page Not Found</h1>
    <p>The requested page could not be found.</p>
    <p><a href="/">Return to home</a></p>
</body>
</html>"""

logger = get_logger("service")


def _resolve_request(root: Path, requested: str) -> Optional[Path]:
    """Map a URL path onto ``root``; ``None`` when it escapes the root."""
    target = (root / requested.lstrip("/")).resolve()
    if target != root and root not in target.parents:
        return None
    return target


def _not_found(root: Path) -> Response:
    custom = root / "404.html"
    if custom.is_file():
        return FileResponse(custom, status_code=404, media_type="text/html")
    return HTMLResponse(_FALLBACK_404, status_code=404)


def create_app(root: Path | str) -> FastAPI:
    """Create an application that serves files below ``root``."""
    site_root = Path(root).expanduser().resolve()
    app = FastAPI(title="colade preview", docs_url=None, redoc_url=None, openapi_url=None)

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.api_route("/{requested:path}", methods=["GET", "HEAD"])
    async def serve_file(requested: str) -> Response:
        target = _resolve_request(site_root, requested)
        if target is None:
            return _not_found(site_root)
        if target.is_dir():
            target = target / "index.html"
        if target.is_file():
            return FileResponse(target)
        return _not_found(site_root)

    return app


def port_available(port: int, host: str = DEFAULT_HOST) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def suggest_port(port: int, host: str = DEFAULT_HOST) -> Optional[int]:
    for candidate in range(port + 1, port + _PORT_SEARCH_SPAN + 1):
        if port_available(candidate, host):
            return candidate
    return None


def serve_directory(
    root: Path | str, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> None:
    site_root = Path(root).expanduser()
    if not site_root.is_dir():
        raise SetupError(f"'{root}' is not a valid directory")
    if not port_available(port, host):
        alternative = suggest_port(port, host)
        hint = f"; port {alternative} is free, use --port {alternative}" if alternative else ""
        raise SetupError(f"port {port} is already in use{hint}")

    logger.info("Serving '%s' at http://%s:%d (Ctrl+C to stop)", site_root, host, port)
    uvicorn.run(create_app(site_root), host=host, port=port, access_log=False, log_level="warning")


__all__ = ["create_app", "port_available", "serve_directory", "suggest_port"]
