# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import asyncio
import logging
from collections.abc import Callable

from aiohttp import web

from ..client.connection import MpdConnection
from ..client.exceptions import MpdError
from ..config import Config
from ..outputs import OutputEnumerator, encode_outputs, find_output


ConnectionFactory = Callable[[], MpdConnection]

CONNECTION_FACTORY = web.AppKey("connection_factory", object)

ACTIONS = ("enable", "disable", "toggle")


def default_connection_factory() -> MpdConnection:
    """Open a connection using the loaded configuration."""
    return MpdConnection.connect(**Config().connection_settings())


def _list_outputs(factory: ConnectionFactory) -> list[dict]:
    with factory() as conn, OutputEnumerator.start(conn) as outputs:
        return encode_outputs(outputs, release=True)


def _apply_action(factory: ConnectionFactory, output_id: int, action: str) -> bool:
    """Run ``action`` on one output. Returns False if the id is unknown."""
    with factory() as conn:
        output = find_output(conn, output_id)
        if output is None:
            return False
        with output:
            if action == "toggle":
                output.toggle()
            else:
                output.set_enabled(action == "enable")
        return True


def _error_response(e: MpdError) -> web.Response:
    logging.getLogger("server").warning(f"daemon request failed: {e}")
    return web.json_response({"error": str(e)}, status=502)


async def health_check_handler(request):
    """Simple health check endpoint."""
    return web.json_response({"status": "ok", "service": "mpd-outputs"})


async def list_outputs_handler(request):
    """Return every configured output as a JSON array."""
    factory = request.app[CONNECTION_FACTORY]
    try:
        outputs = await asyncio.to_thread(_list_outputs, factory)
    except MpdError as e:
        return _error_response(e)
    return web.json_response(outputs)


async def output_action_handler(request):
    """Enable, disable, or toggle one output."""
    action = request.match_info["action"]
    if action not in ACTIONS:
        raise web.HTTPNotFound(text=f"unknown action: {action}")
    try:
        output_id = int(request.match_info["id"])
    except ValueError:
        raise web.HTTPBadRequest(text="output id must be an integer")

    factory = request.app[CONNECTION_FACTORY]
    try:
        found = await asyncio.to_thread(_apply_action, factory, output_id, action)
    except MpdError as e:
        return _error_response(e)

    if not found:
        return web.json_response({"error": f"no output with id {output_id}"}, status=404)

    logging.getLogger("server").info(f"{action} output {output_id}")
    return web.json_response({"status": "ok", "id": output_id, "action": action})


def create_app(connection_factory: ConnectionFactory | None = None) -> web.Application:
    """Create and configure the HTTP application."""
    app = web.Application()
    app[CONNECTION_FACTORY] = connection_factory or default_connection_factory

    app.router.add_get("/api/outputs", list_outputs_handler)
    app.router.add_post("/api/outputs/{id}/{action}", output_action_handler)
    app.router.add_get("/api/system/health", health_check_handler)

    return app


async def start_server(host: str = "0.0.0.0", port: int = 8789, connection_factory: ConnectionFactory | None = None):
    """Start the HTTP server."""
    app = create_app(connection_factory)

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logging.getLogger("server").info(f"Server on http://{host}:{port}/ (outputs API: /api/outputs)")

    return runner
