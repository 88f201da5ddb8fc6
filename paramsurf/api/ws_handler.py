"""WebSocket connection handler and message router."""

import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from paramsurf.api.schemas import FourierComputeMessage, StrokePoint, SurfaceRequest
from paramsurf.fourier.fitter import export_for_frontend as fourier_for_frontend
from paramsurf.geometry.mesh_export import export_for_frontend
from paramsurf.session import Outcome, SurfaceSession

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages active WebSocket connections."""

    def __init__(self):
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def send_json(self, websocket: WebSocket, data: dict):
        await websocket.send_json(data)


manager = ConnectionManager()


async def handle_websocket(websocket: WebSocket):
    """Main WebSocket endpoint handler. Each connection owns one SurfaceSession."""
    await manager.connect(websocket)
    session = SurfaceSession()
    logger.info("Client connected (%d active)", len(manager.active_connections))

    try:
        while True:
            data = await websocket.receive_json()
            if not isinstance(data, dict):
                await manager.send_json(websocket, {
                    "type": "error",
                    "payload": {"code": "INVALID_PAYLOAD", "message": "Expected a JSON object",
                                "severity": "error"}
                })
                continue
            msg_type = data.get("type", "")
            payload = data.get("payload") or {}

            try:
                if msg_type == "build_surface":
                    await handle_build_surface(websocket, session, payload)
                elif msg_type == "request_mesh":
                    await handle_request_mesh(websocket, session)
                elif msg_type == "load_example":
                    await send_outcome(websocket, session,
                                       session.apply_example(payload.get("key", "")))
                elif msg_type == "load_preset":
                    await send_outcome(websocket, session,
                                       session.load_preset(payload.get("preset", payload)))
                elif msg_type == "stroke_start":
                    point = StrokePoint(**payload)
                    session.stroke.begin(point.x, point.y)
                elif msg_type == "stroke_move":
                    point = StrokePoint(**payload)
                    session.stroke.extend(point.x, point.y)
                elif msg_type == "stroke_end":
                    session.stroke.finish()
                elif msg_type == "fourier_compute":
                    await handle_fourier_compute(websocket, session, payload)
                elif msg_type == "fourier_clear":
                    await send_status(websocket, session.clear_stroke())
                elif msg_type == "fourier_to_surface":
                    await send_outcome(websocket, session, session.fourier_to_surface())
                else:
                    await manager.send_json(websocket, {
                        "type": "error",
                        "payload": {"code": "UNKNOWN_MESSAGE", "message": f"Unknown type: {msg_type}",
                                    "severity": "error"}
                    })
            except ValidationError as e:
                await manager.send_json(websocket, {
                    "type": "error",
                    "payload": {"code": "INVALID_PAYLOAD", "message": str(e), "severity": "error"}
                })
            except Exception as e:
                logger.exception("Handler for %r failed", msg_type)
                await manager.send_json(websocket, {
                    "type": "error",
                    "payload": {"code": "HANDLER_ERROR", "message": str(e), "severity": "error"}
                })

    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info("Client disconnected (%d active)", len(manager.active_connections))


async def send_status(websocket: WebSocket, outcome: Outcome):
    await manager.send_json(websocket, {"type": "status", "payload": outcome.status()})


async def send_outcome(websocket: WebSocket, session: SurfaceSession, outcome: Outcome):
    """Send the new mesh (if one was built) followed by the status line."""
    if outcome.ok and outcome.value is not None:
        await send_mesh(websocket, session)
    await send_status(websocket, outcome)


async def send_mesh(websocket: WebSocket, session: SurfaceSession):
    mesh_data = export_for_frontend(session.mesh, wireframe=session.definition.wireframe)
    mesh_data["definition"] = session.definition.to_dict()
    await manager.send_json(websocket, {"type": "mesh_update", "payload": mesh_data})


async def handle_build_surface(websocket: WebSocket, session: SurfaceSession, payload: dict):
    """Build the surface from the submitted fields."""
    request = SurfaceRequest(**payload)
    await send_outcome(websocket, session, session.build(request.to_definition()))


async def handle_request_mesh(websocket: WebSocket, session: SurfaceSession):
    """Send current mesh data."""
    if session.mesh is None:
        await manager.send_json(websocket, {
            "type": "error",
            "payload": {"code": "NO_MESH", "message": "No surface built yet", "severity": "error"}
        })
        return
    await send_mesh(websocket, session)


async def handle_fourier_compute(websocket: WebSocket, session: SurfaceSession, payload: dict):
    """Fit the recorded stroke and send coefficients, expressions and preview."""
    request = FourierComputeMessage(**payload)
    outcome = session.compute_fourier(request.order, request.canvas_width, request.canvas_height)
    if outcome.ok:
        await manager.send_json(websocket, {
            "type": "fourier_result",
            "payload": fourier_for_frontend(outcome.value, request.canvas_width, request.canvas_height),
        })
    await send_status(websocket, outcome)
