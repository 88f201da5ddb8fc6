"""FastAPI application: serves the API, WebSocket, and frontend static files."""

from pathlib import Path
from fastapi import FastAPI, WebSocket
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from paramsurf.api.rest_routes import router as api_router
from paramsurf.api.ws_handler import handle_websocket
from paramsurf.logging_config import setup_logging

setup_logging()

app = FastAPI(title="Parametric Surface Studio")

# CORS for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await handle_websocket(websocket)


# Frontend is optional; the catch-all mount has to come last
frontend_path = Path(__file__).parent.parent / "frontend"
if frontend_path.is_dir():
    app.mount("/", StaticFiles(directory=str(frontend_path), html=True), name="frontend")
