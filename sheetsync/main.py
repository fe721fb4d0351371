from contextlib import asynccontextmanager

import socketio
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sheetsync import config
from sheetsync.database import init_db
from sheetsync.log import get_logger
from sheetsync.realtime.server import CollabServer
from sheetsync.routers import auth, users
from sheetsync.services.jwt import TokenService
from sheetsync.services.stores import AccessStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(
    title="SheetSync API",
    description="Accounts, JWT authentication and a Socket.IO channel for editing sheets together.",
    version="1.0.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth.router, tags=["Auth"], prefix="/auth")
app.include_router(users.router, tags=["Users"], prefix="/users")


def socketio_mount(
    app: FastAPI,
    async_mode: str = "asgi",
    mount_path: str = "/socket.io/",
    socketio_path: str = "socket.io",
    logger: bool = False,
    engineio_logger: bool = False,
    cors_allowed_origins=None,
    **kwargs
) -> socketio.AsyncServer:
    """Mounts an async SocketIO app over an FastAPI app, sharing the CORS origins of the REST API."""
    origins = config.CORS_ORIGINS if cors_allowed_origins is None else cors_allowed_origins
    sio = socketio.AsyncServer(
        async_mode=async_mode,
        # socketio wants the bare "*" string for a wildcard, not a list holding it
        cors_allowed_origins="*" if origins in ("*", ["*"]) else origins,
        logger=logger,
        engineio_logger=engineio_logger,
        **kwargs
    )

    sio_app = socketio.ASGIApp(sio, socketio_path=socketio_path)

    app.add_route(mount_path, route=sio_app, methods=["GET", "POST"])
    app.add_websocket_route(mount_path, sio_app)

    return sio


sio = socketio_mount(app)
collab = CollabServer(sio, TokenService(), AccessStore())


@app.get("/", summary="Server health check")
async def read_root():
    return {"status": "alive"}


def run():
    uvicorn.run("sheetsync.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
