# main.py
import logging
import time

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings
from database import Database
from routes import assignments, auth, submissions
from routes.auth import TokenService
from storage import ThumbnailStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings=None, database=None, storage=None, tokens=None) -> FastAPI:
    """Build the app with explicitly constructed services."""
    settings = settings or Settings.from_env()
    if tokens is None:
        if not settings.token_secret:
            raise RuntimeError("ACCESS_TOKEN_SECRET is not set")
        tokens = TokenService(settings.token_secret)
    if database is None:
        database = Database(settings.mongodb_uri, settings.db_name)
    if storage is None:
        storage = ThumbnailStorage.from_settings(settings)

    app = FastAPI(title="Assignment Server")
    app.state.settings = settings
    app.state.db = database
    app.state.storage = storage
    app.state.tokens = tokens

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f} ms)")
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    app.include_router(auth.router)
    app.include_router(assignments.router)
    app.include_router(submissions.router)

    @app.get("/")
    async def root():
        return {"message": "Assignment server is running"}

    @app.on_event("startup")
    async def startup_event():
        await app.state.db.connect()

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.db.close()
        if app.state.storage is not None:
            app.state.storage.close()

    return app


if __name__ == "__main__":
    import uvicorn
    settings = Settings.from_env()
    uvicorn.run("main:create_app", factory=True, host=settings.host, port=settings.port)
