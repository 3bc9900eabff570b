# jobjournal/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobjournal.api.auth import require_jwt, router as auth_router
from jobjournal.api.users import router as users_router
from jobjournal.core.config import settings
from jobjournal.core.errors import register_exception_handlers
from jobjournal.core.log import configure_logging, log_requests
from jobjournal.db.mongo import close_mongo_client, get_mongo_client, get_users_collection
from jobjournal.repositories.users import UserRepository
from jobjournal.services.auth import TokenUser


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_mongo_client()
    await UserRepository(get_users_collection()).ensure_indexes()
    yield
    close_mongo_client()


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Job Seeker Journal API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(users_router, prefix="/users", tags=["users"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])

    @app.get("/api")
    async def api_status():
        return {"status": "ok"}

    # A protected endpoint which needs a valid JWT to access it
    @app.get("/api/protected")
    async def protected(user: TokenUser = Depends(require_jwt)):
        return {"data": "rosebud"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run("jobjournal.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
