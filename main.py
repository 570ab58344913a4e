import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from config import get_settings
from database import get_db, init_db
from errors import PingMeError
from responses import Responder
from routes import auth, payment, session, vehicle

logger = logging.getLogger(__name__)


def _resolve(request: Request, dependency):
    # honours app.dependency_overrides outside of the DI system
    return request.app.dependency_overrides.get(dependency, dependency)


async def handle_pingme_error(request: Request, exc: PingMeError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
    settings = _resolve(request, get_settings)()
    return Responder(settings.RESPONSE_MODE, settings.LOGIN_PATH).failure(exc)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(get_db(settings))
        logger.info(f"PingMe backend live on port {settings.PORT}")
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    app.include_router(auth.router)
    app.include_router(vehicle.router)
    app.include_router(payment.router)
    app.include_router(session.router)

    app.add_exception_handler(PingMeError, handle_pingme_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "PingMe Backend is Live"

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().PORT)
