import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from messenger.config import settings
from messenger.database import check_connection, create_tables
from messenger.exceptions import MessengerError
from messenger.logger import setup_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await check_connection()
        await create_tables()
    except Exception:
        logger.critical("Could not connect to the database at startup", exc_info=True)
        raise
    logger.info("%s %s started", settings.APP_NAME, settings.VERSION)
    yield


def create_app() -> FastAPI:
    setup_logger()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Messenger API: chats, messages and contact/block lists",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MessengerError)
    async def messenger_error_handler(request: Request, exc: MessengerError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": type(exc).__name__}
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Storage failure", "error": "StoreError"}
        )

    from messenger.api.v1 import auth, users, chats, messages

    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
    app.include_router(chats.router, prefix="/api/v1/chats", tags=["chats"])
    app.include_router(messages.router, prefix="/api/v1/messages", tags=["messages"])

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API", "version": settings.VERSION}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
