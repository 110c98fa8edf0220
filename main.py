import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from db import create_db_and_tables, dispose_engine, engine
from errors import AppError, InternalError
from logging_config import configure_logging
from routers import auth, contacts, requests, users, volunteers
from services.notifications import ExpoPushSender, run_poller
from settings import get_settings

settings = get_settings()

configure_logging(source="api", level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Neighbourhood Help")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    missing = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    detail = f"Missing or invalid fields: {', '.join(missing)}" if missing else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": detail})


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.on_event("startup")
async def on_startup() -> None:
    create_db_and_tables()

    if settings.notifications_enabled:
        sender = ExpoPushSender(settings.expo_push_url, timeout=settings.push_timeout_seconds)
        app.state.push_sender = sender
        app.state.poller = asyncio.create_task(
            run_poller(lambda: Session(engine), sender, settings.poll_interval_seconds)
        )
    else:
        logger.info("Push notifications disabled")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    poller = getattr(app.state, "poller", None)
    if poller is not None:
        poller.cancel()
        try:
            await poller
        except asyncio.CancelledError:
            pass
        app.state.push_sender.close()
    dispose_engine()


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(requests.router, prefix="/help-requests")
app.include_router(volunteers.router, prefix="/volunteers")
app.include_router(contacts.router, prefix="/contacts")
