import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from classbook.config import get_settings
from classbook.realtime import LocalEventFeed
from classbook.server.db import SessionLocal, init_database
from classbook.server.reminders import reminder_loop
from classbook.server.routers import auth, notifications, reservations, rooms, waitlist

settings = get_settings()
logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database and running the reminder task"
    init_database()
    reminders = None
    if settings.reminder_interval_seconds > 0:
        reminders = asyncio.create_task(
            reminder_loop(SessionLocal, settings.reminder_interval_seconds)
        )
    yield
    if reminders is not None:
        reminders.cancel()
        with suppress(asyncio.CancelledError):
            await reminders


app = FastAPI(
    lifespan=lifespan,
    title="Classbook reference backend",
    description="Stand-in for the classroom reservation backend, for development and tests.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)
app.state.event_feed = LocalEventFeed()


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message},
    )


app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(reservations.router)
app.include_router(waitlist.router)
app.include_router(notifications.router)


def run():
    import uvicorn

    uvicorn.run("classbook.server.main:app", host="0.0.0.0", port=4000)
