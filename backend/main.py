"""
HTTP entry point for the Diván Japonés backend.

Exposes the manual notification flush and the newsletter subscribe flow, and
starts the notification scheduler once the content store client exists.

Usage:
    uv run uvicorn main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models.subscriber import SubscribeRequest
from notifications.dispatcher import notify_subscription_in_background
from notifications.flush_pending import flush_pending_notifications
from notifications.scheduler import NotificationScheduler
from notifications.subscribers import list_subscribers, subscribe
from shared.db import get_optional_supabase_client
from shared.settings import NotificationSettings

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    supabase = get_optional_supabase_client()
    if supabase is None:
        logger.warning("SUPABASE_URL not configured. Running without database.")

    scheduler = NotificationScheduler.from_settings(
        NotificationSettings.from_env(),
        flush=partial(flush_pending_notifications, supabase=supabase),
    )
    app.state.supabase = supabase
    app.state.scheduler = scheduler

    if supabase is not None:
        scheduler.start()

    yield

    scheduler.stop(timeout=5)


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_scheduler(request: Request) -> NotificationScheduler:
    return request.app.state.scheduler


def get_store(request: Request) -> Any:
    return getattr(request.app.state, "supabase", None)


@app.get("/")
def read_root():
    return {"message": "Diván Japonés backend running"}


# ---------------------- Notifications ----------------------

@app.post("/api/notifications/flush-pending")
def flush_pending(scheduler: NotificationScheduler = Depends(get_scheduler)):
    """Manually send pending scheduled notifications."""
    try:
        summary = scheduler.run_now()
    except Exception as e:
        logger.exception("Error flushing pending notifications")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return summary.model_dump(mode="json", by_alias=True)


# ---------------------- Newsletter ----------------------

@app.post("/api/newsletter/subscribe", status_code=201)
def subscribe_to_newsletter(
    payload: SubscribeRequest,
    background_tasks: BackgroundTasks,
    supabase: Any = Depends(get_store),
):
    if supabase is None:
        return JSONResponse(
            status_code=503, content={"error": "Database connection is not initialized"}
        )

    try:
        subscriber, created = subscribe(payload.email, supabase)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("Error subscribing to newsletter")
        return JSONResponse(status_code=500, content={"error": str(e)})

    # Welcome goes out for new and repeat sign-ups alike, after the response
    background_tasks.add_task(notify_subscription_in_background, subscriber.email)
    logger.info("Subscribed %s (new=%s)", subscriber.email, created)

    return {"ok": True, "subscriber": subscriber.model_dump(mode="json", by_alias=True)}


@app.get("/api/newsletter/subscribers")
def get_subscribers(supabase: Any = Depends(get_store)):
    try:
        subscribers = list_subscribers(supabase) if supabase is not None else []
    except Exception as e:
        logger.exception("Error listing subscribers")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return [s.model_dump(mode="json", by_alias=True) for s in subscribers]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "4000")))
