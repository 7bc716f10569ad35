"""
File: birdie/main.py

Project: birdie - Messenger test bot

Purpose:
Application entry point.
Responsible only for:
- FastAPI app creation
- Router registration
- Messenger webhook verification (GET)
- Hello page

Design principles:
- No reply logic in this file
- All inbound callback processing is delegated to birdie.webhooks

Run with: uvicorn birdie.main:app --port 8080
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from birdie.health import router as health_router
from birdie.settings import get_birdie_settings
from birdie.webhooks import CALLBACK_PATH, router as webhooks_router

logger = logging.getLogger("birdie")

app = FastAPI(title="birdie")

# -------------------------------------------------------------------
# Webhook routes (POST /birdie-webhook-callback)
# -------------------------------------------------------------------
app.include_router(webhooks_router)
app.include_router(health_router)


@app.get("/", response_class=HTMLResponse)
def index():
    return "<h1>Hello World!</h1>"


# -------------------------------------------------------------------
# Messenger webhook verification (GET)
# -------------------------------------------------------------------
@app.get(CALLBACK_PATH, response_class=PlainTextResponse)
def verify_webhook(request: Request):
    params = request.query_params

    token = params.get("hub.verify_token")
    challenge = params.get("hub.challenge") or ""

    if token is not None and token == get_birdie_settings().verify_token:
        logger.info("Successful challenge!")
        return challenge

    logger.error("Failed validation. Make sure the validation tokens match.")
    return PlainTextResponse(
        "Failed validation. Make sure the validation tokens match.",
        status_code=403,
    )
