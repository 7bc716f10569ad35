"""
File: birdie/webhooks.py

Project: birdie - Messenger test bot

Purpose:
Inbound Messenger webhook handler (POST).

Notes:
- Only messaging items for FACEBOOK_PAGE_ID are processed.
- Messages (not echoes) and postbacks are answered by the reply script.
- A failure while answering one item is logged and does not stop the others.
- The webhook always answers 200 so Facebook does not redeliver.
"""

import logging
import time

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from birdie.replies import BirdieReplies
from birdie.settings import BirdieSettings, get_birdie_settings
from fbmessenger.inbound import callbacks
from fbmessenger.outbound.factory import get_graph_client

router = APIRouter(tags=["webhooks"])
logger = logging.getLogger("birdie")
logging.basicConfig(level=logging.INFO)

CALLBACK_PATH = "/birdie-webhook-callback"


def _build_replies(settings: BirdieSettings) -> BirdieReplies:
    return BirdieReplies(
        client=get_graph_client(),
        fixtures_dir=settings.fixtures_dir,
        media_base_url=settings.media_base_url,
    )


def process_callback(payload: dict, settings: BirdieSettings, replies: BirdieReplies) -> int:
    """
    Answer every message and postback in the callback.
    Returns the number of items answered without error.
    """
    messaging = callbacks.get_messaging_for_page(payload, settings.page_id)
    answered = 0

    for item in messaging:
        if callbacks.is_message(item):
            text = item["message"].get("text", "")
        elif callbacks.is_postback(item):
            text = item["postback"].get("payload", "")
        else:
            kind = callbacks.classify(item)
            logger.info("Ignoring %s callback", kind.value if kind else "unknown")
            continue

        try:
            sender_id = item["sender"]["id"]
            replies.reply(sender_id, text)
            answered += 1
        except Exception:
            logger.exception("Processing error for messaging item %s", item.get("timestamp"))

    return answered


@router.post(CALLBACK_PATH)
async def birdie_webhook_callback(request: Request):
    # ---- Parse payload ----
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    if not callbacks.is_messaging_callback(payload):
        logger.error("Invalid request: %r", payload)
    else:
        settings = get_birdie_settings()
        answered = await run_in_threadpool(
            process_callback, payload, settings, _build_replies(settings)
        )
        logger.info("Answered %d messaging items", answered)

    return {"timestamp": int(time.time() * 1000)}
