"""
File: fbmessenger/inbound/callbacks.py

Project: fbmessenger - Facebook Messenger Platform client

Purpose:
Classify webhook callbacks sent by the Messenger Platform.

Design rules:
- Pure functions over the decoded JSON body
- Never mutate the callback, never raise for odd shapes
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class CallbackKind(str, Enum):
    ECHO = "echo"
    QUICK_REPLY = "quick_reply"
    MESSAGE = "message"
    POSTBACK = "postback"
    AUTHENTICATION = "authentication"
    ACCOUNT_LINKING = "account_linking"
    DELIVERY = "delivery"
    READ = "read"
    REFERRAL = "referral"


def _field(entry: Any, name: str) -> Optional[dict]:
    if isinstance(entry, dict) and isinstance(entry.get(name), dict):
        return entry[name]
    return None


def _has(entry: Any, name: str, key: str) -> bool:
    obj = _field(entry, name)
    return obj is not None and key in obj


# -------------------------------------------------
# Envelope
# -------------------------------------------------
def is_messaging_callback(callback_data: Any) -> bool:
    return (
        isinstance(callback_data, dict)
        and "object" in callback_data
        and isinstance(callback_data.get("entry"), list)
    )


def get_entries_for_page(callback_data: Any, page_id: str) -> list:
    """Entries of a page callback destined to the given page id."""
    if isinstance(callback_data, dict) and callback_data.get("object") == "page":
        entries = callback_data.get("entry")
        if isinstance(entries, list):
            return [e for e in entries if isinstance(e, dict) and e.get("id") == page_id]
    return []


def get_messaging_for_page(callback_data: Any, page_id: str) -> list:
    """All messaging items for the page, flattened in entry order."""
    messaging = []
    for entry in get_entries_for_page(callback_data, page_id):
        if isinstance(entry.get("messaging"), list):
            messaging.extend(entry["messaging"])
    return messaging


# -------------------------------------------------
# Messaging items
# -------------------------------------------------
def is_echo(entry: Any) -> bool:
    message = _field(entry, "message")
    return message is not None and message.get("is_echo") is True


def is_message(entry: Any, allow_echo: bool = False) -> bool:
    if not allow_echo and is_echo(entry):
        return False
    return _has(entry, "message", "mid")


def is_quick_reply(entry: Any, allow_echo: bool = False) -> bool:
    return is_message(entry, allow_echo) and "quick_reply" in entry["message"]


def is_postback(entry: Any) -> bool:
    return _has(entry, "postback", "payload")


def is_authentication(entry: Any) -> bool:
    return _has(entry, "optin", "ref")


def is_account_linking(entry: Any) -> bool:
    return _has(entry, "account_linking", "status")


def is_delivery(entry: Any) -> bool:
    return _has(entry, "delivery", "mids")


def is_read(entry: Any) -> bool:
    return _has(entry, "read", "watermark")


def is_referral(entry: Any) -> bool:
    referral = _field(entry, "referral")
    return referral is not None and referral.get("ref") is not None


def is_valid_facebook_id(value: Any) -> bool:
    """Facebook ids are numeric strings."""
    return isinstance(value, str) and value.isascii() and value.isdigit()


_CLASSIFIERS = (
    (CallbackKind.ECHO, is_echo),
    (CallbackKind.QUICK_REPLY, is_quick_reply),
    (CallbackKind.MESSAGE, is_message),
    (CallbackKind.POSTBACK, is_postback),
    (CallbackKind.AUTHENTICATION, is_authentication),
    (CallbackKind.ACCOUNT_LINKING, is_account_linking),
    (CallbackKind.DELIVERY, is_delivery),
    (CallbackKind.READ, is_read),
    (CallbackKind.REFERRAL, is_referral),
)


def classify(entry: Any) -> CallbackKind | None:
    for kind, predicate in _CLASSIFIERS:
        if predicate(entry):
            return kind
    return None
