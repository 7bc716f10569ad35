"""
fbmessenger/outbound/payloads.py
fbmessenger - Facebook Messenger Platform client

Strongly-typed request objects for the Send API and the Messenger Profile API.

One frozen dataclass per payload shape. Each one checks its own required
fields on construction (raising a CONFIGURATION MessengerError) and renders
the exact JSON object the Graph API expects via `to_payload()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union
from urllib.parse import urlparse

from fbmessenger.outbound.errors import MessengerError
from fbmessenger.outbound.uploads import Upload

NOTIFICATION_DEFAULT = "REGULAR"
NOTIFICATION_TYPES = ("REGULAR", "SILENT_PUSH", "NO_PUSH")

MEDIA_TYPES = ("image", "audio", "video", "file")
SENDER_ACTIONS = ("mark_seen", "typing_on", "typing_off")
AUDIENCE_TYPES = ("all", "none", "custom")

MAX_QUICK_REPLIES = 11


def is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_send_payload(payload: Any) -> None:
    """
    Minimal shape check for anything posted to `me/messages`.
    Applies to raw dicts as well as rendered dataclasses.
    """
    if not isinstance(payload, dict):
        raise MessengerError.configuration(
            f"Invalid payload for Messenger Send API: {type(payload).__name__}"
        )
    if "recipient" not in payload:
        raise MessengerError.configuration("Invalid payload for Messenger Send API: recipient missing!")
    if "message" not in payload and "sender_action" not in payload:
        raise MessengerError.configuration(
            "Invalid payload for Messenger Send API: message or sender_action missing!"
        )
    if "message" in payload and "sender_action" in payload:
        raise MessengerError.configuration(
            "Invalid payload for Messenger Send API: message and sender_action are exclusive!"
        )


# -------------------------------------------------
# Shared checks
# -------------------------------------------------
def _require_recipient(recipient_id: Optional[str]) -> None:
    if not recipient_id:
        raise MessengerError.configuration("Invalid payload for Messenger Send API: recipient missing!")


def _check_delivery(notification_type: Optional[str], quick_replies: Optional[list]) -> None:
    if notification_type is not None and notification_type not in NOTIFICATION_TYPES:
        raise MessengerError.configuration(f"Unknown notification type: {notification_type}")
    if quick_replies is not None:
        if not isinstance(quick_replies, list):
            raise MessengerError.configuration("Quick replies must be a list")
        if len(quick_replies) > MAX_QUICK_REPLIES:
            raise MessengerError.configuration(
                f"At most {MAX_QUICK_REPLIES} quick replies are allowed, got {len(quick_replies)}"
            )


def _check_media_type(media_type: str) -> None:
    if media_type not in MEDIA_TYPES:
        raise MessengerError.configuration(f"Unknown attachment type: {media_type}")


def _envelope(
    recipient_id: str,
    message: Dict[str, Any],
    quick_replies: Optional[list],
    notification_type: Optional[str],
    tag: Optional[str],
) -> Dict[str, Any]:
    if quick_replies:
        message["quick_replies"] = quick_replies

    payload: Dict[str, Any] = {
        "recipient": {"id": recipient_id},
        "message": message,
        "notification_type": notification_type or NOTIFICATION_DEFAULT,
        "messaging_type": "MESSAGE_TAG" if tag else "RESPONSE",
    }
    if tag:
        payload["tag"] = tag
    return payload


# -------------------------------------------------
# Send API
# -------------------------------------------------
@dataclass(frozen=True)
class TextMessage:
    recipient_id: str
    text: str
    quick_replies: Optional[list] = None
    notification_type: Optional[str] = None
    tag: Optional[str] = None

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        if not isinstance(self.text, str) or not self.text:
            raise MessengerError.configuration("Invalid payload for Messenger Send API: message text missing!")
        _check_delivery(self.notification_type, self.quick_replies)

    def to_payload(self) -> Dict[str, Any]:
        return _envelope(
            self.recipient_id,
            {"text": self.text},
            self.quick_replies,
            self.notification_type,
            self.tag,
        )


@dataclass(frozen=True)
class MediaMessage:
    """
    Image, audio, video or file attachment.

    `source` is either a URL the Graph API fetches itself, or an Upload that
    is sent as the `filedata` part of a multipart request.
    """
    recipient_id: str
    media_type: str
    source: Union[str, Upload]
    reusable: Optional[bool] = None
    quick_replies: Optional[list] = None
    notification_type: Optional[str] = None
    tag: Optional[str] = None

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        _check_media_type(self.media_type)
        if not isinstance(self.source, Upload) and not is_url(self.source):
            raise MessengerError.configuration("FBMessenger attachment must be an URL or Upload!")
        _check_delivery(self.notification_type, self.quick_replies)

    @property
    def is_multipart(self) -> bool:
        return isinstance(self.source, Upload)

    def to_payload(self) -> Dict[str, Any]:
        attachment_payload: Dict[str, Any] = {}
        if self.reusable is not None:
            attachment_payload["is_reusable"] = self.reusable is True
        if not self.is_multipart:
            attachment_payload["url"] = self.source

        payload = _envelope(
            self.recipient_id,
            {"attachment": {"type": self.media_type, "payload": attachment_payload}},
            self.quick_replies,
            self.notification_type,
            self.tag,
        )
        if self.is_multipart:
            payload["filedata"] = self.source
        return payload


@dataclass(frozen=True)
class ReusableMediaMessage:
    recipient_id: str
    media_type: str
    attachment_id: str
    notification_type: Optional[str] = None
    tag: Optional[str] = None

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        _check_media_type(self.media_type)
        if not self.attachment_id:
            raise MessengerError.configuration("Reusable attachment id missing!")
        _check_delivery(self.notification_type, None)

    def to_payload(self) -> Dict[str, Any]:
        return _envelope(
            self.recipient_id,
            {
                "attachment": {
                    "type": self.media_type,
                    "payload": {"attachment_id": self.attachment_id},
                }
            },
            None,
            self.notification_type,
            self.tag,
        )


@dataclass(frozen=True)
class TemplateMessage:
    """
    Structured template. `payload` is the template payload itself, e.g.
    list, receipt, airline or open graph templates.
    Use `generic()` and `button()` for the two common shapes.
    """
    recipient_id: str
    payload: Dict[str, Any]
    quick_replies: Optional[list] = None
    notification_type: Optional[str] = None
    tag: Optional[str] = None

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        if not isinstance(self.payload, dict) or not self.payload.get("template_type"):
            raise MessengerError.configuration("Template payload must be an object with a template_type")
        _check_delivery(self.notification_type, self.quick_replies)

    @classmethod
    def generic(cls, recipient_id: str, elements: list, **kwargs: Any) -> "TemplateMessage":
        if not elements:
            raise MessengerError.configuration("Generic template needs at least one element")
        return cls(recipient_id, {"template_type": "generic", "elements": elements}, **kwargs)

    @classmethod
    def button(
        cls,
        recipient_id: str,
        text: str,
        buttons: list,
        sharable: Optional[bool] = None,
        **kwargs: Any,
    ) -> "TemplateMessage":
        if not text or not buttons:
            raise MessengerError.configuration("Button template needs text and buttons")
        payload: Dict[str, Any] = {"template_type": "button", "text": text, "buttons": buttons}
        if sharable is not None:
            payload["sharable"] = sharable is True
        return cls(recipient_id, payload, **kwargs)

    def to_payload(self) -> Dict[str, Any]:
        return _envelope(
            self.recipient_id,
            {"attachment": {"type": "template", "payload": self.payload}},
            self.quick_replies,
            self.notification_type,
            self.tag,
        )


@dataclass(frozen=True)
class AttachmentMessage:
    recipient_id: str
    attachment: Dict[str, Any]
    quick_replies: Optional[list] = None
    notification_type: Optional[str] = None
    tag: Optional[str] = None

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        if not isinstance(self.attachment, dict) or "type" not in self.attachment:
            raise MessengerError.configuration("Attachment must be an object with a type")
        _check_delivery(self.notification_type, self.quick_replies)

    def to_payload(self) -> Dict[str, Any]:
        return _envelope(
            self.recipient_id,
            {"attachment": self.attachment},
            self.quick_replies,
            self.notification_type,
            self.tag,
        )


@dataclass(frozen=True)
class SenderAction:
    recipient_id: str
    action: str

    def __post_init__(self) -> None:
        _require_recipient(self.recipient_id)
        if self.action not in SENDER_ACTIONS:
            raise MessengerError.configuration(f"Unknown sender action: {self.action}")

    def to_payload(self) -> Dict[str, Any]:
        return {"recipient": {"id": self.recipient_id}, "sender_action": self.action}


OutboundMessage = Union[
    TextMessage,
    MediaMessage,
    ReusableMediaMessage,
    TemplateMessage,
    AttachmentMessage,
    SenderAction,
]


# -------------------------------------------------
# Messenger Profile API
# -------------------------------------------------
@dataclass(frozen=True)
class GreetingText:
    """Either a single default greeting or a list of {locale, text} items."""
    greetings: Union[str, List[Dict[str, str]]]

    field_name: ClassVar[str] = "greeting"

    def __post_init__(self) -> None:
        if not self.greetings:
            raise MessengerError.configuration("Greeting text missing!")

    def to_payload(self) -> Dict[str, Any]:
        if isinstance(self.greetings, str):
            return {self.field_name: [{"locale": "default", "text": self.greetings}]}
        return {self.field_name: list(self.greetings)}


@dataclass(frozen=True)
class GetStartedButton:
    payload: str

    field_name: ClassVar[str] = "get_started"

    def __post_init__(self) -> None:
        if not self.payload:
            raise MessengerError.configuration("Get started payload missing!")

    def to_payload(self) -> Dict[str, Any]:
        return {self.field_name: {"payload": self.payload}}


@dataclass(frozen=True)
class PersistentMenu:
    menus: List[Dict[str, Any]]

    field_name: ClassVar[str] = "persistent_menu"

    def __post_init__(self) -> None:
        if not isinstance(self.menus, list) or not self.menus:
            raise MessengerError.configuration("Persistent menu must be a non-empty list")

    def to_payload(self) -> Dict[str, Any]:
        return {self.field_name: self.menus}


@dataclass(frozen=True)
class WhitelistedDomains:
    domains: List[str]

    field_name: ClassVar[str] = "whitelisted_domains"

    def __post_init__(self) -> None:
        if not self.domains:
            raise MessengerError.configuration("Domain whitelist must not be empty")
        invalid = [d for d in self.domains if not is_url(d)]
        if invalid:
            raise MessengerError.configuration(f"Invalid whitelist domains: {', '.join(map(str, invalid))}")

    def to_payload(self) -> Dict[str, Any]:
        return {self.field_name: list(self.domains)}


@dataclass(frozen=True)
class AccountLinkingUrl:
    url: str

    field_name: ClassVar[str] = "account_linking_url"

    def __post_init__(self) -> None:
        if not is_url(self.url):
            raise MessengerError.configuration(f"Invalid account linking URL: {self.url}")

    def to_payload(self) -> Dict[str, Any]:
        return {self.field_name: self.url}


@dataclass(frozen=True)
class TargetAudience:
    """
    audience_type `custom` needs `countries` with a `whitelist` or a
    `blacklist` of ISO 3166 alpha-2 codes.
    """
    audience_type: str
    countries: Optional[Dict[str, List[str]]] = None

    field_name: ClassVar[str] = "target_audience"

    def __post_init__(self) -> None:
        if self.audience_type not in AUDIENCE_TYPES:
            raise MessengerError.configuration(f"Unknown audience type: {self.audience_type}")
        if self.audience_type == "custom":
            if not self.countries or not (
                self.countries.get("whitelist") or self.countries.get("blacklist")
            ):
                raise MessengerError.configuration(
                    "Custom target audience needs a whitelist or blacklist of countries"
                )

    def to_payload(self) -> Dict[str, Any]:
        audience: Dict[str, Any] = {"audience_type": self.audience_type}
        if self.audience_type == "custom":
            audience["countries"] = self.countries
        return {self.field_name: audience}


@dataclass(frozen=True)
class HomeUrl:
    url: str
    webview_height_ratio: str = "tall"
    webview_share_button: Optional[str] = None
    in_test: bool = False

    field_name: ClassVar[str] = "home_url"

    def __post_init__(self) -> None:
        if not is_url(self.url):
            raise MessengerError.configuration(f"Invalid home URL: {self.url}")

    def to_payload(self) -> Dict[str, Any]:
        home: Dict[str, Any] = {
            "url": self.url,
            "webview_height_ratio": self.webview_height_ratio,
            "in_test": self.in_test,
        }
        if self.webview_share_button is not None:
            home["webview_share_button"] = self.webview_share_button
        return {self.field_name: home}


ProfileSetting = Union[
    GreetingText,
    GetStartedButton,
    PersistentMenu,
    WhitelistedDomains,
    AccountLinkingUrl,
    TargetAudience,
    HomeUrl,
]
