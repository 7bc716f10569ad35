"""Tests for the Send API and Messenger Profile request objects."""

from __future__ import annotations

import io

import pytest

from fbmessenger.outbound.errors import ErrorKind, MessengerError
from fbmessenger.outbound.payloads import (
    AttachmentMessage,
    GreetingText,
    HomeUrl,
    MediaMessage,
    ReusableMediaMessage,
    SenderAction,
    TargetAudience,
    TemplateMessage,
    TextMessage,
    WhitelistedDomains,
    validate_send_payload,
)
from fbmessenger.outbound.uploads import Upload


def test_text_message_defaults_to_regular_notification() -> None:
    payload = TextMessage("U1", "hi").to_payload()

    assert payload["recipient"] == {"id": "U1"}
    assert payload["message"] == {"text": "hi"}
    assert payload["notification_type"] == "REGULAR"
    assert payload["messaging_type"] == "RESPONSE"
    assert "tag" not in payload


def test_text_message_with_tag_and_silent_push() -> None:
    payload = TextMessage("U1", "hi", notification_type="SILENT_PUSH", tag="ACCOUNT_UPDATE").to_payload()

    assert payload["notification_type"] == "SILENT_PUSH"
    assert payload["messaging_type"] == "MESSAGE_TAG"
    assert payload["tag"] == "ACCOUNT_UPDATE"


@pytest.mark.parametrize("recipient", ["", None])
def test_missing_recipient_is_a_configuration_error(recipient) -> None:
    with pytest.raises(MessengerError) as exc_info:
        TextMessage(recipient, "hi")

    assert exc_info.value.kind is ErrorKind.CONFIGURATION


def test_unknown_notification_type_is_rejected() -> None:
    with pytest.raises(MessengerError):
        TextMessage("U1", "hi", notification_type="LOUD")


def test_too_many_quick_replies_are_rejected() -> None:
    replies = [{"content_type": "text", "title": str(i), "payload": str(i)} for i in range(12)]
    with pytest.raises(MessengerError):
        TextMessage("U1", "pick one", quick_replies=replies)


def test_media_message_by_url() -> None:
    payload = MediaMessage("U1", "image", "https://example.org/photo.jpg", reusable=True).to_payload()

    assert payload["message"]["attachment"] == {
        "type": "image",
        "payload": {"url": "https://example.org/photo.jpg", "is_reusable": True},
    }
    assert "filedata" not in payload


def test_media_message_by_upload_carries_filedata() -> None:
    upload = Upload("photo.jpg", io.BytesIO(b"jpeg"))
    message = MediaMessage("U1", "image", upload)
    payload = message.to_payload()

    assert message.is_multipart
    assert payload["filedata"] is upload
    assert payload["message"]["attachment"] == {"type": "image", "payload": {}}


@pytest.mark.parametrize("source", ["not a url", 42, b"bytes", None])
def test_media_source_must_be_url_or_upload(source) -> None:
    with pytest.raises(MessengerError) as exc_info:
        MediaMessage("U1", "image", source)

    assert exc_info.value.kind is ErrorKind.CONFIGURATION


def test_unknown_media_type_is_rejected() -> None:
    with pytest.raises(MessengerError):
        MediaMessage("U1", "hologram", "https://example.org/x")


def test_reusable_media_message() -> None:
    payload = ReusableMediaMessage("U1", "image", "1234567890").to_payload()

    assert payload["message"]["attachment"]["payload"] == {"attachment_id": "1234567890"}


def test_generic_template() -> None:
    elements = [{"title": "Robin", "subtitle": "A bird"}]
    payload = TemplateMessage.generic("U1", elements).to_payload()

    assert payload["message"]["attachment"] == {
        "type": "template",
        "payload": {"template_type": "generic", "elements": elements},
    }


def test_button_template_sharable_flag() -> None:
    buttons = [{"type": "postback", "title": "Yes", "payload": "yes"}]

    shared = TemplateMessage.button("U1", "Share?", buttons, sharable=True).to_payload()
    default = TemplateMessage.button("U1", "Share?", buttons).to_payload()

    assert shared["message"]["attachment"]["payload"]["sharable"] is True
    assert "sharable" not in default["message"]["attachment"]["payload"]


def test_template_payload_needs_template_type() -> None:
    with pytest.raises(MessengerError):
        TemplateMessage("U1", {"elements": []})


def test_attachment_message_with_quick_replies() -> None:
    attachment = {"type": "image", "payload": {"url": "https://example.org/a.gif"}}
    replies = [{"content_type": "text", "title": "Cool!", "payload": "cool"}]

    payload = AttachmentMessage("U1", attachment, quick_replies=replies).to_payload()

    assert payload["message"] == {"attachment": attachment, "quick_replies": replies}


def test_sender_action_has_no_message() -> None:
    payload = SenderAction("U1", "typing_on").to_payload()

    assert payload == {"recipient": {"id": "U1"}, "sender_action": "typing_on"}


def test_unknown_sender_action_is_rejected() -> None:
    with pytest.raises(MessengerError):
        SenderAction("U1", "dancing")


def test_validate_send_payload_requires_message_or_action() -> None:
    with pytest.raises(MessengerError, match="recipient missing"):
        validate_send_payload({"message": {"text": "hi"}})
    with pytest.raises(MessengerError, match="message or sender_action missing"):
        validate_send_payload({"recipient": {"id": "U1"}})

    validate_send_payload({"recipient": {"id": "U1"}, "sender_action": "mark_seen"})


def test_greeting_text_from_string_uses_default_locale() -> None:
    assert GreetingText("Hello World!").to_payload() == {
        "greeting": [{"locale": "default", "text": "Hello World!"}]
    }


def test_target_audience_custom_needs_countries() -> None:
    with pytest.raises(MessengerError):
        TargetAudience("custom")
    with pytest.raises(MessengerError):
        TargetAudience("everyone")

    payload = TargetAudience("custom", {"whitelist": ["DE", "AT", "CH"]}).to_payload()
    assert payload == {
        "target_audience": {
            "audience_type": "custom",
            "countries": {"whitelist": ["DE", "AT", "CH"]},
        }
    }
    assert TargetAudience("all").to_payload() == {"target_audience": {"audience_type": "all"}}


def test_whitelisted_domains_must_be_urls() -> None:
    with pytest.raises(MessengerError):
        WhitelistedDomains([])
    with pytest.raises(MessengerError):
        WhitelistedDomains(["example.org"])


def test_home_url() -> None:
    payload = HomeUrl("https://example.org/home", webview_share_button="hide").to_payload()

    assert payload == {
        "home_url": {
            "url": "https://example.org/home",
            "webview_height_ratio": "tall",
            "in_test": False,
            "webview_share_button": "hide",
        }
    }


def test_validate_send_payload_rejects_message_with_sender_action() -> None:
    with pytest.raises(MessengerError, match="exclusive") as exc_info:
        validate_send_payload(
            {"recipient": {"id": "U1"}, "message": {"text": "hi"}, "sender_action": "typing_on"}
        )

    assert exc_info.value.kind is ErrorKind.CONFIGURATION
