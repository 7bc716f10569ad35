"""
File: fbmessenger/outbound/graph.py

Project: fbmessenger - Facebook Messenger Platform client

Purpose:
Graph API client for a Messenger bot (one Facebook page).
Supports:
- Send API (text, attachments, templates, quick replies, sender actions)
- Attachment Upload API
- Messenger Profile API
- User Profile API, page insights, Messenger codes
- Optional batching of independent requests into one HTTP call
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import urlencode

import requests

from fbmessenger.outbound.errors import MessengerError
from fbmessenger.outbound.payloads import (
    MEDIA_TYPES,
    AccountLinkingUrl,
    AttachmentMessage,
    GetStartedButton,
    GreetingText,
    HomeUrl,
    MediaMessage,
    OutboundMessage,
    PersistentMenu,
    ProfileSetting,
    ReusableMediaMessage,
    SenderAction,
    TargetAudience,
    TemplateMessage,
    TextMessage,
    WhitelistedDomains,
    is_url,
    validate_send_payload,
)
from fbmessenger.outbound.settings import GraphApiSettings
from fbmessenger.outbound.uploads import Upload

logger = logging.getLogger(__name__)

SEND_API_ENDPOINT = "me/messages"
ATTACHMENT_UPLOAD_ENDPOINT = "me/message_attachments"
MESSENGER_PROFILE_ENDPOINT = "me/messenger_profile"

DEFAULT_USER_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "profile_pic",
    "locale",
    "timezone",
    "gender",
)

_DEFAULT_HEADERS = {"Cache-Control": "no-cache, no-store"}


def _form_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple, bool)) or value is None:
        return json.dumps(value)
    return str(value)


def _has_upload(payload: Optional[Dict[str, Any]]) -> bool:
    return payload is not None and any(isinstance(v, Upload) for v in payload.values())


class GraphApiClient:
    def __init__(
        self,
        settings: GraphApiSettings,
        session: Optional[requests.Session] = None,
        batch: bool = False,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._batch = batch
        self._queue: List[Dict[str, Any]] = []

    @property
    def batch(self) -> bool:
        return self._batch

    @property
    def pending(self) -> List[Dict[str, Any]]:
        return list(self._queue)

    # ---------------------------------------------------------
    # TRANSPORT
    # ---------------------------------------------------------
    def request(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
        method: str = "POST",
    ) -> Any:
        """
        Issue one Graph API call and return the decoded JSON body.
        In batch mode the call is queued instead and None is returned,
        unless the payload carries an Upload.
        """
        endpoint = endpoint.lstrip("/")
        if endpoint == SEND_API_ENDPOINT:
            validate_send_payload(payload)
        elif payload is not None and not isinstance(payload, dict):
            raise MessengerError.configuration(
                f"Invalid payload for Graph API: {type(payload).__name__}"
            )

        if _has_upload(payload):
            if self._batch:
                logger.warning(
                    "Multipart upload to %s cannot be batched; sending it immediately",
                    endpoint,
                )
            return self._request_multipart(endpoint, payload, query)

        if self._batch:
            self._enqueue(endpoint, payload, query, method)
            return None

        return self._exchange(
            method,
            self._settings.endpoint_url(endpoint),
            params=self._params(query),
            json=payload,
        )

    def _request_multipart(
        self,
        endpoint: str,
        payload: Dict[str, Any],
        query: Optional[Dict[str, Any]],
    ) -> Any:
        try:
            data: Dict[str, str] = {}
            files: Dict[str, Any] = {}
            for name, value in payload.items():
                if isinstance(value, Upload):
                    files[name] = value.as_file_part()
                else:
                    data[name] = _form_value(value)

            return self._exchange(
                "POST",
                self._settings.endpoint_url(endpoint),
                params=self._params(query),
                data=data,
                files=files,
            )
        finally:
            for value in payload.values():
                if isinstance(value, Upload):
                    value.close()

    def _params(self, query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"access_token": self._settings.access_token}
        if query:
            params.update(query)
        return params

    def _exchange(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = self._session.request(
                method,
                url,
                headers=_DEFAULT_HEADERS,
                timeout=self._settings.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise MessengerError.transport(f"Graph API request failed: {e}") from e

        return self._process_response(resp)

    def _process_response(self, resp: requests.Response) -> Any:
        try:
            data = resp.json()
        except ValueError as e:
            raise MessengerError.transport(
                f"Could not parse JSON response by Messenger Send API: {e}",
                status_code=resp.status_code,
            ) from e

        if resp.status_code != 200 or data is None or (isinstance(data, dict) and "error" in data):
            error = MessengerError.remote(data, status_code=resp.status_code)
            logger.warning("Graph API call failed (HTTP %s): %s", resp.status_code, error.message)
            raise error

        return data

    # ---------------------------------------------------------
    # BATCH
    # ---------------------------------------------------------
    def _enqueue(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]],
        query: Optional[Dict[str, Any]],
        method: str,
    ) -> None:
        relative_url = f"{self._settings.api_version}/{endpoint.lstrip('/')}"
        if query:
            relative_url += "?" + urlencode(query)

        item: Dict[str, Any] = {"method": method, "relative_url": relative_url}
        if payload is not None:
            item["body"] = urlencode({k: _form_value(v) for k, v in payload.items()})

        self._queue.append(item)
        logger.debug("Queued %s %s (%d pending)", method, relative_url, len(self._queue))

    def flush(self) -> List[Any]:
        """
        Send all queued requests as one batch call.
        The queue is emptied before the call is made, whatever its outcome.
        Returns one {code, headers, body} item per queued request.
        """
        if not self._batch:
            raise MessengerError.configuration("flush() requires a client in batch mode")

        queued, self._queue = self._queue, []
        if not queued:
            return []

        logger.info("Flushing %d batched Graph API requests", len(queued))
        results = self._exchange(
            "POST",
            self._settings.batch_url,
            data={
                "access_token": self._settings.access_token,
                "batch": json.dumps(queued),
            },
        )

        if isinstance(results, list):
            for index, item in enumerate(results):
                if not isinstance(item, dict) or item.get("code") != 200:
                    logger.warning(
                        "Batched request %d (%s) failed: %s",
                        index,
                        queued[index]["relative_url"] if index < len(queued) else "?",
                        item,
                    )
        return results

    # ---------------------------------------------------------
    # SEND API
    # ---------------------------------------------------------
    def send(self, message: OutboundMessage) -> Any:
        return self.request(SEND_API_ENDPOINT, message.to_payload())

    def send_sender_action(self, recipient_id: str, action: str) -> Any:
        """`mark_seen`, `typing_on` or `typing_off`."""
        return self.send(SenderAction(recipient_id, action))

    def send_text_message(
        self,
        recipient_id: str,
        text: str,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        return self.send(
            TextMessage(recipient_id, text, notification_type=notification_type, tag=tag)
        )

    def send_attachment(
        self,
        media_type: str,
        recipient_id: str,
        attachment: Union[str, Upload],
        reusable: Optional[bool] = None,
        quick_replies: Optional[list] = None,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        return self.send(
            MediaMessage(
                recipient_id,
                media_type,
                attachment,
                reusable=reusable,
                quick_replies=quick_replies,
                notification_type=notification_type,
                tag=tag,
            )
        )

    def send_image_attachment(self, recipient_id, image, reusable=None, notification_type=None, tag=None):
        """Supported formats are jpg, png and gif."""
        return self.send_attachment("image", recipient_id, image, reusable, None, notification_type, tag)

    def send_audio_attachment(self, recipient_id, audio, reusable=None, notification_type=None, tag=None):
        return self.send_attachment("audio", recipient_id, audio, reusable, None, notification_type, tag)

    def send_video_attachment(self, recipient_id, video, reusable=None, notification_type=None, tag=None):
        return self.send_attachment("video", recipient_id, video, reusable, None, notification_type, tag)

    def send_file_attachment(self, recipient_id, file, reusable=None, notification_type=None, tag=None):
        return self.send_attachment("file", recipient_id, file, reusable, None, notification_type, tag)

    def send_reusable_attachment(
        self,
        recipient_id: str,
        media_type: str,
        attachment_id: str,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        return self.send(
            ReusableMediaMessage(
                recipient_id,
                media_type,
                attachment_id,
                notification_type=notification_type,
                tag=tag,
            )
        )

    def send_generic_template(
        self,
        recipient_id: str,
        elements: list,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        """Horizontal scrollable carousel of items."""
        return self.send(
            TemplateMessage.generic(
                recipient_id, elements, notification_type=notification_type, tag=tag
            )
        )

    def send_button_template(
        self,
        recipient_id: str,
        text: str,
        buttons: list,
        sharable: Optional[bool] = None,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        return self.send(
            TemplateMessage.button(
                recipient_id,
                text,
                buttons,
                sharable=sharable,
                notification_type=notification_type,
                tag=tag,
            )
        )

    def send_advanced_template(
        self,
        recipient_id: str,
        payload: Dict[str, Any],
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        """
        Any template not covered by generic and button templates:
        list, receipt, airline itinerary, boarding pass, open graph, ...
        """
        return self.send(
            TemplateMessage(recipient_id, payload, notification_type=notification_type, tag=tag)
        )

    def send_quick_replies(
        self,
        recipient_id: str,
        attachment_or_text: Union[str, Upload, Dict[str, Any]],
        quick_replies: list,
        reusable: Optional[bool] = None,
        notification_type: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> Any:
        """
        Text, an uploaded image, or an arbitrary attachment object,
        presented together with the given quick replies.
        """
        if isinstance(attachment_or_text, str):
            message = TextMessage(
                recipient_id,
                attachment_or_text,
                quick_replies=quick_replies,
                notification_type=notification_type,
                tag=tag,
            )
        elif isinstance(attachment_or_text, Upload):
            message = MediaMessage(
                recipient_id,
                "image",
                attachment_or_text,
                reusable=reusable,
                quick_replies=quick_replies,
                notification_type=notification_type,
                tag=tag,
            )
        else:
            message = AttachmentMessage(
                recipient_id,
                attachment_or_text,
                quick_replies=quick_replies,
                notification_type=notification_type,
                tag=tag,
            )
        return self.send(message)

    # ---------------------------------------------------------
    # ATTACHMENT UPLOAD API
    # ---------------------------------------------------------
    def upload_attachment(self, media_type: str, source: Union[str, Upload]) -> Optional[str]:
        """
        Store an attachment on Facebook's servers for reuse.
        Returns the attachment id (None when queued in batch mode).
        """
        if media_type not in MEDIA_TYPES:
            raise MessengerError.configuration(f"Unknown attachment type: {media_type}")

        attachment: Dict[str, Any] = {"type": media_type, "payload": {"is_reusable": True}}
        payload: Dict[str, Any] = {"message": {"attachment": attachment}}

        if isinstance(source, Upload):
            payload["filedata"] = source
        elif is_url(source):
            attachment["payload"]["url"] = source
        else:
            raise MessengerError.configuration("FBMessenger attachment must be an URL or Upload!")

        resp = self.request(ATTACHMENT_UPLOAD_ENDPOINT, payload)
        return resp.get("attachment_id") if resp else None

    # ---------------------------------------------------------
    # MESSENGER PROFILE API
    # ---------------------------------------------------------
    def set_profile(self, *settings: ProfileSetting) -> Any:
        if not settings:
            raise MessengerError.configuration("No Messenger Profile settings given")
        payload: Dict[str, Any] = {}
        for setting in settings:
            payload.update(setting.to_payload())
        return self.request(MESSENGER_PROFILE_ENDPOINT, payload)

    def set_greeting_text(self, greetings: Union[str, List[Dict[str, str]]]) -> Any:
        return self.set_profile(GreetingText(greetings))

    def set_get_started_button(self, payload: str) -> Any:
        return self.set_profile(GetStartedButton(payload))

    def set_persistent_menu(self, menus: List[Dict[str, Any]]) -> Any:
        return self.set_profile(PersistentMenu(menus))

    def whitelist_domains(self, domains: List[str]) -> Any:
        return self.set_profile(WhitelistedDomains(domains))

    def set_account_linking_url(self, url: str) -> Any:
        return self.set_profile(AccountLinkingUrl(url))

    def set_target_audience(
        self,
        audience_type: str,
        countries: Optional[Dict[str, List[str]]] = None,
    ) -> Any:
        return self.set_profile(TargetAudience(audience_type, countries))

    def set_home_url(
        self,
        url: str,
        webview_height_ratio: str = "tall",
        webview_share_button: Optional[str] = None,
        in_test: bool = False,
    ) -> Any:
        return self.set_profile(HomeUrl(url, webview_height_ratio, webview_share_button, in_test))

    def get_profile_fields(self, fields: Iterable[str]) -> Any:
        return self.request(
            MESSENGER_PROFILE_ENDPOINT, None, {"fields": ",".join(fields)}, "GET"
        )

    def delete_profile_fields(self, fields: Iterable[str]) -> Any:
        fields = list(fields)
        if not fields:
            raise MessengerError.configuration("No Messenger Profile fields to delete")
        return self.request(MESSENGER_PROFILE_ENDPOINT, {"fields": fields}, method="DELETE")

    # ---------------------------------------------------------
    # USER PROFILE / INSIGHTS / CODES
    # ---------------------------------------------------------
    def get_user_profile(self, user_id: str, fields: Optional[Iterable[str]] = None) -> Any:
        query_fields = ",".join(fields if fields is not None else DEFAULT_USER_PROFILE_FIELDS)
        return self.request(user_id, None, {"fields": query_fields}, "GET")

    def get_daily_unique_active_threads(self) -> Any:
        return self.request("me/insights/page_messages_active_threads_unique", method="GET")

    def get_daily_unique_conversations(self) -> Any:
        return self.request("me/insights/page_messages_feedback_by_action_unique", method="GET")

    def get_messenger_code(self, ref: Optional[str] = None, image_size: int = 1000) -> Optional[str]:
        """Returns the URI of the page's Messenger code image."""
        payload: Dict[str, Any] = {"type": "standard", "image_size": image_size}
        if ref:
            payload["data"] = {"ref": ref}
        resp = self.request("me/messenger_codes", payload)
        return resp.get("uri") if resp else None
