"""
File: birdie/replies.py

Project: birdie - Messenger test bot

Purpose:
- Keyword-driven reply script
- Exercises most of the Graph API client operations

Keywords (case-insensitive, first match wins):
photo/image, video, audio, file/document, generic, button, advanced,
rickrolling, quick (+gif), insights, code, get_started
Anything else gets the current time.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path

from fbmessenger.outbound.graph import GraphApiClient
from fbmessenger.outbound.uploads import Upload

logger = logging.getLogger("birdie")

SORRY = "\U0001F62A"


def _stamp() -> int:
    return int(time.time() * 1000)


def _day(end_time: str) -> str:
    try:
        return datetime.strptime(end_time, "%Y-%m-%dT%H:%M:%S%z").strftime("%Y-%m-%d")
    except (TypeError, ValueError):
        return str(end_time)


class BirdieReplies:
    def __init__(
        self,
        client: GraphApiClient,
        fixtures_dir: Path,
        media_base_url: str | None = None,
    ) -> None:
        self._client = client
        self._fixtures_dir = fixtures_dir
        self._media_base_url = media_base_url

    def reply(self, sender_id: str, text: str) -> None:
        text = (text or "").lower()

        if "photo" in text or "image" in text:
            self._client.send_image_attachment(sender_id, self._fixture("animated.gif"))
        elif "video" in text:
            self._send_hosted_media(sender_id, "video", "video.mp4")
        elif "audio" in text:
            self._send_hosted_media(sender_id, "audio", "audio.mp3")
        elif "file" in text or "document" in text:
            self._client.send_file_attachment(sender_id, self._fixture("document.txt"))
        elif "generic" in text:
            self._send_generic(sender_id)
        elif "button" in text:
            self._send_buttons(sender_id)
        elif "advanced" in text:
            self._send_airline_checkin(sender_id)
        elif "rickrolling" in text:
            self._send_open_graph(sender_id)
        elif "quick" in text:
            self._send_quick_replies(sender_id, with_gif="gif" in text)
        elif "insights" in text:
            self._send_insights(sender_id)
        elif "code" in text:
            self._send_messenger_code(sender_id)
        elif "get_started" in text:
            self._client.send_text_message(sender_id, "Welcome to the birdie test bot! \U0001F426")
        else:
            self._client.send_text_message(
                sender_id, f"Heyo, current time is: {datetime.now().isoformat(timespec='seconds')}"
            )

    # ---------------------------------------------------------
    # Media
    # ---------------------------------------------------------
    def _fixture(self, name: str) -> Upload:
        return Upload(name, self._fixtures_dir / name)

    def _send_hosted_media(self, sender_id: str, media_type: str, name: str) -> None:
        if not self._media_base_url:
            self._client.send_text_message(sender_id, f"No {media_type} configured, sorry {SORRY}")
            return
        self._client.send_attachment(media_type, sender_id, f"{self._media_base_url}/{name}")

    # ---------------------------------------------------------
    # Templates
    # ---------------------------------------------------------
    def _send_generic(self, sender_id: str) -> None:
        self._client.send_generic_template(sender_id, [
            {
                "title": "Birdie sighting: a robin in the garden",
                "image_url": "https://upload.wikimedia.org/wikipedia/commons/f/f3/Erithacus_rubecula_with_cocked_head.jpg",
                "subtitle": "Robins are back early this year.",
                "buttons": [
                    {
                        "type": "web_url",
                        "url": "https://en.wikipedia.org/wiki/European_robin",
                        "title": "Read the story",
                    },
                    {
                        "type": "postback",
                        "title": "More about robins",
                        "payload": "news:stories:robin",
                    },
                ],
            },
            {
                "title": "Birdie sighting: a blackbird at dawn",
                "image_url": "https://upload.wikimedia.org/wikipedia/commons/a/a9/Common_Blackbird.jpg",
                "subtitle": "The first song of the morning.",
                "buttons": [
                    {
                        "type": "web_url",
                        "url": "https://en.wikipedia.org/wiki/Common_blackbird",
                        "title": "Read the story",
                    },
                    {
                        "type": "postback",
                        "title": "More about blackbirds",
                        "payload": "news:stories:blackbird",
                    },
                ],
            },
        ])

    def _send_buttons(self, sender_id: str) -> None:
        self._client.send_button_template(sender_id, "\U0001F48C Which bird should win?", [
            {"type": "postback", "title": "Robin", "payload": "vote:robin"},
            {"type": "postback", "title": "Blackbird", "payload": "vote:blackbird"},
        ])
        link = [{"type": "web_url", "title": "Messenger docs", "url": "https://developers.facebook.com/docs/messenger-platform"}]
        self._client.send_button_template(sender_id, "Need a link to share?", link, sharable=True)
        self._client.send_button_template(sender_id, "Need a link not to share?", link, sharable=False)

    def _send_airline_checkin(self, sender_id: str) -> None:
        self._client.send_advanced_template(sender_id, {
            "template_type": "airline_checkin",
            "intro_message": "Check-in is available now!",
            "locale": "en_US",
            "pnr_number": "XYZDD",
            "flight_info": [
                {
                    "flight_number": "RG1234",
                    "departure_airport": {
                        "airport_code": "VIE",
                        "city": "Vienna International Airport",
                        "terminal": "T3",
                        "gate": "F16",
                    },
                    "arrival_airport": {
                        "airport_code": "TSR",
                        "city": "Timișoara",
                        "terminal": "T1",
                        "gate": "G1",
                    },
                    "flight_schedule": {
                        "boarding_time": "2016-12-24T10:00",
                        "departure_time": "2016-12-24T11:00",
                        "arrival_time": "2016-12-24T12:10",
                    },
                }
            ],
            "checkin_url": "https://www.example.com/checkin",
        })

    def _send_open_graph(self, sender_id: str) -> None:
        self._client.send_advanced_template(sender_id, {
            "template_type": "open_graph",
            "elements": [
                {
                    "url": "https://open.spotify.com/track/7GhIk7Il098yCjg4BQjzvb",
                    "buttons": [
                        {
                            "type": "web_url",
                            "url": "https://en.wikipedia.org/wiki/Rickrolling",
                            "title": "View More",
                        }
                    ],
                }
            ],
        })

    def _send_quick_replies(self, sender_id: str, with_gif: bool) -> None:
        if with_gif:
            self._client.send_quick_replies(sender_id, self._fixture("animated.gif"), [
                {"content_type": "text", "title": "WTF?!", "payload": f"quick:wtf:{_stamp()}"},
                {"content_type": "text", "title": "Cool!", "payload": f"quick:cool:{_stamp()}"},
            ])
            return

        self._client.send_quick_replies(sender_id, "1, 2, or 3?", [
            {"content_type": "text", "title": f"{n}!", "payload": f"quick:{n}:{_stamp()}"}
            for n in (1, 2, 3)
        ])

    # ---------------------------------------------------------
    # Insights / codes
    # ---------------------------------------------------------
    def _send_insights(self, sender_id: str) -> None:
        threads = self._client.get_daily_unique_active_threads() or {}
        conversations = self._client.get_daily_unique_conversations() or {}

        if threads.get("data"):
            metric = threads["data"][0]
            self._client.send_text_message(sender_id, metric.get("description", "Active threads"))
            self._client.send_text_message(sender_id, "\n".join(
                f"{_day(day.get('end_time'))} => {day.get('value', 0):,}"
                for day in metric.get("values", [])
            ) or "-")
        else:
            self._client.send_text_message(sender_id, f"No daily unique active thread count available, sorry {SORRY}")

        if conversations.get("data"):
            metric = conversations["data"][0]
            self._client.send_text_message(sender_id, metric.get("description", "Conversations"))
            for day in metric.get("values", []):
                value = day.get("value") or {}
                lines = [f"{_day(day.get('end_time'))} =>"] + [
                    f"{action}: {value.get(action, 0):,}"
                    for action in ("TURN_ON", "TURN_OFF", "DELETE", "REPORT_SPAM", "OTHER")
                ]
                self._client.send_text_message(sender_id, "\n".join(lines))
        else:
            self._client.send_text_message(sender_id, f"No daily unique conversation count available, sorry {SORRY}")

    def _send_messenger_code(self, sender_id: str) -> None:
        uri = self._client.get_messenger_code()
        if uri:
            self._client.send_image_attachment(sender_id, uri)
        else:
            self._client.send_text_message(sender_id, f"Could not generate the code, sorry {SORRY}")
