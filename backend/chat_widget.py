"""Console rendition of the site's live-chat widget.

The widget keeps its own transcript and UI flags (open, typing, unread
notification), remembers the visitor's session id across runs, relays each
message to ``/api/chat``, and answers locally from the full keyword catalogue
whenever the API is unreachable or reports a failure.
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import string
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import requests

from .chat_responder import WIDGET_RESPONDER, KeywordResponder

logger = logging.getLogger("thinkbright.widget")

GREETING = "Hello! Welcome to ThinkBright Web Solutions. How can we help you today?"
NUDGE_MESSAGE = "Need help getting started? I'm here to answer any questions about our services!"
SESSION_KEY = "chatSessionId"
_BASE36 = string.digits + string.ascii_lowercase


@dataclass
class WidgetMessage:
    type: str
    message: str
    timestamp: float = field(default_factory=time.time)


class LocalStore:
    """Tiny JSON key/value file standing in for the browser's localStorage."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._data: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self._path or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable widget store at %s", self._path)
            return
        if isinstance(data, dict):
            self._data = {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        if not self._path:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")


def new_session_id(now_ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """Build ``session_<epoch-ms>_<9 base36 chars>``."""
    rng = rng or random.Random()
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(rng.choice(_BASE36) for _ in range(9))
    return f"session_{stamp}_{suffix}"


class LiveChat:
    """Widget state machine: open/closed, typing indicator, unread notification."""

    def __init__(
        self,
        api_base: str = "http://localhost:5000",
        store: Optional[LocalStore] = None,
        responder: KeywordResponder = WIDGET_RESPONDER,
        timeout: float = 10.0,
        on_change: Optional[Callable[["LiveChat"], None]] = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.is_open = False
        self.is_typing = False
        self.notification_visible = False
        self.messages: List[WidgetMessage] = [WidgetMessage("bot", GREETING)]
        self._store = store or LocalStore()
        self._responder = responder
        self._timeout = timeout
        self._on_change = on_change

    def _changed(self) -> None:
        if self._on_change:
            self._on_change(self)

    @property
    def session_id(self) -> str:
        """Stored session id, created and persisted on first use."""
        session_id = self._store.get(SESSION_KEY)
        if not session_id:
            session_id = new_session_id()
            self._store.set(SESSION_KEY, session_id)
        return session_id

    def open(self) -> None:
        self.is_open = True
        self.notification_visible = False
        self._changed()

    def close(self) -> None:
        self.is_open = False
        self._changed()

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def add_message(self, sender: str, text: str) -> WidgetMessage:
        message = WidgetMessage(sender, text)
        self.messages.append(message)
        self._changed()
        return message

    def nudge(self) -> bool:
        """Show the unread badge and a prompt if the visitor never opened the chat.

        The browser widget fires this ten seconds after page load.
        """
        if self.is_open:
            return False
        self.notification_visible = True
        self.add_message("bot", NUDGE_MESSAGE)
        return True

    def send_message(self, text: str) -> Optional[str]:
        """Purpose: Post a visitor message and append the bot's answer.
        Inputs/Outputs: Input is raw input text; output is the reply, or None for blank input.
        Side Effects / State: Appends to messages, toggles is_typing, may create a session id.
        Dependencies: Uses requests for the relay and the local responder as fallback.
        Failure Modes: Transport errors and unsuccessful payloads fall back to local replies.
        If Removed: The console client cannot talk to the site.
        Testing Notes: Patch requests.post to raise and expect a catalogue reply.
        """
        # The visitor line is shown before the relay completes.
        message = (text or "").strip()
        if not message:
            return None

        self.add_message("user", message)
        self.is_typing = True
        self._changed()
        try:
            reply = self._relay(message)
        finally:
            self.is_typing = False
        if reply is None:
            reply = self._responder.respond(message)
        self.add_message("bot", reply)
        return reply

    def _relay(self, message: str) -> Optional[str]:
        payload = {"sessionId": self.session_id, "message": message, "senderType": "user"}
        try:
            response = requests.post(f"{self.api_base}/api/chat", json=payload, timeout=self._timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Chat API error: %s", exc)
            return None
        if not isinstance(data, dict) or not data.get("success"):
            return None
        bot_response = data.get("botResponse") or {}
        reply = bot_response.get("message") if isinstance(bot_response, dict) else None
        return reply or None


def _print_last(chat: LiveChat) -> None:
    last = chat.messages[-1]
    if last.type == "bot":
        stamp = time.strftime("%H:%M", time.localtime(last.timestamp))
        print(f"[{stamp}] ThinkBright Support: {last.message}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Chat with the ThinkBright site from a terminal.")
    parser.add_argument("--api", default="http://localhost:5000", help="Site base URL")
    parser.add_argument(
        "--store",
        type=Path,
        default=Path.home() / ".thinkbright_chat.json",
        help="File that keeps the chat session id",
    )
    args = parser.parse_args(argv)

    chat = LiveChat(api_base=args.api, store=LocalStore(args.store))
    chat.open()
    _print_last(chat)
    for line in sys.stdin:
        if line.strip().lower() in {"/quit", "/exit"}:
            break
        if chat.send_message(line):
            _print_last(chat)
    chat.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
