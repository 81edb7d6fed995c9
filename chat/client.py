"""
chat/client.py

HTTP client for the robot backend.
- send(payload): POST the chat body and hand back the raw response (any status)
- health() / status() / relay(command): probes of the collaborator endpoints

The chat call is blocking requests code run in a worker thread, so the widget's
event loop keeps drawing the placeholder turn while the backend answers.

Environment variables:
- CHAT_ENDPOINT  (default: http://localhost:8787/api/chat)
- API_BASE_URL   (default: scheme://host of CHAT_ENDPOINT)
- HTTP_TIMEOUT   (default: 30 seconds, see util/http.py)
"""

import asyncio
import logging
import os
from urllib.parse import urlsplit

import requests

from util.http import get_json, post_json


logger = logging.getLogger(__name__)

DEFAULT_CHAT_ENDPOINT = "http://localhost:8787/api/chat"


def _origin(url):
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


class ChatClient:
    def __init__(self, endpoint=None, base_url=None, timeout=None, session=None):
        self.endpoint = endpoint or os.getenv("CHAT_ENDPOINT", DEFAULT_CHAT_ENDPOINT)
        self.base_url = (base_url or os.getenv("API_BASE_URL") or _origin(self.endpoint)).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def post(self, payload):
        """Blocking POST to the chat endpoint. Network errors propagate."""
        return post_json(self.endpoint, payload, timeout=self.timeout, session=self.session)

    async def send(self, payload):
        return await asyncio.to_thread(self.post, payload)

    def health(self):
        """Service identity and mode, or None when the probe fails."""
        return self._probe("get", "/api/health")

    def status(self):
        return self._probe("get", "/api/robot/status")

    def relay(self, command):
        """Hand a command to the relay endpoint. It only acknowledges receipt."""
        return self._probe("post", "/api/robot/command", command)

    def _probe(self, method, path, payload=None):
        url = f"{self.base_url}{path}"
        try:
            if method == "post":
                resp = post_json(url, payload, timeout=self.timeout, session=self.session)
                resp.raise_for_status()
                return resp.json()
            return get_json(url, timeout=self.timeout, session=self.session)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Probe %s failed: %s", path, exc)
            return None

    def close(self):
        self.session.close()
