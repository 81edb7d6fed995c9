"""
util/http.py

Tiny HTTP helpers for the widget's JSON calls.
- Timeout can be configured via HTTP_TIMEOUT env (default 30s)
- No retries: the caller decides what a failure means
- Network errors bubble as requests.RequestException
"""

import os

import requests


JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def _env_timeout():
    try:
        return float(os.getenv("HTTP_TIMEOUT", "30"))
    except Exception:
        return 30.0


def post_json(url, payload, headers=None, timeout=None, session=None):
    """HTTP POST a JSON body and return the raw response, whatever its status."""
    if timeout is None:
        timeout = _env_timeout()
    sender = session or requests
    return sender.post(url, json=payload, headers={**JSON_HEADERS, **(headers or {})}, timeout=timeout)


def get_json(url, params=None, headers=None, timeout=None, session=None):
    """HTTP GET JSON; raises for HTTP status errors."""
    if timeout is None:
        timeout = _env_timeout()
    sender = session or requests
    resp = sender.get(url, params=params, headers={**JSON_HEADERS, **(headers or {})}, timeout=timeout)
    resp.raise_for_status()
    return resp.json()
