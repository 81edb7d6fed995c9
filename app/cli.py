"""
app/cli.py

Terminal front end for the assistant widget.
- Reads user input and submits it through a SessionStore
- Prints each assistant reply through the renderer (cards or plain text)
- '/open' toggles the panel flag, '/health' and '/status' probe the backend
- Appends every exchange to a transcript file (best-effort)

Environment:
- CHAT_ENDPOINT: chat URL (see chat/client.py)
- WIDGET_GREETING: overrides the opening assistant line
- LOG_LEVEL: logging level (default WARNING)
"""

import asyncio
import logging
import os
from datetime import datetime, timezone

from chat.client import ChatClient
from core.render import render_turn, view_lines
from core.session import DEFAULT_GREETING, SessionStore


logger = logging.getLogger(__name__)


def format_turn(turn):
    """Render one turn as it appears in the terminal."""
    lines = view_lines(render_turn(turn))
    speaker = "You" if turn.role == "user" else "Robot"
    return f"{speaker}: " + "\n       ".join(lines)


def _transcript_path():
    try:
        root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        transcripts_dir = os.path.join(root_dir, "transcripts")
        os.makedirs(transcripts_dir, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        return os.path.join(transcripts_dir, f"session-{stamp}.txt")
    except OSError as exc:
        logger.warning("Transcript disabled: %s", exc)
        return None


def _append_transcript(path, *turns):
    if not path:
        return
    try:
        with open(path, "a", encoding="utf-8") as f:
            for turn in turns:
                f.write(format_turn(turn) + "\n")
    except OSError as exc:
        logger.warning("Could not write transcript: %s", exc)


def handle_command(store, client, line):
    """Run a slash command; returns the text to print, or None if `line` is not a command."""
    cmd = line.strip().lower()
    if cmd == "/open":
        return "Panel open." if store.toggle_open() else "Panel closed."
    if cmd == "/health":
        info = client.health()
        if not info:
            return "Health probe failed."
        return f"{info.get('app', '?')} is {info.get('status', '?')} ({info.get('mode', '?')})"
    if cmd == "/status":
        info = client.status()
        return f"Robot state: {info.get('state', '?')}" if info else "Status probe failed."
    return None


def main():
    """Run the interactive CLI loop."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )
    client = ChatClient()
    store = SessionStore(client, greeting=os.getenv("WIDGET_GREETING", DEFAULT_GREETING))
    transcript_path = _transcript_path()

    print("EastersAI Robot (type 'exit' to quit)\n")
    for turn in store.history:
        print(format_turn(turn) + "\n")
    _append_transcript(transcript_path, *store.history)

    try:
        while True:
            try:
                raw = input("You: ")
            except EOFError:
                break
            if raw.strip().lower() in {"exit", "quit"}:
                print("Bye!")
                break
            reply = handle_command(store, client, raw)
            if reply is not None:
                print(reply + "\n")
                continue

            store.update_draft(raw)
            before = len(store.history)
            turn = asyncio.run(store.submit(store.state.draft_text))
            if turn is None:
                continue
            print(format_turn(turn) + "\n")
            _append_transcript(transcript_path, *store.history[before:])
    finally:
        client.close()


if __name__ == "__main__":
    main()
