from __future__ import annotations

import logging
import os
import time
from typing import Any

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("robot.api")

app = FastAPI(title="EastersAI Robot API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _now_ms() -> int:
    return int(time.time() * 1000)


@app.get("/api/health")
def health():
    return {
        "status": "ok",
        "app": os.getenv("APP_NAME", "EastersAI"),
        "mode": os.getenv("MODE", "development"),
    }


@app.post("/api/robot/command")
def robot_command(command: Any = Body(None)):
    # Relay is not wired to a robot yet; acknowledge and echo.
    logger.info("Command received: %s", type(command).__name__)
    return {"accepted": True, "command": command, "timestamp": _now_ms()}


@app.get("/api/robot/status")
def robot_status():
    return {"state": "idle", "lastSeen": _now_ms()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8787")))
