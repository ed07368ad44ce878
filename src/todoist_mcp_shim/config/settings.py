from __future__ import annotations

import os
import json
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://api.todoist.com/api/v1"
# Checked in order; the first non-empty value wins
TOKEN_ENV_KEYS = ("TODOIST_API_TOKEN", "TODOIST_TOKEN", "TODOIST")


class MissingTokenError(RuntimeError):
    pass


class TodoistSettings(BaseModel):
    api_url: str = Field(default=DEFAULT_API_URL)
    token: str | None = Field(default=None)
    timeout: float = Field(default=30.0)

    def require_token(self) -> str:
        if not self.token:
            raise MissingTokenError("Set TODOIST_API_TOKEN in the environment")
        return self.token


class Settings(BaseModel):
    todoist: TodoistSettings = Field(default_factory=TodoistSettings)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8787)
    log_level: str = Field(default="INFO")
    # SSE framing unless set; some connectors only understand plain JSON replies
    json_response: bool = Field(default=False)
    # "*" reflects the caller's origin
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])


def _env_token() -> str | None:
    for key in TOKEN_ENV_KEYS:
        if os.environ.get(key):
            return os.environ[key]
    return None


def _split_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def get_settings() -> Settings:
    # Load base from config file if present
    config_path = os.environ.get("CONFIG_PATH", "config.json")
    data: dict = {}
    p = Path(config_path)
    if p.exists():
        try:
            data = json.loads(p.read_text())
        except Exception:
            pass  # ignore malformed file, fallback to env defaults
    todoist_block = data.get("todoist", {}) if isinstance(data.get("todoist"), dict) else {}
    if os.environ.get("TODOIST_API_URL"):
        todoist_block["api_url"] = os.environ["TODOIST_API_URL"]
    token = _env_token()
    if token:
        todoist_block["token"] = token
    if os.environ.get("TODOIST_TIMEOUT"):
        todoist_block["timeout"] = float(os.environ["TODOIST_TIMEOUT"])

    origins = data.get("cors_allow_origins", ["*"])
    if os.environ.get("CORS_ALLOW_ORIGINS"):
        origins = _split_origins(os.environ["CORS_ALLOW_ORIGINS"])

    return Settings(
        todoist=TodoistSettings(**todoist_block),
        host=os.environ.get("HOST", data.get("host", "0.0.0.0")),
        port=int(os.environ.get("PORT", data.get("port", 8787))),
        log_level=os.environ.get("LOG_LEVEL", data.get("log_level", "INFO")),
        json_response=os.environ.get(
            "MCP_JSON_RESPONSE", str(int(data.get("json_response", False)))
        )
        == "1",
        cors_allow_origins=origins,
    )
