"""
Relay configuration: a JSON file overlaid by environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from lingua_relay.errors import RelayError

CONFIG_FILE = Path.home() / ".lingua-relay" / "config.json"

ENV_VARS = {
    "RELAY_HOST": "host",
    "RELAY_PORT": "port",
    "RELAY_STORE": "store",
    "RELAY_LOG_LEVEL": "log_level",
    "RELAY_CORS_ORIGINS": "cors_origins",
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_key",
}


class RelayConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: Union[str, list[str]] = "*"
    max_http_buffer_size: int = 100_000_000  # inline base64 images
    store: Literal["memory", "supabase"] = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    log_level: str = "INFO"

    def require_supabase(self) -> tuple[str, str]:
        if not self.supabase_url or not self.supabase_key:
            raise RelayError(
                "config_error",
                "Supabase store selected but SUPABASE_URL / SUPABASE_ANON_KEY are not set",
            )
        return self.supabase_url, self.supabase_key


def _load_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[Path] = None, env: Optional[dict[str, str]] = None, **overrides: Any) -> RelayConfig:
    """File < environment < explicit overrides (None overrides are skipped)."""
    values = _load_file(path or CONFIG_FILE)
    environ = os.environ if env is None else env
    for var, field in ENV_VARS.items():
        if environ.get(var):
            values[field] = environ[var]
    if isinstance(values.get("cors_origins"), str) and "," in values["cors_origins"]:
        values["cors_origins"] = [o.strip() for o in values["cors_origins"].split(",") if o.strip()]
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return RelayConfig.model_validate(values)
    except ValidationError as e:
        raise RelayError("config_error", f"Invalid configuration: {e}") from e
