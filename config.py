import os
import json
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("pronunciation-proxy")

DEFAULT_MODEL = "gemini-2.5-flash-preview-05-20"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


def _runtime_config_key(raw: Optional[str]) -> Optional[str]:
    """Pull gemini.key out of the JSON runtime config, if there is one."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("CLOUD_RUNTIME_CONFIG is not valid JSON, ignoring it")
        return None
    gemini = data.get("gemini") if isinstance(data, dict) else None
    if not isinstance(gemini, dict):
        return None
    return gemini.get("key") or None


@dataclass(frozen=True)
class Settings:
    gemini_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    gemini_base_url: str = DEFAULT_BASE_URL
    upstream_timeout: Optional[float] = None
    frontend_origin: str = "*"
    log_level: str = "INFO"
    port: int = 8080

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        timeout = env.get("UPSTREAM_TIMEOUT")
        return cls(
            gemini_key=env.get("GEMINI_KEY") or _runtime_config_key(env.get("CLOUD_RUNTIME_CONFIG")),
            gemini_model=env.get("GEMINI_MODEL", DEFAULT_MODEL),
            gemini_base_url=env.get("GEMINI_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            upstream_timeout=float(timeout) if timeout else None,
            frontend_origin=env.get("FRONTEND_ORIGIN", "*"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            port=int(env.get("PORT", "8080")),
        )

    def __repr__(self) -> str:
        # keep the key out of tracebacks and debug output
        key = "***" if self.gemini_key else None
        return (
            f"Settings(gemini_key={key!r}, gemini_model={self.gemini_model!r}, "
            f"gemini_base_url={self.gemini_base_url!r}, upstream_timeout={self.upstream_timeout!r}, "
            f"frontend_origin={self.frontend_origin!r}, log_level={self.log_level!r}, port={self.port!r})"
        )

    def generate_content_url(self) -> str:
        return f"{self.gemini_base_url}/{self.gemini_model}:generateContent?key={self.gemini_key}"
