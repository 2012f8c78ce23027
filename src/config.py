"""Bot configuration built once at startup and passed to every component."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_DEFAULT_GRAPH_API_URL = "https://graph.facebook.com"


class ConfigurationError(Exception):
    """Raised when mandatory configuration is missing and startup must stop."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing mandatory configuration: {', '.join(missing)}")


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class BotConfig:
    """Process-wide settings.

    Everything is read-only after startup except the public base URL, which
    is derived once from the first webhook POST unless ``bot_root_url`` is
    configured up front.
    """

    page_access_token: str = ""
    verify_token: str = ""
    port: int = 8080
    backend_url: str = ""
    image_preprocess_url: str = ""
    enable_detector: bool = False
    detector: str = "tensorflow"
    enable_nlp: bool = True
    nlp_confidence_threshold: float = 0.5
    persona_name: str = "milton"
    graph_api_url: str = _DEFAULT_GRAPH_API_URL
    http_timeout: float = 30.0
    bot_root_url: str | None = None
    audit_log_path: str | None = None
    exit_on_missing_config: bool = False
    base_url_initialized: bool = False

    def __post_init__(self) -> None:
        if self.bot_root_url:
            self.bot_root_url = self.bot_root_url.rstrip("/")
            self.base_url_initialized = True

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> BotConfig:
        """Create BotConfig from environment variables."""
        env = os.environ if env is None else env
        return cls(
            page_access_token=env.get("PAGE_ACCESS_TOKEN", ""),
            verify_token=env.get("VERIFY_TOKEN", ""),
            port=int(env.get("PORT", "8080")),
            backend_url=env.get("SMBMKT_BACKEND_URL", ""),
            image_preprocess_url=env.get("IMAGE_PRE_PROCESS_URL", ""),
            enable_detector=_flag(env, "ENABLE_DETECTOR", False),
            detector=env.get("DETECTOR", "tensorflow"),
            enable_nlp=_flag(env, "ENABLE_FB_NLP", True),
            nlp_confidence_threshold=float(env.get("NLP_CONFIDENCE_THRESHOLD", "0.5")),
            persona_name=env.get("BOT_PERSONA_NAME", "milton").lower(),
            graph_api_url=env.get("GRAPH_API_URL", _DEFAULT_GRAPH_API_URL),
            http_timeout=float(env.get("HTTP_TIMEOUT", "30")),
            bot_root_url=env.get("BOT_ROOT_URL") or None,
            audit_log_path=env.get("AUDIT_LOG_PATH") or None,
            exit_on_missing_config=_flag(env, "EXIT_ON_MISSING_CONFIG", False),
        )

    def missing(self) -> list[str]:
        """Return the names of mandatory variables that are not set."""
        required = {
            "PAGE_ACCESS_TOKEN": self.page_access_token,
            "VERIFY_TOKEN": self.verify_token,
            "SMBMKT_BACKEND_URL": self.backend_url,
        }
        if self.enable_detector:
            required["IMAGE_PRE_PROCESS_URL"] = self.image_preprocess_url
        return [name for name, value in required.items() if not value]

    def ensure_complete(self) -> None:
        """Log missing configuration, raising when startup must stop."""
        missing = self.missing()
        if not missing:
            return
        for name in missing:
            logger.error("Environment variable %s is not configured", name)
        if self.exit_on_missing_config:
            raise ConfigurationError(missing)
        logger.warning(
            "Bot started, but it will not function until the missing "
            "configuration is provided",
        )

    def init_base_url(self, host: str) -> bool:
        """Derive the public base URL from the first webhook Host header.

        The platform requires https links without a port override, so the
        scheme is always https. Returns True only on the call that set it.
        """
        if self.base_url_initialized or not host:
            return False
        self.bot_root_url = f"https://{host}"
        self.base_url_initialized = True
        logger.info("Bot base URL initialized to %s", self.bot_root_url)
        return True

    @property
    def view_product_url(self) -> str:
        return f"{self.bot_root_url or ''}/web/Products?data="

    @property
    def send_api_url(self) -> str:
        return f"{self.graph_api_url.rstrip('/')}/me/messages"

    @property
    def similarity_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}/SimilarItems"

    @property
    def detector_url(self) -> str:
        return f"{self.image_preprocess_url.rstrip('/')}/{self.detector}"

    def user_profile_url(self, user_id: str) -> str:
        return f"{self.graph_api_url.rstrip('/')}/{user_id}"
