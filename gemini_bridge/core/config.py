import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FOOTER = "\n\nPowered by forou.tech"

# ========== load env ==========
load_dotenv()


class Settings(BaseModel):
    """
    Bridge settings, read from the environment (or .env).
    """

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_backend: str = "gemini"

    # None = keep every turn
    history_max_turns: Optional[int] = Field(default=None, ge=1)
    reply_footer: str = DEFAULT_FOOTER

    gateway_url: str = "http://127.0.0.1:3001"
    gateway_timeout: float = 30.0
    gateway_token: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = ConfigDict(frozen=True)


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
        gemini_base_url=os.getenv("GEMINI_BASE_URL", defaults.gemini_base_url),
        llm_backend=os.getenv("LLM_BACKEND", defaults.llm_backend).lower(),
        history_max_turns=_optional_int(os.getenv("HISTORY_MAX_TURNS")),
        reply_footer=os.getenv("REPLY_FOOTER", defaults.reply_footer),
        gateway_url=os.getenv("WA_GATEWAY_URL", defaults.gateway_url),
        gateway_timeout=float(os.getenv("WA_GATEWAY_TIMEOUT", defaults.gateway_timeout)),
        gateway_token=os.getenv("WA_GATEWAY_TOKEN") or None,
        host=os.getenv("HOST", defaults.host),
        port=int(os.getenv("PORT", defaults.port)),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
