"""Environment-driven settings, read once at process start."""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dotenv import load_dotenv


class Provider(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"

    @property
    def label(self) -> str:
        return {"gemini": "Gemini", "openai": "OpenAI"}[self.value]


MAX_BODY_SIZE = 25 * 1024 * 1024  # 25 MB (base64 data URL)


@dataclass(frozen=True)
class Settings:
    provider: Provider = Provider.GEMINI
    host: str = "0.0.0.0"
    port: int = 8787
    google_api_key: Optional[str] = None
    google_model: str = "gemini-1.5-flash"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    llm_timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env=None, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        env = os.environ if env is None else env

        raw_provider = (env.get("PROVIDER") or "gemini").strip().lower()
        try:
            provider = Provider(raw_provider)
        except ValueError:
            raise ValueError(f"PROVIDER must be 'gemini' or 'openai', got {raw_provider!r}") from None

        timeout = env.get("LLM_TIMEOUT")
        return cls(
            provider=provider,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", 8787)),
            google_api_key=env.get("GOOGLE_API_KEY") or None,
            google_model=env.get("GOOGLE_MODEL") or "gemini-1.5-flash",
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            openai_model=env.get("OPENAI_MODEL") or "gpt-4o-mini",
            llm_timeout=float(timeout) if timeout else None,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
