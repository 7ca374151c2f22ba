import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "deepseek/deepseek-chat-v3-0324:free"


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str = ""
    openrouter_base_url: str = OPENROUTER_BASE_URL
    llm_model: str = DEFAULT_MODEL
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000
    # seconds; bounds a stalled upstream call
    llm_timeout: float = 90.0
    site_url: str = "http://localhost:3000"
    app_title: str = "Resume Optimizer"
    rate_limit_per_ip: str = "3/minute"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 5002
    log_level: str = "INFO"

    @property
    def api_key_configured(self) -> bool:
        return bool(self.openrouter_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", "").strip(),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL).rstrip("/"),
            llm_model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4000")),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "90")),
            site_url=os.getenv("SITE_URL", "http://localhost:3000"),
            app_title=os.getenv("APP_TITLE", "Resume Optimizer"),
            rate_limit_per_ip=os.getenv("RATE_LIMIT_PER_IP", "3/minute"),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5002")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


settings = Settings.from_env()
