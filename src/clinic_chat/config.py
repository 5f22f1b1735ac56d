from pydantic import BaseModel
from dotenv import load_dotenv
from pathlib import Path
import os

load_dotenv()

DEFAULT_KNOWLEDGE_PATH = Path(__file__).parent / "data" / "clinic-knowledge.csv"

def _split_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]

class Settings(BaseModel):
    llm_provider: str = os.getenv("LLM_PROVIDER", "openai")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.1")

    llm_timeout_seconds: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

    allowed_origins: list[str] = _split_origins(os.getenv("ALLOWED_ORIGINS", "https://spica8217.xsrv.jp"))

    knowledge_path: str = os.getenv("KNOWLEDGE_PATH", str(DEFAULT_KNOWLEDGE_PATH))

    redis_url: str | None = os.getenv("REDIS_URL") or None
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "20"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
    rate_limit_prefix: str = os.getenv("RATE_LIMIT_PREFIX", "chat-kanai")
    # Number of reverse proxies in front of the app that append to X-Forwarded-For
    trusted_proxy_hops: int = int(os.getenv("TRUSTED_PROXY_HOPS", "0"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
