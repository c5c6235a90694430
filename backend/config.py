import os
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    # Completion provider: "openai" (any OpenAI-compatible endpoint) | "gemini"
    llm_provider: str = "openai"
    llm_api_key: str = Field("", validation_alias=AliasChoices("llm_api_key", "groq_api_key"))
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.3-70b-versatile"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Decoding parameters, fixed for every request
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 30.0

    max_request_bytes: int = 10 * 1024
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    debug: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def api_key(self) -> str:
        """Key for the active provider."""
        if self.llm_provider == "gemini":
            return self.gemini_api_key
        return self.llm_api_key


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
