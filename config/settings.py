from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


# Near-homophones of "Mise" that speech recognizers tend to produce.
DEFAULT_WAKE_PHRASES = (
    r"^\s*(?:hey|hay|hi|hei|a)[\s,.!-]*(?:mise|miss|mis|mees|meez|mease|niece|mies|meese|me's)\b",
    r"^\s*(?:hey|hay|hi)[\s,.!-]*(?:me\s+is|mi\s+se|meet\s+see)\b",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Claude API (recipe generation, step questions, photo feedback)
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"
    generation_max_tokens: int = 2000
    recipe_count: int = 3

    # Remote narration (edge-tts)
    remote_tts_enabled: bool = True
    tts_voice: str = "en-US-AriaNeural"
    tts_rate: str = "+0%"
    tts_max_chars: int = 4096
    # "local" plays through the speakers of the machine running the app,
    # "browser" hands the audio to the Streamlit page for autoplay
    playback: Literal["local", "browser"] = "browser"

    # Local fallback narration (pyttsx3)
    local_tts_rate: int = 175
    voice_catalog_timeout: float = 3.0

    # Voice session timing (seconds)
    wake_phrases: tuple[str, ...] = DEFAULT_WAKE_PHRASES
    post_speech_delay: float = 1.0
    restart_delay: float = 0.3
    error_backoff: float = 2.0
    error_backoff_max: float = 30.0
    max_error_retries: Optional[int] = None
    wake_arm_timeout: float = 8.0

    # Microphone capture
    listen_timeout: float = 5.0
    phrase_time_limit: float = 10.0

    # Model requests allowed per browser session in a sliding window
    rate_limit_max_requests: int = 30
    rate_limit_window_seconds: float = 60

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
