from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ptt_pipelines.fetcher import DEFAULT_FETCH_ENDPOINTS, FetchEndpoint


class PttSettings(BaseSettings):
    """
    Environment-driven settings for page fetching + sentiment analysis.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Fetching ----
    request_timeout_sec: float = Field(default=15.0, alias="PTT_REQUEST_TIMEOUT_SEC")
    request_delay_sec: float = Field(default=0.3, alias="PTT_REQUEST_DELAY_SEC")

    max_retries: int = Field(default=1, alias="PTT_MAX_RETRIES")
    backoff_base_sec: float = Field(default=1.0, alias="PTT_BACKOFF_BASE_SEC")
    backoff_max_sec: float = Field(default=10.0, alias="PTT_BACKOFF_MAX_SEC")

    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        alias="PTT_USER_AGENT",
    )

    # Tried in order; set as a JSON list in PTT_FETCH_ENDPOINTS to override.
    fetch_endpoints: list[FetchEndpoint] = Field(
        default_factory=lambda: list(DEFAULT_FETCH_ENDPOINTS),
        alias="PTT_FETCH_ENDPOINTS",
    )

    # ---- Sentiment analysis ----
    sentiment_model_path: str = Field(default="./fine_tuned_model", alias="SENTIMENT_MODEL_PATH")
    sentiment_model_version: str = Field(default="finetuned-v1", alias="SENTIMENT_MODEL_VERSION")

    sentiment_batch_size: int = Field(default=16, alias="SENTIMENT_BATCH_SIZE")
    sentiment_max_length: int = Field(default=128, alias="SENTIMENT_MAX_LENGTH")

    # Softmax thresholding (optional): if max prob below this -> neutral
    sentiment_neutral_floor: float = Field(default=0.0, alias="SENTIMENT_NEUTRAL_FLOOR")

    # Device: "auto" | "cpu" | "cuda"
    sentiment_device: str = Field(default="auto", alias="SENTIMENT_DEVICE")

    # Character budget for the rendered comment lines fed to the model
    sentiment_comment_budget: int = Field(default=30000, alias="SENTIMENT_COMMENT_BUDGET")
    # |mean(pos - neg)| above this -> bullish/bearish, else neutral
    sentiment_bullish_threshold: float = Field(default=0.15, alias="SENTIMENT_BULLISH_THRESHOLD")


def load_settings() -> PttSettings:
    return PttSettings()
