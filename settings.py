from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ws_base_url: str = "ws://localhost:8000"
    open_timeout: float = 10.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EDNA_",
        env_file_encoding="utf-8",
    )

    @field_validator("ws_base_url")
    @classmethod
    def must_be_websocket_url(cls, v: str) -> str:
        if not v.startswith(("ws://", "wss://")):
            raise ValueError("ws_base_url must start with ws:// or wss://")
        return v.rstrip("/")

    @field_validator("open_timeout")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("open_timeout must be positive")
        return v

    def stream_url(self, job_id: str) -> str:
        """Address of the event stream for one analysis job."""
        return f"{self.ws_base_url}/ws/{job_id}"
