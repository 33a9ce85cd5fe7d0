"""Service configuration loaded from environment variables."""
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug logging and API documentation.
        json_logs: Render logs as JSON lines instead of console output.
        shutdown_timeout: Seconds uvicorn waits for in-flight requests.
        data_path: JSON file the contact set is loaded from and saved to.
        save_on_shutdown: Persist contacts when the server stops.
        id_min: Smallest generated contact id.
        id_max: Largest generated contact id.
        id_max_attempts: Sampling attempts before id generation fails.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTACTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    json_logs: bool = True
    shutdown_timeout: float = 30.0

    data_path: Path = Path("data/contacts.json")
    save_on_shutdown: bool = False

    id_min: int = Field(default=1, ge=0)
    id_max: int = Field(default=1_000_000, ge=0)
    id_max_attempts: int = Field(default=1000, ge=1)

    @model_validator(mode="after")
    def check_id_range(self) -> "Settings":
        """Reject an empty id range."""
        if self.id_min > self.id_max:
            raise ValueError(
                f"id_min ({self.id_min}) must not exceed id_max ({self.id_max})"
            )
        return self
