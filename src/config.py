from typing import Optional
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class ApiConfig(BaseModel):
    compose_server: str = Field(
        default="https://api.compose.io/2016-07",
        description="Base URL of the Compose API.",
    )
    use_ssl: Optional[bool] = Field(default=True, description="Enables SSL verification on API requests.")
    timeout: Optional[float] = Field(default=15.0, description="API requests timeout.")

class ReconciliationConfig(BaseModel):
    """
    Timing for the poller that waits for the whitelist listing to reflect a write.
    """
    timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Total time budget to wait for the whitelist to converge.",
    )

    delay_seconds: float = Field(
        default=10.0,
        ge=0,
        description="Time to wait after the write before the first poll.",
    )

    min_interval_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Minimum time between two consecutive polls.",
    )

    @model_validator(mode="after")
    def validate_delay_within_timeout(self) -> "ReconciliationConfig":
        if self.delay_seconds >= self.timeout_seconds:
            raise ValueError("delay_seconds must be smaller than timeout_seconds")
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_nested_delimiter="__")

    access_token: Optional[str] = Field(default=None, description="Compose API token.")
    api: ApiConfig = Field(default_factory=ApiConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    log_folder: Optional[str] = Field(default=None, description="Where rotating log files are written.")


def load_settings() -> Settings:
    """Reads settings from the environment and the optional .env file."""
    return Settings()
