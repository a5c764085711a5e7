from pathlib import Path

import dotenv
from loguru import logger
from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

dotenv.load_dotenv()


PROJECT_DIR = Path(__file__).parent
LOG_DIR = PROJECT_DIR.joinpath("logs")
DATA_DIR = PROJECT_DIR.joinpath("data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    DISCORD_BOT_TOKEN: SecretStr = Field(
        default="", description="Bot token from the Discord developer portal"
    )

    DASHBOARD_API_KEY: SecretStr = Field(
        default="",
        description="Shared secret expected in the `X-API-Key` header of mutating dashboard calls. "
        "Leave empty to keep the dashboard open (development only).",
    )

    DASHBOARD_HOST: str = Field(default="0.0.0.0")

    DASHBOARD_PORT: int = Field(default=3553)

    COMMAND_PREFIX: str = Field(
        default="$", description="Prefix of the text command front-end, e.g. `$translate help`"
    )

    CONFIG_FILE: Path = Field(
        default=DATA_DIR.joinpath("translation-config.json"),
        description="JSON document holding channel routes, roles and provider settings",
    )

    DEFAULT_MODEL: str = Field(default="gemma3")

    DEFAULT_OLLAMA_URL: str = Field(default="http://localhost:11434")

    DIRECTORY_CACHE_TTL: float = Field(
        default=60.0, description="Seconds a guild/channel/role/user name stays cached"
    )

    STATS_CACHE_TTL: float = Field(default=5.0)

    CONFIG_SAVE_DELAY: float = Field(
        default=0.1, description="Idle window in seconds that collapses config writes"
    )

    TRANSLATE_TIMEOUT: float = Field(default=60.0)

    OCR_TIMEOUT: float = Field(
        default=120.0, description="Image extraction payloads are larger, so the timeout is longer"
    )

    STATUS_TIMEOUT: float = Field(default=5.0)

    HISTORY_CAPACITY: int = Field(default=100, gt=0)

    LOG_CAPACITY: int = Field(default=100, gt=0)

    @property
    def dashboard_api_key(self) -> str:
        return self.DASHBOARD_API_KEY.get_secret_value()

    def model_post_init(self, context, /) -> None:
        self.DEFAULT_OLLAMA_URL = self.DEFAULT_OLLAMA_URL.rstrip("/")

        if not self.dashboard_api_key:
            logger.warning("DASHBOARD_API_KEY is not set, admin endpoints are open")


settings = Settings()  # type: ignore
