"""Export configuration loaded from environment variables.

Credentials for the Paylight X web login plus output/logging switches.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from src.paylight.errors import ConfigurationError
from src.paylight.models import Credentials


class PaylightConfig(BaseSettings):
    """Export configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Paylight X login (same account as the clinic web client)
    paylight_id: str = Field(
        default="",
        description="Paylight login ID (email address)",
    )
    paylight_pw: str = Field(
        default="",
        description="Paylight password",
    )
    paylight_store: int | None = Field(
        default=None,
        description="Numeric Paylight store ID",
    )

    # Fetch settings
    paylight_per_page: int = Field(
        default=500,
        ge=1,
        description="Event groups requested per page",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "env_ignore_empty": True,
    }

    def credentials(self) -> Credentials:
        """Build login credentials, failing if any required variable is unset.

        Raises:
            ConfigurationError: Listing every missing environment variable.
        """
        missing = [
            env_name
            for env_name, value in [
                ("PAYLIGHT_ID", self.paylight_id),
                ("PAYLIGHT_PW", self.paylight_pw),
                ("PAYLIGHT_STORE", self.paylight_store),
            ]
            if value in (None, "")
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return Credentials(
            username=self.paylight_id,
            password=self.paylight_pw,
            store_id=self.paylight_store,
        )


# Singleton pattern
_config: PaylightConfig | None = None


def get_config() -> PaylightConfig:
    """Get the export configuration singleton.

    Returns:
        PaylightConfig: Export configuration instance
    """
    global _config
    if _config is None:
        _config = PaylightConfig()
    return _config
