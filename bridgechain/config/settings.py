"""Runtime settings read from the environment."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgechainSettings(BaseSettings):
    """Process-level settings, overridable with ``BRIDGECHAIN_*`` variables."""

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", pattern="^(console|json)$")
    config_root: Path = Field(default=Path("~/.bridgechain"))
    core_path: Path = Field(default=Path("~/core-bridgechain"))

    model_config = SettingsConfigDict(
        env_prefix="BRIDGECHAIN_",
        env_file=".env",
        extra="ignore",
    )

    def destination_for(self, network: str, chain_name: str) -> Path:
        """Destination root for a generated bridgechain."""
        return self.config_root.expanduser() / network / chain_name
