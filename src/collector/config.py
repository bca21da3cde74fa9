"""Configuration system using pydantic-settings with environment variable loading.

Settings are built once at startup and passed explicitly into each
component. Nothing below the entry point reads the environment directly.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from collector.exceptions import ConfigError

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"


class ChainSettings(BaseSettings):
    """Blockchain node connection and on-chain price pool settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc_url: str = "https://mainnet.base.org"
    pool_address: str = ""  # empty or NULL_ADDRESS = price flow skipped
    token0_decimals: int | None = None  # overrides the on-chain decimals() call
    token1_decimals: int | None = None
    request_timeout: float = 10.0

    @property
    def pool_configured(self) -> bool:
        """True when a non-null pool address is set."""
        address = self.pool_address.strip().lower()
        return bool(address) and address != NULL_ADDRESS


class SubgraphSettings(BaseSettings):
    """The Graph gateway credentials and indexed pool identifier."""

    model_config = SettingsConfigDict(
        env_prefix="THEGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr = SecretStr("")
    subgraph_id: str = ""
    pool_id: str = ""
    gateway_url: str = "https://gateway.thegraph.com/api"
    request_timeout: float = 10.0

    @property
    def configured(self) -> bool:
        """True when pool id, API key and subgraph id are all present."""
        return bool(
            self.pool_id and self.subgraph_id and self.api_key.get_secret_value()
        )

    @property
    def url(self) -> str:
        """Full gateway query URL for the configured subgraph."""
        return (
            f"{self.gateway_url.rstrip('/')}/{self.api_key.get_secret_value()}"
            f"/subgraphs/id/{self.subgraph_id}"
        )


class CollectorSettings(BaseSettings):
    """Scheduling and output settings."""

    model_config = SettingsConfigDict(
        env_prefix="COLLECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: str = "data"
    interval_seconds: float = 300.0
    run_once: bool = False  # single tick, for externally scheduled runs
    price_file: str = "geth_eth_price.csv"
    stats_file: str = "ethusdc_stats.csv"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    # Sub-settings read the environment when AppSettings is built
    chain: ChainSettings = Field(default_factory=ChainSettings)
    subgraph: SubgraphSettings = Field(default_factory=SubgraphSettings)
    collector: CollectorSettings = Field(default_factory=CollectorSettings)


def validate_settings(settings: AppSettings) -> None:
    """Reject malformed settings before the first tick.

    Missing optional values are not errors; they make the affected
    flow skip. Malformed values are.

    Raises:
        ConfigError: On the first malformed value found.
    """
    api_key = settings.subgraph.api_key.get_secret_value()
    if "http" in api_key:
        raise ConfigError(
            "THEGRAPH_API_KEY must hold only the key string, not a URL"
        )

    subgraph_id = settings.subgraph.subgraph_id
    if "/" in subgraph_id or subgraph_id.startswith("http"):
        raise ConfigError(
            "THEGRAPH_SUBGRAPH_ID must hold only the id (without subgraphs/id/)"
        )

    for name in ("token0_decimals", "token1_decimals"):
        value = getattr(settings.chain, name)
        if value is not None and not 0 <= value <= 255:
            raise ConfigError(f"CHAIN_{name.upper()} must be within 0..255, got {value}")

    if settings.collector.interval_seconds <= 0:
        raise ConfigError(
            "COLLECTOR_INTERVAL_SECONDS must be positive, "
            f"got {settings.collector.interval_seconds}"
        )
