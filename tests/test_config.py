"""Tests for settings helpers, environment loading and pre-tick validation."""

from pathlib import Path

import pytest
from pydantic import SecretStr

from collector.config import (
    NULL_ADDRESS,
    AppSettings,
    ChainSettings,
    CollectorSettings,
    SubgraphSettings,
    validate_settings,
)
from collector.exceptions import ConfigError


class TestChainSettings:
    """Tests for pool address configuration."""

    @pytest.mark.parametrize("address", ["", "  ", NULL_ADDRESS, f" {NULL_ADDRESS} "])
    def test_unset_or_null_pool_not_configured(self, address: str) -> None:
        assert ChainSettings(pool_address=address).pool_configured is False

    def test_real_pool_configured(self, chain_settings: ChainSettings) -> None:
        assert chain_settings.pool_configured is True


class TestSubgraphSettings:
    """Tests for indexer configuration completeness."""

    def test_configured_with_all_values(self, subgraph_settings: SubgraphSettings) -> None:
        assert subgraph_settings.configured is True

    def test_missing_api_key_not_configured(self, subgraph_settings: SubgraphSettings) -> None:
        settings = subgraph_settings.model_copy(update={"api_key": SecretStr("")})
        assert settings.configured is False


class TestValidateSettings:
    """Tests for fatal configuration errors."""

    def test_valid_settings_pass(self, mock_settings: AppSettings) -> None:
        validate_settings(mock_settings)

    def test_unconfigured_sources_are_not_errors(self) -> None:
        settings = AppSettings(
            chain=ChainSettings(pool_address=""),
            subgraph=SubgraphSettings(api_key="", subgraph_id="", pool_id=""),  # type: ignore[arg-type]
            collector=CollectorSettings(),
        )
        validate_settings(settings)

    def test_api_key_given_as_url_rejected(self, mock_settings: AppSettings) -> None:
        mock_settings.subgraph.api_key = SecretStr("https://gateway.thegraph.com/api/abc")
        with pytest.raises(ConfigError, match="THEGRAPH_API_KEY"):
            validate_settings(mock_settings)

    @pytest.mark.parametrize(
        "subgraph_id", ["subgraphs/id/abc123", "https://thegraph.com/explorer/abc"]
    )
    def test_subgraph_id_with_path_rejected(
        self, mock_settings: AppSettings, subgraph_id: str
    ) -> None:
        mock_settings.subgraph.subgraph_id = subgraph_id
        with pytest.raises(ConfigError, match="THEGRAPH_SUBGRAPH_ID"):
            validate_settings(mock_settings)

    def test_out_of_range_decimals_rejected(self, mock_settings: AppSettings) -> None:
        mock_settings.chain.token1_decimals = 300
        with pytest.raises(ConfigError, match="CHAIN_TOKEN1_DECIMALS"):
            validate_settings(mock_settings)

    @pytest.mark.parametrize("interval", [0, -5])
    def test_non_positive_interval_rejected(
        self, mock_settings: AppSettings, interval: float
    ) -> None:
        mock_settings.collector.interval_seconds = interval
        with pytest.raises(ConfigError, match="COLLECTOR_INTERVAL_SECONDS"):
            validate_settings(mock_settings)


# ---------------------------------------------------------------------------
# Loading from the process environment and from .env
# ---------------------------------------------------------------------------

_ENV_KEYS = (
    "LOG_LEVEL",
    "LOG_FORMAT",
    "CHAIN_POOL_ADDRESS",
    "CHAIN_TOKEN0_DECIMALS",
    "THEGRAPH_API_KEY",
    "THEGRAPH_SUBGRAPH_ID",
    "THEGRAPH_POOL_ID",
    "COLLECTOR_RUN_ONCE",
    "COLLECTOR_INTERVAL_SECONDS",
)

POOL = "0x6c561B446416E1A00E8E93E221854d6eA4171372"


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no collector variables set."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestSettingsLoading:
    """Tests for AppSettings() picking up prefixed variables."""

    def test_environment_variables_reach_nested_groups(
        self, clean_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CHAIN_POOL_ADDRESS", POOL)
        monkeypatch.setenv("CHAIN_TOKEN0_DECIMALS", "6")
        monkeypatch.setenv("COLLECTOR_RUN_ONCE", "true")
        monkeypatch.setenv("COLLECTOR_INTERVAL_SECONDS", "60")

        settings = AppSettings()

        assert settings.chain.pool_address == POOL
        assert settings.chain.token0_decimals == 6
        assert settings.chain.pool_configured is True
        assert settings.collector.run_once is True
        assert settings.collector.interval_seconds == 60.0
        assert settings.subgraph.configured is False

    def test_dotenv_file_with_prefixed_names(self, clean_env: Path) -> None:
        (clean_env / ".env").write_text(
            "\n".join(
                [
                    f"CHAIN_POOL_ADDRESS={POOL}",
                    "THEGRAPH_API_KEY=abc123key",
                    "THEGRAPH_SUBGRAPH_ID=5zvR82QoaXYFyDEKLZ9t6v9adgnptxYpKpSbxtgVENFV",
                    "THEGRAPH_POOL_ID=0xd0b53D9277642d899DF5C87A3966A349A798F224",
                    "COLLECTOR_RUN_ONCE=true",
                    "LOG_LEVEL=DEBUG",
                    "LOG_FORMAT=json",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

        settings = AppSettings()

        assert settings.chain.pool_address == POOL
        assert settings.subgraph.configured is True
        assert settings.subgraph.api_key.get_secret_value() == "abc123key"
        assert settings.collector.run_once is True
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        validate_settings(settings)

    def test_unrelated_dotenv_keys_are_ignored(self, clean_env: Path) -> None:
        (clean_env / ".env").write_text(
            "ETH_USDC_V3_POOL=0xabc\nSOME_OTHER_TOOL=1\n", encoding="utf-8"
        )

        settings = AppSettings()

        assert settings.chain.pool_configured is False
        assert settings.subgraph.configured is False
