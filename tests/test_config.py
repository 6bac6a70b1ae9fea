"""Tests for config module."""

import pytest

from docsubmit.config import ClientConfig, window_from_unit
from docsubmit.errors import InvalidConfiguration
from docsubmit.rate_limiter import Window

ENDPOINT = "https://api.example.com/v3/lk/documents/create"


class TestClientConfig:
    """Test ClientConfig validation."""

    def test_defaults(self):
        config = ClientConfig(endpoint=ENDPOINT)
        assert config.signature_header == "X-Signature"
        assert config.request_limit == 1
        assert config.window == 1.0
        assert config.request_timeout == 30.0
        assert config.user_agent.startswith("docsubmit/")
        assert config.rate_window == Window(1, 1.0)

    @pytest.mark.parametrize("limit", [0, -1, -5, -42])
    def test_non_positive_limit(self, limit):
        """Every non-positive request limit fails construction."""
        with pytest.raises(InvalidConfiguration):
            ClientConfig(endpoint=ENDPOINT, request_limit=limit)

    @pytest.mark.parametrize("endpoint", ["", None, "api.example.com", "ftp://example.com/x"])
    def test_invalid_endpoint(self, endpoint):
        with pytest.raises(InvalidConfiguration):
            ClientConfig(endpoint=endpoint)

    @pytest.mark.parametrize("header", ["", "X Signature", "X-Sig:", None])
    def test_invalid_signature_header(self, header):
        with pytest.raises(InvalidConfiguration):
            ClientConfig(endpoint=ENDPOINT, signature_header=header)

    @pytest.mark.parametrize("timeout", [0, -1.0, float("inf")])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(InvalidConfiguration):
            ClientConfig(endpoint=ENDPOINT, request_timeout=timeout)

    @pytest.mark.parametrize("timeout", [None, "30", False])
    def test_non_numeric_timeout(self, timeout):
        """A missing or non-numeric timeout is a configuration error."""
        with pytest.raises(InvalidConfiguration, match="request_timeout"):
            ClientConfig(endpoint=ENDPOINT, request_timeout=timeout)

    @pytest.mark.parametrize("window", [None, "60"])
    def test_non_numeric_window(self, window):
        with pytest.raises(InvalidConfiguration, match="window duration"):
            ClientConfig(endpoint=ENDPOINT, window=window)

    def test_non_string_endpoint(self):
        with pytest.raises(InvalidConfiguration, match="endpoint must be a string"):
            ClientConfig(endpoint=b"https://api.example.com/documents")

    def test_non_string_signature_header(self):
        with pytest.raises(InvalidConfiguration, match="signature header"):
            ClientConfig(endpoint=ENDPOINT, signature_header=42)

    def test_invalid_window(self):
        with pytest.raises(InvalidConfiguration):
            ClientConfig(endpoint=ENDPOINT, window=0)

    def test_is_value_error(self):
        """Configuration errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            ClientConfig(endpoint=ENDPOINT, request_limit=0)

    def test_frozen(self):
        config = ClientConfig(endpoint=ENDPOINT)
        with pytest.raises(AttributeError):
            config.request_limit = 5


class TestFromEnv:
    """Test ClientConfig.from_env."""

    def test_reads_variables(self):
        config = ClientConfig.from_env(
            {
                "DOCSUBMIT_ENDPOINT": ENDPOINT,
                "DOCSUBMIT_SIGNATURE_HEADER": "Signature",
                "DOCSUBMIT_REQUEST_LIMIT": "3",
                "DOCSUBMIT_WINDOW_SECONDS": "60",
                "DOCSUBMIT_TIMEOUT_SECONDS": "15",
            }
        )
        assert config.endpoint == ENDPOINT
        assert config.signature_header == "Signature"
        assert config.request_limit == 3
        assert config.window == 60.0
        assert config.request_timeout == 15.0

    def test_missing_endpoint(self):
        with pytest.raises(InvalidConfiguration, match="endpoint is required"):
            ClientConfig.from_env({})

    def test_malformed_number(self):
        with pytest.raises(InvalidConfiguration, match="Invalid environment"):
            ClientConfig.from_env(
                {"DOCSUBMIT_ENDPOINT": ENDPOINT, "DOCSUBMIT_REQUEST_LIMIT": "three"}
            )

    def test_uses_os_environ(self, monkeypatch):
        monkeypatch.setenv("DOCSUBMIT_ENDPOINT", ENDPOINT)
        monkeypatch.setenv("DOCSUBMIT_REQUEST_LIMIT", "7")
        assert ClientConfig.from_env().request_limit == 7


class TestWindowFromUnit:
    """Test window_from_unit function."""

    @pytest.mark.parametrize(
        "unit, seconds",
        [
            ("millisecond", 0.001),
            ("second", 1.0),
            ("SECONDS", 1.0),
            ("minute", 60.0),
            ("hours", 3600.0),
            ("day", 86400.0),
        ],
    )
    def test_known_units(self, unit, seconds):
        assert window_from_unit(unit) == seconds

    def test_unknown_unit(self):
        with pytest.raises(InvalidConfiguration, match="Unknown time unit"):
            window_from_unit("fortnight")
