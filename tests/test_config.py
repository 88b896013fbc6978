"""Tests for address parsing and environment configuration."""

import pytest

from srcon.config import DEFAULT_PORT, load_options, parse_address


class TestParseAddress:
    @pytest.mark.parametrize("text,expected", [
        ("localhost:7000", ("localhost", 7000)),
        ("10.0.0.5", ("10.0.0.5", DEFAULT_PORT)),
        (" example.org:27015 ", ("example.org", 27015)),
        ("[::1]:27016", ("::1", 27016)),
        ("[::1]", ("::1", DEFAULT_PORT)),
        ("::1", ("::1", DEFAULT_PORT)),
    ])
    def test_valid(self, text, expected):
        assert parse_address(text) == expected

    def test_custom_default_port(self):
        assert parse_address("host", default_port=25575) == ("host", 25575)

    @pytest.mark.parametrize("text", ["host:abc", "host:0", "host:70000", ":27015", "[::1:27015"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_address(text)


class TestLoadOptions:
    def test_defaults(self):
        address, options = load_options({})
        assert address == "localhost:27015"
        assert options.password == ""
        assert options.connect_timeout is None

    def test_from_env(self):
        address, options = load_options({
            "RCON_ADDRESS": "game:7000",
            "RCON_PASSWORD": "test123456",
            "RCON_TIMEOUT": "2.5",
        })
        assert address == "game:7000"
        assert options.password == "test123456"
        assert options.connect_timeout == 2.5

    def test_bad_timeout(self):
        with pytest.raises(ValueError):
            load_options({"RCON_TIMEOUT": "soon"})
