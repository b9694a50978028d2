"""Settings read from the environment."""
import pytest

from realty import config
from realty.errors import ConfigError


@pytest.mark.parametrize("raw", [None, "", "  "])
def test_blank_port_uses_default(monkeypatch, raw):
    if raw is None:
        monkeypatch.delenv('DB_PORT', raising=False)
    else:
        monkeypatch.setenv('DB_PORT', raw)
    assert config.get_db_params()['port'] == 5432


def test_port_is_parsed(monkeypatch):
    monkeypatch.setenv('DB_PORT', '6543')
    assert config.get_db_port() == 6543


@pytest.mark.parametrize("raw", ["abc", "54.32", "0", "70000"])
def test_bad_port_raises_config_error(monkeypatch, raw):
    monkeypatch.setenv('DB_PORT', raw)
    with pytest.raises(ConfigError):
        config.get_db_params()


def test_page_size_falls_back_on_bad_values(monkeypatch):
    monkeypatch.setenv('REALTY_PAGE_SIZE', 'lots')
    assert config.get_page_size() == config.DEFAULT_PAGE_SIZE
    monkeypatch.setenv('REALTY_PAGE_SIZE', '25')
    assert config.get_page_size() == 25
