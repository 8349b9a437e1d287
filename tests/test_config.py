import json

import pytest

from APIConnect.config import ConnectorConfig, load_connector_configs


def test_bundled_configs_load():
    configs = load_connector_configs()

    forge = configs['forge']
    assert forge.base_url == "https://forge.laravel.com/api/v1"
    assert forge.api_key_env_var == "FORGE_API_TOKEN"
    assert forge.default_headers == {'Accept': 'application/json'}


def test_load_from_path(tmp_path):
    path = tmp_path / "connectors.json"
    path.write_text(json.dumps({
        "billing": {"base_url": "https://billing.example.test", "max_retries": 1}
    }), encoding="utf-8")

    configs = load_connector_configs(str(path))

    assert configs['billing'].name == "billing"
    assert configs['billing'].max_retries == 1
    assert configs['billing'].timeout == 30.0


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_connector_configs(str(tmp_path / "nope.json"))


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ValueError):
        load_connector_configs(str(path))


@pytest.mark.parametrize("overrides", [
    {"base_url": "ftp://example.test"},
    {"timeout": 0},
    {"max_retries": -1},
])
def test_validation(overrides):
    settings = dict(name="bad", base_url="https://example.test")
    settings.update(overrides)

    with pytest.raises(ValueError):
        ConnectorConfig(**settings)


class TestApiKey:
    def test_explicit_key(self, monkeypatch):
        monkeypatch.setenv("EXAMPLE_TOKEN", "env")
        config = ConnectorConfig(name="x", base_url="https://x.test", api_key_env_var="EXAMPLE_TOKEN")

        assert config.get_api_key("explicit") == "explicit"
        assert config.get_api_key() == "env"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("EXAMPLE_TOKEN", raising=False)
        config = ConnectorConfig(name="x", base_url="https://x.test", api_key_env_var="EXAMPLE_TOKEN")

        with pytest.raises(ValueError, match="EXAMPLE_TOKEN"):
            config.get_api_key()

    def test_keyless_connector(self):
        assert ConnectorConfig(name="x", base_url="https://x.test").get_api_key() is None
