"""Unit tests for the settings parser."""
import pytest
import tempfile
import os
from routeready.utils.settings_parser import SettingsParser, SettingsParserError
from routeready.models.settings import AppSettings


class TestSettingsParser:
    """Test suite for SettingsParser class."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        """Keep the developer's environment out of the tests."""
        for name in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "ROUTEREADY_CONFIG"):
            monkeypatch.delenv(name, raising=False)

    @pytest.fixture
    def valid_yaml_data(self):
        """Create valid YAML data for testing."""
        return """optimizer:
  model: "gemini-test"
  endpoint: "https://example.test/v1beta/"
  timeout_seconds: 30
  use_maps_grounding: false

route_defaults:
  return_to_start: false
  vehicle_count: 2

map:
  width: 600
  height: 300
  padding: 20
  embed_zoom: 15
"""

    def write_yaml(self, data):
        with tempfile.NamedTemporaryFile(mode='w', delete=False, suffix='.yaml') as f:
            f.write(data)
            return f.name

    @pytest.fixture
    def valid_yaml_file(self, valid_yaml_data):
        """Create temporary YAML file with valid data."""
        temp_path = self.write_yaml(valid_yaml_data)
        yield temp_path
        os.unlink(temp_path)

    def test_parse_valid_yaml(self, valid_yaml_file):
        """Test parsing all sections."""
        settings = SettingsParser(valid_yaml_file).parse()

        assert isinstance(settings, AppSettings)
        assert settings.optimizer.model == "gemini-test"
        assert settings.optimizer.endpoint == "https://example.test/v1beta"
        assert settings.optimizer.timeout_seconds == 30.0
        assert settings.optimizer.use_maps_grounding is False
        assert settings.default_return_to_start is False
        assert settings.default_vehicle_count == 2
        assert settings.map.width == 600
        assert settings.map.height == 300
        assert settings.map.padding == 20
        assert settings.map.embed_zoom == 15
        assert settings.map.embed_height == 400

    def test_missing_file_uses_defaults(self):
        """Test a missing settings file yields defaults."""
        settings = SettingsParser("/nonexistent/conf.yaml").parse()

        assert settings.optimizer.model == "gemini-2.5-flash"
        assert settings.optimizer.timeout_seconds == 60.0
        assert settings.default_return_to_start is True
        assert settings.default_vehicle_count == 1
        assert settings.map.width == 400

    def test_api_key_from_environment(self, monkeypatch):
        """Test the key comes from GEMINI_API_KEY, falling back to API_KEY."""
        monkeypatch.setenv("API_KEY", "fallback-key")
        settings = SettingsParser("/nonexistent/conf.yaml").parse()
        assert settings.optimizer.api_key == "fallback-key"

        monkeypatch.setenv("GEMINI_API_KEY", "primary-key")
        settings = SettingsParser("/nonexistent/conf.yaml").parse()
        assert settings.optimizer.api_key == "primary-key"
        assert settings.optimizer.is_configured

    def test_no_api_key(self):
        """Test missing credential leaves the optimizer unconfigured."""
        settings = SettingsParser("/nonexistent/conf.yaml").parse()
        assert settings.optimizer.is_configured is False

    def test_model_override(self, monkeypatch, valid_yaml_file):
        """Test GEMINI_MODEL overrides the YAML model."""
        monkeypatch.setenv("GEMINI_MODEL", "gemini-override")
        settings = SettingsParser(valid_yaml_file).parse()
        assert settings.optimizer.model == "gemini-override"

    def test_config_path_from_environment(self, monkeypatch, valid_yaml_file):
        """Test ROUTEREADY_CONFIG selects the settings file."""
        monkeypatch.setenv("ROUTEREADY_CONFIG", valid_yaml_file)
        parser = SettingsParser()

        assert parser.yaml_path == valid_yaml_file
        assert parser.parse().optimizer.model == "gemini-test"

    @pytest.mark.parametrize("data", [
        "optimizer: [unclosed",
        "- just\n- a list\n",
        "optimizer:\n  timeout_seconds: 0\n",
        "optimizer:\n  timeout_seconds: soon\n",
        "route_defaults:\n  vehicle_count: 0\n",
        "map:\n  width: 100\n  height: 100\n  padding: 60\n",
    ])
    def test_invalid_yaml(self, data):
        """Test malformed or invalid settings raise SettingsParserError."""
        temp_path = self.write_yaml(data)
        try:
            with pytest.raises(SettingsParserError):
                SettingsParser(temp_path).parse()
        finally:
            os.unlink(temp_path)

    def test_empty_file_uses_defaults(self):
        """Test an empty file behaves like defaults."""
        temp_path = self.write_yaml("")
        try:
            settings = SettingsParser(temp_path).parse()
        finally:
            os.unlink(temp_path)

        assert settings.default_vehicle_count == 1
