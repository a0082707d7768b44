"""
Settings parser.
Reads conf.yaml and environment variables into AppSettings.
"""
import logging
import os
from typing import Optional

import yaml

from ..models.settings import AppSettings, MapSettings, OptimizerSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "conf.yaml"


class SettingsParserError(Exception):
    """Custom exception for settings parsing errors."""
    pass


class SettingsParser:
    """
    Parser for the application configuration YAML file.

    Expected format:
    ```yaml
    optimizer:
      model: "gemini-2.5-flash"
      endpoint: "https://generativelanguage.googleapis.com/v1beta"
      timeout_seconds: 60
      use_maps_grounding: true

    route_defaults:
      return_to_start: true
      vehicle_count: 1

    map:
      width: 400
      height: 400
      padding: 50
      embed_zoom: 18
    ```

    The API key is never read from YAML; it comes from GEMINI_API_KEY
    (or API_KEY). GEMINI_MODEL overrides optimizer.model.
    """

    def __init__(self, yaml_path: Optional[str] = None):
        """
        Initialize settings parser.

        Args:
            yaml_path: Path to YAML file (default: $ROUTEREADY_CONFIG or conf.yaml)
        """
        self.yaml_path = yaml_path or os.getenv("ROUTEREADY_CONFIG", DEFAULT_CONFIG_PATH)
        self.data = None

    def parse(self) -> AppSettings:
        """
        Parse the YAML file and environment into AppSettings.

        A missing file yields default settings.

        Returns:
            AppSettings object

        Raises:
            SettingsParserError: If the file is malformed or values are invalid
        """
        if os.path.exists(self.yaml_path):
            try:
                with open(self.yaml_path, "r") as f:
                    self.data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise SettingsParserError(f"Error parsing YAML file: {str(e)}")
            except OSError as e:
                raise SettingsParserError(f"Error reading YAML file: {str(e)}")
        else:
            logger.info(f"No settings file at {self.yaml_path}, using defaults")
            self.data = {}

        if not isinstance(self.data, dict):
            raise SettingsParserError("YAML file must contain a dictionary")

        try:
            optimizer = self._parse_optimizer(self.data.get("optimizer") or {})
            map_settings = self._parse_map(self.data.get("map") or {})
            defaults = self.data.get("route_defaults") or {}
            settings = AppSettings(
                optimizer=optimizer,
                map=map_settings,
                default_return_to_start=bool(defaults.get("return_to_start", True)),
                default_vehicle_count=int(defaults.get("vehicle_count", 1)),
            )
        except (TypeError, ValueError) as e:
            raise SettingsParserError(f"Invalid settings: {str(e)}")

        if settings.default_vehicle_count < 1:
            raise SettingsParserError("route_defaults.vehicle_count must be at least 1")

        return settings

    def _parse_optimizer(self, config: dict) -> OptimizerSettings:
        """Build optimizer settings from the 'optimizer' section and environment."""
        defaults = OptimizerSettings()
        return OptimizerSettings(
            model=os.getenv("GEMINI_MODEL") or config.get("model", defaults.model),
            endpoint=str(config.get("endpoint", defaults.endpoint)).rstrip("/"),
            timeout_seconds=float(config.get("timeout_seconds", defaults.timeout_seconds)),
            use_maps_grounding=bool(config.get("use_maps_grounding", defaults.use_maps_grounding)),
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
        )

    def _parse_map(self, config: dict) -> MapSettings:
        """Build map settings from the 'map' section."""
        defaults = MapSettings()
        return MapSettings(
            width=int(config.get("width", defaults.width)),
            height=int(config.get("height", defaults.height)),
            padding=int(config.get("padding", defaults.padding)),
            embed_zoom=int(config.get("embed_zoom", defaults.embed_zoom)),
            embed_height=int(config.get("embed_height", defaults.embed_height)),
        )
