import yaml
import os
from dataclasses import dataclass
from typing import List, Tuple, Dict, Any
from rich.console import Console

console = Console()

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config.yaml")

@dataclass
class DisplayConfig:
    window_width: int
    window_height: int
    sidebar_width: int
    fps: int
    default_background_color: Tuple[int, int, int]

@dataclass
class CanvasConfig:
    width: str
    height: str
    scale: str
    background_color: str
    checkerboard_tile_size: int

@dataclass
class PerformanceConfig:
    decode_max_workers: int

@dataclass
class PathsConfig:
    default_image_dir: str
    export_file_name: str

@dataclass
class LoggingConfig:
    level: str

@dataclass
class SupportedExtensionsConfig:
    images: List[str]
    documents: List[str]

@dataclass
class Config:
    display: DisplayConfig
    canvas: CanvasConfig
    performance: PerformanceConfig
    paths: PathsConfig
    logging: LoggingConfig
    supported_extensions: SupportedExtensionsConfig

class ConfigManager:
    """Manages loading and accessing configuration from YAML file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path
        self.config = None
        self.load_config()

    def load_config(self):
        """Load configuration from YAML file."""
        try:
            if not os.path.exists(self.config_path):
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as file:
                yaml_data = yaml.safe_load(file)

            self.config = self._parse_config(yaml_data)
            console.log(f"Configuration loaded from '{self.config_path}'")

        except (OSError, yaml.YAMLError, KeyError, TypeError) as e:
            console.log(f"[yellow]Error loading configuration: {e}. Using default configuration.[/yellow]")
            self.config = self._get_default_config()

    def _parse_config(self, yaml_data: Dict[str, Any]) -> Config:
        """Parse YAML data into structured configuration objects."""
        display = dict(yaml_data['display'])
        display['default_background_color'] = tuple(display['default_background_color'])

        # Hex colors and numbers may come back from YAML as ints or floats
        canvas = {key: (str(value) if key != 'checkerboard_tile_size' else value)
                  for key, value in yaml_data['canvas'].items()}

        return Config(
            display=DisplayConfig(**display),
            canvas=CanvasConfig(**canvas),
            performance=PerformanceConfig(**yaml_data['performance']),
            paths=PathsConfig(**yaml_data['paths']),
            logging=LoggingConfig(**yaml_data.get('logging', {'level': 'INFO'})),
            supported_extensions=SupportedExtensionsConfig(**yaml_data['supported_extensions'])
        )

    def _get_default_config(self) -> Config:
        """Return a default configuration if YAML loading fails."""
        return Config(
            display=DisplayConfig(1280, 800, 320, 60, (30, 30, 30)),
            canvas=CanvasConfig("1170", "2532", "0.5", "transparent", 16),
            performance=PerformanceConfig(4),
            paths=PathsConfig("input", "collage.json"),
            logging=LoggingConfig(level="INFO"),
            supported_extensions=SupportedExtensionsConfig(
                [".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"],
                [".json"]
            )
        )

    def get_config(self) -> Config:
        """Get the current configuration."""
        return self.config

    def reload_config(self):
        """Reload configuration from file."""
        console.log("Reloading configuration...")
        self.load_config()

# Global configuration manager instance
config_manager = ConfigManager()

def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.get_config()

def reload_config():
    """Reload the global configuration."""
    config_manager.reload_config()
