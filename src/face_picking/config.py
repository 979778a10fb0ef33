"""Configuration management for the face picking detector."""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from platformdirs import user_config_dir
from pydantic import BaseModel, Field

from .debouncer import DEFAULT_COOLDOWN_MS
from .regions import DEFAULT_REGION_TABLE

logger = logging.getLogger(__name__)


class DetectionConfig(BaseModel):
    """Detection parameters."""

    cooldown_ms: float = Field(default=DEFAULT_COOLDOWN_MS, ge=0, le=60000)
    probe_landmark_index: int = Field(default=8, ge=0, le=20)
    max_num_faces: int = Field(default=1, ge=1, le=4)
    max_num_hands: int = Field(default=2, ge=1, le=2)
    confidence_threshold: float = Field(default=0.5, ge=0.1, le=0.95)


class RegionConfig(BaseModel):
    """One face region. Validated by RegionCatalog, not here."""

    name: str
    indices: List[int]
    threshold: float


def _default_regions() -> List[RegionConfig]:
    return [RegionConfig(name=name, indices=list(indices), threshold=threshold) for name, indices, threshold in DEFAULT_REGION_TABLE]


class CameraConfig(BaseModel):
    """Camera settings."""

    device_id: Optional[int] = Field(default=None, ge=0)
    width: int = Field(default=640, ge=320, le=1920)
    height: int = Field(default=480, ge=240, le=1080)


class ModelConfig(BaseModel):
    """MediaPipe Tasks model files, only needed when mp.solutions is unavailable."""

    face_landmarker_path: str = "models/face_landmarker.task"
    hand_landmarker_path: str = "models/hand_landmarker.task"


class ServerConfig(BaseModel):
    """State broadcast server settings."""

    enabled: bool = False
    host: str = "localhost"
    port: int = Field(default=8765, ge=1024, le=65535)


class AppConfig(BaseModel):
    """Main configuration."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    regions: List[RegionConfig] = Field(default_factory=_default_regions)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_file: Optional[Path] = None) -> None:
        if config_file is None:
            config_file = Path(user_config_dir("face-picking-detector")) / "settings.json"
        self._config_file = Path(config_file)
        self._config: Optional[AppConfig] = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    def load_config(self) -> AppConfig:
        """Load configuration from file or create default."""
        if self._config:
            return self._config

        if self._config_file.exists():
            try:
                with open(self._config_file) as f:
                    self._config = AppConfig(**json.load(f))
            except Exception as e:
                logger.warning(f"Could not read {self._config_file}, using defaults: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()

        return self._config

    def save_config(self, config: Optional[AppConfig] = None) -> None:
        """Save configuration to file."""
        if not config:
            config = self._config
        if not config:
            return

        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, "w") as f:
            json.dump(config.model_dump(), f, indent=2)
        self._config = config

    def update_config(self, **kwargs: Any) -> AppConfig:
        """Update specific configuration values and persist them."""
        config = self.load_config()
        config_dict = config.model_dump()

        for key, value in kwargs.items():
            if key in config_dict and isinstance(value, dict) and isinstance(config_dict[key], dict):
                config_dict[key].update(value)
            else:
                config_dict[key] = value

        updated_config = AppConfig(**config_dict)
        self.save_config(updated_config)
        return updated_config


_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Path] = None) -> ConfigManager:
    """Get the process-wide configuration manager."""
    global _config_manager
    if _config_manager is None or (config_file is not None and Path(config_file) != _config_manager.config_file):
        _config_manager = ConfigManager(config_file)
    return _config_manager


def get_config() -> AppConfig:
    """Get current configuration."""
    return get_config_manager().load_config()
