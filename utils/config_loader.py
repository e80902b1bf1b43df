#!/usr/bin/env python3
"""
Configuration loader and validator for the marker pose tracker
"""

import yaml
from pathlib import Path
from typing import Dict, Any
from omegaconf import OmegaConf
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/tracker_config.yaml"


class ConfigLoader:
    """Load and validate tracker configuration"""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)
        self.config = None

    def load(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            config_dict = yaml.safe_load(f)

        if not isinstance(config_dict, dict):
            raise ValueError(f"Config file is empty or not a mapping: {self.config_path}")

        # Convert to OmegaConf for advanced features
        self.config = OmegaConf.create(config_dict)

        self._validate()

        logger.info(f"Loaded configuration from {self.config_path}")
        return OmegaConf.to_container(self.config, resolve=True)

    def _validate(self):
        """Validate configuration parameters"""
        for section in ('markers', 'dynamics', 'objects'):
            if not self.config.get(section):
                raise ValueError(f"Config section '{section}' must be specified and non-empty")

        for marker_name, marker in self.config.markers.items():
            points = marker.get('points')
            if not points:
                raise ValueError(f"Marker configuration '{marker_name}' has no points")
            for point in points:
                if len(point) != 3:
                    raise ValueError(f"Marker configuration '{marker_name}' has a non-3D point: {list(point)}")

        names = set()
        for obj in self.config.objects:
            name = obj.get('name')
            if not name:
                raise ValueError("Every object needs a name")
            if name in names:
                raise ValueError(f"Duplicate object name: {name}")
            names.add(name)

            if obj.get('marker') not in self.config.markers:
                raise ValueError(f"Object '{name}' references unknown marker configuration '{obj.get('marker')}'")
            if obj.get('dynamics') not in self.config.dynamics:
                raise ValueError(f"Object '{name}' references unknown dynamics configuration '{obj.get('dynamics')}'")
            if len(obj.get('initial_position', [])) != 3:
                raise ValueError(f"Object '{name}' needs a 3D initial_position")
            if 'initial_orientation' in obj and len(obj.initial_orientation) != 4:
                raise ValueError(f"Object '{name}' needs a [w, x, y, z] initial_orientation")

        logger.info("Configuration validated successfully")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key"""
        if self.config is None:
            self.load()

        return OmegaConf.select(self.config, key, default=default)

    def save(self, output_path: str):
        """Save configuration to file"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            OmegaConf.save(self.config, f)

        logger.info(f"Saved configuration to {output_path}")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Convenience function to load configuration"""
    loader = ConfigLoader(config_path)
    return loader.load()
