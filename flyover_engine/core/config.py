# flyover_engine/core/config.py

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional
from flyover_engine.core.logging import get_logger

logger = get_logger()

DEFAULTS: Dict[str, Any] = {
    'engine': {
        'log_level': 'INFO',
        'debug': False,
        'max_frame_delta': 0.25,
        'frame_rate': 60,
    },
    'playback': {
        'base_duration': 600.0,     # seconds per 100 km
        'min_duration': 180.0,
        'speed_multiplier': 0.25,
        'speeds': {
            '0.5': 0.125,
            '1': 0.25,
            '2': 0.5,
            '4': 1.0,
        },
        'look_ahead_distance': 50.0,  # meters
    },
    'camera': {
        'initial_mode': 'cinematic',
        'zoom': 1.0,
        'chase_pitch': -15.0,
        'side_view_mode': 'auto',
        'modes': {
            'chase': {
                'offset_behind': 200.0,
                'pitch': -15.0,
                'transition_duration': 1.0,
            },
            'birds_eye': {
                'offset_up': 800.0,
                'offset_behind': 50.0,
                'pitch': -75.0,
                'transition_duration': 1.0,
            },
            'side_view': {
                'offset_side': 400.0,
                'offset_up': 100.0,
                'pitch': -10.0,
                'switch_threshold': 100.0,
                'look_ahead_distance': 300.0,
                'look_ahead_samples': 3,
                'transition_duration': 1.0,
            },
            'cinematic': {
                'orbit_radius': 300.0,
                'orbit_speed': 0.15,
                'pitch_min': -30.0,
                'pitch_max': -5.0,
                'height_min': 100.0,
                'height_max': 400.0,
                'transition_duration': 1.5,
            },
        },
    },
    'terrain': {
        'terrain_clearance': 100.0,
        'rider_clearance': 100.0,
        'slope_factor': 0.5,
        'max_cache_distance': 5000.0,
    },
    'smoothing': {
        'max_altitude_change': 30.0,
        'max_position_change': 20.0,
        'max_bearing_change': 4.0,
        'max_bearing_change_birds_eye': 0.5,
    },
    'override': {
        'grace_period': 2.0,
        'return_duration': 2.0,
    },
    'overview': {
        'padding': 0.2,
        'min_padding_degrees': 0.001,
        'min_altitude': 500.0,
        'altitude_scale': 0.8,
        'pitch': -60.0,
        'blend_factor': 0.15,
        'enter_speed': 3.0,
        'return_duration': 0.5,
    },
}


class Config:
    """
    Flyover configuration management.
    Loads a JSON file over the built-in defaults.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self.data: Dict[str, Any] = {}
        self.defaults = copy.deepcopy(DEFAULTS)

        self.load()

    def load(self):
        """Load configuration from file."""
        if self.config_path is None:
            self.data = copy.deepcopy(self.defaults)
            return

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    loaded_data = json.load(f)

                # Loaded values override defaults
                self.data = self._deep_merge(self.defaults, loaded_data)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load configuration from {self.config_path}: {e}")
                self.data = copy.deepcopy(self.defaults)
        else:
            self.data = copy.deepcopy(self.defaults)
            logger.info(f"Configuration file not found, using defaults and creating {self.config_path}")
            self.save()

    def save(self):
        """Save configuration to file."""
        if self.config_path is None:
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
            logger.info(f"Saved configuration to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save configuration to {self.config_path}: {e}")

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value by path.
        Example: config.get('smoothing.max_altitude_change')
        """
        keys = path.split('.')
        value = self.data

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, path: str, value: Any):
        """
        Set configuration value by path.
        Example: config.set('camera.zoom', 1.5)
        """
        keys = path.split('.')
        data = self.data

        for key in keys[:-1]:
            if key not in data:
                data[key] = {}
            data = data[key]

        data[keys[-1]] = value

    def section(self, path: str) -> Dict[str, Any]:
        """Get a copy of a nested section (empty dict when missing)."""
        value = self.get(path, {})
        return dict(value) if isinstance(value, dict) else {}

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
