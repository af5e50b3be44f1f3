# flyover_engine/camera/camera_modes.py

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Dict, Any

# Chase pitch limits
PITCH_MIN = -75.0
PITCH_MAX = -5.0
PITCH_STEP = 5.0
PITCH_BIRDS_EYE_THRESHOLD = -70.0  # at or below this the chase cam becomes a bird's eye

# Zoom limits (multiplier on every configured distance)
ZOOM_MIN = 0.3
ZOOM_MAX = 3.0
ZOOM_STEP = 0.15
ZOOM_DEFAULT = 1.0


class CameraMode(Enum):
    CHASE = 'chase'
    BIRDS_EYE = 'birds_eye'
    SIDE_VIEW = 'side_view'
    CINEMATIC = 'cinematic'

    @classmethod
    def parse(cls, name) -> Optional['CameraMode']:
        """Resolve a mode from a name or alias. Unknown names give None."""
        if isinstance(name, CameraMode):
            return name
        if not isinstance(name, str):
            return None
        return _MODE_ALIASES.get(name.strip().lower())


_MODE_ALIASES = {
    'chase': CameraMode.CHASE,
    'birds_eye': CameraMode.BIRDS_EYE,
    'birdseye': CameraMode.BIRDS_EYE,
    'side_view': CameraMode.SIDE_VIEW,
    'sideview': CameraMode.SIDE_VIEW,
    'side': CameraMode.SIDE_VIEW,
    'cinematic': CameraMode.CINEMATIC,
}


class SideViewMode(Enum):
    AUTO = 'auto'      # pick the lower-terrain side
    LEFT = 'left'      # +90 degrees from travel
    RIGHT = 'right'    # -90 degrees from travel

    def next(self) -> 'SideViewMode':
        order = [SideViewMode.AUTO, SideViewMode.LEFT, SideViewMode.RIGHT]
        return order[(order.index(self) + 1) % len(order)]

    @classmethod
    def parse(cls, name) -> Optional['SideViewMode']:
        if isinstance(name, SideViewMode):
            return name
        try:
            return SideViewMode(str(name).strip().lower())
        except ValueError:
            return None


@dataclass
class ChaseConfig:
    offset_behind: float = 200.0
    pitch: float = -15.0
    transition_duration: float = 1.0


@dataclass
class BirdsEyeConfig:
    offset_up: float = 800.0
    offset_behind: float = 50.0
    pitch: float = -75.0
    transition_duration: float = 1.0


@dataclass
class SideViewConfig:
    offset_side: float = 400.0
    offset_up: float = 100.0
    pitch: float = -10.0
    switch_threshold: float = 100.0
    look_ahead_distance: float = 300.0
    look_ahead_samples: int = 3
    transition_duration: float = 1.0


@dataclass
class CinematicConfig:
    orbit_radius: float = 300.0
    orbit_speed: float = 0.15  # radians per second
    pitch_min: float = -30.0
    pitch_max: float = -5.0
    height_min: float = 100.0
    height_max: float = 400.0
    transition_duration: float = 1.5


_CONFIG_TYPES = {
    CameraMode.CHASE: ChaseConfig,
    CameraMode.BIRDS_EYE: BirdsEyeConfig,
    CameraMode.SIDE_VIEW: SideViewConfig,
    CameraMode.CINEMATIC: CinematicConfig,
}


def mode_configs_from(modes_section: Optional[Dict[str, Any]] = None) -> Dict[CameraMode, Any]:
    """
    Build per-mode configs from the 'camera.modes' config section.
    Unknown keys are ignored, missing keys keep their defaults.
    """
    modes_section = modes_section or {}
    configs = {}
    for mode, config_type in _CONFIG_TYPES.items():
        values = modes_section.get(mode.value, {}) or {}
        known = {f.name for f in fields(config_type)}
        configs[mode] = config_type(**{k: v for k, v in values.items() if k in known})
    return configs
