# flyover_engine/camera/mode_strategy.py

from abc import ABC, abstractmethod
from flyover_engine.camera.camera_modes import CameraMode
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.route.route_track import TrackingFrame


class ModeStrategy(ABC):
    """
    Base class for camera mode strategies.
    A strategy maps a tracking frame to the desired camera pose for its mode,
    before terrain guarding and smoothing.
    """

    mode: CameraMode = None

    def __init__(self, config):
        self.config = config
        # Set when the last compute() placed the camera somewhere it could not
        # have moved to smoothly (e.g. the side view changed sides)
        self.jumped = False

    @property
    def transition_duration(self) -> float:
        return float(self.config.transition_duration)

    def on_enter(self):
        """Called when the mode becomes the target mode."""
        pass

    @abstractmethod
    def compute(self, frame: TrackingFrame) -> CameraPose:
        """Desired camera pose for this frame."""
        pass
