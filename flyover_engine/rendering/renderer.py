# flyover_engine/rendering/renderer.py

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple
from flyover_engine.camera.camera_pose import CameraPose, PathPoint


@dataclass(frozen=True)
class ViewRequest:
    """Coarse camera placement: what a map view understands without a free camera."""

    center: Tuple[float, float]
    zoom: float
    pitch: float      # tilt from vertical, degrees (0 = straight down)
    bearing: float


class Renderer(ABC):
    """
    Rendering surface the controller drives.
    Implementations may raise from set_pose; the controller falls back to set_view.
    """

    @abstractmethod
    def set_pose(self, pose: CameraPose, look_at: PathPoint):
        """Place the camera at pose, aimed at look_at."""
        pass

    @abstractmethod
    def set_view(self, view: ViewRequest):
        """Lower-fidelity placement around a center point."""
        pass

    @abstractmethod
    def current_pose(self) -> Optional[CameraPose]:
        """What the surface is showing now, including manual user changes."""
        pass


class RecordingRenderer(Renderer):
    """
    In-memory renderer that keeps every call.
    Used headless by the demo and as a test double.
    """

    def __init__(self, fail_set_pose: bool = False, fail_set_view: bool = False):
        self.fail_set_pose = fail_set_pose
        self.fail_set_view = fail_set_view

        self.poses: List[CameraPose] = []
        self.views: List[ViewRequest] = []
        self.look_ats: List[PathPoint] = []
        self._current: Optional[CameraPose] = None

    def set_pose(self, pose: CameraPose, look_at: PathPoint):
        if self.fail_set_pose:
            raise RuntimeError("free camera unavailable")
        self.poses.append(pose)
        self.look_ats.append(look_at)
        self._current = pose

    def set_view(self, view: ViewRequest):
        if self.fail_set_view:
            raise RuntimeError("view update failed")
        self.views.append(view)

    def current_pose(self) -> Optional[CameraPose]:
        return self._current

    def move_by_user(self, pose: CameraPose):
        """Simulate the user dragging the view to a new pose."""
        self._current = pose

    @property
    def last_pose(self) -> Optional[CameraPose]:
        return self.poses[-1] if self.poses else None
