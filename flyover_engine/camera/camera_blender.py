# flyover_engine/camera/camera_blender.py

from dataclasses import dataclass
from typing import Callable, Optional, Union
from flyover_engine.camera.camera_modes import CameraMode
from flyover_engine.camera.camera_pose import CameraPose, lerp_pose
from flyover_engine.utils.geo import ease_out_cubic
from flyover_engine.core.logging import get_logger

logger = get_logger()


class PoseBlend:
    """
    Eased blend from a captured start pose towards a live target.
    The target is supplied on every step, so the blend follows a moving target.
    """

    def __init__(self, start_pose: CameraPose, duration: float,
                 easing: Callable[[float], float] = ease_out_cubic):
        self.start_pose = start_pose
        self.duration = max(float(duration), 1e-6)
        self.easing = easing
        self.progress = 0.0

    @property
    def finished(self) -> bool:
        return self.progress >= 1.0

    def advance(self, dt: float):
        if dt > 0:
            self.progress = min(1.0, self.progress + dt / self.duration)

    def blend(self, target: CameraPose) -> CameraPose:
        """Pose at the current progress, without advancing."""
        return lerp_pose(self.start_pose, target, self.easing(self.progress))

    def step(self, dt: float, target: CameraPose) -> CameraPose:
        self.advance(dt)
        return self.blend(target)


@dataclass(frozen=True)
class Stable:
    mode: CameraMode


@dataclass
class Transitioning:
    from_mode: CameraMode
    to_mode: CameraMode
    blend: PoseBlend

    @property
    def progress(self) -> float:
        return self.blend.progress


TransitionState = Union[Stable, Transitioning]


class ModeTransitionManager:
    """
    Blends between camera modes.

    States are Stable(mode) and Transitioning(from, to, blend). A request while
    transitioning restarts from the pose on screen towards the newest mode; the
    last blended pose stands in only when nothing on screen can be read.
    """

    def __init__(self, initial_mode: CameraMode, duration_for: Callable[[CameraMode], float]):
        self.state: TransitionState = Stable(initial_mode)
        self.duration_for = duration_for
        self._last_blended: Optional[CameraPose] = None

    @property
    def current_mode(self) -> CameraMode:
        if isinstance(self.state, Transitioning):
            return self.state.from_mode
        return self.state.mode

    @property
    def target_mode(self) -> CameraMode:
        if isinstance(self.state, Transitioning):
            return self.state.to_mode
        return self.state.mode

    @property
    def is_transitioning(self) -> bool:
        return isinstance(self.state, Transitioning)

    @property
    def progress(self) -> float:
        if isinstance(self.state, Transitioning):
            return self.state.progress
        return 1.0

    def request(self, mode: CameraMode, current_pose: Optional[CameraPose]) -> bool:
        """
        Start a transition to `mode` from `current_pose`.
        Returns False when nothing changes.
        """
        if isinstance(self.state, Stable) and self.state.mode == mode:
            return False

        start = current_pose
        if isinstance(self.state, Transitioning):
            from_mode = self.state.from_mode
            if start is None:
                start = self._last_blended
        else:
            from_mode = self.state.mode

        if start is None:
            # Nothing on screen yet: cut straight to the new mode
            self.state = Stable(mode)
            logger.debug(f"Camera mode set to {mode.value} (no pose to blend from)")
            return True

        self.state = Transitioning(from_mode, mode, PoseBlend(start, self.duration_for(mode)))
        self._last_blended = start
        logger.debug(f"Camera transition {from_mode.value} -> {mode.value}")
        return True

    def complete(self):
        """Jump to the end of any transition in progress."""
        if isinstance(self.state, Transitioning):
            self.state = Stable(self.state.to_mode)
        self._last_blended = None

    def step(self, dt: float, target: CameraPose) -> CameraPose:
        """Advance the transition and return the blended pose."""
        if not isinstance(self.state, Transitioning):
            return target

        pose = self.state.blend.step(dt, target)
        self._last_blended = pose
        if self.state.blend.finished:
            logger.debug(f"Camera transition to {self.state.to_mode.value} complete")
            self.state = Stable(self.state.to_mode)
            self._last_blended = None
        return pose
