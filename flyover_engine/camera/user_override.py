# flyover_engine/camera/user_override.py

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
from flyover_engine.camera.camera_blender import PoseBlend
from flyover_engine.camera.camera_pose import CameraPose
from flyover_engine.core.logging import get_logger

logger = get_logger()


class OverridePhase(Enum):
    IDLE = 'idle'              # guided control
    INTERACTING = 'interacting'  # pointer down, camera belongs to the user
    GRACE = 'grace'            # pointer up, waiting before handing back
    RETURNING = 'returning'    # easing back to the guided pose


@dataclass
class OverrideState:
    active: bool = False
    last_user_pose: Optional[CameraPose] = None
    return_progress: float = 1.0


class UserOverrideManager:
    """
    Suspends guided camera output while the user moves the view by hand,
    then eases back once the user has let go for grace_period seconds.
    """

    def __init__(self, grace_period: float = 2.0, return_duration: float = 2.0):
        self.grace_period = grace_period
        self.return_duration = return_duration

        self.phase = OverridePhase.IDLE
        self._idle_time = 0.0
        self._return: Optional[PoseBlend] = None

    @property
    def suspending(self) -> bool:
        """True while no guided pose may be written."""
        return self.phase in (OverridePhase.INTERACTING, OverridePhase.GRACE)

    @property
    def returning(self) -> bool:
        return self.phase == OverridePhase.RETURNING

    @property
    def state(self) -> OverrideState:
        if self.phase == OverridePhase.IDLE:
            return OverrideState()
        if self._return is not None:
            return OverrideState(active=False, last_user_pose=self._return.start_pose,
                                 return_progress=self._return.progress)
        return OverrideState(active=True)

    def interaction_start(self):
        if self.phase != OverridePhase.INTERACTING:
            logger.debug("User took control of the camera")
        self.phase = OverridePhase.INTERACTING
        self._idle_time = 0.0
        self._return = None

    def interaction_end(self):
        if self.phase != OverridePhase.INTERACTING:
            return
        self.phase = OverridePhase.GRACE
        self._idle_time = 0.0

    def cancel(self):
        """Drop any override or return; guided control resumes next tick."""
        if self.phase != OverridePhase.IDLE:
            logger.debug("User override cancelled")
        self.phase = OverridePhase.IDLE
        self._idle_time = 0.0
        self._return = None

    def update(self, dt: float, capture_pose: Callable[[], Optional[CameraPose]]):
        """
        Advance the grace timer. When it runs out the pose the user left on
        screen is captured and the return begins.
        """
        if self.phase != OverridePhase.GRACE:
            return

        self._idle_time += max(dt, 0.0)
        if self._idle_time < self.grace_period:
            return

        start = capture_pose()
        if start is None:
            # Nothing to ease from; hand control straight back
            self.cancel()
            return

        self._return = PoseBlend(start, self.return_duration)
        self.phase = OverridePhase.RETURNING
        logger.debug("Returning camera to guided control")

    def step_return(self, dt: float, target: CameraPose) -> CameraPose:
        """Blend towards the guided target; finishes the override when done."""
        if self._return is None:
            return target

        # Emit first, then advance: the first returning tick shows the captured pose
        pose = self._return.blend(target)
        if self._return.finished:
            self.cancel()
        else:
            self._return.advance(dt)
        return pose
