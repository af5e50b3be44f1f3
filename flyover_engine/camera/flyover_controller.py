# flyover_engine/camera/flyover_controller.py

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
import numpy as np
from flyover_engine.camera.camera_blender import ModeTransitionManager, PoseBlend
from flyover_engine.camera.camera_modes import (
    CameraMode, SideViewMode, mode_configs_from,
    PITCH_MIN, PITCH_MAX, PITCH_STEP, PITCH_BIRDS_EYE_THRESHOLD, ZOOM_MIN, ZOOM_MAX, ZOOM_STEP, ZOOM_DEFAULT,
)
from flyover_engine.camera.camera_pose import CameraPose, PathPoint
from flyover_engine.camera.mode_strategy import ModeStrategy
from flyover_engine.camera.modes.birds_eye import BirdsEyeStrategy
from flyover_engine.camera.modes.chase import ChaseStrategy
from flyover_engine.camera.modes.cinematic import CinematicStrategy
from flyover_engine.camera.modes.side_view import SideViewStrategy
from flyover_engine.camera.overview import OverviewFramer, ScrubFrameState
from flyover_engine.camera.smoothing import SmoothingStage
from flyover_engine.camera.terrain_guard import GuardResult, TerrainGuard
from flyover_engine.camera.user_override import UserOverrideManager
from flyover_engine.core.config import Config
from flyover_engine.core.playback import PlaybackClock
from flyover_engine.input.command_queue import CommandKind, CommandQueue, ControllerCommand
from flyover_engine.rendering.renderer import Renderer, ViewRequest
from flyover_engine.route.path_sampler import PathSampler
from flyover_engine.route.route_track import RouteTrack, TrackingFrame
from flyover_engine.route.terrain import TerrainOracle
from flyover_engine.utils.geo import ease_out_cubic, haversine_distance, shortest_angle_delta
from flyover_engine.core.logging import get_logger

logger = get_logger()

# Zoom handed to the renderer's coarse fallback
FALLBACK_VIEW_ZOOM = 14.0

# Debug tracing
DEBUG_LOG_INTERVAL = 30
JITTER_BEARING = 10.0    # degrees per tick
JITTER_ALTITUDE = 50.0   # meters per tick
JITTER_POSITION = 100.0  # meters per tick


class CameraPhase(Enum):
    """Which source decides the emitted pose this tick, highest priority first."""

    OVERVIEW = 'overview'
    OVERRIDE = 'override'
    OVERRIDE_RETURN = 'override_return'
    OVERVIEW_RETURN = 'overview_return'
    MODE_TRANSITION = 'mode_transition'
    GUIDED = 'guided'


def _settings_for(component, settings: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the config keys the component's constructor accepts."""
    accepted = inspect.signature(component.__init__).parameters
    unknown = sorted(set(settings) - set(accepted))
    if unknown:
        logger.warning(f"Ignoring unknown {component.__name__} settings: {', '.join(unknown)}")
    return {key: value for key, value in settings.items() if key in accepted and key != 'self'}


@dataclass(frozen=True)
class Telemetry:
    progress: float
    distance_km: float
    mode: CameraMode
    target_mode: CameraMode
    phase: CameraPhase
    terrain_adjusted: bool
    playing: bool


@dataclass
class _GuidedTarget:
    frame: TrackingFrame
    pose: CameraPose
    guard: GuardResult


class CameraController:
    """
    Flyover camera orchestrator.

    Commands are queued and applied at the start of the next tick. Each tick
    samples the route, asks the target mode's strategy for a pose, guards and
    smooths it, then lets exactly one phase decide what reaches the renderer.
    """

    def __init__(self, sampler: PathSampler, renderer: Renderer, terrain: Optional[TerrainOracle] = None,
                 config: Optional[Config] = None):
        self.config = config or Config()
        self.renderer = renderer
        self.debug = bool(self.config.get('engine.debug', False))

        self.route = RouteTrack(sampler, self.config.get('playback.look_ahead_distance', 50.0))
        self.clock = PlaybackClock(
            self.route.total_distance_km,
            base_duration=self.config.get('playback.base_duration', 600.0),
            min_duration=self.config.get('playback.min_duration', 180.0),
            speeds=self.config.get('playback.speeds'),
        )
        self.speed_multiplier = float(self.config.get('playback.speed_multiplier', 0.25))
        self.zoom = float(np.clip(self.config.get('camera.zoom', ZOOM_DEFAULT), ZOOM_MIN, ZOOM_MAX))

        # Mode strategies
        mode_configs = mode_configs_from(self.config.get('camera.modes'))
        chase = ChaseStrategy(mode_configs[CameraMode.CHASE])
        chase.pitch = self.config.get('camera.chase_pitch', chase.pitch)
        side_mode = SideViewMode.parse(self.config.get('camera.side_view_mode', 'auto')) or SideViewMode.AUTO
        self.strategies: Dict[CameraMode, ModeStrategy] = {
            CameraMode.CHASE: chase,
            CameraMode.BIRDS_EYE: BirdsEyeStrategy(mode_configs[CameraMode.BIRDS_EYE]),
            CameraMode.SIDE_VIEW: SideViewStrategy(mode_configs[CameraMode.SIDE_VIEW], terrain=terrain,
                                                   route=self.route, side_mode=side_mode),
            CameraMode.CINEMATIC: CinematicStrategy(mode_configs[CameraMode.CINEMATIC]),
        }

        self.guard = TerrainGuard(terrain, **_settings_for(TerrainGuard, self.config.section('terrain')))
        self.smoothing = SmoothingStage(**_settings_for(SmoothingStage, self.config.section('smoothing')))

        initial_mode = CameraMode.parse(self.config.get('camera.initial_mode')) or CameraMode.CINEMATIC
        self.transitions = ModeTransitionManager(initial_mode, lambda mode: self.strategies[mode].transition_duration)
        self.strategies[initial_mode].on_enter()

        self.override = UserOverrideManager(
            grace_period=self.config.get('override.grace_period', 2.0),
            return_duration=self.config.get('override.return_duration', 2.0),
        )

        overview_settings = self.config.section('overview')
        self.overview_return_duration = float(overview_settings.pop('return_duration', 0.5))
        self.overview = OverviewFramer(sampler, **_settings_for(OverviewFramer, overview_settings))
        self.scrub: Optional[ScrubFrameState] = None
        self.overview_return: Optional[PoseBlend] = None

        self.commands = CommandQueue()
        self.last_pose: Optional[CameraPose] = None
        self.last_tracked: Optional[PathPoint] = None
        self.tick_count = 0
        self._discontinuity = True

        self._command_handlers: Dict[CommandKind, Callable[[Any], None]] = {
            CommandKind.SEEK: self._apply_seek,
            CommandKind.SET_MODE: self._apply_set_mode,
            CommandKind.SET_ZOOM: self._apply_set_zoom,
            CommandKind.ADJUST_ZOOM: self._apply_adjust_zoom,
            CommandKind.SET_SPEED: self._apply_set_speed,
            CommandKind.SET_SPEED_PRESET: self._apply_speed_preset,
            CommandKind.PLAY: self._apply_play,
            CommandKind.PAUSE: self._apply_pause,
            CommandKind.BEGIN_SCRUB: self._apply_begin_scrub,
            CommandKind.UPDATE_SCRUB: self._apply_update_scrub,
            CommandKind.END_SCRUB: self._apply_end_scrub,
            CommandKind.INTERACTION_START: self._apply_interaction_start,
            CommandKind.INTERACTION_END: self._apply_interaction_end,
            CommandKind.ADJUST_CHASE_PITCH: self._apply_chase_pitch,
            CommandKind.SET_SIDE_VIEW_MODE: self._apply_side_view_mode,
            CommandKind.CYCLE_SIDE_VIEW_MODE: self._apply_cycle_side_view,
        }
        self._phase_handlers: Dict[CameraPhase, Callable[[float, Optional[_GuidedTarget]], Optional[CameraPose]]] = {
            CameraPhase.OVERVIEW: self._tick_overview,
            CameraPhase.OVERRIDE: self._tick_override,
            CameraPhase.OVERRIDE_RETURN: self._tick_override_return,
            CameraPhase.OVERVIEW_RETURN: self._tick_overview_return,
            CameraPhase.MODE_TRANSITION: self._tick_mode_transition,
            CameraPhase.GUIDED: self._tick_guided,
        }

        logger.info(f"Camera controller ready: {self.route.total_distance_km:.2f} km route, "
                    f"{self.clock.duration:.0f} s traversal, mode {initial_mode.value}")

    # ------------------------------------------------------------------
    # Commands (queued, applied at the start of the next tick)
    # ------------------------------------------------------------------

    def seek(self, progress: float):
        self.commands.push(CommandKind.SEEK, progress)

    def set_mode(self, mode):
        self.commands.push(CommandKind.SET_MODE, mode)

    def set_zoom(self, factor: float):
        self.commands.push(CommandKind.SET_ZOOM, factor)

    def adjust_zoom(self, delta: float = ZOOM_STEP):
        self.commands.push(CommandKind.ADJUST_ZOOM, delta)

    def set_speed_multiplier(self, value: float):
        self.commands.push(CommandKind.SET_SPEED, value)

    def set_speed_preset(self, label: str):
        self.commands.push(CommandKind.SET_SPEED_PRESET, label)

    def play(self):
        self.commands.push(CommandKind.PLAY)

    def pause(self):
        self.commands.push(CommandKind.PAUSE)

    def begin_scrub(self, full_route: bool = False):
        self.commands.push(CommandKind.BEGIN_SCRUB, full_route)

    def update_scrub(self, progress: float):
        self.commands.push(CommandKind.UPDATE_SCRUB, progress)

    def end_scrub(self):
        self.commands.push(CommandKind.END_SCRUB)

    def notify_user_interaction_start(self):
        self.commands.push(CommandKind.INTERACTION_START)

    def notify_user_interaction_end(self):
        self.commands.push(CommandKind.INTERACTION_END)

    def adjust_chase_pitch(self, delta: float = PITCH_STEP):
        self.commands.push(CommandKind.ADJUST_CHASE_PITCH, delta)

    def set_side_view_mode(self, side_mode):
        self.commands.push(CommandKind.SET_SIDE_VIEW_MODE, side_mode)

    def cycle_side_view_mode(self):
        self.commands.push(CommandKind.CYCLE_SIDE_VIEW_MODE)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def progress(self) -> float:
        return self.clock.progress

    @property
    def playing(self) -> bool:
        return self.clock.playing

    @property
    def mode(self) -> CameraMode:
        return self.transitions.current_mode

    @property
    def target_mode(self) -> CameraMode:
        return self.transitions.target_mode

    @property
    def phase(self) -> CameraPhase:
        if self.scrub is not None:
            return CameraPhase.OVERVIEW
        if self.override.suspending:
            return CameraPhase.OVERRIDE
        if self.override.returning:
            return CameraPhase.OVERRIDE_RETURN
        if self.overview_return is not None:
            return CameraPhase.OVERVIEW_RETURN
        if self.transitions.is_transitioning:
            return CameraPhase.MODE_TRANSITION
        return CameraPhase.GUIDED

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> Telemetry:
        """Advance one frame and write the resulting pose to the renderer."""
        dt = self._sanitize_dt(dt)
        self.tick_count += 1

        for command in self.commands.drain():
            self._apply_command(command)

        if self.scrub is None:
            self.clock.advance(dt, self.speed_multiplier)
            self.override.update(dt, self._capture_pose)

        target = self._guided_target(dt)
        phase = self.phase
        pose = self._phase_handlers[phase](dt, target)

        # Only what reached the renderer this tick counts
        terrain_adjusted = False
        if pose is not None:
            tracked = self._tracked_for(phase, target)
            if tracked is not None:
                result = self.guard.apply(pose, tracked)
                guided_adjusted = phase != CameraPhase.OVERVIEW and target is not None and target.guard.adjusted
                terrain_adjusted = result.adjusted or guided_adjusted
                self._emit(result.pose, tracked)

        self._discontinuity = False
        return Telemetry(
            progress=self.clock.progress,
            distance_km=self.route.distance_at(self.clock.progress),
            mode=self.transitions.current_mode,
            target_mode=self.transitions.target_mode,
            phase=phase,
            terrain_adjusted=terrain_adjusted,
            playing=self.clock.playing,
        )

    def _guided_target(self, dt: float) -> Optional[_GuidedTarget]:
        """Guarded and smoothed pose of the target mode, or None past the route ends."""
        # Paused: no elapsed time for animated modes
        strategy_dt = dt if self.clock.playing else 0.0
        frame = self.route.frame_at(self.clock.progress, self.zoom, strategy_dt)
        if frame is None:
            return None

        mode = self.transitions.target_mode
        strategy = self.strategies[mode]
        desired = strategy.compute(frame)
        if strategy.jumped:
            self._reset_smoothing()

        guarded = self.guard.apply(desired, frame.tracked_point)
        pose = self.smoothing.apply(guarded.pose, mode, floor=guarded.min_altitude)
        return _GuidedTarget(frame=frame, pose=pose, guard=guarded)

    def _tracked_for(self, phase: CameraPhase, target: Optional[_GuidedTarget]) -> Optional[PathPoint]:
        if phase == CameraPhase.OVERVIEW:
            return self.route.point_at(self.clock.progress) or self.last_tracked
        return target.frame.tracked_point if target is not None else None

    # Phase handlers: return the pose to emit, or None to leave the renderer alone

    def _tick_overview(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        current_point = self.route.point_at(self.clock.progress)
        return self.overview.step(self.scrub, current_point, dt)

    def _tick_override(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        # The user owns the camera
        return None

    def _tick_override_return(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        if target is None:
            return None
        return self.override.step_return(dt, target.pose)

    def _tick_overview_return(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        if target is None:
            return None
        pose = self.overview_return.step(dt, target.pose)
        if self.overview_return.finished:
            logger.debug("Returned from overview")
            self.overview_return = None
        return pose

    def _tick_mode_transition(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        if target is None:
            return None
        return self.transitions.step(dt, target.pose)

    def _tick_guided(self, dt: float, target: Optional[_GuidedTarget]) -> Optional[CameraPose]:
        if target is None:
            # Past the route ends: hold the last pose
            return None
        return target.pose

    def _emit(self, pose: CameraPose, tracked: PathPoint):
        if self.debug:
            self._trace(pose)

        try:
            self.renderer.set_pose(pose, tracked)
        except Exception as e:
            logger.debug(f"Renderer rejected camera pose, using view fallback: {e}")
            try:
                self.renderer.set_view(ViewRequest(
                    center=(tracked.lng, tracked.lat),
                    zoom=FALLBACK_VIEW_ZOOM,
                    pitch=abs(pose.pitch),
                    bearing=pose.bearing,
                ))
            except Exception as fallback_error:
                logger.warning(f"Renderer view fallback failed: {fallback_error}")

        self.last_pose = pose
        self.last_tracked = tracked

    def _trace(self, pose: CameraPose):
        last = self.last_pose
        if last is not None and not self._discontinuity:
            bearing_jump = abs(shortest_angle_delta(last.bearing, pose.bearing))
            altitude_jump = abs(pose.alt - last.alt)
            position_jump = float(haversine_distance(last.lng, last.lat, pose.lng, pose.lat))
            if bearing_jump > JITTER_BEARING or altitude_jump > JITTER_ALTITUDE or position_jump > JITTER_POSITION:
                logger.warning(f"Camera jitter in {self.phase.value}: bearing {bearing_jump:.1f} deg, "
                               f"altitude {altitude_jump:.1f} m, position {position_jump:.1f} m")

        if self.tick_count % DEBUG_LOG_INTERVAL == 0:
            logger.debug(f"Camera [{self.transitions.target_mode.value}/{self.phase.value}] "
                         f"progress={self.clock.progress:.4f} lng={pose.lng:.5f} lat={pose.lat:.5f} "
                         f"alt={pose.alt:.0f} bearing={pose.bearing:.1f} pitch={pose.pitch:.1f}")

    # ------------------------------------------------------------------
    # Command application
    # ------------------------------------------------------------------

    def _apply_command(self, command: ControllerCommand):
        handler = self._command_handlers.get(command.kind)
        if handler is None:
            logger.warning(f"Ignoring unknown command {command.kind}")
            return
        handler(command.value)

    def _apply_seek(self, value):
        progress = self._as_float(value, "seek")
        if progress is None:
            return
        self.clock.seek(progress)
        self.transitions.complete()
        self.override.cancel()
        self.overview_return = None
        if self.scrub is not None and not self.scrub.dragging:
            self.scrub = None
        self._reset_smoothing()

    def _apply_set_mode(self, value):
        mode = CameraMode.parse(value)
        if mode is None:
            logger.warning(f"Ignoring unknown camera mode {value!r}")
            return
        self._change_mode(mode)

    def _change_mode(self, mode: CameraMode):
        self.override.cancel()
        self.overview_return = None
        if self.scrub is not None and not self.scrub.dragging:
            self.scrub = None

        if not self.transitions.request(mode, self._capture_pose()):
            return

        self.strategies[mode].on_enter()
        self._reset_smoothing()
        if not self.clock.playing:
            # Nothing is animating: take the new mode at once
            self.transitions.complete()

    def _apply_set_zoom(self, value):
        zoom = self._as_float(value, "set_zoom")
        if zoom is None:
            return
        self.zoom = float(np.clip(zoom, ZOOM_MIN, ZOOM_MAX))

    def _apply_adjust_zoom(self, value):
        delta = self._as_float(value, "adjust_zoom")
        if delta is not None:
            self._apply_set_zoom(self.zoom + delta)

    def _apply_set_speed(self, value):
        speed = self._as_float(value, "set_speed_multiplier")
        if speed is None:
            return
        self.speed_multiplier = max(speed, 0.0)

    def _apply_speed_preset(self, label):
        speed = self.clock.speed_for(label)
        if speed is None:
            logger.warning(f"Ignoring unknown speed preset {label!r}")
            return
        self.speed_multiplier = speed

    def _apply_play(self, _):
        if self.clock.progress >= 1.0:
            # Replay from the start
            self._reset_smoothing()
        self.clock.play()
        if self.scrub is not None and not self.scrub.dragging:
            self._leave_overview()

    def _apply_pause(self, _):
        self.clock.pause()

    def _apply_begin_scrub(self, full_route):
        if self.scrub is not None and self.scrub.dragging:
            return
        start_point = self.route.point_at(self.clock.progress)
        self.scrub = self.overview.begin(start_point, self._capture_pose(), full_route=bool(full_route))
        self.override.cancel()
        self.overview_return = None
        self._reset_smoothing()

    def _apply_update_scrub(self, value):
        if self.scrub is None or not self.scrub.dragging:
            self._apply_seek(value)
            return
        progress = self._as_float(value, "update_scrub")
        if progress is not None:
            self.clock.seek(progress)

    def _apply_end_scrub(self, _):
        if self.scrub is None or not self.scrub.dragging:
            return
        self.transitions.complete()
        self._reset_smoothing()
        if self.clock.playing:
            self._leave_overview()
        else:
            # Paused: hold the overview until play, seek or a mode change
            self.scrub.dragging = False

    def _leave_overview(self):
        start = self.scrub.current_target_pose if self.scrub is not None else None
        self.scrub = None
        self._reset_smoothing()
        if start is not None:
            self.overview_return = PoseBlend(start, self.overview_return_duration, ease_out_cubic)

    def _apply_interaction_start(self, _):
        self.overview_return = None
        if self.scrub is not None and not self.scrub.dragging:
            self.scrub = None
        self.override.interaction_start()

    def _apply_interaction_end(self, _):
        self.override.interaction_end()

    def _apply_chase_pitch(self, value):
        delta = self._as_float(value, "adjust_chase_pitch")
        if delta is None or delta == 0:
            return
        chase: ChaseStrategy = self.strategies[CameraMode.CHASE]
        modes = (self.transitions.current_mode, self.transitions.target_mode)

        if CameraMode.BIRDS_EYE in modes and delta > 0:
            chase.pitch = PITCH_BIRDS_EYE_THRESHOLD + PITCH_STEP
            self._change_mode(CameraMode.CHASE)
            return

        if CameraMode.CHASE not in modes:
            if delta < 0:
                self._change_mode(CameraMode.CHASE)
            return

        if self.transitions.target_mode == CameraMode.CHASE:
            self.transitions.complete()

        new_pitch = float(np.clip(chase.pitch + delta, PITCH_MIN, PITCH_MAX))
        if new_pitch <= PITCH_BIRDS_EYE_THRESHOLD:
            self._change_mode(CameraMode.BIRDS_EYE)
            return
        chase.pitch = new_pitch
        logger.debug(f"Chase pitch {new_pitch:.0f} deg")

    def _apply_side_view_mode(self, value):
        side_mode = SideViewMode.parse(value)
        if side_mode is None:
            logger.warning(f"Ignoring unknown side view mode {value!r}")
            return
        self._set_side_mode(side_mode)

    def _apply_cycle_side_view(self, _):
        side_view: SideViewStrategy = self.strategies[CameraMode.SIDE_VIEW]
        self._set_side_mode(side_view.side_mode.next())

    def _set_side_mode(self, side_mode: SideViewMode):
        side_view: SideViewStrategy = self.strategies[CameraMode.SIDE_VIEW]
        side_view.side_mode = side_mode
        logger.debug(f"Side view mode {side_mode.value}")
        if CameraMode.SIDE_VIEW not in (self.transitions.current_mode, self.transitions.target_mode):
            self._change_mode(CameraMode.SIDE_VIEW)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reset_smoothing(self):
        self.smoothing.reset()
        self._discontinuity = True

    def _capture_pose(self) -> Optional[CameraPose]:
        """What the renderer shows now, falling back to the last emitted pose."""
        try:
            pose = self.renderer.current_pose()
        except Exception as e:
            logger.debug(f"Could not read renderer pose: {e}")
            pose = None
        return pose if pose is not None else self.last_pose

    @staticmethod
    def _sanitize_dt(dt) -> float:
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            return 0.0
        if not np.isfinite(dt) or dt < 0:
            return 0.0
        return dt

    @staticmethod
    def _as_float(value, command: str) -> Optional[float]:
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring {command}({value!r}): not a number")
            return None
        if not np.isfinite(number):
            logger.warning(f"Ignoring {command}({value!r}): not finite")
            return None
        return number
