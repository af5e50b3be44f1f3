# flyover_engine/input/command_queue.py

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, List


class CommandKind(Enum):
    SEEK = 'seek'
    SET_MODE = 'set_mode'
    SET_ZOOM = 'set_zoom'
    ADJUST_ZOOM = 'adjust_zoom'
    SET_SPEED = 'set_speed'
    SET_SPEED_PRESET = 'set_speed_preset'
    PLAY = 'play'
    PAUSE = 'pause'
    BEGIN_SCRUB = 'begin_scrub'
    UPDATE_SCRUB = 'update_scrub'
    END_SCRUB = 'end_scrub'
    INTERACTION_START = 'interaction_start'
    INTERACTION_END = 'interaction_end'
    ADJUST_CHASE_PITCH = 'adjust_chase_pitch'
    SET_SIDE_VIEW_MODE = 'set_side_view_mode'
    CYCLE_SIDE_VIEW_MODE = 'cycle_side_view_mode'


@dataclass(frozen=True)
class ControllerCommand:
    kind: CommandKind
    value: Any = None


class CommandQueue:
    """
    Commands received between ticks.
    The controller drains the queue at the start of each tick, so no tick
    sees a half-applied command.
    """

    def __init__(self):
        self.commands: Deque[ControllerCommand] = deque()

    def push(self, kind: CommandKind, value: Any = None):
        self.commands.append(ControllerCommand(kind, value))

    def drain(self) -> List[ControllerCommand]:
        """Remove and return all pending commands in arrival order."""
        drained = []
        while self.commands:
            drained.append(self.commands.popleft())
        return drained

    def __len__(self) -> int:
        return len(self.commands)
