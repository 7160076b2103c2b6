"""Finite State Machine for the simulation controller."""

import logging
from enum import Enum, auto
from typing import Dict, Callable, Optional, FrozenSet

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """What the controller is currently ticking."""
    IDLE = auto()
    TRAINING = auto()
    ADAPTIVE = auto()


# IDLE is the hub; the two modes never run at the same time
VALID_TRANSITIONS: Dict[EngineState, FrozenSet[EngineState]] = {
    EngineState.IDLE: frozenset({EngineState.TRAINING, EngineState.ADAPTIVE}),
    EngineState.TRAINING: frozenset({EngineState.IDLE}),
    EngineState.ADAPTIVE: frozenset({EngineState.IDLE}),
}

STATE_DESCRIPTIONS: Dict[EngineState, str] = {
    EngineState.IDLE: "Ready",
    EngineState.TRAINING: "Training agent with Q-Learning",
    EngineState.ADAPTIVE: "Following path around moving obstacles",
}

StateCallback = Callable[[Optional[Dict]], None]


class EngineStateMachine:
    """
    Tracks the controller mode and runs enter/exit hooks.

    Invalid transitions are refused with False rather than raised, so a host
    can call start_* unconditionally from a button handler.
    """

    def __init__(self):
        self.current_state = EngineState.IDLE
        self._enter_callbacks: Dict[EngineState, StateCallback] = {}
        self._exit_callbacks: Dict[EngineState, StateCallback] = {}

    def on_state_enter(self, state: EngineState, callback: StateCallback):
        self._enter_callbacks[state] = callback

    def on_state_exit(self, state: EngineState, callback: StateCallback):
        self._exit_callbacks[state] = callback

    def can_transition(self, to_state: EngineState) -> bool:
        return to_state in VALID_TRANSITIONS[self.current_state]

    def transition(self, to_state: EngineState, context: Optional[Dict] = None) -> bool:
        """Move to to_state, running the exit hook of the old state and the enter hook of the new one."""
        if not self.can_transition(to_state):
            logger.debug("Refused transition %s -> %s", self.current_state.name, to_state.name)
            return False

        exit_callback = self._exit_callbacks.get(self.current_state)
        if exit_callback:
            exit_callback(context)

        self.current_state = to_state

        enter_callback = self._enter_callbacks.get(to_state)
        if enter_callback:
            enter_callback(context)
        return True

    def start_training(self, context: Optional[Dict] = None) -> bool:
        return self.transition(EngineState.TRAINING, context)

    def start_adaptive(self, context: Optional[Dict] = None) -> bool:
        return self.transition(EngineState.ADAPTIVE, context)

    def reset_to_idle(self, context: Optional[Dict] = None) -> bool:
        return self.transition(EngineState.IDLE, context)

    def is_idle(self) -> bool:
        return self.current_state == EngineState.IDLE

    def is_training(self) -> bool:
        return self.current_state == EngineState.TRAINING

    def is_adaptive(self) -> bool:
        return self.current_state == EngineState.ADAPTIVE

    def get_state_description(self) -> str:
        return STATE_DESCRIPTIONS[self.current_state]
