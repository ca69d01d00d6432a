"""Wire-fitting Q-learning agent: selection, state recording, reinforcement.

The agent owns no learned numbers of its own. Wires are derived afresh from
the function approximator whenever they are needed; a reinforcement step
changes behaviour only by asking the trainer to fit the approximator
toward an adjusted wire set.

Reinforcement update for the last (state s, action a) pair, given reward r,
next state s' and elapsed time t (ms):

    k        = scaling_factor_to_millis * t
    feedback = (1/k) * (r + gamma^k * max_w Q(s')) + (1 - 1/k) * max_w Q(s)
    target   = (1 - alpha) * Q(s, a) + alpha * feedback

then the wires of s are moved until Q(s, a) ≈ target and the approximator
is trained on (s, encode(adjusted wires)). Short elapsed times lean on the
previous estimate; long ones lean on the fresh bootstrap.

Concurrency: one RLock per agent serialises selection and reinforcement.
AgentState is an immutable value swapped in one assignment, so the
(last_action, last_state) pair is always consistent.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..utils.profiler import timer
from ..utils.validators import AgentConfig
from . import selector
from .adjuster import FitResult, WireAdjuster
from .interpolator import Interpolator
from .networks import FunctionApproximator, Trainer
from .wires import WireSet, decode, encode

logger = logging.getLogger(__name__)

Vector = Union[np.ndarray, Sequence[float]]


class PreconditionError(ValueError):
    """Raised when an operation is called in a state where it cannot run."""


@dataclass(frozen=True, eq=False)
class AgentState:
    """The most recent choice: action and the state it was chosen in.

    Both vectors are private read-only copies, so a snapshot handed out by
    WireFitAgent.state cannot be edited behind the agent's lock.
    """

    last_action: np.ndarray
    last_state: Optional[np.ndarray] = None

    def __post_init__(self):
        object.__setattr__(self, "last_action", _frozen_copy(self.last_action))
        if self.last_state is not None:
            object.__setattr__(self, "last_state", _frozen_copy(self.last_state))

    @classmethod
    def initial(cls, action_dimensions: int) -> "AgentState":
        return cls(last_action=np.zeros(action_dimensions, dtype=np.float64))


def _frozen_copy(values: Vector) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class UpdateReport:
    """Numbers produced by one reinforcement step (for logging and tests)."""

    old_value: float
    feedback: float
    target: float
    fit: FitResult


class WireFitAgent:
    """Continuous-action Q-learner over a wire-emitting approximator.

    Parameters
    ----------
    config : AgentConfig
        Frozen hyperparameters
    approximator : FunctionApproximator
        State → raw wire output
    trainer : Trainer
        Fits the approximator toward target outputs
    rng : np.random.Generator, optional
        Source of Boltzmann determiners; defaults to a fresh generator
    state : AgentState, optional
        Initial recorded state (e.g. restored from a checkpoint)
    """

    def __init__(
        self,
        config: AgentConfig,
        approximator: FunctionApproximator,
        trainer: Trainer,
        rng: Optional[np.random.Generator] = None,
        state: Optional[AgentState] = None
    ):
        self.config = config
        self.approximator = approximator
        self.trainer = trainer
        self.rng = rng if rng is not None else np.random.default_rng()

        self.interpolator = Interpolator(config.smoothing_factor, config.epsilon)
        self.adjuster = WireAdjuster(
            self.interpolator,
            learning_rate=config.gradient_descent_learning_rate,
            error_target=config.gradient_descent_error_target,
            max_iterations=config.gradient_descent_max_iterations,
        )

        self._lock = threading.RLock()
        self._state = state if state is not None else AgentState.initial(config.action_dimensions)
        self._check_action(self._state.last_action)

    # ------------------------------------------------------------------
    # Recorded state
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        with self._lock:
            return self._state

    @state.setter
    def state(self, value: AgentState) -> None:
        self._check_action(value.last_action)
        with self._lock:
            self._state = value

    def _record(self, action: np.ndarray, state: np.ndarray) -> np.ndarray:
        self._state = AgentState(last_action=action, last_state=state)
        return action

    def _check_action(self, action: np.ndarray) -> None:
        if np.shape(action) != (self.config.action_dimensions,):
            raise ValueError(
                f"Action must have shape ({self.config.action_dimensions},), got {np.shape(action)}"
            )

    # ------------------------------------------------------------------
    # Wires
    # ------------------------------------------------------------------

    def wires(self, state: Vector) -> WireSet:
        """Decode the approximator's current output for state into wires."""
        raw = self.approximator.forward(np.asarray(state, dtype=np.float64))
        return decode(raw, self.config.action_dimensions, self.config.number_of_wires)

    def highest_reward(self, state: Vector) -> float:
        """Greedy upper bound max_w reward_w of the value function at state."""
        return self.wires(state).max_reward()

    def best_action(self, state: Vector) -> np.ndarray:
        """Action of the highest-reward wire, without recording it."""
        return selector.best_action(self.wires(state))

    def q_value(self, state: Vector, action: Vector) -> float:
        """Interpolated Q(state, action)."""
        action = np.asarray(action, dtype=np.float64)
        self._check_action(action)
        return self.interpolator.value(self.wires(state), action)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def choose_best_action(self, state: Vector) -> np.ndarray:
        """Greedy action for state; recorded as the pending action."""
        state = np.asarray(state, dtype=np.float64)
        with self._lock:
            return self._record(self.best_action(state), state)

    def choose_boltzmann_action(self, state: Vector, temperature: float) -> np.ndarray:
        """Boltzmann-sampled action for state; recorded as the pending action."""
        state = np.asarray(state, dtype=np.float64)
        with self._lock:
            action = selector.boltzmann_action(self.wires(state), temperature, self.rng)
            return self._record(action, state)

    # ------------------------------------------------------------------
    # Reinforcement
    # ------------------------------------------------------------------

    def compute_target(
        self,
        old_value: float,
        reward: float,
        highest_new: float,
        highest_last: float,
        elapsed_time_millis: float
    ) -> Tuple[float, float]:
        """Time-scaled TD feedback and the blended target; returns (feedback, target)."""
        cfg = self.config
        scaling = cfg.scaling_factor_to_millis * elapsed_time_millis
        feedback = (
            (1.0 / scaling) * (reward + cfg.devaluation_factor ** scaling * highest_new)
            + (1.0 - 1.0 / scaling) * highest_last
        )
        target = (1.0 - cfg.learning_rate) * old_value + cfg.learning_rate * feedback
        return feedback, target

    def apply_reinforcement(
        self,
        reward: float,
        new_state: Vector,
        elapsed_time_millis: float
    ) -> UpdateReport:
        """Reinforce the last recorded (state, action) pair.

        Parameters
        ----------
        reward : float
            Reward received for the last action
        new_state : Vector
            State reached after the last action
        elapsed_time_millis : float
            Time between the action and this reward, > 0

        Returns
        -------
        UpdateReport
            old value, feedback, target and solver outcome

        Raises
        ------
        PreconditionError
            If elapsed_time_millis <= 0 or no action has been chosen yet
        """
        if not elapsed_time_millis > 0:
            raise PreconditionError(
                f"elapsed_time_millis must be > 0, got {elapsed_time_millis}"
            )

        with self._lock:
            snapshot = self._state
            if snapshot.last_state is None:
                raise PreconditionError("No action has been chosen yet; nothing to reinforce")

            control_wires = self.wires(snapshot.last_state)
            old_value = self.interpolator.value(control_wires, snapshot.last_action)
            feedback, target = self.compute_target(
                old_value,
                reward,
                highest_new=self.highest_reward(new_state),
                highest_last=control_wires.max_reward(),
                elapsed_time_millis=elapsed_time_millis,
            )

            with timer("wire_fit"):
                fit = self.adjuster.fit_with_report(target, snapshot.last_action, control_wires)

            self.trainer.train(self.approximator, [snapshot.last_state], [encode(fit.wires)])

        logger.debug(
            "Reinforced: reward=%.4f old=%.4f feedback=%.4f target=%.4f fit_iters=%d",
            reward, old_value, feedback, target, fit.iterations
        )
        return UpdateReport(old_value=old_value, feedback=feedback, target=target, fit=fit)
