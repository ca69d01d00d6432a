"""Shared fixtures: deterministic stand-ins for the approximator and trainer.

StubApproximator serves a fixed raw output per state (looked up by the
state's tuple). FittingTrainer records every call and, when asked to, makes
the stub reproduce the target exactly, i.e. a perfect one-step fit.
"""

from typing import Dict, List, Sequence, Tuple

import numpy as np
import pytest

from wirefit.utils.validators import AgentConfig


class StubApproximator:
    def __init__(self, table: Dict[Tuple[float, ...], Sequence[float]], default: Sequence[float] = None):
        self.table = {k: np.asarray(v, dtype=np.float64) for k, v in table.items()}
        self.default = None if default is None else np.asarray(default, dtype=np.float64)
        self.calls = 0

    def forward(self, state: np.ndarray) -> np.ndarray:
        self.calls += 1
        key = tuple(float(x) for x in np.asarray(state).reshape(-1))
        if key in self.table:
            return self.table[key].copy()
        if self.default is None:
            raise KeyError(f"No stub output for state {key}")
        return self.default.copy()

    def state_dict(self):
        return {"table": {k: v.tolist() for k, v in self.table.items()}}

    def load_state_dict(self, state_dict):
        self.table = {tuple(k): np.asarray(v) for k, v in state_dict["table"].items()}


class FittingTrainer:
    def __init__(self, apply: bool = False):
        self.apply = apply
        self.calls: List[Tuple[List[np.ndarray], List[np.ndarray]]] = []

    def train(self, model, inputs, targets):
        self.calls.append(([np.array(x) for x in inputs], [np.array(y) for y in targets]))
        if self.apply:
            for x, y in zip(inputs, targets):
                model.table[tuple(float(v) for v in np.asarray(x).reshape(-1))] = np.asarray(y, dtype=np.float64)
        return 0.0

    def state_dict(self):
        return {"calls": len(self.calls)}

    def load_state_dict(self, state_dict):
        pass


@pytest.fixture
def small_config() -> AgentConfig:
    """Two 1-D wires; scaling 0.5 so elapsed 2 ms gives a time scale of 1."""
    return AgentConfig(
        learning_rate=0.5,
        devaluation_factor=0.9,
        action_dimensions=1,
        number_of_wires=2,
        gradient_descent_max_iterations=2000,
    )


@pytest.fixture
def example_raw() -> np.ndarray:
    """Wires {[0.5], 1.0} and {[-0.2], 2.0}."""
    return np.array([0.5, 1.0, -0.2, 2.0])


@pytest.fixture
def stub_approximator(example_raw) -> StubApproximator:
    return StubApproximator(
        {
            (0.0,): example_raw,
            (1.0,): [0.0, 4.0, 1.0, 3.0],
        }
    )
