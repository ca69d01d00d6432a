"""Action selection over a wire set: greedy and Boltzmann.

Greedy picks the first wire holding the greatest reward, so ties resolve
deterministically by wire order.

Boltzmann samples wire i with probability

    p_i = exp(r_i / T) / sum_j exp(r_j / T)

by drawing u ~ U[0, 1) and walking the cumulative mass in wire order,
taking the first wire whose cumulative mass reaches u. Rounding can leave
the final cumulative sum a hair below 1.0; any u above it selects the last
wire, so a draw can never fall off the end.

These functions are pure: recording the choice in the agent state is the
agent's job.
"""

from typing import Optional

import numpy as np

from .wires import WireSet


class SelectionError(RuntimeError):
    """Raised when no wire can be selected (empty wire set)."""


def _require_wires(wires: WireSet) -> None:
    if len(wires) == 0:
        raise SelectionError("Cannot select an action from an empty wire set")


def best_index(wires: WireSet) -> int:
    """Index of the first wire with the greatest reward."""
    _require_wires(wires)
    return wires.best_index()


def best_action(wires: WireSet) -> np.ndarray:
    """Action of the first wire with the greatest reward (a copy)."""
    return wires.actions[best_index(wires)].copy()


def boltzmann_probabilities(wires: WireSet, temperature: float) -> np.ndarray:
    """Softmax of reward / temperature over the wires.

    Parameters
    ----------
    wires : WireSet
        Candidate wires
    temperature : float
        Exploration temperature, > 0 (large → uniform, small → greedy)

    Returns
    -------
    np.ndarray
        Probabilities, shape (N,), summing to 1 up to rounding

    Notes
    -----
    Rewards are shifted by their max before exponentiating; the shift
    cancels in the ratio, so the distribution is unchanged while overflow
    at small temperatures is avoided.
    """
    _require_wires(wires)
    if not temperature > 0.0:
        raise ValueError(f"Boltzmann temperature must be > 0, got {temperature}")
    logits = wires.rewards / temperature
    weights = np.exp(logits - logits.max())
    return weights / weights.sum()


def select_by_cumulative_mass(probabilities: np.ndarray, determiner: float) -> int:
    """First index whose cumulative mass is >= determiner; last index otherwise."""
    cumulative = np.cumsum(probabilities)
    idx = int(np.searchsorted(cumulative, determiner, side="left"))
    return min(idx, len(probabilities) - 1)


def boltzmann_index(
    wires: WireSet,
    temperature: float,
    rng: Optional[np.random.Generator] = None
) -> int:
    """Sample a wire index from the Boltzmann distribution."""
    rng = rng if rng is not None else np.random.default_rng()
    probabilities = boltzmann_probabilities(wires, temperature)
    determiner = float(rng.random())
    return select_by_cumulative_mass(probabilities, determiner)


def boltzmann_action(
    wires: WireSet,
    temperature: float,
    rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Action of a Boltzmann-sampled wire (a copy)."""
    return wires.actions[boltzmann_index(wires, temperature, rng)].copy()
