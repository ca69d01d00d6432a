"""Wire codec: raw approximator output ↔ ordered wire sets.

Layout of a raw output vector for N wires of D action dimensions:

    [a0_0, ..., a0_{D-1}, r0, a1_0, ..., a1_{D-1}, r1, ...]

i.e. N consecutive chunks of D + 1 floats, each chunk holding the wire's
action components in order followed by its reward. encode() is the exact
inverse of decode(); both are pure reshapes, so the round trip is exact in
float64.

Every chunk fills every action component. (Some historical decoders wrote
each component to the wire's own index instead of the component index,
leaving most actions partially populated; that layout is not reproduced.)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np


@dataclass(frozen=True, eq=False)
class Wire:
    """One control point of the action-value surface."""

    action: np.ndarray
    reward: float

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Wire):
            return NotImplemented
        return self.reward == other.reward and np.array_equal(self.action, other.action)

    __hash__ = None


class WireSet:
    """Ordered, fixed-size collection of wires.

    Stored column-wise: ``actions`` is (N, D) and ``rewards`` is (N,), both
    float64. Instances are treated as values; operations that change wires
    build a new WireSet.
    """

    __slots__ = ("actions", "rewards")

    def __init__(self, actions: np.ndarray, rewards: np.ndarray):
        actions = np.array(actions, dtype=np.float64, ndmin=2)
        rewards = np.array(rewards, dtype=np.float64).reshape(-1)
        if actions.shape[0] != rewards.shape[0]:
            raise ValueError(
                f"Got {actions.shape[0]} actions but {rewards.shape[0]} rewards"
            )
        self.actions = actions
        self.rewards = rewards

    @classmethod
    def from_wires(cls, wires: Sequence[Wire]) -> "WireSet":
        if not wires:
            raise ValueError("A wire set needs at least one wire")
        actions = np.stack([np.asarray(w.action, dtype=np.float64) for w in wires])
        rewards = np.array([w.reward for w in wires], dtype=np.float64)
        return cls(actions, rewards)

    @property
    def number_of_wires(self) -> int:
        return self.rewards.shape[0]

    @property
    def action_dimensions(self) -> int:
        return self.actions.shape[1]

    def max_reward(self) -> float:
        return float(self.rewards.max())

    def best_index(self) -> int:
        """Index of the first wire holding the greatest reward."""
        return int(np.argmax(self.rewards))

    def copy(self) -> "WireSet":
        return WireSet(self.actions.copy(), self.rewards.copy())

    def __len__(self) -> int:
        return self.number_of_wires

    def __getitem__(self, i: int) -> Wire:
        return Wire(action=self.actions[i].copy(), reward=float(self.rewards[i]))

    def __iter__(self) -> Iterator[Wire]:
        for i in range(self.number_of_wires):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WireSet):
            return NotImplemented
        return (
            np.array_equal(self.actions, other.actions)
            and np.array_equal(self.rewards, other.rewards)
        )

    __hash__ = None

    def __repr__(self) -> str:
        body = ", ".join(f"({w.action.tolist()}, {w.reward:.4g})" for w in self)
        return f"WireSet[{body}]"


def raw_output_size(action_dimensions: int, number_of_wires: int) -> int:
    return number_of_wires * (action_dimensions + 1)


def decode(raw: np.ndarray, action_dimensions: int, number_of_wires: int) -> WireSet:
    """Slice a raw approximator output into wires.

    Parameters
    ----------
    raw : np.ndarray
        Flat vector of length number_of_wires * (action_dimensions + 1)
    action_dimensions : int
        Action components per wire
    number_of_wires : int
        Wires in the output

    Returns
    -------
    WireSet
        Wires in output order

    Raises
    ------
    ValueError
        If raw has the wrong length
    """
    raw = np.asarray(raw, dtype=np.float64).reshape(-1)
    expected = raw_output_size(action_dimensions, number_of_wires)
    if raw.shape[0] != expected:
        raise ValueError(
            f"Raw output has length {raw.shape[0]}, expected {expected} "
            f"({number_of_wires} wires x {action_dimensions + 1})"
        )
    chunks = raw.reshape(number_of_wires, action_dimensions + 1)
    return WireSet(chunks[:, :action_dimensions].copy(), chunks[:, action_dimensions].copy())


def encode(wires: WireSet) -> np.ndarray:
    """Flatten a wire set back into the raw output layout (inverse of decode)."""
    return np.concatenate([wires.actions, wires.rewards[:, None]], axis=1).reshape(-1)
