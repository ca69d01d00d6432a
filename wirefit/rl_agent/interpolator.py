"""Inverse-distance interpolation over a wire set.

Evaluates the continuous action-value function Q(s, a) from the wires of
state s (Shepard-style weighting):

    d_i(a) = (||a - w_i||^2)^2 + c * (r_max - r_i) + eps
    Q(a)   = sum_i(r_i / d_i) / sum_i(1 / d_i)

where c is the smoothing factor and r_max the greatest reward in the set.
The smoothing term shrinks the distance of high-reward wires, biasing the
surface toward optimistic wires; eps keeps every d_i strictly positive, so
querying a wire's own action is well defined.

The pieces (distance, weighted_sum, normalize) are exposed separately
because the wire adjuster's analytic gradients are written in terms of
them. Each of them accepts an optional precomputed ``max_reward`` so that
a caller evaluating many quantities on the same wire set computes it once.
"""

from typing import Optional

import numpy as np

from .wires import WireSet


class Interpolator:
    """Inverse-distance interpolator with reward smoothing.

    Parameters
    ----------
    smoothing_factor : float
        Weight c of the (r_max - r_i) distance bias, >= 0
    epsilon : float
        Distance floor, > 0
    """

    def __init__(self, smoothing_factor: float, epsilon: float):
        if epsilon <= 0.0:
            raise ValueError(f"epsilon must be > 0, got {epsilon}")
        if smoothing_factor < 0.0:
            raise ValueError(f"smoothing_factor must be >= 0, got {smoothing_factor}")
        self.smoothing_factor = float(smoothing_factor)
        self.epsilon = float(epsilon)

    def squared_norms(self, wires: WireSet, action: np.ndarray) -> np.ndarray:
        """Per-wire squared Euclidean distance ||a - w_i||^2, shape (N,)."""
        diff = np.asarray(action, dtype=np.float64)[None, :] - wires.actions
        return np.sum(diff * diff, axis=1)

    def distance(
        self,
        wires: WireSet,
        action: np.ndarray,
        max_reward: Optional[float] = None
    ) -> np.ndarray:
        """Per-wire interpolation distance d_i(a), shape (N,)."""
        if max_reward is None:
            max_reward = wires.max_reward()
        sq = self.squared_norms(wires, action)
        return sq * sq + self.smoothing_factor * (max_reward - wires.rewards) + self.epsilon

    def weighted_sum(
        self,
        wires: WireSet,
        action: np.ndarray,
        max_reward: Optional[float] = None
    ) -> float:
        """sum_i r_i / d_i"""
        return float(np.sum(wires.rewards / self.distance(wires, action, max_reward)))

    def normalize(
        self,
        wires: WireSet,
        action: np.ndarray,
        max_reward: Optional[float] = None
    ) -> float:
        """sum_i 1 / d_i"""
        return float(np.sum(1.0 / self.distance(wires, action, max_reward)))

    def value(
        self,
        wires: WireSet,
        action: np.ndarray,
        max_reward: Optional[float] = None
    ) -> float:
        """Interpolated action value Q(a) = weighted_sum / normalize."""
        inv = 1.0 / self.distance(wires, action, max_reward)
        return float(np.sum(wires.rewards * inv) / np.sum(inv))
