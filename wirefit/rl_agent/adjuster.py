"""Wire adjuster: gradient descent on wires toward a target Q value.

Given a target value T for the query action a, moves every wire's reward
and action so that the interpolated value Q(a) approaches T, by fixed-step
gradient descent on the squared error

    E = (T - Q(a))^2

With W = sum_i r_i / d_i, Z = sum_i 1 / d_i, Q = W / Z and
s_i = ||a - w_i||^2 the analytic partials are

    dQ/dr_i   = (Z (d_i + c r_i) - W c) / (Z d_i)^2              (i != m)
    dQ/dr_m   = (1/d_m + c * sum_{j != m} (Q - r_j) / d_j^2) / Z
    dQ/dw_ib  = (W - Z r_i) * 4 s_i (w_ib - a_b) / (Z d_i)^2
    dE/dθ     = -2 (T - Q) dQ/dθ

where m is the (first) max-reward wire: raising r_m raises r_max and so
every other wire's distance, while d_m itself stays at its floor. The max
reward and the index m are computed once per iteration.

All wires are updated simultaneously from the pre-iteration wire set
(vectorised over wires); iteration n+1 reads the fully updated set of
iteration n.

Termination: squared error <= error_target (checked before every
iteration, so an already-satisfied target costs zero iterations) or
max_iterations iterations, whichever comes first. Hitting the cap returns
the current wires; it is logged, not raised.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .interpolator import Interpolator
from .wires import WireSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitResult:
    """Outcome of one WireAdjuster solve."""

    wires: WireSet
    iterations: int
    error: float
    converged: bool


class WireAdjuster:
    """Fixed-step gradient-descent solver over wire rewards and actions.

    Parameters
    ----------
    interpolator : Interpolator
        Defines Q(a) and the distance function
    learning_rate : float
        Step size (no line search, no auto-tuning)
    error_target : float
        Stop once (T - Q)^2 <= error_target
    max_iterations : int
        Hard cap on iterations
    """

    def __init__(
        self,
        interpolator: Interpolator,
        learning_rate: float,
        error_target: float,
        max_iterations: int
    ):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self.interpolator = interpolator
        self.learning_rate = float(learning_rate)
        self.error_target = float(error_target)
        self.max_iterations = int(max_iterations)

    def gradients(
        self,
        target: float,
        action: np.ndarray,
        wires: WireSet
    ) -> Tuple[np.ndarray, np.ndarray, float]:
        """Partials of (target - Q(action))^2 w.r.t. rewards and actions.

        Returns
        -------
        tuple
            (grad_rewards (N,), grad_actions (N, D), q)
        """
        interp = self.interpolator
        c = interp.smoothing_factor

        rewards = wires.rewards
        m = wires.best_index()
        max_reward = float(rewards[m])
        sq = interp.squared_norms(wires, action)
        dist = sq * sq + c * (max_reward - rewards) + interp.epsilon

        inv = 1.0 / dist
        norm = float(np.sum(inv))
        wsum = float(np.sum(rewards * inv))
        q = wsum / norm

        denom = (norm * dist) ** 2
        dq_dr = (norm * (dist + c * rewards) - wsum * c) / denom
        others = np.arange(len(rewards)) != m
        dq_dr[m] = (inv[m] + c * np.sum((q - rewards[others]) * inv[others] ** 2)) / norm

        dd_dw = 4.0 * sq[:, None] * (wires.actions - action[None, :])
        dq_dw = ((wsum - norm * rewards) / denom)[:, None] * dd_dw

        scale = -2.0 * (target - q)
        return scale * dq_dr, scale * dq_dw, q

    def fit_with_report(self, target: float, action: np.ndarray, wires: WireSet) -> FitResult:
        """Run the solver and report iterations and final squared error."""
        action = np.asarray(action, dtype=np.float64).reshape(-1)
        if action.shape[0] != wires.action_dimensions:
            raise ValueError(
                f"Action has {action.shape[0]} components, wires have {wires.action_dimensions}"
            )

        current = wires.copy()
        error = (target - self.interpolator.value(current, action)) ** 2
        iterations = 0

        while error > self.error_target and iterations < self.max_iterations:
            grad_r, grad_w, _ = self.gradients(target, action, current)
            current = WireSet(
                current.actions - self.learning_rate * grad_w,
                current.rewards - self.learning_rate * grad_r,
            )
            iterations += 1
            error = (target - self.interpolator.value(current, action)) ** 2

            if not np.isfinite(error):
                raise ValueError(
                    f"Wire fit diverged after {iterations} iterations "
                    f"(learning_rate={self.learning_rate}); error is {error}"
                )

        converged = error <= self.error_target
        if not converged:
            logger.warning(
                "Wire fit hit iteration cap (%d) with squared error %.3e > %.3e",
                iterations, error, self.error_target
            )
        else:
            logger.debug("Wire fit converged in %d iterations (error %.3e)", iterations, error)

        return FitResult(wires=current, iterations=iterations, error=float(error), converged=converged)

    def fit(self, target: float, action: np.ndarray, wires: WireSet) -> WireSet:
        """Return a new wire set whose Q(action) is moved toward target."""
        return self.fit_with_report(target, action, wires).wires
