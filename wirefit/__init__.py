"""Wirefit: continuous-action Q-learning by wire fitting.

A function approximator with a fixed-size output emits a small set of
(action, reward) control points ("wires"). The action-value surface at any
continuous action is recovered by inverse-distance interpolation between
the wires, which makes greedy and Boltzmann action selection cheap and lets
a temporal-difference update be expressed as "move the wires, then fit the
approximator toward the moved wires".

Architecture layers (strict one-way dependency):
    scripts/ → wirefit/rl_agent/ → wirefit/utils/

Key invariants:
    - Raw approximator output has length number_of_wires * (action_dimensions + 1)
    - Wires are ephemeral: always re-derived from the approximator, never cached
    - The approximator's parameters are the only learned state
    - YAML-only configs, torch state dicts for collaborator state
"""

__version__ = "1.0.0"
