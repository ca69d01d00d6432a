"""RL agent: wire-fitting Q-learning core.

Modules:
    - wires: Wire / WireSet and the raw-output codec
    - interpolator: inverse-distance Q(s, a) over a wire set
    - selector: greedy and Boltzmann action selection
    - adjuster: gradient descent moving wires toward a target Q
    - agent: WireFitAgent (selection + reinforcement, serialised state)
    - networks: approximator / trainer contracts and torch adapters
    - checkpoint: versioned save/load

No concrete network architecture lives here; callers supply any module
whose output length is number_of_wires * (action_dimensions + 1).
"""

from .adjuster import FitResult, WireAdjuster
from .agent import AgentState, PreconditionError, UpdateReport, WireFitAgent
from .checkpoint import load_agent, save_agent
from .interpolator import Interpolator
from .networks import FunctionApproximator, TorchApproximator, TorchTrainer, Trainer
from .selector import SelectionError
from .wires import Wire, WireSet, decode, encode

__all__ = [
    'AgentState',
    'FitResult',
    'FunctionApproximator',
    'Interpolator',
    'PreconditionError',
    'SelectionError',
    'TorchApproximator',
    'TorchTrainer',
    'Trainer',
    'UpdateReport',
    'Wire',
    'WireAdjuster',
    'WireFitAgent',
    'WireSet',
    'decode',
    'encode',
    'load_agent',
    'save_agent',
]
