"""Collaborator contracts: function approximator and supervised trainer.

The core never looks inside either collaborator. It needs:

    FunctionApproximator
        forward(state) → raw output of length wires * (action_dims + 1)
        state_dict() / load_state_dict(sd)   (checkpointing only)

    Trainer
        train(model, inputs, targets)        one fitting step toward targets
        state_dict() / load_state_dict(sd)   (checkpointing only)

Torch adapters:
    - TorchApproximator: wraps any torch.nn.Module mapping (B, S) → (B, R).
      No architecture is prescribed; bring your own module.
    - TorchTrainer: backpropagation on an MSE loss with a torch optimizer
      (SGD by default), a configurable number of steps per call.

Conversions go through wirefit.utils.torch_utils so the core only ever sees
flat float64 numpy arrays.
"""

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import torch
import torch.nn as nn

from ..utils.torch_utils import as_batch_tensor, to_numpy_f64

logger = logging.getLogger(__name__)


@runtime_checkable
class FunctionApproximator(Protocol):
    def forward(self, state: np.ndarray) -> np.ndarray: ...

    def state_dict(self) -> Dict[str, Any]: ...

    def load_state_dict(self, state_dict: Dict[str, Any]) -> Any: ...


@runtime_checkable
class Trainer(Protocol):
    def train(
        self,
        model: FunctionApproximator,
        inputs: Sequence[np.ndarray],
        targets: Sequence[np.ndarray]
    ) -> Any: ...

    def state_dict(self) -> Dict[str, Any]: ...

    def load_state_dict(self, state_dict: Dict[str, Any]) -> Any: ...


class TorchApproximator:
    """Adapter exposing an nn.Module as a FunctionApproximator.

    Parameters
    ----------
    module : nn.Module
        Maps (B, state_dim) float32 → (B, raw_output_size)
    device : str or torch.device
        Where the module lives, default "cpu"
    """

    def __init__(self, module: nn.Module, device: str = "cpu"):
        self.device = torch.device(device)
        self.module = module.to(self.device)

    @torch.no_grad()
    def forward(self, state: np.ndarray) -> np.ndarray:
        was_training = self.module.training
        self.module.eval()
        try:
            out = self.module(as_batch_tensor([state]).to(self.device))
        finally:
            self.module.train(was_training)
        return to_numpy_f64(out[0])

    def parameters(self):
        return self.module.parameters()

    def state_dict(self) -> Dict[str, Any]:
        return self.module.state_dict()

    def load_state_dict(self, state_dict: Dict[str, Any]) -> Any:
        return self.module.load_state_dict(state_dict)


class TorchTrainer:
    """Backpropagation trainer: MSE loss, torch optimizer, N steps per call.

    Parameters
    ----------
    model : TorchApproximator
        Model whose parameters the optimizer owns
    learning_rate : float
        Optimizer step size
    momentum : float
        SGD momentum, default 0.0
    steps_per_call : int
        Optimizer steps per train() call, default 1
    optimizer_factory : callable, optional
        (params, lr) → torch.optim.Optimizer; overrides the SGD default
    """

    def __init__(
        self,
        model: TorchApproximator,
        learning_rate: float = 0.01,
        momentum: float = 0.0,
        steps_per_call: int = 1,
        optimizer_factory: Optional[Callable[..., torch.optim.Optimizer]] = None
    ):
        if steps_per_call < 1:
            raise ValueError(f"steps_per_call must be >= 1, got {steps_per_call}")
        self.steps_per_call = steps_per_call
        self.loss_fn = nn.MSELoss()
        if optimizer_factory is None:
            self.optimizer = torch.optim.SGD(model.parameters(), lr=learning_rate, momentum=momentum)
        else:
            self.optimizer = optimizer_factory(model.parameters(), learning_rate)

    def train(
        self,
        model: TorchApproximator,
        inputs: Sequence[np.ndarray],
        targets: Sequence[np.ndarray]
    ) -> float:
        """Pull model(inputs) toward targets; returns the last loss value."""
        if len(inputs) != len(targets):
            raise ValueError(f"Got {len(inputs)} inputs but {len(targets)} targets")

        x = as_batch_tensor(inputs).to(model.device)
        y = as_batch_tensor(targets).to(model.device)

        model.module.train()
        loss_value = float("nan")
        for _ in range(self.steps_per_call):
            self.optimizer.zero_grad()
            loss = self.loss_fn(model.module(x), y)
            loss.backward()
            self.optimizer.step()
            loss_value = loss.item()

        logger.debug("Trainer step: mse=%.6f over %d example(s)", loss_value, len(inputs))
        return loss_value

    def state_dict(self) -> Dict[str, Any]:
        return {
            "steps_per_call": self.steps_per_call,
            "optimizer": self.optimizer.state_dict(),
        }

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        self.steps_per_call = int(state_dict["steps_per_call"])
        self.optimizer.load_state_dict(state_dict["optimizer"])
