"""Test the torch collaborator adapters.

Tests for wirefit.rl_agent.networks:
    - TorchApproximator returns flat float64 output of the module's width
    - forward() leaves the module's train/eval flag as it found it
    - TorchTrainer reduces MSE toward fixed targets
    - Adapters satisfy the FunctionApproximator / Trainer protocols
    - An agent with torch collaborators pulls its output toward the fit

Run:
    pytest tests/test_networks.py -v
"""

import numpy as np
import pytest
import torch
import torch.nn as nn

from wirefit.rl_agent.agent import WireFitAgent
from wirefit.rl_agent.networks import FunctionApproximator, TorchApproximator, TorchTrainer, Trainer
from wirefit.rl_agent.wires import encode
from wirefit.utils.torch_utils import seed_everything
from wirefit.utils.validators import AgentConfig


@pytest.fixture
def mlp() -> nn.Module:
    seed_everything(0)
    return nn.Sequential(nn.Linear(2, 8), nn.Tanh(), nn.Linear(8, 6))


def test_approximator_output_shape_and_dtype(mlp):
    approx = TorchApproximator(mlp)
    out = approx.forward(np.array([0.1, -0.3]))

    assert out.dtype == np.float64
    assert out.shape == (6,)


def test_approximator_restores_training_flag(mlp):
    approx = TorchApproximator(mlp)
    mlp.train()
    approx.forward(np.zeros(2))
    assert mlp.training

    mlp.eval()
    approx.forward(np.zeros(2))
    assert not mlp.training


def test_adapters_satisfy_protocols(mlp):
    approx = TorchApproximator(mlp)
    trainer = TorchTrainer(approx)
    assert isinstance(approx, FunctionApproximator)
    assert isinstance(trainer, Trainer)


def test_trainer_reduces_mse(mlp):
    approx = TorchApproximator(mlp)
    trainer = TorchTrainer(approx, learning_rate=0.1)
    inputs = [np.array([0.0, 1.0]), np.array([1.0, 0.0])]
    targets = [np.linspace(-1, 1, 6), np.linspace(1, -1, 6)]

    first = trainer.train(approx, inputs, targets)
    for _ in range(200):
        last = trainer.train(approx, inputs, targets)

    assert last < first * 0.5


def test_trainer_steps_per_call(mlp):
    approx = TorchApproximator(mlp)
    single = TorchTrainer(approx, learning_rate=0.05, steps_per_call=1)
    before = [p.clone() for p in mlp.parameters()]
    single.train(approx, [np.ones(2)], [np.zeros(6)])
    assert any(not torch.equal(a, b) for a, b in zip(before, mlp.parameters()))

    with pytest.raises(ValueError):
        TorchTrainer(approx, steps_per_call=0)


def test_trainer_rejects_mismatched_batch(mlp):
    approx = TorchApproximator(mlp)
    trainer = TorchTrainer(approx)
    with pytest.raises(ValueError, match="targets"):
        trainer.train(approx, [np.zeros(2)], [np.zeros(6), np.zeros(6)])


def test_agent_with_torch_collaborators_moves_toward_fit():
    seed_everything(1)
    config = AgentConfig(
        learning_rate=0.5,
        devaluation_factor=0.9,
        action_dimensions=1,
        number_of_wires=3,
        gradient_descent_learning_rate=0.1,
        gradient_descent_max_iterations=500,
    )
    approx = TorchApproximator(nn.Linear(1, config.raw_output_size))
    trainer = TorchTrainer(approx, learning_rate=0.1)
    agent = WireFitAgent(config, approx, trainer, rng=np.random.default_rng(1))

    state = np.array([1.0])
    agent.choose_best_action(state)
    report = agent.apply_reinforcement(1.0, state, elapsed_time_millis=2.0)

    target_raw = encode(report.fit.wires)
    before = approx.forward(state)
    for _ in range(50):
        trainer.train(approx, [state], [target_raw])
    after = approx.forward(state)

    assert np.linalg.norm(after - target_raw) < np.linalg.norm(before - target_raw)
