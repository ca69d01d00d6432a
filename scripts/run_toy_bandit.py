#!/usr/bin/env python3
"""Toy continuous bandit driven by the wire-fitting agent.

A single fixed context, a 1-D action and a reward peaked at a target
action. The agent explores with Boltzmann selection, is reinforced after
every pull, and reports the greedy action it settles on.

The approximator is a small MLP built here for the demo only; the agent
itself is architecture-agnostic.

Usage:
    python scripts/run_toy_bandit.py --steps 200 --temperature 0.5
    python scripts/run_toy_bandit.py --config configs/agent.v1.yaml --save_dir outputs/bandit
    python scripts/run_toy_bandit.py --verbose --log_file outputs/logs/bandit.log

Outputs (with --save_dir):
    - agent.yaml, trainer.pt, model.pt: agent checkpoint
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import torch.nn as nn

from wirefit.rl_agent import TorchApproximator, TorchTrainer, WireFitAgent, save_agent
from wirefit.utils import logging_config, torch_utils, validators

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "agent.v1.yaml"


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the wire-fitting agent on a toy continuous bandit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', type=str, default=str(DEFAULT_CONFIG),
                        help='Agent config YAML (schema agent.v1)')
    parser.add_argument('--steps', type=int, default=200, help='Number of pulls')
    parser.add_argument('--temperature', type=float, default=0.5, help='Boltzmann temperature')
    parser.add_argument('--peak', type=float, default=0.3, help='Action with the highest reward')
    parser.add_argument('--elapsed_ms', type=float, default=2.0, help='Elapsed time reported per pull (ms)')
    parser.add_argument('--hidden', type=int, default=16, help='Hidden width of the demo MLP')
    parser.add_argument('--trainer_lr', type=float, default=0.05, help='Trainer learning rate')
    parser.add_argument('--seed', type=int, default=0, help='Random seed')
    parser.add_argument('--save_dir', type=str, default=None, help='Write a checkpoint here when done')
    parser.add_argument('--log_file', type=str, default=None, help='Also write log lines to this file')
    parser.add_argument('--verbose', action='store_true', help='DEBUG logging')
    return parser.parse_args(argv)


def bandit_reward(action: np.ndarray, peak: float) -> float:
    """Reward in [0, 1], maximal at the peak action."""
    return float(np.exp(-4.0 * np.sum((action - peak) ** 2)))


def build_agent(cfg: validators.AgentConfig, hidden: int, trainer_lr: float, seed: int) -> WireFitAgent:
    """Agent over a 1-input MLP emitting cfg.raw_output_size values."""
    module = nn.Sequential(
        nn.Linear(1, hidden),
        nn.Tanh(),
        nn.Linear(hidden, cfg.raw_output_size),
    )
    approximator = TorchApproximator(module)
    trainer = TorchTrainer(approximator, learning_rate=trainer_lr)
    return WireFitAgent(cfg, approximator, trainer, rng=np.random.default_rng(seed))


def run_bandit(
    agent: WireFitAgent,
    steps: int,
    temperature: float,
    peak: float,
    elapsed_ms: float
) -> Dict[str, object]:
    """Explore/reinforce for `steps` pulls; returns a summary dict."""
    logger = logging.getLogger(__name__)
    context = np.ones(1)
    rewards = []

    for step in range(steps):
        action = agent.choose_boltzmann_action(context, temperature)
        reward = bandit_reward(action, peak)
        report = agent.apply_reinforcement(reward, context, elapsed_ms)
        rewards.append(reward)

        if (step + 1) % 50 == 0:
            logger.info(
                "step %d: mean reward (last 50) %.3f, target %.3f, fit iters %d",
                step + 1, np.mean(rewards[-50:]), report.target, report.fit.iterations
            )

    greedy = agent.best_action(context)
    return {
        'steps': steps,
        'mean_reward': float(np.mean(rewards)) if rewards else 0.0,
        'greedy_action': greedy.tolist(),
        'greedy_reward': bandit_reward(greedy, peak),
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging_config.setup_logging(
        log_level="DEBUG" if args.verbose else "INFO",
        log_file=args.log_file,
        context={"app": "toy_bandit", "seed": args.seed},
    )
    logger = logging.getLogger(__name__)

    torch_utils.seed_everything(args.seed)
    cfg = validators.load_agent_config(args.config)
    logger.info(
        "Loaded config %s: %d wires x %d-D actions",
        args.config, cfg.number_of_wires, cfg.action_dimensions
    )

    agent = build_agent(cfg, args.hidden, args.trainer_lr, args.seed)
    summary = run_bandit(agent, args.steps, args.temperature, args.peak, args.elapsed_ms)
    logger.info(
        "Done: mean reward %.3f, greedy action %s (reward %.3f)",
        summary["mean_reward"], summary["greedy_action"], summary["greedy_reward"]
    )

    if args.save_dir:
        save_agent(agent, args.save_dir)

    return 0


if __name__ == '__main__':
    sys.exit(main())
