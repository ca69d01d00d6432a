"""Agent checkpoints: versioned YAML header plus opaque torch state files.

Layout of a checkpoint directory:

    agent.yaml    schema wirefit_agent.v1: config, last_action, last_state,
                  relative paths of the two state files
    trainer.pt    trainer.state_dict()   (owned by the trainer)
    model.pt      approximator.state_dict()   (owned by the approximator)

Every file is written atomically. The header is written last, so a
directory with a valid agent.yaml always has complete state files.

Loading reads and validates all three files before touching the
collaborators, and rolls both back if either rejects its saved state.
A missing, malformed or incompatible checkpoint leaves the given
approximator and trainer exactly as they were.
"""

import copy
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..utils import fs
from ..utils.validators import AgentCheckpointV1, config_to_dict, load_checkpoint_header
from .agent import AgentState, WireFitAgent
from .networks import FunctionApproximator, Trainer

logger = logging.getLogger(__name__)

HEADER_FILENAME = "agent.yaml"


def save_agent(agent: WireFitAgent, directory: Union[str, Path]) -> Path:
    """Write agent config, recorded state and collaborator state to directory.

    Parameters
    ----------
    agent : WireFitAgent
        Agent to persist
    directory : Union[str, Path]
        Checkpoint directory (created if needed)

    Returns
    -------
    Path
        Path of the written agent.yaml

    Raises
    ------
    RuntimeError
        If the destination is not writable
    """
    directory = Path(directory)
    state = agent.state

    header = AgentCheckpointV1(
        config=agent.config,
        last_action=[float(x) for x in state.last_action],
        last_state=None if state.last_state is None else [float(x) for x in state.last_state],
    )

    fs.atomic_torch_save(agent.trainer.state_dict(), directory / header.trainer_state_path)
    fs.atomic_torch_save(agent.approximator.state_dict(), directory / header.model_state_path)

    header_path = directory / HEADER_FILENAME
    fs.atomic_yaml_dump(config_to_dict(header), header_path)

    logger.info("Saved agent checkpoint to %s", directory)
    return header_path


def load_agent(
    directory: Union[str, Path],
    approximator: FunctionApproximator,
    trainer: Trainer,
    rng: Optional[np.random.Generator] = None
) -> WireFitAgent:
    """Restore an agent from a checkpoint directory.

    Parameters
    ----------
    directory : Union[str, Path]
        Checkpoint directory written by save_agent
    approximator : FunctionApproximator
        Freshly built approximator with the saved architecture
    trainer : Trainer
        Freshly built trainer bound to approximator
    rng : np.random.Generator, optional
        RNG for Boltzmann selection

    Returns
    -------
    WireFitAgent
        Agent with the saved config and recorded state

    Raises
    ------
    FileNotFoundError
        If the header or a state file is missing
    ValueError
        If the header fails validation or a collaborator rejects its state
    """
    directory = Path(directory)
    header = load_checkpoint_header(directory / HEADER_FILENAME)

    trainer_state = fs.load_torch(directory / header.trainer_state_path)
    model_state = fs.load_torch(directory / header.model_state_path)

    state = AgentState(
        last_action=np.asarray(header.last_action, dtype=np.float64),
        last_state=None if header.last_state is None else np.asarray(header.last_state, dtype=np.float64),
    )

    previous_model = copy.deepcopy(approximator.state_dict())
    previous_trainer = copy.deepcopy(trainer.state_dict())
    try:
        approximator.load_state_dict(model_state)
        trainer.load_state_dict(trainer_state)
    except Exception as e:
        approximator.load_state_dict(previous_model)
        trainer.load_state_dict(previous_trainer)
        raise ValueError(f"Checkpoint state rejected at {directory}: {e}") from e

    logger.info("Loaded agent checkpoint from %s", directory)
    return WireFitAgent(header.config, approximator, trainer, rng=rng, state=state)
