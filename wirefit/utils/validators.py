"""YAML schema validation and config loading.

Provides centralized validation for all configuration files using pydantic:
    - Agent schema (agent.v1.yaml): wire-fitting hyperparameters
    - Checkpoint schema (wirefit_agent.v1): persisted agent header

Every field is named, so adding or removing a hyperparameter can never
silently shift the meaning of the fields that follow it on reload.

All modules must use these validators to load configs for fail-fast error
detection with actionable messages (offending keys, expected ranges).

Usage:
    from wirefit.utils import validators

    cfg = validators.load_agent_config("configs/agent.v1.yaml")
    cfg = validators.AgentConfig(learning_rate=0.3, devaluation_factor=0.9,
                                 action_dimensions=1, number_of_wires=4)
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


AGENT_CONFIG_SCHEMA = "agent.v1"
CHECKPOINT_SCHEMA = "wirefit_agent.v1"


# ============================================================================
# AGENT CONFIG
# ============================================================================

class AgentConfig(BaseModel):
    """Wire-fitting agent hyperparameters (immutable once built).

    Defaults for the scaling, smoothing and gradient-descent settings are
    the values the agent has always shipped with; learning rate,
    devaluation factor and the two shape parameters have no sensible
    default and must be given.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    learning_rate: float = Field(..., ge=0.0, le=1.0, description="Blend weight of new feedback vs old value")
    devaluation_factor: float = Field(..., ge=0.0, le=1.0, description="Discount per unit of scaled time")
    action_dimensions: int = Field(..., ge=1, description="Length of each action vector")
    number_of_wires: int = Field(..., ge=1, description="Control points emitted per state")
    scaling_factor_to_millis: float = Field(0.5, gt=0.0, description="Elapsed ms → dimensionless time scale")
    smoothing_factor: float = Field(0.2, ge=0.0, description="Distance bias toward high-reward wires")
    epsilon: float = Field(0.01, gt=0.0, description="Distance floor (keeps distances > 0)")
    gradient_descent_error_target: float = Field(1e-5, ge=0.0, description="Squared-error stop threshold")
    gradient_descent_learning_rate: float = Field(0.5, gt=0.0, description="Fixed step size of the wire solver")
    gradient_descent_max_iterations: int = Field(10000, ge=1, description="Iteration cap of the wire solver")

    @property
    def raw_output_size(self) -> int:
        """Length of the approximator output: wires * (action_dimensions + 1)."""
        return self.number_of_wires * (self.action_dimensions + 1)


class AgentConfigFileV1(BaseModel):
    """Container for an agent config YAML file."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(AGENT_CONFIG_SCHEMA, alias="schema", description="Schema version")
    agent: AgentConfig

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != AGENT_CONFIG_SCHEMA:
            raise ValueError(f"Expected schema '{AGENT_CONFIG_SCHEMA}', got '{v}'")
        return v


# ============================================================================
# CHECKPOINT HEADER
# ============================================================================

class AgentCheckpointV1(BaseModel):
    """Persisted agent header (agent.yaml inside a checkpoint directory).

    Trainer and model state live in sibling torch files; they are opaque
    here and referenced by relative path only.
    """
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(CHECKPOINT_SCHEMA, alias="schema", description="Schema version")
    config: AgentConfig
    last_action: List[float] = Field(..., description="Most recently chosen action")
    last_state: Optional[List[float]] = Field(None, description="State active when last_action was chosen")
    trainer_state_path: str = Field("trainer.pt", description="Trainer state dict, relative to agent.yaml")
    model_state_path: str = Field("model.pt", description="Model state dict, relative to agent.yaml")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != CHECKPOINT_SCHEMA:
            raise ValueError(f"Expected schema '{CHECKPOINT_SCHEMA}', got '{v}'")
        return v

    @field_validator('trainer_state_path', 'model_state_path')
    @classmethod
    def validate_relative(cls, v: str) -> str:
        if not v or Path(v).is_absolute():
            raise ValueError(f"State paths must be non-empty and relative, got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_last_action_length(self) -> 'AgentCheckpointV1':
        expected = self.config.action_dimensions
        if len(self.last_action) != expected:
            raise ValueError(
                f"last_action has {len(self.last_action)} components, expected {expected}"
            )
        return self


# ============================================================================
# PUBLIC API
# ============================================================================

def load_agent_config(path: Union[str, Path]) -> AgentConfig:
    """Load and validate agent config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to agent.v1.yaml file

    Returns
    -------
    AgentConfig
        Validated, frozen agent configuration

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Agent config not found: {path}")

    data = fs.load_yaml(path)
    try:
        return AgentConfigFileV1(**data).agent
    except Exception as e:
        raise ValueError(f"Agent config validation failed at {path}: {e}") from e


def load_checkpoint_header(path: Union[str, Path]) -> AgentCheckpointV1:
    """Load and validate a checkpoint header (agent.yaml).

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails
    """
    from . import fs

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint header not found: {path}")

    data = fs.load_yaml(path)
    try:
        return AgentCheckpointV1(**data)
    except Exception as e:
        raise ValueError(f"Checkpoint header validation failed at {path}: {e}") from e


def config_to_dict(cfg: BaseModel) -> Dict[str, Any]:
    """Dump a validated model to plain YAML-safe types (schema alias kept)."""
    return cfg.model_dump(mode="json", by_alias=True)
