"""PyTorch ergonomics: seeding and numpy ↔ tensor conversion.

Provides:
    - seed_everything(): Reproducible runs (torch, numpy, Python RNG)
    - as_batch_tensor(): 1-D state vectors → (1, D) float32 tensors
    - to_numpy_f64(): tensors → flat float64 arrays for wire math

Wire math runs in float64 numpy; collaborators run in float32 torch.
The conversions here are the only place the two meet.
"""

import os
import random
from typing import Sequence, Union

import numpy as np
import torch


ArrayLike = Union[np.ndarray, Sequence[float], torch.Tensor]


def seed_everything(seed: int, deterministic: bool = False) -> None:
    """Seed Python, numpy and torch RNGs.

    Parameters
    ----------
    seed : int
        Seed value
    deterministic : bool
        Also request deterministic torch kernels, default False
    """
    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if deterministic:
        torch.use_deterministic_algorithms(True)


def as_batch_tensor(rows: Sequence[ArrayLike], dtype: torch.dtype = torch.float32) -> torch.Tensor:
    """Stack 1-D vectors into a (N, D) tensor.

    Parameters
    ----------
    rows : Sequence[ArrayLike]
        Vectors of equal length
    dtype : torch.dtype
        Output dtype, default float32

    Returns
    -------
    torch.Tensor
        Shape (N, D)
    """
    # Rows are copied; read-only inputs are accepted
    stacked = [torch.from_numpy(np.array(r, dtype=np.float64)).reshape(-1) for r in rows]
    return torch.stack(stacked).to(dtype)


def to_numpy_f64(t: ArrayLike) -> np.ndarray:
    """Convert a tensor or array-like to a flat float64 numpy array."""
    if isinstance(t, torch.Tensor):
        t = t.detach().cpu().numpy()
    return np.asarray(t, dtype=np.float64).reshape(-1)
