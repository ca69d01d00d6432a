"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config validation (validators)
    - Atomic I/O and YAML (fs)
    - Torch ergonomics (torch_utils)
    - Wall-clock timing (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (rl_agent, scripts).

Convenience imports:
    from wirefit.utils import fs, validators
    from wirefit.utils.logging_config import setup_logging, get_logger
"""

from . import fs
from . import logging_config
from . import profiler
from . import torch_utils
from . import validators

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'fs',
    'logging_config',
    'profiler',
    'torch_utils',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
