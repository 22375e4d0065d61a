"""Resolve simulation and renderer factories from configuration."""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable

from visreg.errors import ConfigError

logger = logging.getLogger(__name__)


def load_factory(reference: str) -> Callable[[], Any]:
    """Import a ``"package.module:attribute"`` reference and return the callable."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Factory reference must look like 'module:callable', got '{reference}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module '{module_name}': {e}") from e

    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ConfigError(f"'{module_name}' has no attribute '{attr}'") from e

    if not callable(target):
        raise ConfigError(f"Factory '{reference}' is not callable")
    logger.debug("Resolved factory %s", reference)
    return target
