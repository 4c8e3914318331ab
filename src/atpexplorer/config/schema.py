"""Config schema re-export and validation helpers for atp-explorer.

Re-exports ``ExplorerConfig`` from the canonical schema module so that
``atpexplorer.config`` is a complete import path.
"""
from __future__ import annotations

from pydantic import ValidationError

from atpexplorer.schema.config import ExplorerConfig
from atpexplorer.schema.errors import ConfigurationError

__all__ = ["ExplorerConfig", "validate_config"]


def validate_config(data: dict[str, object]) -> ExplorerConfig:
    """Validate a raw dict against the ``ExplorerConfig`` schema.

    Raises
    ------
    ConfigurationError
        If the data fails Pydantic validation.  The original
        ``ValidationError`` is attached as the ``__cause__``.

    Examples
    --------
    >>> validate_config({"port": 8080}).port
    8080
    """
    try:
        return ExplorerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Configuration validation failed: {exc}",
            context={"errors": exc.errors()},
        ) from exc
