"""Configuration loader for atp-explorer.

``ConfigLoader`` resolves configuration from YAML files, JSON files,
environment variables, or auto-discovers the first available source by
searching well-known paths.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from atpexplorer.config.defaults import DEFAULT_CONFIG
from atpexplorer.config.schema import validate_config
from atpexplorer.schema.config import LEGACY_REGISTRY_ENV, ExplorerConfig
from atpexplorer.schema.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Ordered list of paths searched by load_auto()
_AUTO_SEARCH_PATHS: tuple[str, ...] = (
    "atp-explorer.yaml",
    "atp-explorer.yml",
    "atp-explorer.json",
    ".atp-explorer.yaml",
    ".atp-explorer.yml",
    ".atp-explorer.json",
)

ENV_PREFIX: str = "ATP_EXPLORER_"


class ConfigLoader:
    """Loads ``ExplorerConfig`` from multiple sources.

    All loader methods return a validated ``ExplorerConfig`` instance.

    Examples
    --------
    >>> loader = ConfigLoader()
    >>> loader.load_auto(search_dir="/nonexistent").port  # doctest: +SKIP
    3847
    """

    def load_yaml(self, path: str | Path) -> ExplorerConfig:
        """Load configuration from a YAML file.

        Raises
        ------
        ConfigurationError
            If the file cannot be read or fails validation.
        """
        resolved = Path(path)
        if not resolved.exists():
            raise ConfigurationError(
                f"YAML config file not found: {resolved}",
                context={"path": str(resolved)},
            )
        try:
            with resolved.open(encoding="utf-8") as fh:
                raw: object = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Failed to parse YAML config at {resolved}: {exc}",
                context={"path": str(resolved)},
            ) from exc

        data: dict[str, object] = dict(raw) if isinstance(raw, dict) else {}
        logger.debug("Loaded YAML config from %s", resolved)
        return validate_config(data)

    def load_json(self, path: str | Path) -> ExplorerConfig:
        """Load configuration from a JSON file.

        Raises
        ------
        ConfigurationError
            If the file cannot be read or fails validation.
        """
        resolved = Path(path)
        if not resolved.exists():
            raise ConfigurationError(
                f"JSON config file not found: {resolved}",
                context={"path": str(resolved)},
            )
        try:
            with resolved.open(encoding="utf-8") as fh:
                raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Failed to parse JSON config at {resolved}: {exc}",
                context={"path": str(resolved)},
            ) from exc

        data = dict(raw) if isinstance(raw, dict) else {}
        logger.debug("Loaded JSON config from %s", resolved)
        return validate_config(data)

    def load_file(self, path: str | Path) -> ExplorerConfig:
        """Load a YAML or JSON file, chosen by extension."""
        if Path(path).suffix.lower() == ".json":
            return self.load_json(path)
        return self.load_yaml(path)

    def load_env(self, prefix: str = ENV_PREFIX) -> ExplorerConfig:
        """Build configuration from environment variables.

        See :meth:`~atpexplorer.schema.config.ExplorerConfig.from_env` for
        variable mapping rules.

        Raises
        ------
        ConfigurationError
            If an environment value fails validation.
        """
        try:
            config = ExplorerConfig.from_env(prefix=prefix)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid environment configuration: {exc}",
                context={"prefix": prefix, "errors": exc.errors()},
            ) from exc
        logger.debug("Loaded config from environment with prefix %r", prefix)
        return config

    def load_auto(
        self,
        search_dir: str | Path | None = None,
        env_prefix: str = ENV_PREFIX,
    ) -> ExplorerConfig:
        """Auto-discover and load configuration.

        Discovery order:

        1. Search *search_dir* (defaults to ``cwd``) for ``atp-explorer.yaml``,
           ``atp-explorer.yml``, ``atp-explorer.json``, and hidden variants.
        2. Overlay environment variables from *env_prefix* on top.
        3. Fall back to ``DEFAULT_CONFIG`` if nothing is found.
        """
        base_dir = Path(search_dir) if search_dir is not None else Path.cwd()
        base_config: ExplorerConfig | None = None

        for candidate_name in _AUTO_SEARCH_PATHS:
            candidate = base_dir / candidate_name
            if not candidate.exists():
                continue
            try:
                base_config = self.load_file(candidate)
                logger.info("Auto-loaded atp-explorer config from %s", candidate)
                break
            except ConfigurationError:
                logger.warning("Could not load config from %s; trying next.", candidate)

        if base_config is None:
            base_config = DEFAULT_CONFIG
            logger.debug("No config file found; using DEFAULT_CONFIG.")

        env_has_any = LEGACY_REGISTRY_ENV in os.environ or any(
            k.startswith(env_prefix) for k in os.environ
        )
        if env_has_any:
            base_config = base_config.merge(self.load_env(prefix=env_prefix))
            logger.debug("Applied environment variable overlay.")

        return base_config
