"""Explorer configuration schema for atp-explorer.

``ExplorerConfig`` is a Pydantic v2 model that acts as the validated,
strongly-typed boundary object between raw configuration sources (YAML files,
environment variables, in-memory dicts) and the registry engine.

Shipped in this module
----------------------
- ExplorerConfig   - Pydantic v2 model with class-method loaders
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# Read before the prefixed variable set existed; still honoured.
LEGACY_REGISTRY_ENV: str = "ATP_REGISTRY_PATH"


class ExplorerConfig(BaseModel):
    """Validated runtime configuration for the registry explorer.

    Every field has a default so the explorer can start with zero
    configuration against ``./atp-registry``.

    Parameters
    ----------
    registry_path:
        Root directory of the identity registry.
    identities_dir:
        Sub-directory of ``registry_path`` holding one document per identity.
    document_extensions:
        Recognised document extensions.  Normalised to lower case with a
        leading dot.
    sort_documents:
        Read documents in lexicographic filename order so that duplicate
        keys resolve the same way on every load.
    refresh_interval_seconds:
        Period of the background reload.
    host, port:
        Bind address of the HTTP service.
    cors_origins:
        Origins allowed by the HTTP service's CORS policy.
    log_level:
        Root logging level used by the CLI.
    """

    model_config = {"extra": "forbid", "validate_assignment": True}

    registry_path: str = Field(default="atp-registry")
    identities_dir: str = Field(default="identities")
    document_extensions: list[str] = Field(default_factory=lambda: [".json"])
    sort_documents: bool = Field(default=True)
    refresh_interval_seconds: float = Field(default=300.0, gt=0)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3847, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")

    @model_validator(mode="before")
    @classmethod
    def _normalise_lists(cls, values: Any) -> Any:  # noqa: ANN401
        """Ensure list fields are never None."""
        if isinstance(values, dict):
            for key in ("document_extensions", "cors_origins"):
                if key in values and values[key] is None:
                    values.pop(key)
        return values

    @field_validator("document_extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        normalised: list[str] = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in normalised:
                normalised.append(ext)
        if not normalised:
            raise ValueError("document_extensions must name at least one extension")
        return normalised

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def documents_dir(self) -> Path:
        """Directory scanned for identity documents."""
        return Path(self.registry_path) / self.identities_dir

    # ------------------------------------------------------------------
    # Class-method loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, prefix: str = "ATP_EXPLORER_") -> "ExplorerConfig":
        """Build configuration from environment variables.

        Variables are mapped by stripping the ``prefix`` and lower-casing the
        remainder.  For example ``ATP_EXPLORER_PORT=8080`` maps to
        ``port="8080"``.  List fields accept comma-separated values; boolean
        fields accept ``"true"`` / ``"1"`` / ``"yes"`` as truthy.  Unknown
        keys are ignored.

        ``ATP_REGISTRY_PATH`` is used for ``registry_path`` when the prefixed
        variable is not set.
        """
        data: dict[str, object] = {}
        bool_fields = {"sort_documents"}
        list_fields = {"document_extensions", "cors_origins"}
        known_fields = set(cls.model_fields)

        for raw_key, raw_value in os.environ.items():
            if not raw_key.startswith(prefix):
                continue
            key = raw_key[len(prefix):].lower()
            if key not in known_fields:
                continue
            if key in bool_fields:
                data[key] = raw_value.lower() in {"true", "1", "yes"}
            elif key in list_fields:
                data[key] = [item.strip() for item in raw_value.split(",") if item.strip()]
            else:
                data[key] = raw_value

        legacy_path = os.environ.get(LEGACY_REGISTRY_ENV)
        if "registry_path" not in data and legacy_path:
            data["registry_path"] = legacy_path

        return cls.model_validate(data)

    def merge(self, overrides: "ExplorerConfig") -> "ExplorerConfig":
        """Produce a new ``ExplorerConfig`` with the explicitly set fields of *overrides*.

        A field counts as set when it was supplied at construction, even if
        its value equals the class default.  Neither object is mutated.
        """
        merged = self.model_dump()
        merged.update(overrides.model_dump(include=overrides.model_fields_set))
        return ExplorerConfig.model_validate(merged)
