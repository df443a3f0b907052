from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .machine import LeftEdgePolicy

DEFAULT_SETTINGS: Dict[str, Any] = {
    "max_steps": 10_000,
    "strict_transitions": False,
    "left_edge": LeftEdgePolicy.CLAMP.value,
    "log_level": "WARNING",
}

SETTINGS_SCHEMA = {
    "max_steps": int,
    "strict_transitions": bool,
    "left_edge": str,
    "log_level": str,
}


@dataclass(frozen=True)
class EngineSettings:
    """Parámetros de ejecución del simulador."""

    max_steps: int = 10_000
    strict_transitions: bool = False
    left_edge: LeftEdgePolicy = LeftEdgePolicy.CLAMP
    log_level: str = "WARNING"

    def override(self, **changes: Any) -> "EngineSettings":
        """Devuelve una copia con los valores no nulos de ``changes``."""

        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def _normalize_config(data: Dict) -> Dict:
    """Acepta configuraciones con o sin el nodo 'engine'."""

    if "engine" in data and isinstance(data["engine"], dict):
        return data["engine"]
    return data


def validate_settings(config: Dict[str, Any]) -> EngineSettings:
    unknown = sorted(set(config) - set(SETTINGS_SCHEMA))
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    merged = dict(DEFAULT_SETTINGS)
    merged.update(config)

    for key, expected_type in SETTINGS_SCHEMA.items():
        value = merged[key]
        # bool es subclase de int
        if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
            raise TypeError(f"Config key '{key}' expected {expected_type.__name__}, got {type(value).__name__}")

    if merged["max_steps"] <= 0:
        raise ValueError(f"Config key 'max_steps' must be positive; found {merged['max_steps']}")

    policies = [policy.value for policy in LeftEdgePolicy]
    if merged["left_edge"] not in policies:
        raise ValueError(f"Config key 'left_edge' must be one of {policies}; found '{merged['left_edge']}'")

    log_level = merged["log_level"].upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Config key 'log_level' is not a logging level; found '{merged['log_level']}'")

    return EngineSettings(
        max_steps=merged["max_steps"],
        strict_transitions=merged["strict_transitions"],
        left_edge=LeftEdgePolicy(merged["left_edge"]),
        log_level=log_level,
    )


def load_settings(path: Optional[str | Path] = None) -> EngineSettings:
    """Carga y valida el archivo YAML de configuración, si se indica."""

    if path is None:
        return EngineSettings()

    with Path(path).open("r", encoding="utf-8") as handle:
        raw_data = yaml.safe_load(handle)

    if raw_data is None:
        return EngineSettings()
    if not isinstance(raw_data, dict):
        raise ValueError("The YAML settings file must describe a mapping.")

    return validate_settings(_normalize_config(raw_data))
