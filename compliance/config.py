"""Evaluator configuration (JSON, or YAML via PyYAML)."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .errors import ConfigError


DEFAULT_PENALTY_WEIGHT = 1000.0
UNKNOWN_ATTRIBUTE_VALUE = "__UNKNOWN__"


@dataclass(frozen=True)
class EvaluatorConfig:
    default_penalty_weight: float = DEFAULT_PENALTY_WEIGHT
    hard_penalty_weight: float = 1.0
    unknown_attribute_value: str = UNKNOWN_ATTRIBUTE_VALUE
    respect_participation: bool = True
    warn_on_unknown_constraints: bool = True


def load_config(path: str | Path | None) -> EvaluatorConfig:
    """
    Load an EvaluatorConfig from a JSON or YAML file.

    A ``None`` path yields the defaults. Keys not known to EvaluatorConfig
    are rejected so that typos do not silently fall back to defaults.
    """
    if path is None:
        return EvaluatorConfig()
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text) if text.strip() else {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not parse config {p}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config {p} must contain a mapping at the top level")

    known = {f.name for f in fields(EvaluatorConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {p}: {', '.join(unknown)}")

    cfg = EvaluatorConfig(**raw)
    if cfg.hard_penalty_weight < 0 or cfg.default_penalty_weight < 0:
        raise ConfigError("Penalty weights must be non-negative")
    return cfg
