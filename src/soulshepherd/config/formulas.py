from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from importlib.resources import files as resource_files

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from soulshepherd.errors import ConfigError

logger = logging.getLogger(__name__)

FORMULAS_ENV = "SOUL_SHEPHERD_FORMULAS"
FORMULAS_SCHEMA = "formulas@1"


class FormulaTable(BaseModel):
    """Read-only numeric constants consumed by the progression and reward code.

    Every value must be non-negative. The level threshold base and exponent
    must be strictly positive so that thresholds strictly increase with level.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    soul_insight_base_multiplier: float = Field(10, ge=0)
    soul_insight_spirit_bonus: float = Field(0.1, ge=0)
    soul_embers_base_multiplier: float = Field(2, ge=0)
    soul_embers_soulflow_bonus: float = Field(0.05, ge=0)
    critical_hit_multiplier: float = Field(1.5, ge=0)
    compromise_penalty_multiplier: float = Field(0.7, ge=0)
    boss_damage_multiplier: float = Field(0.5, ge=0)

    idle_collection_base_rate: float = Field(1, ge=0)
    idle_collection_interval_minutes: float = Field(5, gt=0)
    idle_collection_soulflow_bonus: float = Field(0.1, ge=0)
    content_soul_to_embers: int = Field(5, ge=0)

    level_threshold_base: float = Field(100, gt=0)
    level_threshold_exponent: float = Field(1.5, gt=0)
    skill_points_per_level: int = Field(1, ge=0)

    stat_upgrade_base_cost: float = Field(10, ge=0)
    stat_upgrade_cost_multiplier: float = Field(1.5, ge=0)
    harmony_step: float = Field(0.01, gt=0, le=1)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormulaTable":
        data = dict(data)
        schema = data.pop("schema", FORMULAS_SCHEMA)
        if schema != FORMULAS_SCHEMA:
            logger.warning("Unexpected formulas schema %s; continuing anyway", schema)
        unknown = sorted(set(data) - set(cls.model_fields))
        if unknown:
            logger.warning("Ignoring unknown formula keys: %s", unknown)
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid formula table: {e}") from e


def load_formulas(path: Optional[str] = None) -> FormulaTable:
    """Load the formula table from YAML.

    If path is None, SOUL_SHEPHERD_FORMULAS is consulted, then the embedded
    default resource at soulshepherd/config/formulas.yaml is used.
    """
    path = path or os.getenv(FORMULAS_ENV)
    if path is None:
        text = resource_files("soulshepherd.config").joinpath("formulas.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded formulas resource")
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read formulas file {path}: {e}") from e
        logger.debug("Loaded formulas from path: %s", path)

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Formulas file is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError("Formulas file must contain a mapping")
    return FormulaTable.from_dict(raw)
