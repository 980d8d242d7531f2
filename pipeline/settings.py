"""
Settings: loads ``configs/settings.yaml`` into typed, read-only sections.

A missing file, or a missing key inside it, falls back to the defaults
declared on the dataclasses below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from attendance.overtime import OvertimePolicy

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent.parent / "configs" / "settings.yaml"


@dataclass(frozen=True)
class StorageSettings:
    path: Path = Path("data/time_records.json")
    key: str = "timeRecords"


@dataclass(frozen=True)
class OCRSettings:
    languages: tuple[str, ...] = ("ch", "en")
    engine_load_timeout: float = 60.0
    recognition_timeout: float = 30.0
    upscale_min_height: int = 1000
    max_lines: int = 300


@dataclass(frozen=True)
class Settings:
    storage: StorageSettings = field(default_factory=StorageSettings)
    ocr: OCRSettings = field(default_factory=OCRSettings)
    policy: OvertimePolicy = field(default_factory=OvertimePolicy)
    log_level: str = "INFO"


def _section(cfg: dict[str, Any], name: str) -> dict[str, Any]:
    value = cfg.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def load_settings(config_path: str | Path = CONFIG_PATH) -> Settings:
    path = Path(config_path)
    if not path.exists():
        logger.info("No config at %s, using defaults.", path)
        return Settings()

    with open(path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    s_cfg = _section(cfg, "storage")
    o_cfg = _section(cfg, "ocr")
    p_cfg = _section(cfg, "policy")
    l_cfg = _section(cfg, "logging")

    base_storage = StorageSettings()
    storage = StorageSettings(
        path=Path(s_cfg.get("path", base_storage.path)),
        key=str(s_cfg.get("key", base_storage.key)),
    )

    base_ocr = OCRSettings()
    ocr = OCRSettings(
        languages=tuple(o_cfg.get("languages", base_ocr.languages)),
        engine_load_timeout=float(o_cfg.get("engine_load_timeout", base_ocr.engine_load_timeout)),
        recognition_timeout=float(o_cfg.get("recognition_timeout", base_ocr.recognition_timeout)),
        upscale_min_height=int(o_cfg.get("upscale_min_height", base_ocr.upscale_min_height)),
        max_lines=int(o_cfg.get("max_lines", base_ocr.max_lines)),
    )

    base_policy = OvertimePolicy()
    policy = OvertimePolicy(
        standard_day_minutes=int(p_cfg.get("standard_day_minutes", base_policy.standard_day_minutes)),
        lunch_threshold_minutes=int(p_cfg.get("lunch_threshold_minutes", base_policy.lunch_threshold_minutes)),
        lunch_break_minutes=int(p_cfg.get("lunch_break_minutes", base_policy.lunch_break_minutes)),
        required_overtime_per_workday=int(
            p_cfg.get("required_overtime_per_workday", base_policy.required_overtime_per_workday)
        ),
    )

    return Settings(
        storage=storage,
        ocr=ocr,
        policy=policy,
        log_level=str(l_cfg.get("level", "INFO")).upper(),
    )
