# src/genmidi/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging
import yaml

logger = logging.getLogger(__name__)

# package root: .../src/genmidi
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "genmidi" / "config.yaml"

DEFAULT_TICKS_PER_BEAT = 480

def _safe_load(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if isinstance(data, dict):
                return data
            logger.warning("config %s is not a mapping, ignored", path)
    except (OSError, yaml.YAMLError) as exc:
        # an unreadable layer is skipped, the core keeps working
        logger.warning("config %s unreadable: %s", path, exc)
    return {}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Packaged defaults merged with user overrides.
    Always contains 'ticks_per_beat' (top-level).
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    defaults = _safe_load(dpath)
    user = _safe_load(upath)
    cfg = _deep_merge(defaults, user)

    cfg.setdefault("ticks_per_beat", DEFAULT_TICKS_PER_BEAT)
    return cfg

def get_ticks_per_beat(cfg: Dict[str, Any]) -> int:
    try:
        return int(cfg.get("ticks_per_beat", DEFAULT_TICKS_PER_BEAT))
    except (TypeError, ValueError):
        return DEFAULT_TICKS_PER_BEAT

def get_import_options(cfg: Dict[str, Any]) -> Dict[str, Any]:
    sec = cfg.get("import") or {}
    return {
        "mode": str(sec.get("mode", "auto")),
        "default_bpm": float(sec.get("default_bpm", 60.0)),
    }

def get_export_options(cfg: Dict[str, Any]) -> Dict[str, Any]:
    sec = cfg.get("export") or {}
    return {
        "end_of_track_offset": int(sec.get("end_of_track_offset", 100)),
        "emit_program_change": bool(sec.get("emit_program_change", False)),
    }

def get_playback_bpm(cfg: Dict[str, Any]) -> float:
    return float((cfg.get("playback") or {}).get("bpm", 120.0))
