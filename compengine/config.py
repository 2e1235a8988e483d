"""
Engine configuration loaded from YAML.

Example:

    default_algorithm: lzss
    lzss:
      window_size: 4096
      lookahead: 18
      min_match: 3

Missing keys keep their defaults.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from compengine.engine import Algorithm
from compengine.errors import UnknownAlgorithmError
from compengine.lzss import LzssParams

_TOP_LEVEL_KEYS = {"default_algorithm", "lzss"}
_LZSS_KEYS = {"window_size", "lookahead", "min_match"}


@dataclass
class EngineConfig:
    """Tunable engine settings."""

    lzss: LzssParams = field(default_factory=LzssParams)
    default_algorithm: Algorithm = Algorithm.HUFFMAN


def config_from_dict(raw: Dict[str, Any]) -> EngineConfig:
    """
    Build an EngineConfig from parsed YAML.

    Raises:
        ValueError: Unknown keys or invalid values
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Config must be a mapping, got {type(raw).__name__}")

    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    config = EngineConfig()

    if "default_algorithm" in raw:
        try:
            config.default_algorithm = Algorithm.parse(raw["default_algorithm"])
        except UnknownAlgorithmError as e:
            raise ValueError(str(e)) from e

    lzss = raw.get("lzss") or {}
    if not isinstance(lzss, dict):
        raise ValueError("'lzss' must be a mapping")
    unknown = set(lzss) - _LZSS_KEYS
    if unknown:
        raise ValueError(f"Unknown lzss keys: {', '.join(sorted(unknown))}")
    for key, value in lzss.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"lzss.{key} must be an integer, got {value!r}")
    config.lzss = LzssParams(**lzss)

    return config


def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: YAML file path (None = defaults)

    Returns:
        Parsed configuration

    Raises:
        OSError: File cannot be read
        ValueError: Malformed YAML, unknown keys or invalid values
    """
    if path is None:
        return EngineConfig()

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {path}: {e}") from e

    # An empty file parses to None
    return config_from_dict(raw or {})
