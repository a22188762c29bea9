"""
Configuration for parsing, layout and rendering.

Defaults live on BrowserConfig; a YAML file and command-line overrides can
replace any of them.
"""

import logging
import os
from dataclasses import dataclass, fields, asdict
from typing import Dict, Optional, Tuple

import yaml


@dataclass
class BrowserConfig:
    """Tunable constants for the GFF3 feature map."""
    # Parsing
    malformed_threshold: float = 0.1
    max_reported_errors: int = 5
    error_line_length: int = 100
    strict_numeric: bool = False

    # Zoom limits
    min_zoom: float = 1.0
    deep_zoom_threshold: int = 100000
    deep_max_zoom: float = 2000.0
    shallow_max_zoom: float = 1000.0

    # Rendering
    throttle_interval_ms: float = 60.0
    viewport_padding: float = 0.1
    max_primitives: int = 5000
    min_feature_px: float = 1.0
    lane_height: float = 60.0
    surface_width: int = 1200
    surface_height: int = 600

    # Feature type classes
    gene_types: Tuple[str, ...] = ('gene', 'pseudogene', 'ncRNA_gene')
    transcript_types: Tuple[str, ...] = (
        'mRNA', 'transcript', 'primary_transcript', 'ncRNA', 'lnc_RNA',
        'tRNA', 'rRNA', 'snRNA', 'snoRNA', 'miRNA', 'pseudogenic_transcript',
    )
    block_types: Tuple[str, ...] = (
        'exon', 'CDS', 'five_prime_UTR', 'three_prime_UTR',
        'start_codon', 'stop_codon',
    )

    def max_zoom_for(self, region_size):
        """Upper zoom bound for a loaded region of the given size in bp."""
        if region_size >= self.deep_zoom_threshold:
            return self.deep_max_zoom
        return self.shallow_max_zoom

    def validate(self):
        """Raise ValueError if any setting is out of range."""
        if not 0.0 <= self.malformed_threshold <= 1.0:
            raise ValueError(f"malformed_threshold must be within [0, 1], got {self.malformed_threshold}")
        if self.min_zoom <= 0:
            raise ValueError(f"min_zoom must be positive, got {self.min_zoom}")
        if min(self.deep_max_zoom, self.shallow_max_zoom) < self.min_zoom:
            raise ValueError("max zoom settings must not be below min_zoom")
        if self.throttle_interval_ms < 0:
            raise ValueError(f"throttle_interval_ms must not be negative, got {self.throttle_interval_ms}")
        if self.viewport_padding < 0:
            raise ValueError(f"viewport_padding must not be negative, got {self.viewport_padding}")
        if self.max_primitives < 1:
            raise ValueError(f"max_primitives must be at least 1, got {self.max_primitives}")
        if self.lane_height <= 0:
            raise ValueError(f"lane_height must be positive, got {self.lane_height}")
        return self

    def to_dict(self):
        return asdict(self)


_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0")


def _coerce(name, value):
    """Convert YAML values to the type of the matching default."""
    default = BrowserConfig.__dataclass_fields__[name].default
    if isinstance(default, tuple):
        if isinstance(value, str):
            value = [value]
        return tuple(str(v) for v in value)
    if isinstance(default, bool):
        return _coerce_bool(name, value)
    return type(default)(value)


def _coerce_bool(name, value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"{name} must be true or false, got {value!r}")
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"{name} must be true or false, got {value!r}")


def load_config(path: Optional[str] = None, overrides: Optional[Dict] = None) -> BrowserConfig:
    """
    Build a BrowserConfig from defaults, an optional YAML file and overrides.

    Args:
        path: YAML file holding a mapping of setting names to values
        overrides: Settings that take precedence over the file (None values are ignored)

    Returns:
        Validated BrowserConfig
    """
    values = {}
    known = {f.name for f in fields(BrowserConfig)}

    if path:
        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logging.info(f"Loaded configuration from {path}")
        for key, value in data.items():
            if key not in known:
                logging.warning(f"Ignoring unknown config setting '{key}' in {path}")
                continue
            values[key] = _coerce(key, value)

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key not in known:
            raise ValueError(f"Unknown config setting '{key}'")
        values[key] = _coerce(key, value)

    return BrowserConfig(**values).validate()
