"""
Utility functions for configuration and I/O.
"""

import json
import yaml
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..exceptions import MalformedInput


@dataclass(frozen=True)
class DiagnosticsConfig:
    """Settings passed explicitly into each diagnostics run."""
    pfi_threshold: float = 0.01          # |mean| below this -> removal candidate
    correlation_threshold: float = 0.9   # |corr| above this -> flagged pair
    zero_variance: str = "zero"          # 'zero' or 'raise'
    show_legend: bool = False
    color: bool = True
    label: Optional[str] = "Survived"
    categorical: Tuple[str, ...] = ()  # left out of the correlation matrix


def config_from_dict(values: Dict[str, Any]) -> DiagnosticsConfig:
    """Build a DiagnosticsConfig, rejecting unknown keys."""
    known = {f.name for f in fields(DiagnosticsConfig)}
    unknown = set(values).difference(known)
    if unknown:
        raise MalformedInput(f"Unknown diagnostics settings: {sorted(unknown)}")
    values = dict(values)
    if "categorical" in values:
        values["categorical"] = tuple(values["categorical"] or ())
    return DiagnosticsConfig(**values)


def load_config(config_path: str = "configs/default.yaml") -> DiagnosticsConfig:
    """Load the ``diagnostics`` section of a YAML configuration file."""
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}
    return config_from_dict(config.get("diagnostics") or {})


def save_results(
    results: Dict[str, Any],
    output_dir: str = "results",
    prefix: str = "diagnostics"
) -> str:
    """
    Save diagnostics results to JSON file with timestamp.

    Returns path to saved file.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"{prefix}_{timestamp}.json"
    filepath = output_path / filename

    with open(filepath, 'w') as f:
        json.dump(results, f, indent=2, default=str)

    return str(filepath)


def config_to_dict(config: DiagnosticsConfig) -> Dict[str, Any]:
    return asdict(config)
