"""
Configuration and document loading utilities.
"""
import json
import logging
import os
import yaml
from typing import Dict, Any
from .settings import LabPlanSettings

logger = logging.getLogger(__name__)


def load_yaml_config(path: str) -> Dict[str, Any]:
    """Read a YAML settings file; a missing or empty file means no overrides."""
    if not os.path.isfile(path):
        logger.debug(f"No settings file at {path}, using defaults")
        return {}

    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must hold a mapping, got {type(data).__name__}")
    return data


def load_settings_from_yaml(path: str) -> LabPlanSettings:
    """Load LabPlanSettings from a YAML file.

    Unknown keys are ignored; missing keys fall back to the dataclass defaults.
    """
    data = load_yaml_config(path)
    valid_keys = LabPlanSettings.__annotations__.keys()
    filtered_data = {k: v for k, v in data.items() if k in valid_keys}
    ignored = sorted(set(data) - set(filtered_data))
    if ignored:
        logger.warning(f"Ignoring unknown settings keys in {path}: {ignored}")
    return LabPlanSettings(**filtered_data)


def load_experiment(path: str) -> Dict[str, Any]:
    """Load an authored experiment document from a .json, .yaml or .yml file."""
    ext = os.path.splitext(path)[1].lower()
    with open(path, 'r') as f:
        if ext == ".json":
            document = json.load(f)
        elif ext in (".yaml", ".yml"):
            document = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported experiment file extension: {ext!r}")

    if not isinstance(document, dict):
        raise ValueError(f"Experiment document in {path} must be a mapping, got {type(document).__name__}")
    logger.info(f"Loaded experiment from {path}")
    return document
