from .settings import LabPlanSettings, configure_logging
from .loader import load_yaml_config, load_settings_from_yaml, load_experiment

__all__ = [
    "LabPlanSettings",
    "configure_logging",
    "load_yaml_config",
    "load_settings_from_yaml",
    "load_experiment",
]
