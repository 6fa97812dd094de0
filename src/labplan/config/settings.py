"""
Configuration settings using dataclasses.
"""
import logging
import os
from dataclasses import dataclass, field
from . import defaults


@dataclass
class LabPlanSettings:
    """Central configuration for labplan."""

    # Plates
    default_well_type: str = field(default=defaults.DEFAULT_WELL_TYPE)
    low_utilization_warning: float = field(default=defaults.DEFAULT_LOW_UTILIZATION_WARNING)

    # Hashing
    fingerprint_length: int = field(default=defaults.DEFAULT_FINGERPRINT_LENGTH)

    # Compiler
    validate_before_compile: bool = field(default=defaults.DEFAULT_VALIDATE_BEFORE_COMPILE)

    # Logging
    log_level: str = field(default=defaults.DEFAULT_LOG_LEVEL)

    def __post_init__(self):
        if not 1 <= self.fingerprint_length <= 64:
            raise ValueError(
                f"fingerprint_length must be between 1 and 64 hex characters, got {self.fingerprint_length}"
            )
        if not 0.0 <= self.low_utilization_warning <= 1.0:
            raise ValueError(
                f"low_utilization_warning must be a fraction in [0, 1], got {self.low_utilization_warning}"
            )

    @classmethod
    def load_from_env(cls) -> 'LabPlanSettings':
        """Load settings from environment variables."""
        return cls(
            default_well_type=os.getenv("LABPLAN_DEFAULT_WELL_TYPE", defaults.DEFAULT_WELL_TYPE),
            low_utilization_warning=float(os.getenv("LABPLAN_LOW_UTILIZATION_WARNING", defaults.DEFAULT_LOW_UTILIZATION_WARNING)),
            fingerprint_length=int(os.getenv("LABPLAN_FINGERPRINT_LENGTH", defaults.DEFAULT_FINGERPRINT_LENGTH)),
            validate_before_compile=os.getenv("LABPLAN_VALIDATE_BEFORE_COMPILE", str(defaults.DEFAULT_VALIDATE_BEFORE_COMPILE)).lower() == "true",
            log_level=os.getenv("LABPLAN_LOG_LEVEL", defaults.DEFAULT_LOG_LEVEL),
        )


def configure_logging(config: LabPlanSettings) -> None:
    """Apply the configured level to the labplan logger hierarchy."""
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.log_level}")
    logging.getLogger("labplan").setLevel(level)


# Global settings instance
settings = LabPlanSettings.load_from_env()
