"""
Default configuration values.
"""

# Plates
DEFAULT_WELL_TYPE = "med96"

# Content hashing: hex characters kept from the SHA-256 digest
DEFAULT_FINGERPRINT_LENGTH = 16

# Plates filled below this fraction are reported at WARNING level
DEFAULT_LOW_UTILIZATION_WARNING = 0.25

# Logging
DEFAULT_LOG_LEVEL = "INFO"

# Compiler
DEFAULT_VALIDATE_BEFORE_COMPILE = True
