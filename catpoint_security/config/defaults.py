"""Default configuration values and constants."""

from typing import Dict, Any

# Default system configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    # Image analysis
    "cat_confidence_threshold": 0.5,
    "image_backend": "opencv",
    "cascade_path": None,

    # State storage
    "repository_path": None,

    # Logging
    "log_level": "INFO",
    "log_dir": "logs",

    # Web API
    "web_host": "0.0.0.0",
    "web_port": 5000,
    "event_history_size": 100
}

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "catpoint_config.json"
}

# Haar cascade settings for the local cat detector
CASCADE_SETTINGS = {
    "cascade_file": "haarcascade_frontalcatface.xml",
    "scale_factor": 1.1,
    "min_neighbors": 3,
    "min_size": (30, 30),
    # Level weights at or above this map to confidence 1.0
    "max_level_weight": 5.0
}

IMAGE_BACKENDS = ("opencv", "fake")
