"""Configuration data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SecurityConfig:
    """System configuration settings."""
    # Image analysis
    cat_confidence_threshold: float = 0.5
    image_backend: str = "opencv"  # opencv, fake
    cascade_path: Optional[str] = None  # None uses the cascade bundled with OpenCV

    # State storage; None keeps state in memory only
    repository_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    # Web API
    web_host: str = "0.0.0.0"
    web_port: int = 5000
    event_history_size: int = 100
