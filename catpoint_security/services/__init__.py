"""Services for the catpoint security system."""

from .interfaces import (
    SecurityRepositoryInterface,
    ImageServiceInterface,
    StatusListener
)
from .error_handler import SecurityError, AnalysisFailure
from .repository import InMemorySecurityRepository, JsonFileSecurityRepository
from .listeners import EventLogListener
from .security_service import SecurityService

__all__ = [
    'SecurityRepositoryInterface',
    'ImageServiceInterface',
    'StatusListener',
    'SecurityError',
    'AnalysisFailure',
    'InMemorySecurityRepository',
    'JsonFileSecurityRepository',
    'EventLogListener',
    'SecurityService'
]
