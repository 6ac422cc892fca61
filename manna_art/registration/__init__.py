"""
Registration workflows for new artworks and remixes.
"""

from .orchestrator import (
    OnChainPolicy,
    RegistrationOrchestrator,
    RegistrationResult,
    RemixResult,
)
from .requests import RegistrationRequest, RemixRequest

__all__ = [
    "OnChainPolicy",
    "RegistrationOrchestrator",
    "RegistrationRequest",
    "RegistrationResult",
    "RemixRequest",
    "RemixResult",
]
