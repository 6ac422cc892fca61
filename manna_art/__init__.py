"""
Manna Art

Permanent storage and IP registration for creators' artworks and remixes.
"""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("manna-art")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

from .errors import MannaError
from .registration import OnChainPolicy, RegistrationOrchestrator

__all__ = [
    "MannaError",
    "OnChainPolicy",
    "RegistrationOrchestrator",
]
