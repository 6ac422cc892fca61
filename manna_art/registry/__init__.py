"""
IP registration protocol.
"""

from .client import (
    PUBLIC_SPG_NFT_CONTRACT,
    CollectionResult,
    IPRegistration,
    IPRegistry,
    StoryIPRegistry,
)

__all__ = [
    "CollectionResult",
    "IPRegistration",
    "IPRegistry",
    "PUBLIC_SPG_NFT_CONTRACT",
    "StoryIPRegistry",
]
