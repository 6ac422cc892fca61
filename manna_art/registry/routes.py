"""
IP registry API routes: SPG NFT collection management.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import Settings
from ..dependencies import get_app_settings, get_registry
from ..errors import ValidationError
from .client import IPRegistry

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/spg", tags=["registry"])


class CreateCollectionRequest(BaseModel):
    name: Optional[str] = None
    symbol: Optional[str] = None
    isPublicMinting: bool = False
    mintFeeRecipient: Optional[str] = None


@router.post("/create")
async def create_spg_collection(
    body: CreateCollectionRequest,
    registry: IPRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Create an SPG NFT collection owned by the server wallet."""
    if not body.name or not body.symbol:
        raise ValidationError("name y symbol son requeridos")

    result = await registry.create_collection(
        name=body.name,
        symbol=body.symbol,
        is_public_minting=body.isPublicMinting,
        mint_fee_recipient=body.mintFeeRecipient,
    )

    storyscan = settings.storyscan_url.rstrip("/")
    return {
        "success": True,
        "data": {
            "contractAddress": result.contract_address,
            "spgNftContract": result.contract_address,
            "txHash": result.tx_hash,
            "storyscanUrl": f"{storyscan}/address/{result.contract_address}",
            "message": (
                "SPG NFT Collection creado exitosamente. "
                "Agrega SPG_NFT_CONTRACT a tu .env"
            ),
        },
    }
