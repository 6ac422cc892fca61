"""
Registration API routes: new artworks and remixes.

Both endpoints take a multipart form and answer ``{"success": true, "data": ...}``.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..dependencies import get_orchestrator
from .orchestrator import OnChainPolicy, RegistrationOrchestrator
from .requests import RegistrationRequest, RemixRequest

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["registration"])


async def _read(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None:
        return None
    try:
        return await upload.read()
    finally:
        await upload.close()


@router.post("/register-ip")
async def register_ip(
    email: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    ip_type: Optional[str] = Form(None, alias="ipType"),
    wallet_address: Optional[str] = Form(None, alias="walletAddress"),
    license_fee: Optional[str] = Form(None, alias="licenseFee"),
    commercial_rev_share: Optional[str] = Form(None, alias="commercialRevShare"),
    file: Optional[UploadFile] = File(None),
    orchestrator: RegistrationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Store an artwork permanently and register it as IP (best effort)."""
    request = RegistrationRequest.from_form(
        email=email,
        title=title,
        description=description,
        ip_type=ip_type,
        wallet_address=wallet_address,
        file=await _read(file),
        content_type=file.content_type if file else None,
        filename=file.filename if file else None,
        license_fee=license_fee,
        commercial_rev_share=commercial_rev_share,
    )
    logger.info(
        "Registration requested",
        email=request.email,
        title=request.title,
        ip_type=request.ip_type.value,
        size=len(request.file),
    )

    result = await orchestrator.register_artwork(request, on_chain=OnChainPolicy.BEST_EFFORT)
    return {"success": True, "data": result.to_dict()}


@router.post("/remix")
async def remix(
    parent_ip_id: Optional[str] = Form(None, alias="parentIpId"),
    email: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    ip_type: Optional[str] = Form(None, alias="ipType"),
    wallet_address: Optional[str] = Form(None, alias="walletAddress"),
    license_fee: Optional[str] = Form(None, alias="licenseFee"),
    commercial_rev_share: Optional[str] = Form(None, alias="commercialRevShare"),
    file: Optional[UploadFile] = File(None),
    orchestrator: RegistrationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Register a derivative of a catalog artwork."""
    request = RemixRequest.from_form(
        parent_ip_id=parent_ip_id,
        email=email,
        title=title,
        description=description,
        ip_type=ip_type,
        wallet_address=wallet_address,
        file=await _read(file),
        content_type=file.content_type if file else None,
        filename=file.filename if file else None,
        license_fee=license_fee,
        commercial_rev_share=commercial_rev_share,
    )
    logger.info(
        "Remix requested",
        parent_ip_id=request.parent_ip_id,
        title=request.title,
        size=len(request.file),
    )

    result = await orchestrator.register_remix(request, on_chain=OnChainPolicy.REQUIRED)
    return {"success": True, "data": result.to_dict()}
