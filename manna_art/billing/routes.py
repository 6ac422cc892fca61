"""
Billing API routes: subscription status and checkout.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..dependencies import get_billing
from ..errors import ValidationError
from .client import Billing
from .plans import parse_plan

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["billing"])


class SubscriptionStatusRequest(BaseModel):
    email: Optional[str] = None


class CheckoutRequest(BaseModel):
    planName: Optional[str] = None
    isYearly: bool = False
    userEmail: Optional[str] = None


@router.post("/subscription/status")
async def subscription_status(
    body: SubscriptionStatusRequest,
    billing: Billing = Depends(get_billing),
) -> Dict[str, Any]:
    """Return the caller's active subscription, or null."""
    if not body.email:
        raise ValidationError("Email es requerido")

    subscription = await billing.get_active_subscription(body.email)
    if subscription is None:
        return {"subscription": None}

    logger.info(
        "Subscription found",
        subscription_id=subscription.id,
        plan=subscription.plan.value if subscription.plan else None,
        registrations_used=subscription.registrations_used,
    )
    return {"subscription": subscription.to_status_dict()}


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutRequest,
    billing: Billing = Depends(get_billing),
) -> Dict[str, Any]:
    """Start a hosted checkout for a plan."""
    logger.info(
        "Checkout requested",
        plan=body.planName,
        is_yearly=body.isYearly,
        email=body.userEmail,
    )
    if not body.userEmail:
        raise ValidationError("Email es requerido")

    plan = parse_plan(body.planName)
    if plan is None:
        raise ValidationError("Plan inválido")

    session = await billing.create_checkout_session(plan, body.isYearly, body.userEmail)
    return {"sessionId": session.session_id, "url": session.url}
