"""
Subscription plans and the billing collaborator.
"""

from .client import Billing, StripeBilling
from .plans import PLAN_LIMITS, CheckoutSession, PlanTier, SubscriptionRecord

__all__ = [
    "Billing",
    "CheckoutSession",
    "PLAN_LIMITS",
    "PlanTier",
    "StripeBilling",
    "SubscriptionRecord",
]
