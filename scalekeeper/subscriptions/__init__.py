"""订阅等级与付费功能。"""
from scalekeeper.subscriptions.models import (
    PRODUCT_TIERS,
    PremiumFeature,
    Product,
    PurchaseOutcome,
    PurchaseResult,
    ScaleUser,
    SubscriptionTier,
    Transaction,
)

__all__ = [
    "PRODUCT_TIERS",
    "PremiumFeature",
    "Product",
    "PurchaseOutcome",
    "PurchaseResult",
    "ScaleUser",
    "SubscriptionTier",
    "Transaction",
]
