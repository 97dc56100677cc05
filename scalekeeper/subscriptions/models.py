"""订阅等级、商品、交易与本地用户数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from scalekeeper.config import FREE_ANIMAL_LIMIT
from scalekeeper.store.models import AwareModel, Record


class SubscriptionTier(str, Enum):
    """订阅等级，按 rank 由低到高。"""
    FREE = "free"
    KEEPER = "keeper"
    BREEDER = "breeder"
    PROFESSIONAL = "professional"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    @property
    def animal_limit(self) -> Optional[int]:
        """可饲养数量上限，None 为不限。"""
        if self == SubscriptionTier.FREE:
            return FREE_ANIMAL_LIMIT
        return None


_TIER_RANK = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.KEEPER: 1,
    SubscriptionTier.BREEDER: 2,
    SubscriptionTier.PROFESSIONAL: 3,
}


class PremiumFeature(str, Enum):
    """付费功能。"""
    # Keeper
    UNLIMITED_ANIMALS = "unlimited_animals"
    FULL_HISTORY = "full_history"
    IOT_BASIC = "iot_basic"
    CLOUD_BACKUP = "cloud_backup"
    # Breeder
    GENETICS_ENGINE = "genetics_engine"
    BREEDING_TOOLS = "breeding_tools"
    MARKETPLACE = "marketplace"
    EXPO_TOOLS = "expo_tools"
    ADVANCED_REPORTING = "advanced_reporting"
    # Professional
    MULTI_USER = "multi_user"
    API_ACCESS = "api_access"
    WHITE_LABEL = "white_label"
    PRIORITY_SUPPORT = "priority_support"

    @property
    def required_tier(self) -> SubscriptionTier:
        if self in (
            PremiumFeature.UNLIMITED_ANIMALS,
            PremiumFeature.FULL_HISTORY,
            PremiumFeature.IOT_BASIC,
            PremiumFeature.CLOUD_BACKUP,
        ):
            return SubscriptionTier.KEEPER
        if self in (
            PremiumFeature.MULTI_USER,
            PremiumFeature.API_ACCESS,
            PremiumFeature.WHITE_LABEL,
            PremiumFeature.PRIORITY_SUPPORT,
        ):
            return SubscriptionTier.PROFESSIONAL
        return SubscriptionTier.BREEDER


# 商品 ID → 订阅等级
PRODUCT_TIERS = {
    "com.scalekeeper.keeper.monthly": SubscriptionTier.KEEPER,
    "com.scalekeeper.keeper.annual": SubscriptionTier.KEEPER,
    "com.scalekeeper.breeder.monthly": SubscriptionTier.BREEDER,
    "com.scalekeeper.breeder.annual": SubscriptionTier.BREEDER,
    "com.scalekeeper.professional.monthly": SubscriptionTier.PROFESSIONAL,
    "com.scalekeeper.professional.annual": SubscriptionTier.PROFESSIONAL,
    "com.scalekeeper.lifetime": SubscriptionTier.PROFESSIONAL,
}


class Product(BaseModel):
    """商店中的可购商品。"""
    id: str
    display_name: str = ""
    price: float = 0.0

    @property
    def tier(self) -> Optional[SubscriptionTier]:
        return PRODUCT_TIERS.get(self.id)

    @property
    def is_annual(self) -> bool:
        return "annual" in self.id

    @property
    def is_lifetime(self) -> bool:
        return "lifetime" in self.id


class Transaction(AwareModel):
    """一笔交易；verified 为 False 表示凭证未通过校验。"""
    id: str
    product_id: str
    purchased_at: datetime
    expires_at: Optional[datetime] = None
    verified: bool = True


class PurchaseOutcome(str, Enum):
    """购买结果。"""
    SUCCESS = "success"
    USER_CANCELLED = "user_cancelled"
    PENDING = "pending"


class PurchaseResult(BaseModel):
    """商店返回的购买结果，仅 SUCCESS 带交易。"""
    outcome: PurchaseOutcome
    transaction: Optional[Transaction] = None


class ScaleUser(Record):
    """本机唯一用户，记录订阅等级。"""
    collection: ClassVar[str] = "users"

    subscription_tier: SubscriptionTier = Field(SubscriptionTier.FREE, description="订阅等级")
    subscription_expires_at: Optional[datetime] = Field(None, description="订阅到期时间")
