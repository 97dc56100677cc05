"""订阅服务：商品、购买、权益检查与功能门槛。"""
import logging
from datetime import datetime
from typing import List, Optional

from scalekeeper.exceptions import ScaleKeeperError, VerificationFailedError
from scalekeeper.store.data_service import DataService
from scalekeeper.subscriptions.client import StoreClient
from scalekeeper.subscriptions.models import (
    PRODUCT_TIERS,
    PremiumFeature,
    Product,
    PurchaseOutcome,
    SubscriptionTier,
    Transaction,
)

logger = logging.getLogger(__name__)


class SubscriptionService:
    """当前订阅等级；等级变化写回本地用户，写入失败只记日志。"""

    def __init__(self, data_service: DataService, store_client: Optional[StoreClient] = None):
        self.data = data_service
        self.client = store_client
        self.products: List[Product] = []
        user = self.data.fetch_current_user()
        self.current_tier = user.subscription_tier if user else SubscriptionTier.FREE
        self.expiration_date: Optional[datetime] = user.subscription_expires_at if user else None

    @property
    def is_premium(self) -> bool:
        return self.current_tier != SubscriptionTier.FREE

    def load_products(self) -> List[Product]:
        """从商店加载商品；失败时保留上一次的列表。"""
        if self.client is None:
            return self.products
        try:
            self.products = self.client.products(list(PRODUCT_TIERS))
        except (OSError, ScaleKeeperError):
            logger.exception("Failed to load products")
        return self.products

    def check_entitlement(self) -> SubscriptionTier:
        """按商店里已校验的当前交易更新等级。"""
        if self.client is None:
            return self.current_tier
        for transaction in self.client.current_entitlements():
            if not transaction.verified:
                logger.warning("Ignoring unverified transaction %s", transaction.id)
                continue
            if transaction.expires_at is not None:
                self.expiration_date = transaction.expires_at
            self._update_tier(transaction.product_id)
        return self.current_tier

    def purchase(self, product: Product) -> Optional[Transaction]:
        """购买；用户取消或待处理返回 None，凭证未通过抛 VerificationFailedError。"""
        if self.client is None:
            raise ScaleKeeperError("No store client configured")
        result = self.client.purchase(product)
        if result.outcome != PurchaseOutcome.SUCCESS or result.transaction is None:
            logger.info("Purchase of %s not completed: %s", product.id, result.outcome.value)
            return None
        transaction = result.transaction
        if not transaction.verified:
            raise VerificationFailedError()
        if transaction.expires_at is not None:
            self.expiration_date = transaction.expires_at
        self._update_tier(transaction.product_id)
        return transaction

    def restore_purchases(self) -> SubscriptionTier:
        if self.client is None:
            return self.current_tier
        self.client.restore()
        return self.check_entitlement()

    def has_access(self, feature: PremiumFeature) -> bool:
        return self.current_tier.rank >= feature.required_tier.rank

    def can_add_animal(self, current_count: int) -> bool:
        limit = self.current_tier.animal_limit
        return limit is None or current_count < limit

    def _update_tier(self, product_id: str) -> None:
        tier = PRODUCT_TIERS.get(product_id)
        if tier is None:
            logger.warning("Unknown product id %s", product_id)
            return
        self.current_tier = tier
        logger.info("Subscription tier is now %s", tier.value)
        try:
            user = self.data.get_or_create_user()
            user.subscription_tier = tier
            user.subscription_expires_at = self.expiration_date
            self.data.save()
        except ScaleKeeperError:
            logger.exception("Failed to update user subscription")
