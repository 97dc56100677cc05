"""应用商店接口：商品查询、购买、当前权益与恢复购买。

平台接入时继承 StoreClient 并实现四个方法；测试里用内存实现替代。
"""
from typing import List

from scalekeeper.subscriptions.models import Product, PurchaseResult, Transaction


class StoreClient:
    """商店客户端基类。"""

    def products(self, product_ids: List[str]) -> List[Product]:
        """按 ID 查询可购商品。"""
        raise NotImplementedError

    def purchase(self, product: Product) -> PurchaseResult:
        raise NotImplementedError

    def current_entitlements(self) -> List[Transaction]:
        """当前有效的交易（含未校验的，由调用方过滤）。"""
        raise NotImplementedError

    def restore(self) -> None:
        """与商店同步历史购买。"""
        raise NotImplementedError
