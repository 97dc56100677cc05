"""业务异常。

存储层的写入失败向上抛出，由调用方记录日志并提示用户；
分析类计算在「数据不足」时返回 None，而不是抛异常。
"""
from typing import Optional


class ScaleKeeperError(Exception):
    """所有业务异常的基类。"""


class NotFoundError(ScaleKeeperError):
    """请求的记录不存在。"""

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id:
            super().__init__(f"{entity} not found: {entity_id}")
        else:
            super().__init__(f"{entity} not found")


class VerificationFailedError(ScaleKeeperError):
    """购买凭证校验失败。"""

    def __init__(self, message: str = "Transaction verification failed"):
        super().__init__(message)


class SaveFailedError(ScaleKeeperError):
    """持久化写入失败，underlying 为原始异常。"""

    def __init__(self, underlying: Exception):
        self.underlying = underlying
        super().__init__(f"Failed to save: {underlying}")


class NoHistoryError(ScaleKeeperError):
    """缺少必要的历史记录（如快速喂食时没有上一次喂食）。"""


class InvalidTransitionError(ScaleKeeperError):
    """状态流转不合法（终态、非待执行剂量等）。"""

    def __init__(self, entity: str, current: str, target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"{entity}: cannot go from {current} to {target}")


class LimitReachedError(ScaleKeeperError):
    """当前订阅等级的数量上限已满。"""
