"""记录存储：每类记录一个 JSON 文件，进程内缓存，save 时写回。"""
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Type, TypeVar

from scalekeeper.config import RECORDS_DIR, ensure_dirs
from scalekeeper.exceptions import SaveFailedError
from scalekeeper.store.models import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class RecordStore:
    """对象记录的增删查与落盘。

    insert/delete 立即作用于进程内缓存，查询可见；save() 把已加载的集合
    整体写回磁盘。记录对象按引用返回，原地修改后调用 save() 即可持久化。
    """
    _suffix = ".json"

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
        self.base_dir = base_dir or RECORDS_DIR
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._collections: Dict[str, Dict[str, Record]] = {}

    def _path(self, collection: str) -> Path:
        return self.base_dir / f"{collection}{self._suffix}"

    def _items(self, record_type: Type[R]) -> Dict[str, R]:
        name = record_type.collection
        if not name:
            raise TypeError(f"{record_type.__name__} has no collection name")
        if name not in self._collections:
            self._collections[name] = self._load(record_type)
        return self._collections[name]  # type: ignore[return-value]

    def _load(self, record_type: Type[R]) -> Dict[str, R]:
        path = self._path(record_type.collection)
        if not path.exists():
            return {}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        items: Dict[str, R] = {}
        for item in data.get("records", []):
            record = record_type.model_validate(item)
            items[record.id] = record
        logger.debug("Loaded %d %s from %s", len(items), record_type.collection, path)
        return items

    def insert(self, record: Record) -> None:
        """加入一条记录（同 ID 覆盖）。"""
        self._items(type(record))[record.id] = record

    def delete(self, record: Record) -> None:
        """删除一条记录；不存在时忽略。"""
        self._items(type(record)).pop(record.id, None)

    def save(self) -> None:
        """把所有已加载集合写回磁盘。失败抛 SaveFailedError。"""
        try:
            for name, items in self._collections.items():
                data = {"records": [r.model_dump(mode="json") for r in items.values()]}
                with open(self._path(name), "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save records to %s: %s", self.base_dir, e)
            raise SaveFailedError(e) from e

    def get(self, record_type: Type[R], record_id: str) -> Optional[R]:
        """按 ID 取一条记录。"""
        return self._items(record_type).get(record_id)

    def fetch(
        self,
        record_type: Type[R],
        predicate: Optional[Callable[[R], bool]] = None,
        sort_key: Optional[Callable[[R], object]] = None,
        reverse: bool = False,
        limit: Optional[int] = None,
    ) -> List[R]:
        """按条件筛选、排序并截取记录。"""
        out = list(self._items(record_type).values())
        if predicate is not None:
            out = [r for r in out if predicate(r)]
        if sort_key is not None:
            out.sort(key=sort_key, reverse=reverse)
        if limit is not None:
            out = out[:limit]
        return out

    def count(self, record_type: Type[R], predicate: Optional[Callable[[R], bool]] = None) -> int:
        """统计满足条件的记录数。"""
        if predicate is None:
            return len(self._items(record_type))
        return sum(1 for r in self._items(record_type).values() if predicate(r))
