"""
本地内存缓存（TTL）

进程内缓存，时钟可注入便于测试：
- 条目写入时记录时间戳，读取时按 TTL 判断是否过期
- 可缓存 None（表示"查无此项"），未命中用 MISSING 区分
- 除过期与显式失效外不做淘汰
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """缓存条目"""
    value: Any
    stored_at: float


class TTLCache:
    """带 TTL 的本地缓存"""

    def __init__(self, ttl_seconds: float = 60.0, clock: Optional[Clock] = None):
        self._entries: Dict[str, CacheEntry] = {}
        self._ttl = ttl_seconds
        self._clock = clock or time.monotonic

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Any:
        """获取缓存值，未命中或已过期返回 MISSING"""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING
        if self._clock() - entry.stored_at >= self._ttl:
            return MISSING
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
