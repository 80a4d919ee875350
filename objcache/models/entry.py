from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict

from objcache.models.enums import EvictionPolicy


@dataclass(slots=True)
class CacheEntry:
    # value + wall-clock touch time (ms) + per-cache touch counter
    key: Any
    value: Any
    recency: int
    sequence: int

    @property
    def order_key(self) -> tuple[int, int]:
        return (self.recency, self.sequence)


class CacheStats(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    policy: EvictionPolicy
    size: int
    max_size: int
    capacity: int
    oldest_touch_ms: int | None = None
    newest_touch_ms: int | None = None
