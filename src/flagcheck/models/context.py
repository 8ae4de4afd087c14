from __future__ import annotations

import time
from typing import Optional

from pydantic import BaseModel, ConfigDict


class EvaluationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str  # synthetic user for this run

    @classmethod
    def for_process(cls, prefix: str = "user", now_ms: Optional[int] = None) -> "EvaluationContext":
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return cls(key=f"{prefix}-{now_ms}")


class FlagResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    flag_key: str
    value: bool

    def line(self) -> str:
        shown = "true" if self.value else "false"
        return f"Feature flag '{self.flag_key}' is '{shown}'"
