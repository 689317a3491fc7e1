"""Configuration for streaming fetches via Pydantic models."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Callable, Optional

from pydantic import BaseModel, Field

from .cancellation import CancellationToken

DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_CHUNK_SIZE = 64 * 1024


class FetchSettings(BaseModel):
    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, ge=1)
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, ge=1024, le=16 * 1024 * 1024)


class FetchOptions(BaseModel):
    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, ge=1)
    cancel: Optional[CancellationToken] = None
    on_progress: Optional[Callable[[int, int], None]] = None
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, ge=1024, le=16 * 1024 * 1024)

    model_config = {
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_settings(cls, **overrides) -> "FetchOptions":
        settings = get_fetch_settings()
        values = {"timeout_ms": settings.timeout_ms, "chunk_size": settings.chunk_size}
        values.update(overrides)
        return cls(**values)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@lru_cache
def get_fetch_settings() -> FetchSettings:
    return FetchSettings(
        timeout_ms=int(os.getenv("NIFTI_FETCH_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
        chunk_size=int(os.getenv("NIFTI_FETCH_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
    )
