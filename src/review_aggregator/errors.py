# review_aggregator/errors.py

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class ReviewValidationError(ValueError):
    """A raw review record was rejected before reaching the store."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        record: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.record = dict(record) if record is not None else None
