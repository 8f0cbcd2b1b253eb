"""
schemas/common.py

- Shared schemas used across the project (pydantic v2)
- Contents:
  1) Standard error response: ErrorDetail, ErrorResponse
  2) Pagination metadata: PaginationInfo, make_pagination()
"""

from __future__ import annotations

from datetime import datetime, timezone
from math import ceil
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =========================================================
# 1) Standard error response
# =========================================================

class ErrorDetail(BaseModel):
    """Error code / message pair"""
    code: str = Field(..., description="Error identifier (e.g. VALIDATION_ERROR, DUPLICATE_RECORDS_FOUND)")
    message: str = Field(..., description="Human readable message")
    details: Optional[Any] = Field(default=None, description="Field-level errors or conflict details")


class ErrorResponse(BaseModel):
    """
    Error body rendered by the global exception handlers
    - middlewares/error_handler.py returns this shape for every failure
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Response creation time (UTC)"
    )
    latency_ms: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) Pagination metadata
# =========================================================

class PaginationInfo(BaseModel):
    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    items_per_page: int = Field(..., ge=1)
    has_next_page: bool
    has_previous_page: bool
    start_index: int
    end_index: int


def make_pagination(total: int, page: int, limit: int) -> PaginationInfo:
    """Offset/limit slice metadata; end_index is inclusive (-1 for an empty page set)."""
    offset = (page - 1) * limit
    return PaginationInfo(
        current_page=page,
        total_pages=ceil(total / limit) if limit else 0,
        total_items=total,
        items_per_page=limit,
        has_next_page=offset + limit < total,
        has_previous_page=page > 1,
        start_index=offset,
        end_index=min(offset + limit - 1, total - 1),
    )
