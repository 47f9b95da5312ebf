"""
Request/response models for the ranking API
"""
from datetime import datetime, timezone
from typing import List
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class RecordRequest(BaseModel):
    """Manual request recording"""

    address: str = Field(..., description="Client address, any string")

    class Config:
        json_schema_extra = {"example": {"address": "145.87.2.109"}}


class RecordResponse(BaseModel):
    """Recording response"""

    success: bool
    address: str = ""
    count: int = 0
    message: str
    timestamp: datetime = Field(default_factory=utc_now)


class RankedAddress(BaseModel):
    """One ranked address"""

    address: str
    count: int


class TopAddressesResponse(BaseModel):
    """Top-N addresses response"""

    epoch: int
    limit: int
    items: List[RankedAddress]
    timestamp: datetime = Field(default_factory=utc_now)


class AddressCountResponse(BaseModel):
    """Single address count response"""

    epoch: int
    address: str
    count: int
    ranked: bool


class StatsResponse(BaseModel):
    """Listener statistics response"""

    epoch: int
    epoch_started_at: datetime
    distinct_addresses: int
    total_requests: int
    capacity: int
    ranked: int
    next_reset_in_seconds: float = Field(
        -1.0, description="Seconds until the scheduled reset, -1 when unscheduled"
    )


class ResetResponse(BaseModel):
    """Epoch reset response"""

    success: bool
    epoch: int
    message: str
    timestamp: datetime = Field(default_factory=utc_now)
