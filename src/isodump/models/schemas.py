from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BoxInfo(BaseModel):
    offset: int
    depth: int
    type: str
    size: int
    header_length: int
    dump: Optional[str] = Field(default=None, description="Rendered payload")


class ViolationInfo(BaseModel):
    offset: int
    depth: int
    type: str
    claimed_size: int
    boundary: int


class InspectResponse(BaseModel):
    data_size: int
    end_offset: int = Field(..., description="Offset where traversal stopped")
    complete: bool = Field(..., description="Whether the whole input was traversed")
    stop_reason: Optional[str] = None
    boxes: List[BoxInfo]
    violations: List[ViolationInfo] = Field(default_factory=list)
    processing_time: float

    model_config = ConfigDict(extra="forbid")


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime: float
    memory_usage: float
    active_tasks: int
