from pydantic import BaseModel, Field


class ReloadResponse(BaseModel):
    status: str
    count: int


class RecordFailureOut(BaseModel):
    sku: str
    reason: str


class PushResponse(BaseModel):
    status: str
    created: int
    failed: int
    failures: list[RecordFailureOut] = Field(default_factory=list)
