from datetime import datetime

from pydantic import BaseModel


class HealthOut(BaseModel):
    status: str
    products: int
    loaded: bool
    last_reload: datetime | None = None
    refresh_count: int
    failed_refreshes: int
    last_error: str | None = None
