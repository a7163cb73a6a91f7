"""Source status models."""
from typing import Optional

from pydantic import BaseModel


class SourceStatus(BaseModel):
    """Outcome of fetching one vendor during a request."""
    ok: bool
    records: int = 0
    error: Optional[str] = None
