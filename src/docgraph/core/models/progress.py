"""Progress updates emitted while a document is processed."""

from typing import Literal

from pydantic import BaseModel, Field

from docgraph.core.models.graph import utc_now_iso

ProgressStatus = Literal["processing", "completed", "failed"]


class ProgressUpdate(BaseModel):
    document_id: str
    status: ProgressStatus
    progress: int = Field(ge=0, le=100)
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)
