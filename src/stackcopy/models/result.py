"""
Models for copy run results and state tracking.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class CopyState(str, Enum):
    """State of a copy run."""
    IDLE = "idle"
    KEYS_VALIDATED = "keys_validated"
    DOWNLOADED = "downloaded"
    CLEARED = "cleared"
    UPLOADED = "uploaded"
    DONE = "done"
    FAILED = "failed"


class TableCopyStats(BaseModel):
    """Per-table counts for a copy run."""
    source_name: str
    target_name: str
    downloaded: int = 0
    target_existing: int = 0
    deleted: int = 0
    delete_failed: int = 0
    uploaded: int = 0


class CopyResult(BaseModel):
    """Represents a copy run."""
    id: str
    source_stage: str
    target_stage: str
    overwrite_all_data: bool = False
    triggered_by: str = "manual"
    state: CopyState = CopyState.IDLE
    failed_stage: Optional[CopyState] = None
    tables: Dict[str, TableCopyStats] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    execution_time_seconds: Optional[float] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CopyState.DONE

    def mark_state(self, state: CopyState) -> None:
        self.state = state

    def mark_completed(self) -> None:
        self.state = CopyState.DONE
        self._finish()

    def mark_failed(self, error_message: str) -> None:
        """Record the failure, keeping the last state reached before it."""
        self.failed_stage = self.state
        self.state = CopyState.FAILED
        self.error_message = error_message
        self._finish()

    def _finish(self) -> None:
        self.completed_at = datetime.utcnow()
        self.execution_time_seconds = (self.completed_at - self.started_at).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the run."""
        return {
            "id": self.id,
            "source_stage": self.source_stage,
            "target_stage": self.target_stage,
            "state": self.state.value,
            "failed_stage": self.failed_stage.value if self.failed_stage else None,
            "tables": len(self.tables),
            "downloaded": sum(t.downloaded for t in self.tables.values()),
            "deleted": sum(t.deleted for t in self.tables.values()),
            "uploaded": sum(t.uploaded for t in self.tables.values()),
            "execution_time_seconds": self.execution_time_seconds,
            "error_message": self.error_message
        }
