"""Data models for backup/restore operations."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class UnitStatus(str, Enum):
    """Outcome of one collection transfer."""
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"


class UnitOutcome(BaseModel):
    """Result of backing up or restoring a single collection."""

    database: str = Field(..., description="Database name")
    collection: str = Field(..., description="Collection name")
    status: UnitStatus = Field(..., description="succeeded or skipped")
    count: Optional[int] = Field(default=None, description="Documents written or restored")
    reason: Optional[str] = Field(default=None, description="Why the collection was skipped")
    path: Optional[str] = Field(default=None, description="Snapshot file used")

    @classmethod
    def succeeded(cls, database: str, collection: str, count: int, path: Optional[str] = None) -> "UnitOutcome":
        return cls(database=database, collection=collection, status=UnitStatus.SUCCEEDED, count=count, path=path)

    @classmethod
    def skipped(cls, database: str, collection: str, reason: str, path: Optional[str] = None) -> "UnitOutcome":
        return cls(database=database, collection=collection, status=UnitStatus.SKIPPED, reason=reason, path=path)

    @property
    def ok(self) -> bool:
        return self.status == UnitStatus.SUCCEEDED

    def describe(self) -> str:
        """One-line summary for console output."""
        name = f"{self.database}.{self.collection}"
        if self.ok:
            return f"✓ {name}: {self.count} documents"
        return f"✗ {name}: skipped ({self.reason})"


class RunReport(BaseModel):
    """Per-collection outcomes of one backup or restore run."""

    operation: Literal["backup", "restore"]
    project: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    outcomes: List[UnitOutcome] = Field(default_factory=list)

    def add(self, outcome: UnitOutcome) -> UnitOutcome:
        self.outcomes.append(outcome)
        return outcome

    def finish(self) -> "RunReport":
        self.finished_at = datetime.now(timezone.utc)
        return self

    @property
    def succeeded(self) -> List[UnitOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def skipped(self) -> List[UnitOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def restored_any(self) -> bool:
        """True when at least one collection was transferred."""
        return bool(self.succeeded)

    @property
    def document_count(self) -> int:
        return sum(outcome.count or 0 for outcome in self.succeeded)
