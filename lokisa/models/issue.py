"""
Pydantic models for issues and supports.
These models handle validation for issue submission and API responses.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from enum import Enum

from lokisa.models.geo import Coordinate


class IssueStatus(str, Enum):
    """Issue lifecycle. Reminders go out only for unresolved issues."""
    REPORTED = "reported"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class NotificationKind(str, Enum):
    NEW = "new"
    SUPPORT = "support"
    REMINDER = "reminder"


class IssueCreate(BaseModel):
    """
    Model for creating a new issue (incoming POST request).
    Photo upload happens elsewhere; only the resulting URL is stored.
    """
    type: str = Field(..., min_length=1, max_length=100, description="Issue category id, e.g. 'pothole'")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=5, max_length=500, description="Human readable address")
    notes: Optional[str] = Field(None, max_length=2000)
    photo_url: Optional[str] = Field(None, max_length=1000)
    status: IssueStatus = IssueStatus.REPORTED

    @field_validator("type", "address")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "type": "streetlight",
                "latitude": -25.7479,
                "longitude": 28.2293,
                "address": "Church Square, Pretoria Central",
                "notes": "Light has been out for a week",
            }
        }
        extra = "ignore"


class Issue(BaseModel):
    """Stored issue as returned by the repository and the API."""
    id: int
    type: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    status: IssueStatus = IssueStatus.REPORTED
    upvote_count: int = Field(default=0, ge=0)
    report_id: str
    created_at: datetime
    email_sent_to: List[str] = Field(default_factory=list)
    email_delivered: bool = False
    last_reminder_sent_at: Optional[datetime] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class Support(BaseModel):
    """One device's endorsement of one issue."""
    id: int
    issue_id: int
    device_id: str
    created_at: datetime


class SupportRequest(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=200)


class StatusUpdate(BaseModel):
    status: IssueStatus


class SupportResult(BaseModel):
    """Outcome of a support or revoke call."""
    issue: Issue
    supported: bool
    notified: bool = False


class SupportStatus(BaseModel):
    issue_id: int
    supported: bool
