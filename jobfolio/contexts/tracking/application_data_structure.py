"""
Job application data structure for the Tracking context.

A JobApplication is one job posting the user is tracking, plus weak
references to the resume and cover-letter versions sent with it.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jobfolio.utils.records import record_from_dict, record_to_dict

APPLICATION_STATUSES = ("saved", "applied", "interviewing", "offered", "rejected")
WORK_TYPES = ("remote", "hybrid", "onsite", "unknown")


def validate_status(status: str) -> str:
    """
    Raises:
        ValueError: If status is not one of APPLICATION_STATUSES
    """
    if status not in APPLICATION_STATUSES:
        raise ValueError(f"Unknown status '{status}'. Expected one of: {list(APPLICATION_STATUSES)}")
    return status


def validate_work_type(work_type: str) -> str:
    """
    Raises:
        ValueError: If work_type is not one of WORK_TYPES
    """
    if work_type not in WORK_TYPES:
        raise ValueError(f"Unknown work type '{work_type}'. Expected one of: {list(WORK_TYPES)}")
    return work_type


@dataclass
class JobApplication:
    """
    Tracked job application.

    Status moves saved -> applied -> interviewing -> offered | rejected, but
    the store accepts any valid status at any time; enforcing the order is the
    caller's business.

    resume_version_id / cover_letter_version_id are weak references: deleting
    the CV version they point at leaves them dangling.
    """

    id: str
    title: str
    company: str
    url: str = ""
    description: str = ""
    requirements: List[str] = field(default_factory=list)
    location: str = ""
    work_type: str = field(default="unknown", metadata={"key": "workType"})
    status: str = "saved"
    notes: str = ""
    salary: Optional[str] = None
    date_posted: Optional[str] = field(default=None, metadata={"key": "datePosted"})
    date_applied: Optional[str] = field(default=None, metadata={"key": "dateApplied"})
    position_id: Optional[str] = field(default=None, metadata={"key": "positionId"})
    match_score: Optional[float] = field(default=None, metadata={"key": "matchScore"})
    resume_version_id: Optional[str] = field(default=None, metadata={"key": "resumeVersionId"})
    cover_letter_version_id: Optional[str] = field(
        default=None, metadata={"key": "coverLetterVersionId"}
    )
    created_at: str = field(default="", metadata={"key": "createdAt"})
    updated_at: str = field(default="", metadata={"key": "updatedAt"})

    @classmethod
    def new(cls, title: str, company: str, **kwargs) -> "JobApplication":
        """
        Create an application with a fresh UUID.

        Timestamps are left empty; the store fills them in on save().

        Raises:
            ValueError: If status or work_type is given and unknown
        """
        if "status" in kwargs:
            validate_status(kwargs["status"])
        if "work_type" in kwargs:
            validate_work_type(kwargs["work_type"])
        return cls(id=str(uuid.uuid4()), title=title, company=company, **kwargs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobApplication":
        return record_from_dict(cls, data)

    def to_dict(self) -> Dict[str, Any]:
        return record_to_dict(self)
