# models/submission.py
from typing import Optional

from pydantic import BaseModel, ConfigDict

PENDING = "pending"


class SubmissionCreate(BaseModel):
    # Clients attach extra fields (pdf link, note, examinee name), all stored as-is.
    model_config = ConfigDict(extra="allow")

    assignmentId: Optional[str] = None
    email: str
    status: str = PENDING
    feedback: Optional[str] = None
    result_marks: Optional[float] = None


class SubmissionGrade(BaseModel):
    status: Optional[str] = None
    feedback: Optional[str] = None
    result_marks: Optional[float] = None
