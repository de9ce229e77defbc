# models/assignment.py
from typing import List, Optional

from pydantic import BaseModel

DIFFICULTIES = ("Easy", "Medium", "Hard")


class AssignmentFields(BaseModel):
    """Editable fields of an assignment, as sent by the create/update forms."""
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    difficulty: Optional[str] = None
    marks: Optional[float] = None
    thumbnailUrl: Optional[str] = None


class AssignmentPage(BaseModel):
    total: int
    data: List[dict]
