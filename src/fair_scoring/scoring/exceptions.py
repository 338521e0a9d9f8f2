"""Exceptions raised by the scoring core."""

from typing import Optional
from uuid import UUID


class ScoringError(Exception):
    """Base class for scoring core errors."""

    pass


class InvalidScoreError(ScoringError, ValueError):
    """Raised when a submitted score falls outside the rubric's rules."""

    def __init__(self, message: str, criterion_id: Optional[int] = None):
        self.criterion_id = criterion_id
        super().__init__(message)


class ScoringIntegrityError(ScoringError):
    """Raised when the snapshot handed to the core is internally inconsistent."""

    pass


class OrphanAssignmentError(ScoringIntegrityError):
    """Raised when an assignment references a project missing from the snapshot."""

    def __init__(self, project_id: UUID, judge_id: UUID):
        self.project_id = project_id
        self.judge_id = judge_id
        super().__init__(
            f"Assignment for judge {judge_id} references unknown project {project_id}"
        )


class UnknownJudgeError(ScoringIntegrityError):
    """Raised when an assignment references a judge missing from the snapshot."""

    def __init__(self, judge_id: UUID, project_id: UUID):
        self.judge_id = judge_id
        self.project_id = project_id
        super().__init__(
            f"Assignment on project {project_id} references unknown judge {judge_id}"
        )


class UnknownProjectError(ScoringError, LookupError):
    """Raised when a score is requested for a project outside the snapshot."""

    def __init__(self, project_id: UUID):
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")
