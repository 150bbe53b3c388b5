from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel


class Severity(str, Enum):
    FATAL = "fatal"
    WARNING = "warning"


class StepStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class Step:
    """
    One privileged host mutation.

    `kind` selects the failure policy; `name` identifies this particular
    instance (e.g. `samba.password[alice]`) for reporting and resume.
    """

    def __init__(self, kind: str, action: Callable[[], Optional[str]], name: Optional[str] = None, description: str = ""):
        self.kind = kind
        self.name = name or kind
        self.action = action
        self.description = description

    def __repr__(self):
        return f"Step({self.name!r})"


class StepResult(BaseModel):
    name: str
    kind: str
    status: StepStatus
    severity: Optional[Severity] = None
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.status == StepStatus.FAILED


class ProcedureReport(BaseModel):
    procedure: str
    results: List[StepResult] = []
    started_at: datetime
    finished_at: Optional[datetime] = None
    aborted: bool = False

    @property
    def warnings(self) -> List[StepResult]:
        return [r for r in self.results if r.failed and r.severity == Severity.WARNING]

    @property
    def succeeded(self) -> bool:
        return not self.aborted


class ProcedureState(BaseModel):
    procedure: str
    completed: List[str] = []
    updated_at: Optional[datetime] = None
