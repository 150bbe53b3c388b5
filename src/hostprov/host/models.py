from typing import List, Optional
from pydantic import BaseModel


class CommandResult(BaseModel):
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DiskUsage(BaseModel):
    path: str
    total: int
    used: int
    free: int
    percent: float


class OSInfo(BaseModel):
    id: str
    id_like: List[str] = []
    name: Optional[str] = None
    version_id: Optional[str] = None
