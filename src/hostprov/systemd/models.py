from typing import Optional
from pydantic import BaseModel


class SystemdServiceStatus(BaseModel):
    name: str
    unit: Optional[str] = None
    description: Optional[str] = None
    load_state: str
    active_state: str
    sub_state: str
    unit_file_state: Optional[str] = None
    main_pid: int = 0
