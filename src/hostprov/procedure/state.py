import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from hostprov.errors import ProcedureLocked
from hostprov.procedure.models import ProcedureState

logger = logging.getLogger(__name__)


class StateStore:
    """
    Resume markers and run locks for procedures, one JSON file per procedure.

    A procedure interrupted half-way leaves its completed steps recorded here;
    a later run with resume enabled skips them.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _state_path(self, procedure: str) -> str:
        return os.path.join(self.directory, f"{procedure}.json")

    def _lock_path(self, procedure: str) -> str:
        return os.path.join(self.directory, f"{procedure}.lock")

    def load(self, procedure: str) -> ProcedureState:
        path = self._state_path(procedure)
        if not os.path.exists(path):
            return ProcedureState(procedure=procedure)
        try:
            with open(path, "r") as f:
                return ProcedureState.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load state for {procedure}: {e}")
            return ProcedureState(procedure=procedure)

    def mark_completed(self, procedure: str, step_name: str):
        state = self.load(procedure)
        if step_name not in state.completed:
            state.completed.append(step_name)
        state.updated_at = datetime.now()
        self._save(state)

    def clear(self, procedure: str):
        path = self._state_path(procedure)
        if os.path.exists(path):
            os.remove(path)

    def _save(self, state: ProcedureState):
        os.makedirs(self.directory, exist_ok=True)
        path = self._state_path(state.procedure)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w") as f:
            f.write(state.model_dump_json(indent=2))
        os.replace(tmp_path, path)

    @contextmanager
    def lock(self, procedure: str):
        os.makedirs(self.directory, exist_ok=True)
        path = self._lock_path(procedure)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError:
            raise ProcedureLocked(procedure, path)
        try:
            os.write(fd, str(os.getpid()).encode())
            os.close(fd)
            yield
        finally:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
