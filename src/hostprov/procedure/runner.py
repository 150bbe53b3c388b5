import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, Dict, List, Optional

from hostprov.errors import HostprovError, ProcedureAborted
from hostprov.procedure.models import ProcedureReport, Severity, Step, StepResult, StepStatus
from hostprov.procedure.policy import STEP_POLICIES
from hostprov.procedure.state import StateStore

logger = logging.getLogger(__name__)


def _silent(message: str, error: bool = False):
    pass


class ProcedureRunner:
    """Runs an ordered list of steps, applying each step's failure policy."""

    def __init__(
        self,
        name: str,
        steps: List[Step],
        policies: Optional[Dict[str, Severity]] = None,
        state_store: Optional[StateStore] = None,
        echo: Callable[..., None] = _silent,
    ):
        self.name = name
        self.steps = steps
        self.policies = policies if policies is not None else STEP_POLICIES
        self.state_store = state_store
        self.echo = echo

    def severity(self, step: Step) -> Severity:
        return self.policies.get(step.kind, Severity.FATAL)

    def run(self, resume: bool = False) -> ProcedureReport:
        report = ProcedureReport(procedure=self.name, started_at=datetime.now())
        lock = self.state_store.lock(self.name) if self.state_store else nullcontext()

        with lock:
            completed = set()
            if self.state_store:
                if resume:
                    completed = set(self.state_store.load(self.name).completed)
                    if completed:
                        logger.info(f"Resuming {self.name}; skipping {len(completed)} completed steps")
                else:
                    self.state_store.clear(self.name)

            for step in self.steps:
                if step.name in completed:
                    self.echo(f"[skip] {step.name} (completed in a previous run)")
                    report.results.append(StepResult(name=step.name, kind=step.kind, status=StepStatus.SKIPPED))
                    continue

                result = self._run_step(step)
                report.results.append(result)

                if result.status == StepStatus.OK:
                    if self.state_store:
                        self.state_store.mark_completed(self.name, step.name)
                    continue

                if result.severity == Severity.FATAL:
                    report.aborted = True
                    report.finished_at = datetime.now()
                    raise ProcedureAborted(step.name, result.message, report)

            report.finished_at = datetime.now()
            if self.state_store:
                self.state_store.clear(self.name)
            return report

    def _run_step(self, step: Step) -> StepResult:
        self.echo(f"==> {step.description or step.name}")
        logger.info(f"[{self.name}] starting step {step.name}")
        try:
            message = step.action() or ""
        except (HostprovError, OSError, ValueError) as e:
            severity = self.severity(step)
            if severity == Severity.FATAL:
                logger.error(f"[{self.name}] step {step.name} failed: {e}")
                self.echo(f"ERROR: {e}", error=True)
            else:
                logger.warning(f"[{self.name}] step {step.name} failed, continuing: {e}")
                self.echo(f"WARNING: {e}", error=True)
            return StepResult(
                name=step.name,
                kind=step.kind,
                status=StepStatus.FAILED,
                severity=severity,
                message=str(e),
            )

        if message:
            self.echo(message)
        return StepResult(name=step.name, kind=step.kind, status=StepStatus.OK, message=message)
