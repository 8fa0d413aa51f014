"""
Background runner for detached decisioning.

Renewals hand their application to the runner and return immediately. The
runner keeps a reference to every task it starts, so a run can be observed
with `status` or awaited with `wait`, and nothing is lost to the garbage
collector half way through.
"""

import asyncio
from collections import OrderedDict
from enum import Enum
from typing import AsyncContextManager, Callable, Dict, Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.core.metrics import (
    record_run_failure,
    record_run_finished,
    record_run_retry,
    record_run_started,
)
from limit_automation.service.automation.settings import (
    AutomationSettings,
    automation_settings,
)

from .decision_service import DecisionService

logger = structlog.get_logger(__name__)

SessionScope = Callable[[], AsyncContextManager[AsyncSession]]
DecisionServiceFactory = Callable[[AsyncSession], DecisionService]


class RunStatus(str, Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNKNOWN = "unknown"


class AutomationRunner:
    """
    Runs decisioning for submitted applications outside the request.

    Each attempt gets a fresh database session from `session_scope` and a
    DecisionService built on it. Unexpected errors are retried with
    exponential backoff; once attempts run out the application is routed
    to review with the failure blocker.
    """

    def __init__(
        self,
        session_scope: SessionScope,
        service_factory: DecisionServiceFactory,
        settings: AutomationSettings = automation_settings,
    ):
        self._session_scope = session_scope
        self._service_factory = service_factory
        self._settings = settings
        self._tasks: Dict[UUID, asyncio.Task] = {}
        self._outcomes: "OrderedDict[UUID, RunStatus]" = OrderedDict()

    def submit(self, application_uuid: UUID) -> asyncio.Task:
        """
        Start decisioning an application.

        Submitting an application that is already running returns the
        existing task.
        """
        task = self._tasks.get(application_uuid)
        if task is not None and not task.done():
            return task

        task = asyncio.create_task(
            self._run(application_uuid),
            name=f"automation-{application_uuid}",
        )
        self._tasks[application_uuid] = task
        self._outcomes.pop(application_uuid, None)
        record_run_started()
        task.add_done_callback(lambda t: self._on_done(application_uuid, t))

        logger.info("automation_run_submitted", application_uuid=str(application_uuid))
        return task

    def status(self, application_uuid: UUID) -> RunStatus:
        task = self._tasks.get(application_uuid)
        if task is not None:
            return self._outcome_of(task) if task.done() else RunStatus.RUNNING
        return self._outcomes.get(application_uuid, RunStatus.UNKNOWN)

    async def wait(self, application_uuid: UUID, timeout: Optional[float] = None) -> RunStatus:
        """Wait for a run to finish (or the timeout to pass) and return its status."""
        task = self._tasks.get(application_uuid)
        if task is not None:
            await asyncio.wait({task}, timeout=timeout)
        return self.status(application_uuid)

    async def shutdown(self) -> None:
        """Cancel runs still in flight."""
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("automation_runner_stopped", cancelled=len(pending))

    async def _run(self, application_uuid: UUID) -> RunStatus:
        log = logger.bind(application_uuid=str(application_uuid))
        max_attempts = self._settings.max_attempts
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                async with self._session_scope() as session:
                    application = await self._service_factory(session).finalize(
                        application_uuid
                    )
                log.info(
                    "automation_run_completed",
                    attempt=attempt,
                    status=application.status.value,
                )
                return RunStatus.SUCCEEDED

            except Exception as e:
                last_error = e
                log.warning(
                    "automation_run_attempt_failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )

            if attempt < max_attempts:
                record_run_retry()
                delay = 2 ** (attempt - 1) * self._settings.retry_base_delay_seconds
                await asyncio.sleep(delay)

        record_run_failure()
        log.error("automation_run_exhausted_attempts", max_attempts=max_attempts)

        try:
            async with self._session_scope() as session:
                await self._service_factory(session).route_to_review(
                    application_uuid, str(last_error)
                )
        except Exception as e:
            log.error("automation_run_fallback_failed", error=str(e))

        return RunStatus.FAILED

    def _on_done(self, application_uuid: UUID, task: asyncio.Task) -> None:
        record_run_finished()
        if self._tasks.get(application_uuid) is task:
            del self._tasks[application_uuid]
        self._outcomes[application_uuid] = self._outcome_of(task)
        # Oldest outcomes are forgotten first
        while len(self._outcomes) > self._settings.max_tracked_outcomes:
            self._outcomes.popitem(last=False)

    @staticmethod
    def _outcome_of(task: asyncio.Task) -> RunStatus:
        if task.cancelled() or task.exception() is not None:
            return RunStatus.FAILED
        return task.result()
