"""Dependency injection for FastAPI."""

from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.application.services import (
    ApplicationNotifier,
    ApplicationService,
    AutomationRunner,
    DecisionService,
    RenewalService,
)
from limit_automation.domain.interfaces import EntityClassifier, NotificationChannel
from limit_automation.infrastructure.clients import (
    HttpEntityClassifierClient,
    HttpNotificationChannel,
)
from limit_automation.infrastructure.database import db_manager, get_db_session
from limit_automation.infrastructure.repositories import (
    PostgresApplicationRepository,
    PostgresAuditSink,
    PostgresClientDebtorRepository,
    PostgresClientRepository,
    PostgresDebtorRepository,
    PostgresNotificationSink,
    PostgresPolicyRepository,
    PostgresSequenceRepository,
    PostgresStakeholderRepository,
    PostgresTaskSink,
)
from limit_automation.service.automation import EligibilityGate


# External client dependencies
def get_classifier() -> EntityClassifier:
    """Get an EntityClassifier instance."""
    return HttpEntityClassifierClient()


def get_notification_channel() -> NotificationChannel:
    """Get a NotificationChannel instance."""
    return HttpNotificationChannel()


# Service construction shared by requests and the background runner
def build_decision_service(
    session: AsyncSession,
    classifier: EntityClassifier,
    channel: NotificationChannel,
) -> DecisionService:
    """Build a DecisionService whose writes go through `session`."""
    return DecisionService(
        application_repository=PostgresApplicationRepository(session),
        client_repository=PostgresClientRepository(session),
        debtor_repository=PostgresDebtorRepository(session),
        client_debtor_repository=PostgresClientDebtorRepository(session),
        gate=EligibilityGate(
            policy_repository=PostgresPolicyRepository(db_manager.session),
            classifier=classifier,
        ),
        notifier=build_notifier(session, channel),
    )


def build_notifier(session: AsyncSession, channel: NotificationChannel) -> ApplicationNotifier:
    return ApplicationNotifier(
        task_sink=PostgresTaskSink(session),
        notification_sink=PostgresNotificationSink(session),
        audit_sink=PostgresAuditSink(session),
        channel=channel,
    )


_runner: Optional[AutomationRunner] = None


def get_automation_runner() -> AutomationRunner:
    """Get the process-wide AutomationRunner."""
    global _runner
    if _runner is None:
        _runner = AutomationRunner(
            session_scope=db_manager.session,
            service_factory=lambda session: build_decision_service(
                session, get_classifier(), get_notification_channel()
            ),
        )
    return _runner


# Service dependencies
async def get_decision_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    classifier: Annotated[EntityClassifier, Depends(get_classifier)],
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
) -> DecisionService:
    """Get a DecisionService instance with all dependencies."""
    return build_decision_service(session, classifier, channel)


async def get_application_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    decision_service: Annotated[DecisionService, Depends(get_decision_service)],
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
) -> ApplicationService:
    """Get an ApplicationService instance."""
    return ApplicationService(
        application_repository=PostgresApplicationRepository(session),
        client_repository=PostgresClientRepository(session),
        debtor_repository=PostgresDebtorRepository(session),
        client_debtor_repository=PostgresClientDebtorRepository(session),
        stakeholder_repository=PostgresStakeholderRepository(db_manager.session),
        sequence_repository=PostgresSequenceRepository(session),
        decision_service=decision_service,
        notifier=build_notifier(session, channel),
    )


async def get_renewal_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    channel: Annotated[NotificationChannel, Depends(get_notification_channel)],
    runner: Annotated[AutomationRunner, Depends(get_automation_runner)],
) -> RenewalService:
    """Get a RenewalService instance."""
    return RenewalService(
        application_repository=PostgresApplicationRepository(session),
        client_repository=PostgresClientRepository(session),
        debtor_repository=PostgresDebtorRepository(session),
        client_debtor_repository=PostgresClientDebtorRepository(session),
        sequence_repository=PostgresSequenceRepository(session),
        notifier=build_notifier(session, channel),
        runner=runner,
        commit=session.commit,
    )
