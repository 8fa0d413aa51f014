"""Credit-limit renewal API endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from limit_automation.application.dto import ApplicationResponse
from limit_automation.application.services import RenewalService
from limit_automation.core.dependencies import get_renewal_service
from limit_automation.domain.exceptions import ApplicationNotFoundException
from limit_automation.presentation.schemas import (
    ErrorResponseSchema,
    ExpiringNotifyRequestSchema,
    ExpiringNotifyResponseSchema,
    RenewalRequestSchema,
    RenewalResponseSchema,
    RenewalStatusSchema,
)

from .applications import to_schema

credit_limit_router = APIRouter(
    prefix="/credit-limits",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        404: {"model": ErrorResponseSchema, "description": "Credit limit not found"},
        409: {"model": ErrorResponseSchema, "description": "Open application exists"},
    },
)


@credit_limit_router.post(
    "/{client_debtor_id}/renew",
    response_model=RenewalResponseSchema,
    status_code=202,
    summary="Renew Credit Limit",
    description="""
    Request a new limit based on the latest approved application.

    The new application is returned as PENDING_AUTOMATION while decisioning
    continues in the background. `submitted` is false when the credit limit
    has no approved application to renew. A renewal is refused while the
    client and debtor still have an open application.
    """,
)
async def renew_credit_limit(
    client_debtor_id: UUID,
    request: RenewalRequestSchema,
    service: Annotated[RenewalService, Depends(get_renewal_service)],
) -> RenewalResponseSchema:
    application = await service.renew(
        client_debtor_id,
        credit_limit=request.credit_limit,
        created_by_type=request.created_by_type,
        created_by_id=request.created_by_id,
    )
    if application is None:
        return RenewalResponseSchema(submitted=False)

    return RenewalResponseSchema(
        submitted=True,
        application=to_schema(ApplicationResponse.from_entity(application)),
    )


@credit_limit_router.get(
    "/{client_debtor_id}/renewal/{application_id}",
    response_model=RenewalStatusSchema,
    summary="Get Renewal Status",
)
async def get_renewal_status(
    client_debtor_id: UUID,
    application_id: UUID,
    service: Annotated[RenewalService, Depends(get_renewal_service)],
) -> RenewalStatusSchema:
    renewal = await service.get_renewal(client_debtor_id, application_id)
    if renewal is None:
        raise ApplicationNotFoundException(str(application_id))

    return RenewalStatusSchema(
        application=to_schema(renewal.application),
        run_status=renewal.run_status,
    )


@credit_limit_router.post(
    "/expiring/notify",
    response_model=ExpiringNotifyResponseSchema,
    summary="Notify Expiring Limits",
    description="""Notify risk analysts about credit limits expiring in the window (default: today)""",
)
async def notify_expiring_limits(
    service: Annotated[RenewalService, Depends(get_renewal_service)],
    request: Optional[ExpiringNotifyRequestSchema] = None,
) -> ExpiringNotifyResponseSchema:
    request = request or ExpiringNotifyRequestSchema()
    count = await service.notify_expiring_limits(start=request.start, end=request.end)
    return ExpiringNotifyResponseSchema(notifications=count)
