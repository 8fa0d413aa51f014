"""Credit application API endpoints."""

from dataclasses import asdict
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from limit_automation.application.dto import (
    ApplicationResponse,
    CompanyDetailsRequest,
    CreditLimitDetailsRequest,
    PartnerDetailsRequest,
    StatusChangeRequest,
)
from limit_automation.application.services import ApplicationService
from limit_automation.core.dependencies import get_application_service
from limit_automation.presentation.schemas import (
    ApplicationResponseSchema,
    CompanyDetailsSchema,
    CreditLimitDetailsSchema,
    ErrorResponseSchema,
    PartnerDetailsSchema,
    StatusChangeSchema,
    SubmitApplicationSchema,
)

application_router = APIRouter(
    prefix="/applications",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        404: {"model": ErrorResponseSchema, "description": "Application not found"},
        409: {"model": ErrorResponseSchema, "description": "Conflicting application state"},
    },
)


def to_schema(response: ApplicationResponse) -> ApplicationResponseSchema:
    return ApplicationResponseSchema(**asdict(response))


@application_router.post(
    "/company",
    response_model=ApplicationResponseSchema,
    status_code=200,
    summary="Store Company Details",
    description="""Create a draft application for a debtor, or update the debtor of an existing draft""",
)
async def store_company_details(
    request: CompanyDetailsSchema,
    service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    dto = CompanyDetailsRequest(
        client_id=request.client_id,
        entity_name=request.entity_name,
        entity_type=request.entity_type.value,
        country_code=request.country_code,
        abn=request.abn,
        acn=request.acn,
        registration_number=request.registration_number,
        application_uuid=request.application_id,
        created_by_type=request.created_by_type,
        created_by_id=request.created_by_id,
    )
    return to_schema(await service.store_company_details(dto))


@application_router.put(
    "/{application_id}/partners",
    response_model=ApplicationResponseSchema,
    summary="Store Partner Details",
    description="""
    Disclose the debtor's stakeholders.

    The number of individuals and companies must satisfy the rule for the
    debtor's entity type, and every partner must carry its mandatory fields.
    """,
)
async def store_partner_details(
    application_id: UUID,
    request: PartnerDetailsSchema,
    service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    dto = PartnerDetailsRequest(
        partners=[partner.model_dump(mode="json") for partner in request.partners]
    )
    return to_schema(await service.store_partner_details(application_id, dto))


@application_router.put(
    "/{application_id}/credit-limit",
    response_model=ApplicationResponseSchema,
    summary="Store Credit Limit Details",
)
async def store_credit_limit_details(
    application_id: UUID,
    request: CreditLimitDetailsSchema,
    service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    dto = CreditLimitDetailsRequest(**request.model_dump())
    return to_schema(await service.store_credit_limit_details(application_id, dto))


@application_router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponseSchema,
    summary="Submit Application",
    description="""Submit a draft application and run automated decisioning on it""",
)
async def submit_application(
    application_id: UUID,
    service: Annotated[ApplicationService, Depends(get_application_service)],
    request: Optional[SubmitApplicationSchema] = None,
) -> ApplicationResponseSchema:
    request = request or SubmitApplicationSchema()
    response = await service.submit_application(
        application_id,
        actor_type=request.user_type,
        actor_id=request.user_id,
    )
    return to_schema(response)


@application_router.put(
    "/{application_id}/status",
    response_model=ApplicationResponseSchema,
    summary="Change Application Status",
    description="""Approve, decline, cancel, withdraw or surrender an application by hand""",
)
async def change_status(
    application_id: UUID,
    request: StatusChangeSchema,
    service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    dto = StatusChangeRequest(
        status=request.status,
        accepted_amount=request.accepted_amount,
        user_type=request.user_type,
        user_id=request.user_id,
        user_name=request.user_name,
    )
    return to_schema(await service.change_status(application_id, dto))


@application_router.get(
    "/{application_id}",
    response_model=ApplicationResponseSchema,
    summary="Get Application",
)
async def get_application(
    application_id: UUID,
    service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApplicationResponseSchema:
    return to_schema(await service.get_application(application_id))
