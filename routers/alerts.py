"""routers/alerts.py - Alert CRUD: create, price update, list, edit, delete."""

from typing import Any, Dict, Optional, Type

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from schemas.alerts import (
    AlertCreate,
    AlertListResponse,
    AlertOut,
    AlertPriceUpdate,
    AlertUpdatePayload,
    CreateAlertResponse,
    DeleteAlertResponse,
    EditAlertResponse,
    ErrorResponse,
    UpdatePriceResponse,
)
from services.alert_service import AlertOutcome, AlertService, OutcomeKind

router = APIRouter(prefix="/v1/alerts", tags=["alerts"])

VALIDATION_ERROR = {400: {"model": ErrorResponse, "description": "Validation error"}}
NOT_FOUND_ERROR = {404: {"model": ErrorResponse, "description": "Alert not found"}}


def documented_body(model: Type[BaseModel]) -> Dict[str, Any]:
    """OpenAPI request body for a route that reads the raw JSON body."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema(by_alias=True)}},
        }
    }


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alert_service


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _failure(outcome: AlertOutcome) -> Optional[JSONResponse]:
    if outcome.kind == OutcomeKind.VALIDATION_FAILED:
        return error_response(400, outcome.error or "Invalid request")
    if outcome.kind == OutcomeKind.NOT_FOUND:
        return error_response(404, outcome.error or "Alert not found")
    return None


@router.post(
    "/update",
    response_model=UpdatePriceResponse,
    responses={**VALIDATION_ERROR, **NOT_FOUND_ERROR},
    openapi_extra=documented_body(AlertPriceUpdate),
)
def update_alert_price(
    payload: Any = Body(None),
    service: AlertService = Depends(get_alert_service),
):
    """
    Records the most recent alerted price for an alert.
    Called by the price checker, not by end users.
    """
    outcome = service.update_price(payload)
    failure = _failure(outcome)
    if failure is not None:
        return failure
    return UpdatePriceResponse(updated=bool(outcome.updated))


@router.post(
    "/create",
    response_model=CreateAlertResponse,
    status_code=201,
    responses=VALIDATION_ERROR,
    openapi_extra=documented_body(AlertCreate),
)
def create_alert(
    payload: Any = Body(None),
    service: AlertService = Depends(get_alert_service),
):
    outcome = service.create(payload)
    failure = _failure(outcome)
    if failure is not None:
        return failure
    return CreateAlertResponse(id=outcome.alert_id)


@router.get("", response_model=AlertListResponse, responses=VALIDATION_ERROR)
def get_alerts(
    email: Optional[str] = Query(None),
    service: AlertService = Depends(get_alert_service),
):
    outcome = service.list_by_email(email)
    failure = _failure(outcome)
    if failure is not None:
        return failure

    return AlertListResponse(
        count=len(outcome.alerts),
        data=[AlertOut(**a) for a in outcome.alerts],
    )


@router.patch(
    "/{alert_id}",
    response_model=EditAlertResponse,
    responses={**VALIDATION_ERROR, **NOT_FOUND_ERROR},
    openapi_extra=documented_body(AlertUpdatePayload),
)
def edit_alert(
    alert_id: str,
    payload: Any = Body(None),
    service: AlertService = Depends(get_alert_service),
):
    """
    Partial update. Only fields present in the body are written;
    budget may be cleared with an explicit null.
    """
    outcome = service.edit(alert_id, payload)
    failure = _failure(outcome)
    if failure is not None:
        return failure

    return EditAlertResponse(updated=bool(outcome.updated), data=AlertOut(**outcome.alert))


@router.delete(
    "/{alert_id}",
    response_model=DeleteAlertResponse,
    responses={**VALIDATION_ERROR, **NOT_FOUND_ERROR},
)
def delete_alert(
    alert_id: str,
    service: AlertService = Depends(get_alert_service),
):
    outcome = service.delete(alert_id)
    failure = _failure(outcome)
    if failure is not None:
        return failure
    return DeleteAlertResponse()
