"""schemas/alerts.py - Pydantic models for alert CRUD.

Request models document the JSON bodies in OpenAPI. Bodies are checked by
services/validators.py, which owns the 400 messages.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AlertCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    from_: str = Field(alias="from")
    to: str

    budget: Optional[float] = Field(None, gt=0)

    start_range: Optional[str] = Field(None, description="ISO-8601 date")
    end_range: Optional[str] = Field(None, description="ISO-8601 date")
    return_date: Optional[str] = Field(None, description="ISO-8601 date")

    roundTrip: Optional[bool] = None
    price_mode: Optional[str] = None
    alert_type: Optional[str] = None


class AlertPriceUpdate(BaseModel):
    id: str = Field(description="24 lowercase hex characters")
    price: float = Field(gt=0)


class AlertUpdatePayload(BaseModel):
    # Only keys present in the body are written; budget accepts null
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None

    budget: Optional[float] = Field(None, gt=0)

    start_range: Optional[str] = None
    end_range: Optional[str] = None
    return_date: Optional[str] = None

    roundTrip: Optional[bool] = None
    price_mode: Optional[str] = None
    alert_type: Optional[str] = None


class AlertOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str

    email: str
    from_: str = Field(alias="from")
    to: str

    budget: Optional[float] = None

    # Date-valued strings, returned as stored
    start_range: Optional[str] = None
    end_range: Optional[str] = None
    return_date: Optional[str] = None

    roundTrip: Optional[bool] = None
    price_mode: Optional[str] = None
    alert_type: Optional[str] = None

    last_alert_price: Optional[float] = None
    last_alert_sent_at: Optional[datetime] = None

    created_at: datetime
    updated_at: Optional[datetime] = None


class CreateAlertResponse(BaseModel):
    success: bool = True
    id: str


class UpdatePriceResponse(BaseModel):
    success: bool = True
    updated: bool


class AlertListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[AlertOut]


class EditAlertResponse(BaseModel):
    success: bool = True
    updated: bool
    data: AlertOut


class DeleteAlertResponse(BaseModel):
    success: bool = True
    message: str = "Alert deleted successfully"


class HealthResponse(BaseModel):
    success: bool = True
    message: str = "API is running"
    timestamp: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
