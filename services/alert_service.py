"""
services/alert_service.py

Alert bookkeeping:
- create: validate, normalise and insert a new alert
- update_price: record the last alerted price (system-only fields)
- edit: partial update of client-owned fields
- list_by_email: all alerts for one address, newest first
- delete: remove by id

Every operation returns an AlertOutcome. Validation failures and missing
records are outcomes, not exceptions; StoreError from the store propagates
to the HTTP layer.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from services.alert_store import DESCENDING, AlertStore
from services.validators import (
    MUTABLE_FIELDS,
    ValidationResult,
    validate_alert_creation,
    validate_alert_edit,
    validate_alert_id,
    validate_alert_update,
    validate_email_query,
)

logger = logging.getLogger("alerts")


class OutcomeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    FOUND = "found"
    NOT_FOUND = "not_found"
    DELETED = "deleted"
    VALIDATION_FAILED = "validation_failed"


@dataclass
class AlertOutcome:
    kind: OutcomeKind
    alert_id: Optional[str] = None
    updated: Optional[bool] = None
    alert: Optional[Dict[str, Any]] = None
    alerts: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


def _invalid(result: ValidationResult) -> AlertOutcome:
    return AlertOutcome(kind=OutcomeKind.VALIDATION_FAILED, error=result.error)


def _not_found(message: str = "Alert not found") -> AlertOutcome:
    return AlertOutcome(kind=OutcomeKind.NOT_FOUND, error=message)


# =====================================================================
# SECTION: NORMALISATION
# =====================================================================

def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Canonical form of every client-owned field present in payload.
    Absent keys stay absent; only budget may carry an explicit None.
    """
    out: Dict[str, Any] = {}
    for name in MUTABLE_FIELDS:
        if name not in payload:
            continue
        value = payload[name]
        if name == "email":
            value = normalize_email(value)
        elif name in ("from", "to", "price_mode", "alert_type"):
            value = value.strip()
        out[name] = value
    return out


# =====================================================================
# SECTION: SERVICE
# =====================================================================

class AlertService:
    def __init__(self, store: AlertStore):
        self.store = store

    def create(self, payload: Any) -> AlertOutcome:
        validation = validate_alert_creation(payload)
        if not validation.valid:
            logger.info(f"[alerts] create rejected: {validation.error}")
            return _invalid(validation)

        doc = normalize_fields(payload)
        doc["created_at"] = datetime.utcnow()

        alert_id = self.store.insert(doc)
        logger.info(f"[alerts] created id={alert_id} route={doc['from']}->{doc['to']}")
        return AlertOutcome(kind=OutcomeKind.CREATED, alert_id=alert_id)

    def update_price(self, payload: Any) -> AlertOutcome:
        validation = validate_alert_update(payload)
        if not validation.valid:
            logger.info(f"[alerts] price update rejected: {validation.error}")
            return _invalid(validation)

        alert_id = payload["id"]
        result = self.store.update_fields(
            {"id": alert_id},
            {"last_alert_price": payload["price"]},
            touch={"last_alert_sent_at": datetime.utcnow()},
        )

        if result.matched_count == 0:
            return _not_found("Document not found")

        updated = result.modified_count == 1
        logger.info(f"[alerts] price update id={alert_id} price={payload['price']} updated={updated}")
        return AlertOutcome(kind=OutcomeKind.UPDATED, alert_id=alert_id, updated=updated)

    def edit(self, alert_id: Any, payload: Any) -> AlertOutcome:
        if payload is None:
            payload = {}
        if isinstance(payload, dict):
            # Path id wins over any id in the body
            payload = {**payload, "id": alert_id}

        validation = validate_alert_edit(payload)
        if not validation.valid:
            logger.info(f"[alerts] edit rejected id={alert_id}: {validation.error}")
            return _invalid(validation)

        fields = normalize_fields(payload)
        result = self.store.update_fields(
            {"id": alert_id},
            fields,
            touch={"updated_at": datetime.utcnow()},
        )

        if result.matched_count == 0:
            return _not_found()

        # Not isolated from a concurrent write between update and read
        alert = self.store.find_one({"id": alert_id})
        if alert is None:
            return _not_found()

        updated = result.modified_count == 1
        logger.info(f"[alerts] edited id={alert_id} fields={sorted(fields)} updated={updated}")
        return AlertOutcome(kind=OutcomeKind.UPDATED, alert_id=alert_id, updated=updated, alert=alert)

    def list_by_email(self, email: Any) -> AlertOutcome:
        validation = validate_email_query(email)
        if not validation.valid:
            return _invalid(validation)

        alerts = self.store.find_many(
            {"email": normalize_email(email)},
            sort=[("created_at", DESCENDING)],
        )
        return AlertOutcome(kind=OutcomeKind.FOUND, alerts=alerts)

    def delete(self, alert_id: Any) -> AlertOutcome:
        validation = validate_alert_id(alert_id)
        if not validation.valid:
            return _invalid(validation)

        result = self.store.delete_one({"id": alert_id})
        if result.deleted_count == 0:
            return _not_found()

        logger.info(f"[alerts] deleted id={alert_id}")
        return AlertOutcome(kind=OutcomeKind.DELETED, alert_id=alert_id)
