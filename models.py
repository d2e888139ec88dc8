# =======================================
# SECTION: IMPORTS AND BASE
# =======================================

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, String, Text

from config import ALERTS_TABLE
from db import Base


# =======================================
# SECTION: FLIGHT ALERT MODEL
# =======================================

class FlightAlert(Base):
    __tablename__ = ALERTS_TABLE

    id = Column(String(24), primary_key=True, index=True)

    email = Column(Text, index=True, nullable=False)
    from_ = Column("from", Text, nullable=False)
    to = Column(Text, nullable=False)

    # NULL when not supplied or explicitly cleared
    budget = Column(Float, nullable=True)

    # Date-valued strings, stored as supplied by the client
    start_range = Column(Text, nullable=True)
    end_range = Column(Text, nullable=True)
    return_date = Column(Text, nullable=True)

    round_trip = Column("roundTrip", Boolean, nullable=True)
    price_mode = Column(Text, nullable=True)
    alert_type = Column(Text, nullable=True)

    # Written only by the price-update operation
    last_alert_price = Column(Float, nullable=True)
    last_alert_sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=True)


# Document field name -> model attribute name
DOCUMENT_ATTRS = {
    "id": "id",
    "email": "email",
    "from": "from_",
    "to": "to",
    "budget": "budget",
    "start_range": "start_range",
    "end_range": "end_range",
    "roundTrip": "round_trip",
    "return_date": "return_date",
    "price_mode": "price_mode",
    "alert_type": "alert_type",
    "last_alert_price": "last_alert_price",
    "last_alert_sent_at": "last_alert_sent_at",
    "created_at": "created_at",
    "updated_at": "updated_at",
}


def alert_to_document(alert: FlightAlert) -> dict:
    return {field: getattr(alert, attr) for field, attr in DOCUMENT_ATTRS.items()}
