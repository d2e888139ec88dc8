"""Tests for the alert service outcomes and merge rules."""

from hypothesis import given, settings
from hypothesis import strategies as st

from services.alert_service import AlertService, OutcomeKind, normalize_fields
from services.alert_store import UpdateResult

MISSING_ID = "0123456789abcdef01234567"


class RecordingStore:
    """Captures inserted documents without a database."""

    def __init__(self):
        self.inserted = []

    def insert(self, document):
        self.inserted.append(document)
        return "a" * 24


def _create(service, **overrides):
    payload = {"email": "a@b.com", "from": "NYC", "to": "LON"}
    payload.update(overrides)
    outcome = service.create(payload)
    assert outcome.kind == OutcomeKind.CREATED
    return outcome.alert_id


@given(
    local=st.from_regex(r"[A-Za-z0-9]{1,10}", fullmatch=True),
    domain=st.from_regex(r"[A-Za-z0-9]{1,10}\.[A-Za-z]{2,4}", fullmatch=True),
    pad=st.text(alphabet=" \t\n", max_size=3),
    origin=st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ ", min_size=1, max_size=12).filter(lambda s: s.strip()),
)
@settings(max_examples=50)
def test_create_normalizes_stored_strings(local, domain, pad, origin):
    store = RecordingStore()
    email = f"{pad}{local}@{domain}{pad}"

    outcome = AlertService(store).create({"email": email, "from": origin, "to": f" {origin} "})

    assert outcome.kind == OutcomeKind.CREATED
    doc = store.inserted[0]
    assert doc["email"] == email.strip().lower()
    assert doc["from"] == origin.strip()
    assert doc["to"] == origin.strip()


def test_create_stores_only_supplied_fields():
    store = RecordingStore()
    AlertService(store).create({"email": "A@B.com", "from": "NYC", "to": "LON", "price_mode": " flex "})

    doc = store.inserted[0]
    assert set(doc) == {"email", "from", "to", "price_mode", "created_at"}
    assert doc["price_mode"] == "flex"


def test_create_ignores_system_fields():
    store = RecordingStore()
    AlertService(store).create(
        {"email": "a@b.com", "from": "NYC", "to": "LON", "last_alert_price": 1, "last_alert_sent_at": "x"}
    )
    assert "last_alert_price" not in store.inserted[0]
    assert "last_alert_sent_at" not in store.inserted[0]


def test_create_validation_failure_does_not_touch_store():
    store = RecordingStore()
    outcome = AlertService(store).create({"email": "a@b.com", "from": "NYC", "to": "LON", "budget": 0})

    assert outcome.kind == OutcomeKind.VALIDATION_FAILED
    assert outcome.error == "Invalid budget"
    assert store.inserted == []


def test_normalize_fields_keeps_absent_keys_absent():
    assert normalize_fields({"budget": None}) == {"budget": None}
    assert normalize_fields({"to": " LON ", "unknown": 1}) == {"to": "LON"}


def test_update_price_reports_change_then_no_change(service):
    alert_id = _create(service)

    first = service.update_price({"id": alert_id, "price": 420})
    second = service.update_price({"id": alert_id, "price": 420})
    third = service.update_price({"id": alert_id, "price": 399.99})

    assert (first.kind, first.updated) == (OutcomeKind.UPDATED, True)
    assert (second.kind, second.updated) == (OutcomeKind.UPDATED, False)
    assert (third.kind, third.updated) == (OutcomeKind.UPDATED, True)


def test_update_price_writes_price_and_timestamp_together(service, store):
    alert_id = _create(service)
    service.update_price({"id": alert_id, "price": 420})

    doc = store.find_one({"id": alert_id})
    assert doc["last_alert_price"] == 420
    assert doc["last_alert_sent_at"] is not None
    assert doc["updated_at"] is None


def test_update_price_only_touches_system_fields(service, store):
    alert_id = _create(service, budget=500)
    service.update_price({"id": alert_id, "price": 420, "budget": 1, "from": "SFO"})

    doc = store.find_one({"id": alert_id})
    assert doc["budget"] == 500
    assert doc["from"] == "NYC"


def test_update_price_not_found(service):
    outcome = service.update_price({"id": MISSING_ID, "price": 100})
    assert outcome.kind == OutcomeKind.NOT_FOUND


def test_edit_merges_only_supplied_fields(service):
    alert_id = _create(service, budget=500, price_mode="flex")

    outcome = service.edit(alert_id, {"budget": 750, "to": " PAR "})

    assert outcome.kind == OutcomeKind.UPDATED
    assert outcome.updated is True
    assert outcome.alert["budget"] == 750
    assert outcome.alert["to"] == "PAR"
    assert outcome.alert["from"] == "NYC"
    assert outcome.alert["price_mode"] == "flex"
    assert outcome.alert["updated_at"] is not None


def test_edit_can_clear_budget(service):
    alert_id = _create(service, budget=500)

    outcome = service.edit(alert_id, {"budget": None})

    assert outcome.updated is True
    assert outcome.alert["budget"] is None


def test_edit_with_same_values_reports_unchanged(service):
    alert_id = _create(service, budget=500)

    outcome = service.edit(alert_id, {"budget": 500, "email": " A@B.COM "})

    assert outcome.kind == OutcomeKind.UPDATED
    assert outcome.updated is False
    assert outcome.alert["updated_at"] is not None


def test_edit_path_id_overrides_body_id(service):
    alert_id = _create(service)
    outcome = service.edit(alert_id, {"id": MISSING_ID, "to": "ROM"})

    assert outcome.kind == OutcomeKind.UPDATED
    assert outcome.alert["id"] == alert_id


def test_edit_not_found(service):
    outcome = service.edit(MISSING_ID, {"budget": 10})
    assert outcome.kind == OutcomeKind.NOT_FOUND


def test_edit_without_fields(service):
    alert_id = _create(service)
    assert service.edit(alert_id, None).kind == OutcomeKind.VALIDATION_FAILED
    assert service.edit(alert_id, {}).kind == OutcomeKind.VALIDATION_FAILED


def test_list_by_email_is_case_and_whitespace_insensitive(service):
    first = _create(service, email="Foo@Bar.com")
    second = _create(service, email="foo@bar.com ")
    _create(service, email="someone@else.com")

    padded = service.list_by_email(" Foo@Bar.com ")
    plain = service.list_by_email("foo@bar.com")

    assert padded.kind == OutcomeKind.FOUND
    assert [a["id"] for a in padded.alerts] == [a["id"] for a in plain.alerts]
    # Newest first
    assert [a["id"] for a in plain.alerts] == [second, first]


def test_list_by_email_empty_is_not_an_error(service):
    outcome = service.list_by_email("nobody@example.com")
    assert outcome.kind == OutcomeKind.FOUND
    assert outcome.alerts == []


def test_list_by_email_invalid(service):
    assert service.list_by_email("not-an-email").kind == OutcomeKind.VALIDATION_FAILED


def test_delete(service):
    alert_id = _create(service)

    assert service.delete(alert_id).kind == OutcomeKind.DELETED
    assert service.delete(alert_id).kind == OutcomeKind.NOT_FOUND
    assert service.delete("abc").kind == OutcomeKind.VALIDATION_FAILED


def test_edit_refetch_miss_is_not_found():
    class VanishingStore:
        def update_fields(self, filter, fields, touch=None):
            return UpdateResult(1, 1)

        def find_one(self, filter):
            return None

    outcome = AlertService(VanishingStore()).edit(MISSING_ID, {"budget": 10})
    assert outcome.kind == OutcomeKind.NOT_FOUND
