from sqlalchemy.exc import OperationalError

from models import db
from models.booking import Booking
from models.payment import Payment
from services.booking_store import BookingStore

DAY = "2026-10-20"


def book(client, start_time, duration=1, date=DAY, name="Ravi", phone="9000000001"):
    return client.post("/bookings", json={
        "customer_name": name,
        "phone_number": phone,
        "date": date,
        "start_time": start_time,
        "duration_hours": duration,
    })


def test_requires_login(app):
    resp = app.test_client().get("/bookings")
    assert resp.status_code == 401


def test_mutations_require_csrf_header(client):
    client.environ_base.pop("HTTP_X_CSRF_TOKEN")
    resp = book(client, "10:00")
    assert resp.status_code == 403


def test_operating_hours_scenario(client, rate_150):
    resp = book(client, "22:00")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["booking"]["total_amount"] == 150.0
    assert body["booking"]["payment_status"] == "pending"
    assert body["payment_flow"]["state"] == "choice"

    resp = book(client, "22:30")
    assert resp.status_code == 409
    assert resp.get_json()["reason"] == "outside_operating_hours"


def test_overlap_and_back_to_back_scenario(client, rate_150):
    assert book(client, "10:00").status_code == 201

    resp = book(client, "10:00")
    assert resp.status_code == 409
    assert resp.get_json()["reason"] == "overlap"

    assert book(client, "11:00").status_code == 201
    assert Booking.query.count() == 2


def test_past_time_is_rejected(client):
    resp = book(client, "07:00", date="2026-10-19")
    assert resp.status_code == 409
    assert resp.get_json()["reason"] == "past_time"


def test_validation_errors_are_400(client):
    assert book(client, "10:00", duration=0).status_code == 400
    assert book(client, "10:00", name="").status_code == 400
    assert book(client, "10:00", date="tomorrow").status_code == 400
    assert Booking.query.count() == 0


def test_availability_check_does_not_book(client, rate_150):
    resp = client.post("/bookings/availability", json={"date": DAY, "start_time": "10:00", "duration_hours": 2})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["valid"] is True
    assert body["total_amount"] == 300.0
    assert Booking.query.count() == 0


def test_rate_change_does_not_touch_existing_amounts(client, rate_150):
    book(client, "10:00", duration=2)
    assert client.put("/settings/hourly_rate", json={"value": "400"}).status_code == 200
    book(client, "14:00")

    rows = client.get(f"/bookings?date={DAY}").get_json()["bookings"]
    assert [r["total_amount"] for r in rows] == [300.0, 400.0]


def test_day_view_and_list_filter(client, rate_150):
    book(client, "12:00", name="Anita", phone="9111111111")
    book(client, "09:00")

    day = client.get(f"/bookings?date={DAY}").get_json()
    assert [b["booking_time"][11:16] for b in day["bookings"]] == ["09:00", "12:00"]
    assert day["open_time"] == "06:00"

    listed = client.get("/bookings?filter=week&search=anita").get_json()
    assert listed["count"] == 1
    assert client.get("/bookings?filter=today").get_json()["count"] == 0
    assert client.get("/bookings?filter=fortnight").status_code == 400


def test_patch_booking_fields(client, rate_150):
    booking_id = book(client, "10:00").get_json()["booking"]["id"]

    resp = client.patch(f"/bookings/{booking_id}", json={"customer_name": "Ravi K"})
    assert resp.status_code == 200
    assert resp.get_json()["customer_name"] == "Ravi K"

    resp = client.patch(f"/bookings/{booking_id}", json={"total_amount": 1})
    assert resp.status_code == 400
    assert client.patch("/bookings/999", json={"payment_status": "paid"}).status_code == 404


def test_delete_needs_confirmation_and_leaves_payments(client, rate_150):
    booking_id = book(client, "10:00").get_json()["booking"]["id"]
    db.session.add(Payment(booking_id=booking_id, amount_paid=150, payment_method="cash"))
    db.session.commit()

    assert client.delete(f"/bookings/{booking_id}").status_code == 400
    resp = client.delete(f"/bookings/{booking_id}", json={"confirm": True})
    assert resp.status_code == 200

    assert client.get(f"/bookings/{booking_id}").status_code == 404
    assert client.get(f"/bookings?date={DAY}").get_json()["bookings"] == []
    assert Payment.query.filter_by(booking_id=booking_id).count() == 1


def test_store_failure_is_503_and_nothing_saved(client, monkeypatch):
    def failing_create(self, drafts):
        return [], OperationalError("INSERT", {}, Exception("connection lost"))

    monkeypatch.setattr(BookingStore, "create_bookings", failing_create)
    resp = book(client, "10:00")

    assert resp.status_code == 503
    assert Booking.query.count() == 0
