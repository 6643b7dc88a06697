import pytest
from conftest import auth


@pytest.fixture
def booked(provider, client_user, create_service, create_booking):
    service = create_service(provider.id, price=100.0)
    return create_booking(client_user.id, service["id"])


def payment_of(client, uid, booking_id):
    payments = client.get("/payments", headers=auth(uid)).json()
    return next(p for p in payments if p["bookingId"] == booking_id)


def set_status(client, uid, payment_id, status):
    return client.patch(f"/payments/{payment_id}/status", json={"status": status}, headers=auth(uid))


class TestPayments:
    def test_both_parties_see_the_payment(self, client, provider, client_user, other_client, booked):
        for uid in (client_user.id, provider.id):
            payment = payment_of(client, uid, booked["id"])
            assert payment["amount"] == 105.0
            assert payment["status"] == "pending"
            assert payment["serviceName"] == "Pipe repair"

        assert client.get("/payments", headers=auth(other_client.id)).json() == []

    def test_provider_marks_paid_then_refunds(self, client, provider, client_user, booked):
        payment = payment_of(client, provider.id, booked["id"])

        paid = set_status(client, provider.id, payment["id"], "paid")
        assert paid.status_code == 200
        assert paid.json()["status"] == "paid"

        refunded = set_status(client, provider.id, payment["id"], "refunded")
        assert refunded.json()["status"] == "refunded"

    def test_illegal_status_changes(self, client, provider, booked):
        payment = payment_of(client, provider.id, booked["id"])

        assert set_status(client, provider.id, payment["id"], "refunded").status_code == 409
        set_status(client, provider.id, payment["id"], "failed")
        assert set_status(client, provider.id, payment["id"], "paid").status_code == 409

    def test_client_cannot_change_status(self, client, client_user, booked):
        payment = payment_of(client, client_user.id, booked["id"])
        assert set_status(client, client_user.id, payment["id"], "paid").status_code == 403

    def test_unknown_status(self, client, provider, booked):
        payment = payment_of(client, provider.id, booked["id"])
        assert set_status(client, provider.id, payment["id"], "settled").status_code == 422

    def test_status_filter(self, client, provider, client_user, create_service, create_booking, booked):
        second = create_booking(client_user.id, create_service(provider.id, name="Boiler")["id"])
        set_status(client, provider.id, payment_of(client, provider.id, second["id"])["id"], "paid")

        paid = client.get("/payments?status=paid", headers=auth(client_user.id)).json()
        assert [p["bookingId"] for p in paid] == [second["id"]]

    def test_summaries(self, client, provider, client_user, create_service, create_booking, booked):
        second = create_booking(client_user.id, create_service(provider.id, name="Boiler", price=50.0)["id"])
        set_status(client, provider.id, payment_of(client, provider.id, second["id"])["id"], "paid")

        client_summary = client.get("/payments/summary", headers=auth(client_user.id)).json()
        assert client_summary == {"totalSpent": 52.5, "upcomingTotal": 105.0}

        provider_summary = client.get("/payments/summary", headers=auth(provider.id)).json()
        assert provider_summary == {"totalRevenue": 52.5}

    def test_admin_summary_covers_all_payments(
        self, client, admin, provider, other_provider, client_user, other_client, create_service, create_booking, booked
    ):
        second = create_booking(other_client.id, create_service(other_provider.id, name="Sockets", price=50.0)["id"])
        set_status(client, other_provider.id, payment_of(client, other_provider.id, second["id"])["id"], "paid")

        summary = client.get("/payments/summary", headers=auth(admin.id)).json()
        assert summary == {"totalSpent": 52.5, "upcomingTotal": 105.0, "totalRevenue": 52.5}
        assert len(client.get("/payments", headers=auth(admin.id)).json()) == 2
