from conftest import auth


def pay(client, provider_uid, booking_id):
    payment = next(
        p for p in client.get("/payments", headers=auth(provider_uid)).json() if p["bookingId"] == booking_id
    )
    client.patch(f"/payments/{payment['id']}/status", json={"status": "paid"}, headers=auth(provider_uid))


class TestClientDashboard:
    def test_figures(self, client, provider, client_user, create_service, create_booking, complete_booking):
        s1 = create_service(provider.id, name="Pipe repair", price=100.0)
        s2 = create_service(provider.id, name="Boiler service", price=200.0)

        create_booking(client_user.id, s1["id"], days_ahead=2)
        done = complete_booking(client_user.id, s1)
        complete_booking(client_user.id, s2)
        pay(client, provider.id, done["id"])

        client.post("/reviews", json={"serviceId": s1["id"], "rating": 4}, headers=auth(client_user.id))
        client.post("/favorites", json={"type": "service", "itemId": s2["id"]}, headers=auth(client_user.id))
        client.post("/favorites", json={"type": "provider", "itemId": provider.id}, headers=auth(client_user.id))

        response = client.get("/dashboard/client", headers=auth(client_user.id))
        assert response.status_code == 200
        data = response.json()

        assert data["activeBookings"] == 1
        assert data["upcomingBookings"] == 1
        assert data["favoriteServices"] == 1
        assert data["favoriteProviders"] == 1
        assert data["totalFavorites"] == 2
        assert data["totalSpent"] == 105.0
        assert data["reviewsGiven"] == 1
        assert data["averageRating"] == 4.0
        assert data["pendingReviews"] == 1
        assert len(data["recentBookings"]) == 3
        assert len(data["recentReviews"]) == 1

    def test_providers_are_refused(self, client, provider):
        assert client.get("/dashboard/client", headers=auth(provider.id)).status_code == 403


class TestProviderDashboard:
    def test_figures(
        self, client, make_user, provider, client_user, other_client, create_service, create_booking, complete_booking
    ):
        service = create_service(provider.id, price=100.0)
        soon = create_booking(client_user.id, service["id"], days_ahead=1)
        create_booking(other_client.id, service["id"], days_ahead=5)
        create_booking(client_user.id, service["id"], days_ahead=9)
        done = complete_booking(other_client.id, service)
        pay(client, provider.id, done["id"])

        for i, rating in enumerate([5, 4, 5]):
            reviewer = make_user(f"reviewer-{i}")
            reviewed = create_service(provider.id, name=f"Extra {i}")
            complete_booking(reviewer.id, reviewed)
            client.post("/reviews", json={"serviceId": reviewed["id"], "rating": rating}, headers=auth(reviewer.id))

        data = client.get("/dashboard/provider", headers=auth(provider.id)).json()

        assert data["totalRevenue"] == 105.0
        assert data["bookingsCount"] == 7
        assert data["activeClients"] == 2
        assert data["averageRating"] == 4.7
        assert data["reviewCount"] == 3
        assert [b["id"] for b in data["upcomingBookings"]][0] == soon["id"]
        assert len(data["upcomingBookings"]) == 3
        assert [p["bookingId"] for p in data["recentPayments"]] == [done["id"]]

    def test_clients_are_refused(self, client, client_user):
        assert client.get("/dashboard/provider", headers=auth(client_user.id)).status_code == 403
