from conftest import auth

from fixit.models import Service


def post_review(client, client_uid, service_id, rating=5, comment="Great work"):
    return client.post(
        "/reviews",
        json={"serviceId": service_id, "rating": rating, "comment": comment},
        headers=auth(client_uid),
    )


class TestCreateReview:
    def test_review_after_completed_booking(self, client, provider, client_user, create_service, complete_booking):
        service = create_service(provider.id)
        booking = complete_booking(client_user.id, service)

        response = post_review(client, client_user.id, service["id"], rating=4, comment="  Tidy job  ")
        assert response.status_code == 201
        review = response.json()
        assert review["rating"] == 4
        assert review["comment"] == "Tidy job"
        assert review["serviceName"] == "Pipe repair"
        assert review["providerId"] == provider.id
        assert review["clientName"] == "Casey Client"
        assert review["bookingId"] == booking["id"]

    def test_requires_completed_booking(self, client, provider, client_user, create_service, create_booking):
        service = create_service(provider.id)
        create_booking(client_user.id, service["id"])

        response = post_review(client, client_user.id, service["id"])
        assert response.status_code == 400

    def test_one_review_per_client_and_service(
        self, client, provider, client_user, create_service, complete_booking
    ):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        complete_booking(client_user.id, service)

        assert post_review(client, client_user.id, service["id"]).status_code == 201
        assert post_review(client, client_user.id, service["id"], rating=1).status_code == 409

    def test_rating_bounds(self, client, provider, client_user, create_service, complete_booking):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)

        assert post_review(client, client_user.id, service["id"], rating=0).status_code == 422
        assert post_review(client, client_user.id, service["id"], rating=6).status_code == 422

    def test_providers_cannot_review(self, client, provider, create_service):
        service = create_service(provider.id)
        assert post_review(client, provider.id, service["id"]).status_code == 403


class TestServiceAggregate:
    def test_rating_and_count_follow_every_write(
        self, client, db, provider, client_user, other_client, create_service, complete_booking
    ):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        complete_booking(other_client.id, service)

        first = post_review(client, client_user.id, service["id"], rating=5).json()
        post_review(client, other_client.id, service["id"], rating=4)

        fetched = client.get(f"/services/{service['id']}").json()
        assert fetched["rating"] == 4.5
        assert fetched["reviewCount"] == 2

        client.patch(f"/reviews/{first['id']}", json={"rating": 2}, headers=auth(client_user.id))
        assert client.get(f"/services/{service['id']}").json()["rating"] == 3.0

        client.delete(f"/reviews/{first['id']}", headers=auth(client_user.id))
        fetched = client.get(f"/services/{service['id']}").json()
        assert fetched["rating"] == 4.0
        assert fetched["reviewCount"] == 1

        db.expire_all()
        assert db.get(Service, service["id"]).review_count == 1

    def test_last_review_deleted_clears_rating(
        self, client, provider, client_user, create_service, complete_booking
    ):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        review = post_review(client, client_user.id, service["id"]).json()

        client.delete(f"/reviews/{review['id']}", headers=auth(client_user.id))
        fetched = client.get(f"/services/{service['id']}").json()
        assert fetched["rating"] is None
        assert fetched["reviewCount"] == 0


class TestEditing:
    def test_only_author_can_edit(
        self, client, provider, client_user, other_client, create_service, complete_booking
    ):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        review = post_review(client, client_user.id, service["id"]).json()

        response = client.patch(f"/reviews/{review['id']}", json={"rating": 1}, headers=auth(other_client.id))
        assert response.status_code == 403

        response = client.patch(
            f"/reviews/{review['id']}", json={"comment": "Updated"}, headers=auth(client_user.id)
        )
        assert response.status_code == 200
        assert response.json()["comment"] == "Updated"
        assert response.json()["updatedAt"] is not None

    def test_admin_can_delete(self, client, admin, provider, client_user, create_service, complete_booking):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        review = post_review(client, client_user.id, service["id"]).json()

        assert client.delete(f"/reviews/{review['id']}", headers=auth(admin.id)).status_code == 200
        assert client.get(f"/reviews/service/{service['id']}").json() == []


class TestPendingReviews:
    def test_excludes_reviewed_services(self, client, provider, client_user, create_service, complete_booking):
        s1 = create_service(provider.id, name="Pipe repair")
        s2 = create_service(provider.id, name="Boiler service")
        s3 = create_service(provider.id, name="Drain unblocking")
        for service in (s1, s2, s3):
            complete_booking(client_user.id, service)
        post_review(client, client_user.id, s1["id"])

        pending = client.get("/reviews/pending", headers=auth(client_user.id)).json()
        assert len(pending) == 2
        assert {b["serviceId"] for b in pending} == {s2["id"], s3["id"]}

    def test_unfinished_bookings_are_not_pending(
        self, client, provider, client_user, create_service, create_booking
    ):
        create_booking(client_user.id, create_service(provider.id)["id"])
        assert client.get("/reviews/pending", headers=auth(client_user.id)).json() == []


class TestProviderRating:
    def test_mean_of_all_reviews(
        self, client, make_user, provider, create_service, complete_booking
    ):
        services = [create_service(provider.id, name=f"Job {i}") for i in range(3)]
        for i, (service, rating) in enumerate(zip(services, [5, 4, 5])):
            reviewer = make_user(f"reviewer-{i}")
            complete_booking(reviewer.id, service)
            post_review(client, reviewer.id, service["id"], rating=rating)

        response = client.get(f"/reviews/provider/{provider.id}/rating")
        assert response.json() == {"providerId": provider.id, "averageRating": 4.7, "reviewCount": 3}

    def test_no_reviews(self, client, provider):
        response = client.get(f"/reviews/provider/{provider.id}/rating")
        assert response.json()["averageRating"] == 0.0
        assert response.json()["reviewCount"] == 0

    def test_listings(self, client, provider, client_user, create_service, complete_booking):
        service = create_service(provider.id)
        complete_booking(client_user.id, service)
        post_review(client, client_user.id, service["id"])

        assert len(client.get(f"/reviews/provider/{provider.id}").json()) == 1
        assert len(client.get(f"/reviews/service/{service['id']}?limit=5").json()) == 1
        assert len(client.get("/reviews/mine", headers=auth(client_user.id)).json()) == 1
