#!/usr/bin/env python3
"""
Script to seed a development database with demo providers, clients,
services, bookings, payments and reviews.

Profiles are created without Firebase accounts; sign up with the same
email to attach a login to one of them.
"""

from datetime import timedelta

from fixit.database import Base, SessionLocal, engine
from fixit.domain.bookings.lifecycle import compute_pricing
from fixit.domain.bookings.repository import BookingRepository
from fixit.domain.reviews.repository import ReviewRepository
from fixit.models import Booking, Review, Service, User
from fixit.shared.timestamps import utcnow

PROVIDERS = [
    ("seed-provider-1", "pat@fixit.dev", "Pat Plumber", "Pat's Pipes"),
    ("seed-provider-2", "sam@fixit.dev", "Sam Sparks", "Sparks Electric"),
    ("seed-provider-3", "gale@fixit.dev", "Gale Green", "Green Thumb Gardens"),
]

CLIENTS = [
    ("seed-client-1", "casey@fixit.dev", "Casey Client"),
    ("seed-client-2", "jordan@fixit.dev", "Jordan Lee"),
]

# provider, name, description, price, duration, category
SERVICES = [
    ("seed-provider-1", "Leak repair", "Find and fix leaking pipes and taps", 120.0, 60, "plumbing"),
    ("seed-provider-1", "Boiler service", "Annual boiler check and safety report", 180.0, 90, "plumbing"),
    ("seed-provider-2", "Socket installation", "Add or replace wall sockets", 95.0, 45, "electrical"),
    ("seed-provider-2", "Full rewiring", "Rewire a room to current standards", 850.0, 480, "electrical"),
    ("seed-provider-3", "Lawn care", "Mowing, edging and clearing", 60.0, 120, "gardening"),
]

# client, service index, days from today, final status, rating
BOOKINGS = [
    ("seed-client-1", 0, -20, "completed", 5),
    ("seed-client-1", 2, -12, "completed", 4),
    ("seed-client-2", 0, -9, "completed", 4),
    ("seed-client-2", 4, -5, "cancelled", None),
    ("seed-client-1", 1, 3, "confirmed", None),
    ("seed-client-2", 3, 7, "pending", None),
]

PAYMENT_STATUS = {"completed": "paid", "cancelled": "failed", "confirmed": "pending", "pending": "pending"}


def seed_marketplace():
    db = SessionLocal()

    try:
        print("🌱 Seeding Fix-it demo data...\n")
        Base.metadata.create_all(bind=engine, checkfirst=True)

        if db.query(User).filter(User.id.like("seed-%")).count():
            print("⚠️  Seed users already exist, nothing to do")
            return

        users = {}
        for uid, email, name, business in PROVIDERS:
            users[uid] = User(id=uid, email=email, display_name=name, role="provider", business_name=business)
        for uid, email, name in CLIENTS:
            users[uid] = User(id=uid, email=email, display_name=name, role="client")
        db.add_all(users.values())
        db.flush()
        print(f"1️⃣ Added {len(PROVIDERS)} providers and {len(CLIENTS)} clients")

        services = []
        for provider_id, name, description, price, duration, category in SERVICES:
            provider = users[provider_id]
            service = Service(
                name=name,
                description=description,
                price=price,
                duration=duration,
                category=category,
                provider_id=provider_id,
                provider_name=provider.display_name,
                business_name=provider.business_name,
                status="active",
            )
            db.add(service)
            services.append(service)
        db.commit()
        print(f"2️⃣ Added {len(services)} services")

        now = utcnow()
        for client_id, service_index, days, status, rating in BOOKINGS:
            service = services[service_index]
            client = users[client_id]
            fee, total = compute_pricing(service.price)
            date = now + timedelta(days=days)

            booking = BookingRepository.create_booking_with_payment(
                db,
                {
                    "service_id": service.id,
                    "service_name": service.name,
                    "provider_id": service.provider_id,
                    "provider_name": service.provider_name,
                    "business_name": service.business_name,
                    "client_id": client_id,
                    "client_name": client.display_name,
                    "client_email": client.email,
                    "price": service.price,
                    "fee": float(fee),
                    "total": float(total),
                    "duration": service.duration,
                    "date": date,
                    "status": status,
                    "address": "1 Demo Street",
                    "reason": "Plans changed" if status == "cancelled" else None,
                    "started_at": date if status == "completed" else None,
                    "completed_at": date + timedelta(minutes=service.duration) if status == "completed" else None,
                },
                {
                    "service_id": service.id,
                    "service_name": service.name,
                    "provider_id": service.provider_id,
                    "provider_name": service.provider_name,
                    "client_id": client_id,
                    "amount": float(total),
                    "status": PAYMENT_STATUS[status],
                    "method": "card",
                    "date": date,
                },
            )
            print(f"   - {status:<10} {service.name} for {client.display_name}")

            if rating:
                db.add(
                    Review(
                        service_id=service.id,
                        service_name=service.name,
                        provider_id=service.provider_id,
                        provider_name=service.provider_name,
                        client_id=client_id,
                        client_name=client.display_name,
                        booking_id=booking.id,
                        rating=rating,
                        comment="Great work, would book again." if rating == 5 else "Solid job.",
                    )
                )
                db.flush()
                ReviewRepository.refresh_service_aggregate(db, service.id)
                db.commit()

        print(f"3️⃣ Added {len(BOOKINGS)} bookings with payments")

        print(f"\n{'='*80}")
        print("✅ Seeding completed!")
        print(f"   - Bookings: {db.query(Booking).count()}")
        print(f"   - Reviews: {db.query(Review).count()}")
        print(f"{'='*80}\n")

        print("📋 Services:")
        for service in db.query(Service).order_by(Service.category, Service.name):
            rating = f"{service.rating} ({service.review_count})" if service.rating else "no reviews"
            print(f"   - [{service.category}] {service.name}: ${service.price:.2f}, {rating}")

    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed_marketplace()
