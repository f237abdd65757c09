"""Seed the database with the Infiniti Casa Mumbai collection.

Creates the six boutique homes, an admin profile, a demo guest, and a few
bookings spread across past and future dates.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from casa.database import async_session_factory
from casa.models.booking import Booking, BookingPayment
from casa.models.engagement import PropertySuggestion, UserActivity, UserFavorite
from casa.models.property import Property
from casa.models.user import UserProfile
from casa.services.booking_service import generate_confirmation_code
from casa.services.pricing import calculate_quote

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_PHONE = "+919800000001"
GUEST_PHONE = "+919800000002"

PROPERTIES = [
    {
        "name": "The Art House",
        "location": "Kala Ghoda, Mumbai",
        "description": "A gallery apartment in the art district, hung with work by Mumbai painters.",
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 2,
        "price_per_night_paise": 750_000,
        "category": "Art & Culture",
        "aesthetic": "contemporary art gallery",
        "images": ["/images/art-house/living.jpg", "/images/art-house/studio.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "kitchen", "art_library", "workspace"],
            "pet_friendly": False,
            "house_rules": ["No smoking indoors", "Quiet hours after 22:00"],
        },
        "story": "Built around a private collection of contemporary Indian art.",
        "highlights": ["Walk to Jehangir Art Gallery", "Curated art library"],
    },
    {
        "name": "The Bandra Cottage",
        "location": "Bandra West, Mumbai",
        "description": "A restored 1920s Portuguese cottage with a walled garden.",
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 2,
        "price_per_night_paise": 620_000,
        "category": "Heritage",
        "aesthetic": "colonial grandeur",
        "images": ["/images/bandra-cottage/garden.jpg", "/images/bandra-cottage/veranda.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "garden", "butler_service", "kitchen"],
            "pet_friendly": True,
            "house_rules": ["Pets welcome in the garden", "No parties"],
        },
        "story": "One of the last cottages of old Ranwar village, restored tile by tile.",
        "testimonials": [
            {
                "author": "Priya Sharma",
                "text": "A magical step back in time. The colonial charm made our family vacation extraordinary.",
                "rating": 5,
            },
        ],
        "highlights": ["Private garden", "Butler service"],
    },
    {
        "name": "City Zen",
        "location": "Lower Parel, Mumbai",
        "description": "A calm high-floor apartment above the business district.",
        "guests": 2,
        "bedrooms": 1,
        "bathrooms": 1,
        "price_per_night_paise": 550_000,
        "category": "Urban Zen",
        "aesthetic": "japanese zen minimalism",
        "images": ["/images/city-zen/bedroom.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "workspace", "meditation_corner"],
            "pet_friendly": False,
        },
        "story": "Designed for quiet mornings between meetings.",
        "highlights": ["Ten minutes to BKC", "Blackout bedroom"],
    },
    {
        "name": "India House",
        "location": "Colaba, Mumbai",
        "description": "A grand heritage flat with high ceilings and teak furniture.",
        "guests": 6,
        "bedrooms": 3,
        "bathrooms": 3,
        "price_per_night_paise": 980_000,
        "category": "Heritage",
        "aesthetic": "heritage grandeur",
        "images": ["/images/india-house/hall.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "kitchen", "dining_hall", "library"],
            "pet_friendly": False,
        },
        "story": "A 1930s Art Deco home a short walk from the Gateway of India.",
        "highlights": ["Sea-facing balcony", "Seats eight for dinner"],
    },
    {
        "name": "Little White Studio",
        "location": "Juhu, Mumbai",
        "description": "A bright studio steps from Juhu beach.",
        "guests": 2,
        "bedrooms": 1,
        "bathrooms": 1,
        "price_per_night_paise": 420_000,
        "category": "Studio",
        "aesthetic": "scandinavian white",
        "images": ["/images/little-white/studio.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "kitchenette"],
            "pet_friendly": True,
        },
        "story": "White walls, pale wood, and the sound of the sea.",
        "highlights": ["Beach at the end of the lane"],
    },
    {
        "name": "Sky Lounge",
        "location": "Worli, Mumbai",
        "description": "A penthouse with a terrace over the Sea Link.",
        "guests": 8,
        "bedrooms": 4,
        "bathrooms": 4,
        "price_per_night_paise": 1_850_000,
        "category": "Penthouse",
        "aesthetic": "modern luxury",
        "images": ["/images/sky-lounge/terrace.jpg"],
        "features": {
            "amenities": ["wifi", "ac", "terrace", "jacuzzi", "bar", "kitchen"],
            "pet_friendly": False,
            "house_rules": ["Events by arrangement"],
        },
        "story": "Built for celebrations with the whole city below.",
        "highlights": ["Sea Link views", "Rooftop jacuzzi"],
    },
]

# (property name, days from today to check-in, nights, pets, status)
BOOKINGS = [
    ("The Bandra Cottage", -20, 3, 1, "completed"),
    ("The Art House", -10, 2, 0, "completed"),
    ("City Zen", 7, 4, 0, "confirmed"),
    ("Sky Lounge", 21, 2, 0, "pending"),
    ("Little White Studio", 14, 3, 0, "cancelled"),
]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with the sample collection.

    Idempotent: existing seed profiles, their bookings, and all properties
    are removed before re-seeding.
    """
    async with async_session_factory() as session:
        result = await session.execute(
            select(UserProfile.id).where(UserProfile.phone.in_([ADMIN_PHONE, GUEST_PHONE]))
        )
        seed_user_ids = list(result.scalars().all())
        if seed_user_ids:
            print("⚠️  Seed profiles already exist. Deleting and re-seeding...")
            booking_ids = select(Booking.id).where(Booking.user_id.in_(seed_user_ids))
            await session.execute(delete(BookingPayment).where(BookingPayment.booking_id.in_(booking_ids)))
            await session.execute(delete(Booking).where(Booking.user_id.in_(seed_user_ids)))
            await session.execute(delete(UserFavorite).where(UserFavorite.user_id.in_(seed_user_ids)))
            await session.execute(delete(UserActivity).where(UserActivity.user_id.in_(seed_user_ids)))
            await session.execute(delete(UserProfile).where(UserProfile.id.in_(seed_user_ids)))
            await session.flush()

        seeded_names = [p["name"] for p in PROPERTIES]
        seeded_ids = select(Property.id).where(Property.name.in_(seeded_names))
        await session.execute(delete(PropertySuggestion).where(PropertySuggestion.suggested_property_id.in_(seeded_ids)))
        await session.execute(delete(Property).where(Property.name.in_(seeded_names)))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Profiles
        # ------------------------------------------------------------------
        admin = UserProfile(phone=ADMIN_PHONE, full_name="Casa Admin", role="admin", is_verified=True)
        guest = UserProfile(
            phone=GUEST_PHONE,
            full_name="Aarav Desai",
            email="aarav@example.com",
            is_verified=True,
        )
        session.add_all([admin, guest])
        await session.flush()
        print(f"✅ Created admin {admin.phone} and guest {guest.phone}")

        # ------------------------------------------------------------------
        # 2. Properties
        # ------------------------------------------------------------------
        created: dict[str, Property] = {}
        for prop_data in PROPERTIES:
            prop = Property(**prop_data)
            session.add(prop)
            await session.flush()
            created[prop.name] = prop
            print(f"   🏠 {prop.name} — {prop.location} (₹{prop.price_per_night_paise // 100}/night)")

        # ------------------------------------------------------------------
        # 3. Bookings
        # ------------------------------------------------------------------
        today = date.today()
        for name, offset, nights, pets, status in BOOKINGS:
            prop = created[name]
            check_in = today + timedelta(days=offset)
            check_out = check_in + timedelta(days=nights)
            quote = calculate_quote(prop.price_per_night_paise, check_in, check_out, 2, pets)
            session.add(
                Booking(
                    property_id=prop.id,
                    user_id=guest.id,
                    check_in=check_in,
                    check_out=check_out,
                    guests=2,
                    pets=pets,
                    nightly_rate_paise=quote.nightly_rate,
                    subtotal_paise=quote.subtotal,
                    service_fee_paise=quote.service_fee,
                    pet_fee_paise=quote.pet_fee,
                    total_amount_paise=quote.total,
                    status=status,
                    payment_status="completed" if status in ("confirmed", "completed") else "pending",
                    confirmation_code=generate_confirmation_code(),
                    guest_details={
                        "full_name": guest.full_name,
                        "email": guest.email,
                        "phone": guest.phone,
                    },
                    cancellation_reason="cancelled_by_user" if status == "cancelled" else None,
                )
            )

        await session.flush()
        await session.commit()

        print(f"✅ Created {len(BOOKINGS)} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Admin:      {ADMIN_PHONE} (sign in with a WhatsApp OTP)")
        print(f"   Guest:      {GUEST_PHONE}")
        print(f"   Properties: {len(created)}")
        print(f"   Bookings:   {len(BOOKINGS)}")
        print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed())
