"""Seed an admin account and the sample gym catalogue."""
import asyncio
import sys
sys.path.insert(0, ".")

from app.database import async_session_factory
from app.repositories.sql import SqlAlchemyRepository
from app.schemas.gym import GymCreate
from app.schemas.user import UserCreate
from app.services.gym_service import GymService
from app.services.user_service import UserService


ADMIN_USER = {
    "username": "admin",
    "name": "FitMatch Admin",
    "email": "admin@fitmatch.local",
}

SAMPLE_GYMS = [
    {
        "name": "Fitness Evolution",
        "location": {"lat": 47.6062, "lng": -122.3321, "address": "2500 Broadway Ave", "city": "Seattle", "state": "WA"},
        "amenities": ["24/7 Access", "Personal Training", "Pool"],
        "rating": 4.8,
    },
    {
        "name": "PowerFit",
        "location": {"lat": 45.5231, "lng": -122.6765, "address": "1840 Oak Street", "city": "Portland", "state": "OR"},
        "amenities": ["Group Classes", "Cardio Equipment", "Free Weights"],
        "rating": 4.5,
    },
    {
        "name": "City Fitness Club",
        "location": {"lat": 39.7392, "lng": -104.9903, "address": "550 Main Street", "city": "Denver", "state": "CO"},
        "amenities": ["Sauna", "Yoga Studio", "Parking"],
        "rating": 4.0,
    },
    {
        "name": "Iron Athletics",
        "location": {"lat": 37.7749, "lng": -122.4194, "address": "123 Market St", "city": "San Francisco", "state": "CA"},
        "amenities": ["Weightlifting", "CrossFit", "24/7"],
        "rating": 4.6,
    },
    {
        "name": "Flex Fitness",
        "location": {"lat": 34.0522, "lng": -118.2437, "address": "456 Hollywood Blvd", "city": "Los Angeles", "state": "CA"},
        "amenities": ["Cardio", "Classes", "Personal Training"],
        "rating": 4.3,
    },
    {
        "name": "UrbanFit Gym",
        "location": {"lat": 40.7128, "lng": -74.0060, "address": "789 Broadway", "city": "New York", "state": "NY"},
        "amenities": ["Free Weights", "Cardio Equipment", "Sauna"],
        "rating": 4.2,
    },
    {
        "name": "FitZone",
        "location": {"lat": 41.8781, "lng": -87.6298, "address": "321 Michigan Ave", "city": "Chicago", "state": "IL"},
        "amenities": ["Group Classes", "Personal Training", "Smoothie Bar"],
        "rating": 4.5,
    },
    {
        "name": "Elite Fitness",
        "location": {"lat": 33.4484, "lng": -112.0740, "address": "987 Desert Rd", "city": "Phoenix", "state": "AZ"},
        "amenities": ["CrossFit", "Yoga", "Boxing"],
        "rating": 3.9,
    },
]


async def seed():
    async with async_session_factory() as session:
        repository = SqlAlchemyRepository(session)

        admin = await repository.get_user_by_username(ADMIN_USER["username"])
        if admin is None:
            admin = await UserService(repository).register(UserCreate(**ADMIN_USER), is_admin=True)
            print(f"  Seeded admin user {admin.username} ({admin.id})")
        else:
            print(f"  Admin user {admin.username} already exists, skipping.")

        gym_service = GymService(repository)
        existing_names = {gym.name for gym in await repository.get_all_gyms()}
        for gym in SAMPLE_GYMS:
            if gym["name"] in existing_names:
                print(f"  Gym {gym['name']} already exists, skipping.")
                continue
            created = await gym_service.create_gym(GymCreate(**gym), added_by=admin.id)
            print(f"  Seeded gym {created.name}")
        await session.commit()
    print("Done seeding gyms.")


if __name__ == "__main__":
    asyncio.run(seed())
