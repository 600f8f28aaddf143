"""
Seed script -- populates local stores with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 requester profiles in the ``users`` table
  - 3 sample rides in the Redis ride store (requested / accepted / completed)
"""

import asyncio

from sqlalchemy import func, select

from ridesync.config import settings
from ridesync.domain.decoder import encode_ride
from ridesync.domain.entities import Coordinate, Identity, Profile, Ride
from ridesync.domain.enums import RideStatus
from ridesync.infrastructure.database import async_session_factory, engine
from ridesync.infrastructure.models import UserModel
from ridesync.infrastructure.redis_client import get_redis
from ridesync.infrastructure.store import RedisRideStore

USERS = [
    {"email": "maya@example.edu", "user_name": "Maya Chen", "school_name": "Lincoln High", "phone_number": "555-0101"},
    {"email": "omar@example.edu", "user_name": "Omar Haddad", "school_name": "Lincoln High", "phone_number": "555-0102"},
    {"email": "lena@example.edu", "user_name": "Lena Novak", "school_name": "Riverside Academy", "phone_number": "555-0103"},
    {"email": "sam@example.edu", "user_name": "Sam Okafor", "school_name": "Riverside Academy", "phone_number": "555-0104"},
    {"email": "ines@example.edu", "user_name": "Ines Duarte", "school_name": "Westfield Prep", "phone_number": "555-0105"},
    {"email": "theo@example.edu", "user_name": "Theo Lindqvist", "school_name": "Westfield Prep", "phone_number": "555-0106"},
]

RIDES = [
    # (requester index, pickup, drop, (lat, lng), status)
    (0, "Main St & 3rd", "Lincoln High", (37.7793, -122.4193), RideStatus.REQUESTED),
    (2, "Riverside Library", "Riverside Academy", (37.7680, -122.4310), RideStatus.ACCEPTED),
    (4, "Oak Park", "Westfield Prep", (37.7905, -122.4010), RideStatus.COMPLETED),
]


async def seed_profiles() -> None:
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(UserModel))
        if result.scalar() > 0:
            print("Profiles already seeded. Skipping.")
            return

        session.add_all(UserModel(**u) for u in USERS)
        await session.commit()
        print(f"  Created {len(USERS)} profiles")


async def seed_rides() -> None:
    store = RedisRideStore(await get_redis(), settings.rides_namespace)
    if await store.snapshot():
        print("Ride store already seeded. Skipping.")
        return

    for index, pickup, drop, (lat, lng), status in RIDES:
        user = USERS[index]
        ride = Ride.create(
            pickup_location=pickup,
            drop_location=drop,
            coordinate=Coordinate(lat, lng),
            requester=Identity(user["email"]),
            profile=Profile(user["user_name"], user["school_name"], user["phone_number"]),
        )
        record = encode_ride(ride)
        record["status"] = status.value
        await store.create(ride.id, record)
    print(f"  Created {len(RIDES)} rides")


async def main():
    print("Seeding...")
    await seed_profiles()
    await seed_rides()
    await engine.dispose()
    print("\nSeed complete!")


if __name__ == "__main__":
    asyncio.run(main())
