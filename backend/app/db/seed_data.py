"""
Database Seed Data Module

Demo data for a small boarding school: operators, lookup tables, two
boarding houses, a student masterlist with room placements, transport
zones and a stocked store room. Room occupancy is left at zero on insert
and filled in by a reconcile at the end, the same path the API uses.

Run with: python -m app.db.seed_data
          python -m app.db.seed_data clear
"""
import asyncio
import random
from datetime import date, timedelta
from typing import Dict, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import get_password_hash
from app.models.user import User, UserRole
from app.models.lookups import SchoolClass, Stream, TeamColour, TransportType
from app.models.student import Student, StudentStatus
from app.models.boarding import BoardingHouse, Room, AccommodationType
from app.models.transport import TransportZone, TransportZoneArea
from app.models.inventory import (
    InventoryCategory,
    InventoryStorageLocation,
    InventoryItem,
    InventoryStockHistory,
)
from app.services.room_status_writer import room_status_writer


# ==================== Sample Data Constants ====================

SAMPLE_USERS = [
    {"email": "admin@school.test", "full_name": "School Administrator", "role": UserRole.ADMIN},
    {"email": "bursar@school.test", "full_name": "Grace Wanjiru", "role": UserRole.STAFF},
    {"email": "matron@school.test", "full_name": "Esther Achieng", "role": UserRole.STAFF},
]

CLASSES = ["Grade 4", "Grade 5", "Grade 6", "Grade 7", "Grade 8", "Grade 9"]
STREAMS = ["East", "West", "North"]
TEAM_COLOURS = ["Red", "Blue", "Green", "Yellow"]
TRANSPORT_TYPES = ["One Way", "Two Way"]

HOUSES = [
    {
        "name": "Kilimanjaro House",
        "designation": "Boys",
        "personnel": [{"name": "Mr. Otieno", "designation": "House Master"}],
        "amenities": ["Common room", "Laundry"],
        "rooms": [("K1", "Ground", 4), ("K2", "Ground", 4), ("K3", "First", 6), ("K4", "First", 2)],
    },
    {
        "name": "Kenya House",
        "designation": "Girls",
        "personnel": [{"name": "Mrs. Njeri", "designation": "House Mistress"}],
        "amenities": ["Common room", "Study hall"],
        "rooms": [("N1", "Ground", 4), ("N2", "Ground", 4), ("N3", "First", 6)],
    },
]

ACCOMMODATION_TYPES = [
    {"name": "Full Boarder", "description": "Stays through the term"},
    {"name": "Weekly Boarder", "description": "Home on weekends"},
]

ZONES = [
    {"name": "Zone A", "description": "Within 5km", "areas": ["Westlands", "Parklands"]},
    {"name": "Zone B", "description": "5-15km", "areas": ["Karen", "Langata", "Kilimani"]},
    {"name": "Zone C", "description": "Beyond 15km", "areas": ["Ruaka", "Kiambu Road"]},
]

FIRST_NAMES = [
    "Amani", "Baraka", "Chege", "Daudi", "Eric", "Faith", "Gloria", "Hawa",
    "Imani", "Jabari", "Kamau", "Lulu", "Makena", "Nia", "Omondi", "Pendo",
    "Rehema", "Sifa", "Tumaini", "Wambui", "Zawadi", "Kioko", "Achieng", "Mwangi",
]
LAST_NAMES = ["Otieno", "Kariuki", "Mutua", "Njoroge", "Wekesa", "Kiprop", "Odhiambo", "Wanjiku"]

INVENTORY = {
    "categories": ["Stationery", "Cleaning", "Bedding"],
    "locations": ["Main Store", "Boarding Store"],
    "items": [
        ("Exercise books", "Stationery", "Main Store", 400, 45.0, 100),
        ("Ballpoint pens", "Stationery", "Main Store", 60, 20.0, 80),
        ("Bleach 5L", "Cleaning", "Boarding Store", 0, 850.0, 5),
        ("Mattress", "Bedding", "Boarding Store", 12, 4500.0, 4),
        ("Blanket", "Bedding", "Boarding Store", 30, 1200.0, 10),
    ],
}


# ==================== Seeders ====================

async def seed_users(db: AsyncSession) -> List[User]:
    """Create sample operators (password: Password123!)"""
    users = []
    default_password = get_password_hash("Password123!")

    for user_data in SAMPLE_USERS:
        user = User(hashed_password=default_password, is_active=True, **user_data)
        db.add(user)
        users.append(user)

    await db.flush()
    print(f"Created {len(users)} users")
    return users


async def seed_lookups(db: AsyncSession) -> Dict[str, list]:
    """Create lookup rows with sort_order matching list order"""
    lookups = {}
    for model, names in (
        (SchoolClass, CLASSES),
        (Stream, STREAMS),
        (TeamColour, TEAM_COLOURS),
        (TransportType, TRANSPORT_TYPES),
    ):
        rows = [model(name=name, sort_order=i) for i, name in enumerate(names)]
        db.add_all(rows)
        lookups[model.__tablename__] = rows

    await db.flush()
    print(f"Created lookups: {', '.join(f'{k}={len(v)}' for k, v in lookups.items())}")
    return lookups


async def seed_boarding(db: AsyncSession) -> tuple:
    """Create houses, rooms and accommodation types"""
    houses = []
    rooms = []
    for house_data in HOUSES:
        house = BoardingHouse(
            name=house_data["name"],
            designation=house_data["designation"],
            personnel=house_data["personnel"],
            amenities=house_data["amenities"],
        )
        db.add(house)
        await db.flush()
        houses.append(house)

        for room_number, floor, capacity in house_data["rooms"]:
            room = Room(
                house_id=house.id,
                room_number=room_number,
                floor=floor,
                capacity=capacity,
                current_occupancy=0,
                status="vacant",
                amenities=[],
            )
            db.add(room)
            rooms.append(room)

    types = [AccommodationType(**data) for data in ACCOMMODATION_TYPES]
    db.add_all(types)

    await db.flush()
    print(f"Created {len(houses)} houses, {len(rooms)} rooms, {len(types)} accommodation types")
    return houses, rooms, types


async def seed_transport(db: AsyncSession) -> List[TransportZone]:
    zones = []
    for zone_data in ZONES:
        zone = TransportZone(
            name=zone_data["name"],
            description=zone_data["description"],
            areas=[TransportZoneArea(name=area) for area in zone_data["areas"]],
        )
        db.add(zone)
        zones.append(zone)

    await db.flush()
    print(f"Created {len(zones)} transport zones")
    return zones


async def seed_students(
    db: AsyncSession,
    lookups: Dict[str, list],
    rooms: List[Room],
    accommodation_types: List[AccommodationType],
    zones: List[TransportZone],
    count: int = 40,
) -> List[Student]:
    """Create students; roughly half board, a few are inactive but still assigned"""
    students = []
    classes = lookups["classes"]
    transport_types = lookups["transport_types"]

    for i in range(count):
        current_class = random.choice(classes)
        admitted = date.today() - timedelta(days=random.randint(30, 5 * 365))
        status = StudentStatus.INACTIVE if i % 13 == 12 else StudentStatus.ACTIVE

        student = Student(
            admission_number=f"ADM{1000 + i}",
            name=f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
            gender=random.choice(["Male", "Female"]),
            date_of_birth=date.today() - timedelta(days=random.randint(9 * 365, 15 * 365)),
            date_of_admission=admitted,
            class_admitted_to_id=current_class.id,
            current_class_id=current_class.id,
            stream_id=random.choice(lookups["streams"]).id,
            team_colour_id=random.choice(lookups["team_colours"]).id,
            status=status,
            withdrawal_date=date.today() if status == StudentStatus.INACTIVE else None,
            father_name=f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
            father_phone=f"07{random.randint(10000000, 99999999)}",
            emergency_contact=f"07{random.randint(10000000, 99999999)}",
            emergency_relationship="Parent",
        )

        if i % 2 == 0:
            room = random.choice(rooms)
            student.boarding_house_id = room.house_id
            student.boarding_room_id = room.id
            student.accommodation_type_id = random.choice(accommodation_types).id
            student.check_in_date = admitted
        else:
            student.transport_zone_id = random.choice(zones).id
            student.transport_type_id = random.choice(transport_types).id

        db.add(student)
        students.append(student)

    await db.flush()
    print(f"Created {len(students)} students")
    return students


async def seed_inventory(db: AsyncSession, created_by: User) -> List[InventoryItem]:
    categories = {name: InventoryCategory(name=name) for name in INVENTORY["categories"]}
    locations = {name: InventoryStorageLocation(name=name) for name in INVENTORY["locations"]}
    db.add_all(list(categories.values()) + list(locations.values()))
    await db.flush()

    items = []
    for name, category, location, in_stock, unit_price, minimum in INVENTORY["items"]:
        item = InventoryItem(
            item_name=name,
            category_id=categories[category].id,
            storage_location_id=locations[location].id,
            in_stock=in_stock,
            unit_price=unit_price,
            minimum_stock_level=minimum,
        )
        db.add(item)
        await db.flush()
        if in_stock:
            db.add(InventoryStockHistory(
                item_id=item.id,
                transaction_type="initial",
                quantity_change=in_stock,
                quantity_before=0,
                quantity_after=in_stock,
                unit_price_at_time=unit_price,
                created_by=created_by.id,
            ))
        items.append(item)

    await db.flush()
    print(f"Created {len(items)} inventory items")
    return items


# ==================== Main Seed Function ====================

async def seed_all():
    """Seed all sample data"""
    print("=" * 50)
    print("Starting database seeding...")
    print("=" * 50)

    random.seed(42)
    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            users = await seed_users(db)
            lookups = await seed_lookups(db)
            _, rooms, accommodation_types = await seed_boarding(db)
            zones = await seed_transport(db)
            await seed_students(db, lookups, rooms, accommodation_types, zones)
            await seed_inventory(db, users[0])

            await db.commit()
        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise

        updates = await room_status_writer.reconcile_all(db)
        print(f"Reconciled {len(updates)} rooms ({sum(1 for u in updates if u.written)} updated)")

    print("=" * 50)
    print("Database seeding completed successfully!")
    print("=" * 50)


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with AsyncSessionLocal() as db:
        # Delete in reverse order of dependencies
        for model in (
            InventoryStockHistory,
            InventoryItem,
            InventoryStorageLocation,
            InventoryCategory,
            Student,
            Room,
            BoardingHouse,
            AccommodationType,
            TransportZoneArea,
            TransportZone,
            SchoolClass,
            Stream,
            TeamColour,
            TransportType,
            User,
        ):
            await db.execute(delete(model))
        await db.commit()
        print("All data cleared!")


def main():
    import sys

    if len(sys.argv) > 1 and sys.argv[1] == "clear":
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all())


if __name__ == "__main__":
    main()
