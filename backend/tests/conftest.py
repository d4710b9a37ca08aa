"""
School Admin - Test Configuration and Fixtures
"""
import os
from datetime import date
from typing import AsyncGenerator
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['CACHE_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.database import Base, get_db
from app.models.user import User, UserRole
from app.models.student import Student, StudentStatus
from app.models.boarding import BoardingHouse, Room
from app.core.security import get_password_hash, create_access_token

fake = Faker()

TEST_DATABASE_URL = 'sqlite+aiosqlite:///:memory:'


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database and session for each test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_user(db: AsyncSession, role: UserRole, password: str) -> User:
    user = User(
        email=fake.unique.email(),
        hashed_password=get_password_hash(password),
        full_name=fake.name(),
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> User:
    """Create a staff operator"""
    return await _create_user(db_session, UserRole.STAFF, 'staffpassword123')


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create an admin operator"""
    return await _create_user(db_session, UserRole.ADMIN, 'adminpassword123')


def _headers_for(user: User) -> dict:
    token = create_access_token(user.id, {'email': user.email, 'role': user.role.value})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(staff_user: User) -> dict:
    """Authentication headers for the staff operator"""
    return _headers_for(staff_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Authentication headers for the admin operator"""
    return _headers_for(admin_user)


# ==================== Domain factories ====================

@pytest.fixture
def make_house(db_session: AsyncSession):
    async def _make(name: str = None) -> BoardingHouse:
        house = BoardingHouse(name=name or f"{fake.last_name()} House", personnel=[], amenities=[])
        db_session.add(house)
        await db_session.commit()
        await db_session.refresh(house)
        return house
    return _make


@pytest.fixture
def make_room(db_session: AsyncSession):
    async def _make(
        house: BoardingHouse,
        room_number: str,
        capacity: int = 4,
        status: str = 'vacant',
        current_occupancy: int = 0,
    ) -> Room:
        room = Room(
            house_id=house.id,
            room_number=room_number,
            capacity=capacity,
            current_occupancy=current_occupancy,
            status=status,
            amenities=[],
        )
        db_session.add(room)
        await db_session.commit()
        await db_session.refresh(room)
        return room
    return _make


@pytest.fixture
def make_student(db_session: AsyncSession):
    async def _make(
        room: Room = None,
        status: StudentStatus = StudentStatus.ACTIVE,
        name: str = None,
    ) -> Student:
        student = Student(
            admission_number=f"ADM{fake.unique.random_int(min=1000, max=999999)}",
            name=name or fake.name(),
            status=status,
            boarding_room_id=room.id if room else None,
            boarding_house_id=room.house_id if room else None,
            check_in_date=date.today() if room else None,
        )
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student
    return _make
