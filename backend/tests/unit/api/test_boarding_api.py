"""
Unit Tests for Boarding API Endpoints
"""
import pytest
from httpx import AsyncClient

from app.models.boarding import Room, BoardingHouse
from app.models.student import Student, StudentStatus


class TestHouses:

    @pytest.mark.asyncio
    async def test_create_house_requires_admin(self, client: AsyncClient, auth_headers: dict):
        response = await client.post('/api/v1/boarding/houses', json={'name': 'Kenya House'}, headers=auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_and_list_with_stats(
        self, client: AsyncClient, admin_auth_headers: dict, db_session, make_room, make_student
    ):
        response = await client.post('/api/v1/boarding/houses', json={
            'name': 'Kenya House',
            'designation': 'Girls',
            'personnel': [{'name': 'Mrs. Njeri', 'designation': 'House Mistress'}],
            'amenities': ['Laundry'],
        }, headers=admin_auth_headers)

        assert response.status_code == 201
        house = await db_session.get(BoardingHouse, response.json()['id'])

        room_a = await make_room(house, 'N1', capacity=4)
        await make_room(house, 'N2', capacity=2)
        await make_student(room_a)
        await make_student(room_a, status=StudentStatus.INACTIVE)

        listing = await client.get('/api/v1/boarding/houses', headers=admin_auth_headers)

        assert listing.status_code == 200
        stats = listing.json()[0]
        assert stats['total_rooms'] == 2
        assert stats['total_capacity'] == 6
        assert stats['current_occupancy'] == 1
        assert stats['personnel'][0]['name'] == 'Mrs. Njeri'

    @pytest.mark.asyncio
    async def test_delete_house_unassigns_everyone(
        self, client: AsyncClient, admin_auth_headers: dict, db_session, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'K1')
        student = await make_student(room)

        response = await client.delete(f'/api/v1/boarding/houses/{house.id}', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['rooms_deleted'] == 1
        assert response.json()['students_unassigned'] == 1

        await db_session.refresh(student)
        assert student.boarding_room_id is None
        assert student.boarding_house_id is None
        assert await db_session.get(Room, room.id) is None

    @pytest.mark.asyncio
    async def test_missing_house(self, client: AsyncClient, auth_headers: dict):
        response = await client.get('/api/v1/boarding/houses/missing', headers=auth_headers)

        assert response.status_code == 404


class TestRooms:

    @pytest.mark.asyncio
    async def test_create_room_starts_vacant(self, client: AsyncClient, admin_auth_headers: dict, make_house):
        house = await make_house()

        response = await client.post('/api/v1/boarding/rooms', json={
            'house_id': house.id, 'room_number': 'A1', 'capacity': 4,
        }, headers=admin_auth_headers)

        assert response.status_code == 201
        assert response.json()['status'] == 'vacant'
        assert response.json()['current_occupancy'] == 0

    @pytest.mark.asyncio
    async def test_create_room_keeps_manual_override(self, client: AsyncClient, admin_auth_headers: dict, make_house):
        house = await make_house()

        response = await client.post('/api/v1/boarding/rooms', json={
            'house_id': house.id, 'room_number': 'A1', 'capacity': 4, 'status': 'maintenance',
        }, headers=admin_auth_headers)

        assert response.json()['status'] == 'maintenance'

    @pytest.mark.asyncio
    async def test_duplicate_room_number_in_house(self, client: AsyncClient, admin_auth_headers: dict, make_house, make_room):
        house = await make_house()
        await make_room(house, 'A1')

        response = await client.post('/api/v1/boarding/rooms', json={
            'house_id': house.id, 'room_number': 'A1', 'capacity': 2,
        }, headers=admin_auth_headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_capacity_change_recomputes(
        self, client: AsyncClient, admin_auth_headers: dict, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=4, status='partially-occupied', current_occupancy=2)
        await make_student(room)
        await make_student(room)

        response = await client.patch(f'/api/v1/boarding/rooms/{room.id}', json={'capacity': 2}, headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['room']['status'] == 'fully-occupied'
        assert data['occupancy_updates'][0]['written'] is True

    @pytest.mark.asyncio
    async def test_clearing_override_restores_derived_status(
        self, client: AsyncClient, admin_auth_headers: dict, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=2, status='reserved', current_occupancy=1)
        await make_student(room)

        response = await client.patch(f'/api/v1/boarding/rooms/{room.id}', json={'status': 'vacant'}, headers=admin_auth_headers)

        assert response.json()['room']['status'] == 'partially-occupied'

    @pytest.mark.asyncio
    async def test_available_rooms(self, client: AsyncClient, auth_headers: dict, make_house, make_room):
        house = await make_house()
        await make_room(house, 'A1', status='vacant')
        await make_room(house, 'A2', status='partially-occupied', current_occupancy=1)
        await make_room(house, 'A3', capacity=1, status='fully-occupied', current_occupancy=1)
        await make_room(house, 'A4', status='maintenance')

        response = await client.get(f'/api/v1/boarding/houses/{house.id}/available-rooms', headers=auth_headers)

        assert [r['room_number'] for r in response.json()] == ['A1', 'A2']

    @pytest.mark.asyncio
    async def test_delete_room_unassigns_occupants(
        self, client: AsyncClient, admin_auth_headers: dict, db_session, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1')
        student = await make_student(room)

        response = await client.delete(f'/api/v1/boarding/rooms/{room.id}', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['students_unassigned'] == 1
        await db_session.refresh(student)
        assert student.boarding_room_id is None

    @pytest.mark.asyncio
    async def test_reconcile(self, client: AsyncClient, admin_auth_headers: dict, make_house, make_room, make_student):
        house = await make_house()
        await make_room(house, 'A1', capacity=2, status='vacant')
        stale = await make_room(house, 'A2', capacity=2, status='fully-occupied', current_occupancy=2)
        await make_student(stale)

        response = await client.post('/api/v1/boarding/rooms/reconcile', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['rooms_checked'] == 2
        assert response.json()['rooms_updated'] == 1


class TestAccommodationTypes:

    @pytest.mark.asyncio
    async def test_crud(self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict):
        created = await client.post('/api/v1/boarding/accommodation-types', json={'name': 'Full Boarder'}, headers=admin_auth_headers)
        assert created.status_code == 201
        type_id = created.json()['id']

        duplicate = await client.post('/api/v1/boarding/accommodation-types', json={'name': 'full boarder'}, headers=admin_auth_headers)
        assert duplicate.status_code == 409

        updated = await client.patch(
            f'/api/v1/boarding/accommodation-types/{type_id}',
            json={'description': 'Whole term'},
            headers=admin_auth_headers,
        )
        assert updated.json()['description'] == 'Whole term'

        listing = await client.get('/api/v1/boarding/accommodation-types', headers=auth_headers)
        assert [t['name'] for t in listing.json()] == ['Full Boarder']

        deleted = await client.delete(f'/api/v1/boarding/accommodation-types/{type_id}', headers=admin_auth_headers)
        assert deleted.status_code == 200
        assert deleted.json()['students_cleared'] == 0


class TestAssignments:

    @pytest.mark.asyncio
    async def test_assign_updates_room(
        self, client: AsyncClient, auth_headers: dict, db_session, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=1)
        student = await make_student()

        response = await client.post('/api/v1/boarding/assignments', json={
            'student_id': student.id, 'room_id': room.id,
        }, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data['boarding_room_id'] == room.id
        assert data['boarding_house_id'] == house.id
        assert data['check_in_date'] is not None
        assert data['occupancy_updates'] == [
            {'room_id': room.id, 'occupancy': 1, 'status': 'fully-occupied', 'written': True, 'warning': None}
        ]

        await db_session.refresh(room)
        assert room.status == 'fully-occupied'

    @pytest.mark.asyncio
    async def test_assign_beyond_capacity_reports_over_capacity(
        self, client: AsyncClient, auth_headers: dict, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=1, status='fully-occupied', current_occupancy=1)
        await make_student(room)
        student = await make_student()

        response = await client.post('/api/v1/boarding/assignments', json={
            'student_id': student.id, 'room_id': room.id,
        }, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()['occupancy_updates'][0]['status'] == 'over-capacity'

    @pytest.mark.asyncio
    async def test_inactive_student_cannot_be_assigned(
        self, client: AsyncClient, auth_headers: dict, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1')
        student = await make_student(status=StudentStatus.INACTIVE)

        response = await client.post('/api/v1/boarding/assignments', json={
            'student_id': student.id, 'room_id': room.id,
        }, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assign_to_missing_room(self, client: AsyncClient, auth_headers: dict, make_student):
        student = await make_student()

        response = await client.post('/api/v1/boarding/assignments', json={
            'student_id': student.id, 'room_id': 'missing',
        }, headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unassign(self, client: AsyncClient, admin_auth_headers: dict, db_session, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=2, status='partially-occupied', current_occupancy=1)
        student = await make_student(room)

        response = await client.delete(f'/api/v1/boarding/assignments/{student.id}', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['boarding_room_id'] is None
        assert response.json()['occupancy_updates'][0]['status'] == 'vacant'

        stored = await db_session.get(Student, student.id)
        assert stored.check_in_date is None

    @pytest.mark.asyncio
    async def test_staff_cannot_unassign(self, client: AsyncClient, auth_headers: dict, db_session, make_house, make_room, make_student):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=2, status='partially-occupied', current_occupancy=1)
        student = await make_student(room)

        response = await client.delete(f'/api/v1/boarding/assignments/{student.id}', headers=auth_headers)

        assert response.status_code == 403
        stored = await db_session.get(Student, student.id)
        assert stored.boarding_room_id == room.id

    @pytest.mark.asyncio
    async def test_boarding_students_with_roommates(
        self, client: AsyncClient, auth_headers: dict, make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1')
        first = await make_student(room, name='Amani Otieno')
        second = await make_student(room, name='Baraka Mutua')
        await make_student(room, name='Chege Kiprop', status=StudentStatus.INACTIVE)

        response = await client.get('/api/v1/boarding/students', headers=auth_headers)

        assert response.status_code == 200
        boarders = response.json()
        assert [b['name'] for b in boarders] == ['Amani Otieno', 'Baraka Mutua']
        assert boarders[0]['roommates'] == [
            {'id': second.id, 'name': 'Baraka Mutua', 'admission_number': second.admission_number}
        ]
        assert boarders[1]['roommates'][0]['id'] == first.id
        assert boarders[0]['room_number'] == 'A1'
