"""
Integration Tests - boarding occupancy through the full API flow
"""
import pytest
from httpx import AsyncClient

from app.models.boarding import Room


async def room_state(client: AsyncClient, headers: dict, room_id: str) -> tuple:
    response = await client.get(f'/api/v1/boarding/rooms/{room_id}', headers=headers)
    assert response.status_code == 200
    data = response.json()
    return data['current_occupancy'], data['status']


class TestRoomMoves:

    @pytest.mark.asyncio
    async def test_move_between_rooms_updates_both(
        self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict, make_student
    ):
        """A student leaving a room of 1/4 for a room of 3/4 empties one and fills the other"""
        house = await client.post('/api/v1/boarding/houses', json={'name': 'Kilimanjaro House'}, headers=admin_auth_headers)
        house_id = house.json()['id']

        rooms = {}
        for number in ('A', 'B'):
            created = await client.post('/api/v1/boarding/rooms', json={
                'house_id': house_id, 'room_number': number, 'capacity': 4,
            }, headers=admin_auth_headers)
            rooms[number] = created.json()['id']

        mover = await make_student(name='Amani Otieno')
        await client.post('/api/v1/boarding/assignments', json={
            'student_id': mover.id, 'room_id': rooms['A'],
        }, headers=auth_headers)
        for _ in range(3):
            student = await make_student()
            await client.post('/api/v1/boarding/assignments', json={
                'student_id': student.id, 'room_id': rooms['B'],
            }, headers=auth_headers)

        assert await room_state(client, auth_headers, rooms['A']) == (1, 'partially-occupied')
        assert await room_state(client, auth_headers, rooms['B']) == (3, 'partially-occupied')

        response = await client.put(f'/api/v1/boarding/assignments/{mover.id}', json={
            'room_id': rooms['B'],
        }, headers=auth_headers)

        assert response.status_code == 200
        updates = {u['room_id']: u for u in response.json()['occupancy_updates']}
        assert updates[rooms['A']]['occupancy'] == 0
        assert updates[rooms['A']]['status'] == 'vacant'
        assert updates[rooms['B']]['occupancy'] == 4
        assert updates[rooms['B']]['status'] == 'fully-occupied'
        assert response.json()['warnings'] == []

        assert await room_state(client, auth_headers, rooms['A']) == (0, 'vacant')
        assert await room_state(client, auth_headers, rooms['B']) == (4, 'fully-occupied')

        available = await client.get(f'/api/v1/boarding/houses/{house_id}/available-rooms', headers=auth_headers)
        assert [r['id'] for r in available.json()] == [rooms['A']]

    @pytest.mark.asyncio
    async def test_assignment_survives_recompute_failure(
        self, client: AsyncClient, auth_headers: dict, db_session, make_house, make_room, make_student, monkeypatch
    ):
        """The student keeps the room even when the occupancy write fails"""
        from app.core.exceptions import OccupancyUpdateError
        from app.services.room_status_writer import room_status_writer

        house = await make_house()
        room = await make_room(house, 'A1', capacity=2)
        student = await make_student()

        async def failing_persist(db, room_id, occupancy, status):
            raise OccupancyUpdateError(room_id, "write refused")

        monkeypatch.setattr(room_status_writer, "_persist", failing_persist)

        response = await client.post('/api/v1/boarding/assignments', json={
            'student_id': student.id, 'room_id': room.id,
        }, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()['boarding_room_id'] == room.id
        assert len(response.json()['warnings']) == 1

        await db_session.refresh(student)
        assert student.boarding_room_id == room.id

        stored = await db_session.get(Room, room.id)
        await db_session.refresh(stored)
        assert stored.current_occupancy == 0

        monkeypatch.undo()
        reconcile = await room_status_writer.recompute(db_session, room.id)
        assert reconcile.occupancy == 1
        assert reconcile.written is True

    @pytest.mark.asyncio
    async def test_deactivated_boarder_then_room_delete(
        self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict, db_session,
        make_house, make_room, make_student
    ):
        house = await make_house()
        room = await make_room(house, 'A1', capacity=2)
        active = await make_student()
        leaving = await make_student()
        for student in (active, leaving):
            await client.post('/api/v1/boarding/assignments', json={
                'student_id': student.id, 'room_id': room.id,
            }, headers=auth_headers)

        assert await room_state(client, auth_headers, room.id) == (2, 'fully-occupied')

        await client.post(f'/api/v1/students/{leaving.id}/deactivate', headers=auth_headers)
        assert await room_state(client, auth_headers, room.id) == (1, 'partially-occupied')

        response = await client.delete(f'/api/v1/boarding/rooms/{room.id}', headers=admin_auth_headers)

        assert response.json()['students_unassigned'] == 2
        for student in (active, leaving):
            await db_session.refresh(student)
            assert student.boarding_room_id is None
