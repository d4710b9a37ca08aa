"""
Unit Tests for Inventory API Endpoints
"""
import pytest
from httpx import AsyncClient


async def create_item(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {
        'item_name': 'Exercise books',
        'in_stock': 10,
        'unit_price': 45.0,
        'minimum_stock_level': 5,
    }
    payload.update(overrides)
    response = await client.post('/api/v1/inventory/items', json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestCategoriesAndLocations:

    @pytest.mark.asyncio
    async def test_category_soft_delete(self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict):
        created = await client.post('/api/v1/inventory/categories', json={'name': 'Stationery'}, headers=auth_headers)
        assert created.status_code == 201
        category_id = created.json()['id']

        response = await client.delete(f'/api/v1/inventory/categories/{category_id}', headers=admin_auth_headers)
        assert response.status_code == 200

        listing = await client.get('/api/v1/inventory/categories', headers=auth_headers)
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_item_with_inactive_location_rejected(
        self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict
    ):
        location = await client.post('/api/v1/inventory/locations', json={'name': 'Old Store'}, headers=auth_headers)
        location_id = location.json()['id']
        await client.delete(f'/api/v1/inventory/locations/{location_id}', headers=admin_auth_headers)

        response = await client.post('/api/v1/inventory/items', json={
            'item_name': 'Mattress', 'storage_location_id': location_id,
        }, headers=auth_headers)

        assert response.status_code == 404


class TestItems:

    @pytest.mark.asyncio
    async def test_create_records_initial_history(self, client: AsyncClient, auth_headers: dict):
        item = await create_item(client, auth_headers)

        assert item['status'] == 'In Stock'
        assert item['total_value'] == 450.0

        history = await client.get('/api/v1/inventory/stock-history', params={'item_id': item['id']}, headers=auth_headers)
        rows = history.json()
        assert len(rows) == 1
        assert rows[0]['transaction_type'] == 'initial'
        assert rows[0]['quantity_after'] == 10

    @pytest.mark.asyncio
    async def test_status_filter(self, client: AsyncClient, auth_headers: dict):
        await create_item(client, auth_headers, item_name='Pens', in_stock=2, minimum_stock_level=10)
        await create_item(client, auth_headers, item_name='Bleach', in_stock=0)
        await create_item(client, auth_headers, item_name='Blankets', in_stock=30)

        response = await client.get('/api/v1/inventory/items', params={'status': 'Low Stock'}, headers=auth_headers)

        assert [i['item_name'] for i in response.json()] == ['Pens']

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client: AsyncClient, auth_headers: dict, admin_auth_headers: dict):
        item = await create_item(client, auth_headers)

        updated = await client.patch(f"/api/v1/inventory/items/{item['id']}", json={'unit_price': 50}, headers=auth_headers)
        assert updated.json()['total_value'] == 500.0

        deleted = await client.delete(f"/api/v1/inventory/items/{item['id']}", headers=admin_auth_headers)
        assert deleted.status_code == 200

        missing = await client.get(f"/api/v1/inventory/items/{item['id']}", headers=auth_headers)
        assert missing.status_code == 404


class TestStock:

    @pytest.mark.asyncio
    async def test_adjust_stock(self, client: AsyncClient, auth_headers: dict):
        item = await create_item(client, auth_headers)

        response = await client.post(f"/api/v1/inventory/items/{item['id']}/adjust", json={
            'quantity_change': -7, 'transaction_type': 'issue', 'notes': 'Grade 5',
        }, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['in_stock'] == 3
        assert response.json()['status'] == 'Low Stock'

    @pytest.mark.asyncio
    async def test_cannot_go_negative(self, client: AsyncClient, auth_headers: dict):
        item = await create_item(client, auth_headers, in_stock=2)

        response = await client.post(f"/api/v1/inventory/items/{item['id']}/adjust", json={
            'quantity_change': -3,
        }, headers=auth_headers)

        assert response.status_code == 400
        assert 'Insufficient stock' in response.json()['error']['message']

    @pytest.mark.asyncio
    async def test_zero_change_rejected(self, client: AsyncClient, auth_headers: dict):
        item = await create_item(client, auth_headers)

        response = await client.post(f"/api/v1/inventory/items/{item['id']}/adjust", json={
            'quantity_change': 0,
        }, headers=auth_headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_batch_update_is_all_or_nothing(self, client: AsyncClient, auth_headers: dict):
        pens = await create_item(client, auth_headers, item_name='Pens', in_stock=5)
        books = await create_item(client, auth_headers, item_name='Books', in_stock=1)

        failed = await client.post('/api/v1/inventory/stock-updates', json={'updates': [
            {'item_id': pens['id'], 'quantity_change': 10},
            {'item_id': books['id'], 'quantity_change': -2},
        ]}, headers=auth_headers)

        assert failed.status_code == 400
        unchanged = await client.get(f"/api/v1/inventory/items/{pens['id']}", headers=auth_headers)
        assert unchanged.json()['in_stock'] == 5

        applied = await client.post('/api/v1/inventory/stock-updates', json={'updates': [
            {'item_id': pens['id'], 'quantity_change': 10},
            {'item_id': pens['id'], 'quantity_change': -3},
            {'item_id': books['id'], 'quantity_change': -1},
        ]}, headers=auth_headers)

        assert applied.status_code == 200
        stock = {i['item_name']: i['in_stock'] for i in applied.json()}
        assert stock == {'Pens': 12, 'Books': 0}

        history = await client.get('/api/v1/inventory/stock-history', params={'item_id': pens['id']}, headers=auth_headers)
        assert len(history.json()) == 3
