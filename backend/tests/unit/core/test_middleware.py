"""
Unit Tests for HTTP middleware
"""
import pytest
from httpx import AsyncClient

from app.core.config import settings


class TestRequestTracing:

    @pytest.mark.asyncio
    async def test_generates_request_id(self, client: AsyncClient):
        response = await client.get('/health')

        assert len(response.headers['X-Request-ID']) == 8
        assert response.headers['X-Response-Time'].endswith('ms')

    @pytest.mark.asyncio
    async def test_echoes_caller_request_id(self, client: AsyncClient):
        response = await client.get('/health', headers={'X-Request-ID': 'trace-123'})

        assert response.headers['X-Request-ID'] == 'trace-123'


class TestSecurityHeaders:

    @pytest.mark.asyncio
    async def test_headers_present(self, client: AsyncClient):
        response = await client.get('/health')

        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'


class TestRequestSizeLimit:

    @pytest.mark.asyncio
    async def test_oversized_body_rejected(self, client: AsyncClient):
        response = await client.post(
            '/api/v1/auth/login',
            content=b'x' * (settings.MAX_REQUEST_SIZE + 1),
            headers={'Content-Type': 'application/json'},
        )

        assert response.status_code == 413
        assert response.json()['error']['code'] == 'REQUEST_TOO_LARGE'
