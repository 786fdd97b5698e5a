"""Unit tests for the service info API router."""

import pytest
from fastapi import status

from xbs.infrastructure.api.routes.info_router import WELCOME_MESSAGE
from xbs.infrastructure.api.schemas import ServiceStatus


@pytest.mark.asyncio
async def test_get_service_info(client, settings):
    response = await client.get("/info")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "status": ServiceStatus.ONLINE,
        "message": settings.service_message,
        "version": settings.app_version,
        "maxSyncSize": settings.max_sync_size,
    }


@pytest.mark.asyncio
async def test_get_service_info_no_new_syncs(client, app_context):
    app_context.settings.allow_new_syncs = False

    response = await client.get("/info")

    assert response.json()["status"] == ServiceStatus.NO_NEW_SYNCS


@pytest.mark.asyncio
async def test_welcome(client):
    response = await client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == WELCOME_MESSAGE
