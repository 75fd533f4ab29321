# tests/test_routes/conftest.py
import pytest

from app.dependencies import get_marketplace_client, get_migration_service, get_storage
from app.main import app


@pytest.fixture
def api(test_client, mock_storage, migration_service, ozon_client, wildberries_client):
    """TestClient with storage, service and marketplace clients replaced by in-memory doubles"""
    clients = {"ozon": ozon_client, "wildberries": wildberries_client}

    def override_client(marketplace: str):
        return clients[marketplace]

    app.dependency_overrides[get_storage] = lambda: mock_storage
    app.dependency_overrides[get_migration_service] = lambda: migration_service
    app.dependency_overrides[get_marketplace_client] = override_client
    return test_client
