"""
Fixtures partagées: base Mongo en mémoire (mongomock-motor) injectée à la
place de config.db dans tous les modules de l'application.
"""

import sys
import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

import config
import server


@pytest.fixture
def mock_db(monkeypatch):
    """Base vide par test"""
    real_db = config.db
    fake_db = AsyncMongoMockClient()[f"test_{uuid.uuid4().hex}"]

    for module in list(sys.modules.values()):
        if getattr(module, "db", None) is real_db:
            monkeypatch.setattr(module, "db", fake_db)

    return fake_db


@pytest.fixture
def client(mock_db):
    """Client HTTP sans lifespan (pas d'index, pas de scheduler)"""
    return TestClient(server.app)


@pytest.fixture
def product_group(client):
    response = client.post("/api/product-groups", json={"name": "Túi giấy", "code": "TUI"})
    assert response.status_code == 200
    return response.json()["product_group"]


@pytest.fixture
def sales_team(client):
    """Deux commerciaux actifs"""
    team = []
    for name in ("Nguyễn Văn An", "Trần Thị Bình"):
        response = client.post("/api/sales-employees", json={"full_name": name})
        assert response.status_code == 200
        team.append(response.json()["employee"])
    return team


@pytest.fixture
def customer(client):
    response = client.post("/api/customers", json={
        "full_name": "Công ty In Ấn Sao Mai",
        "phone": "0901234567",
        "email": "contact@saomai.vn"
    })
    assert response.status_code == 200
    return response.json()["customer"]
