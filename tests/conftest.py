"""
Fixtures compartidas: base SQLite en memoria AISLADA por prueba, cliente HTTP
con la dependencia get_db reemplazada y helpers para crear datos vía API.
"""
import os

# Configurar el entorno ANTES de importar la aplicación (settings se lee al importar)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config.database import get_db
from app.modules.assistant.store import InMemoryFlowStore, get_flow_store
from app.shared.database.models import Base, User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(autouse=True)
def database():
    """Esquema nuevo para cada prueba"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db(database):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def owner(db):
    """Dueño creado directamente en la base (pruebas de servicios)"""
    user = User(email="dueno@negocio.com", business_name="Negocio", password_hash="x", is_active=True)
    db.add(user)
    db.commit()
    return user

@pytest.fixture
def flow_store():
    store = InMemoryFlowStore()
    app.dependency_overrides[get_flow_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_flow_store, None)

@pytest.fixture
def client(database):
    return TestClient(app)

class LedgerApi:
    """Atajos para preparar datos a través de la API de un dueño"""

    def __init__(self, client: TestClient, headers: dict):
        self.client = client
        self.headers = headers

    def get(self, url, **kwargs):
        return self.client.get(url, headers=self.headers, **kwargs)

    def post(self, url, json=None):
        return self.client.post(url, json=json, headers=self.headers)

    def put(self, url, json=None):
        return self.client.put(url, json=json, headers=self.headers)

    def delete(self, url):
        return self.client.delete(url, headers=self.headers)

    def collaborator(self, name="Ana", **fields):
        response = self.post("/api/v1/collaborators/", {"name": name, **fields})
        assert response.status_code == 201, response.text
        return response.json()["collaborator"]

    def product(self, name="Camisa", total_quantity=10, unit_price="25.00", **fields):
        response = self.post("/api/v1/products/", {
            "name": name,
            "total_quantity": total_quantity,
            "unit_price": unit_price,
            **fields
        })
        assert response.status_code == 201, response.text
        return response.json()["product"]

    def sale(self, collaborator_id, items, **fields):
        response = self.post("/api/v1/sales/", {
            "collaborator_id": collaborator_id,
            "items": items,
            **fields
        })
        assert response.status_code == 201, response.text
        return response.json()["sale"]

    def payment(self, sale_id, amount, **fields):
        return self.post("/api/v1/payments/", {"sale_id": sale_id, "amount": str(amount), **fields})

    def sale_return(self, sale_id, product_id, quantity, reason="Defectuoso", **fields):
        return self.post("/api/v1/returns/", {
            "sale_id": sale_id,
            "product_id": product_id,
            "quantity": quantity,
            "reason": reason,
            **fields
        })

    def get_product(self, product_id):
        return self.get(f"/api/v1/products/{product_id}").json()

    def get_sale(self, sale_id):
        return self.get(f"/api/v1/sales/{sale_id}").json()

def register(client: TestClient, email: str, business_name: str = "Mi Negocio") -> dict:
    response = client.post("/api/v1/auth/register", json={
        "email": email,
        "password": "secreto123",
        "business_name": business_name
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}

@pytest.fixture
def api(client):
    return LedgerApi(client, register(client, "dueno@negocio.com"))

@pytest.fixture
def other_api(client):
    return LedgerApi(client, register(client, "otro@negocio.com", "Otro Negocio"))

@pytest.fixture
def register_owner(client):
    return lambda email, business_name="Mi Negocio": register(client, email, business_name)
