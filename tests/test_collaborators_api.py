"""Pruebas de la API de colaboradores"""

def test_create_and_find_by_name(api):
    created = api.collaborator("Ana Pérez", phone="555-1234", department="Ventas")

    assert created["department"] == "Ventas"

    response = api.get("/api/v1/collaborators/by-name/ana pérez")
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    assert api.get("/api/v1/collaborators/by-name/Nadie").status_code == 404

def test_invalid_department_is_rejected(api):
    response = api.post("/api/v1/collaborators/", {"name": "Ana", "department": "Marketing"})

    assert response.status_code == 422

def test_list_filters(api):
    api.collaborator("Ana", department="Ventas")
    api.collaborator("Beto", department="Producción")
    api.collaborator("Carla", department="Ventas")

    sales_team = api.get("/api/v1/collaborators/", params={"department": "Ventas"}).json()
    assert [c["name"] for c in sales_team["items"]] == ["Ana", "Carla"]

    found = api.get("/api/v1/collaborators/", params={"search": "bet"}).json()
    assert found["total"] == 1

def test_update_collaborator(api):
    created = api.collaborator("Ana")

    response = api.put(f"/api/v1/collaborators/{created['id']}", {"email": "ana@negocio.com", "salary": "1200.00"})

    assert response.status_code == 200
    assert response.json()["collaborator"]["email"] == "ana@negocio.com"

def test_delete_guard_with_sales(api):
    seller = api.collaborator("Ana")
    idle = api.collaborator("Beto")
    product = api.product()
    api.sale(seller["id"], [{"product_id": product["id"], "quantity": 1}])

    response = api.delete(f"/api/v1/collaborators/{seller['id']}")
    assert response.status_code == 409
    assert response.json()["error_code"] == "COLLABORATOR_HAS_SALES"

    assert api.delete(f"/api/v1/collaborators/{idle['id']}").status_code == 200
    assert api.get(f"/api/v1/collaborators/{idle['id']}").status_code == 404

def test_delete_guard_with_personnel_records(api):
    collaborator = api.collaborator("Ana")
    api.post("/api/v1/personnel/records", {
        "collaborator_id": collaborator["id"],
        "description": "Jornada",
        "daily_pay": "50.00"
    })

    response = api.delete(f"/api/v1/collaborators/{collaborator['id']}")

    assert response.status_code == 409
