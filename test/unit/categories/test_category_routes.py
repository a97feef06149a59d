from bson.objectid import ObjectId


def test_categories_require_login(client):
    assert client.get("/api/categories").status_code == 401
    assert client.post("/api/categories", json={"name": "Impuestos"}).status_code == 401


def test_create_and_list_categories(logged_in_client):
    response = logged_in_client.post("/api/categories", json={"name": "Impuestos", "color": "#EF4444"})

    assert response.status_code == 201
    created = response.get_json()
    assert created["name"] == "Impuestos"
    assert created["color"] == "#EF4444"
    assert created["description"] is None

    listed = logged_in_client.get("/api/categories").get_json()
    assert [c["id"] for c in listed] == [created["id"]]


def test_create_category_defaults_color(logged_in_client):
    response = logged_in_client.post("/api/categories", json={"name": "Autónomo"})

    assert response.status_code == 201
    assert response.get_json()["color"] == "#3B82F6"


def test_create_category_with_invalid_data(logged_in_client):
    response = logged_in_client.post("/api/categories", json={"color": "rojo"})

    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Datos de categoría inválidos"
    assert set(body["errors"]) == {"name", "color"}


def test_update_category(logged_in_client):
    created = logged_in_client.post("/api/categories", json={"name": "Informe"}).get_json()

    response = logged_in_client.put(f"/api/categories/{created['id']}", json={"description": "Cuentas anuales"})

    assert response.status_code == 200
    assert response.get_json()["description"] == "Cuentas anuales"
    assert response.get_json()["name"] == "Informe"


def test_update_category_rejects_null_name(logged_in_client):
    created = logged_in_client.post("/api/categories", json={"name": "Informe"}).get_json()

    response = logged_in_client.put(f"/api/categories/{created['id']}", json={"name": None})

    assert response.status_code == 400
    assert "name" in response.get_json()["errors"]


def test_update_unknown_category(logged_in_client):
    response = logged_in_client.put(f"/api/categories/{ObjectId()}", json={"name": "Nada"})

    assert response.status_code == 404
    assert response.get_json()["message"] == "Categoría no encontrada"


def test_delete_category(logged_in_client):
    created = logged_in_client.post("/api/categories", json={"name": "Informe"}).get_json()

    first = logged_in_client.delete(f"/api/categories/{created['id']}")
    second = logged_in_client.delete(f"/api/categories/{created['id']}")

    assert first.status_code == 204
    assert first.data == b""
    assert second.status_code == 404
