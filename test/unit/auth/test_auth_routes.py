from flask_login import current_user

from conftest import TEST_PASSWORD, TEST_USER


def test_register_logs_the_user_in(client, app):
    """
    GIVEN un visitante sin sesión
    WHEN se registra con datos válidos
    THEN se crea el usuario y queda con la sesión iniciada
    """
    response = client.post("/api/register", json={
        "username": "javier",
        "email": "Javier@Gestoria-Ejemplo.es",
        "password": "una-clave-larga",
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body["username"] == "javier"
    assert body["email"] == "javier@gestoria-ejemplo.es"
    assert "password_hash" not in body

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.get_json()["id"] == body["id"]


def test_register_with_invalid_data(client):
    response = client.post("/api/register", json={"username": "jv", "email": "no-es-email", "password": "corta"})

    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert set(errors) == {"username", "email", "password"}


def test_register_duplicate_user(client, seed_test_user):
    response = client.post("/api/register", json={
        "username": TEST_USER["username"],
        "email": "otro@example.com",
        "password": "una-clave-larga",
    })

    assert response.status_code == 400
    assert "username" in response.get_json()["errors"]


def test_login_and_logout(client, seed_test_user, app):
    """Test que un usuario puede iniciar sesión y cerrar sesión."""
    with client:
        login_response = client.post(
            "/api/login",
            json={"username": TEST_USER["username"], "password": TEST_PASSWORD},
        )
        assert login_response.status_code == 200
        assert login_response.get_json()["email"] == TEST_USER["email"]
        assert current_user.is_authenticated

        logout_response = client.post("/api/logout")
        assert logout_response.status_code == 200
        assert logout_response.get_json()["message"] == "Has cerrado sesión correctamente."
        assert not current_user.is_authenticated

    assert client.get("/api/user").status_code == 401


def test_login_with_email(client, seed_test_user):
    response = client.post("/api/login", json={"username": TEST_USER["email"], "password": TEST_PASSWORD})

    assert response.status_code == 200


def test_login_with_wrong_password(client, seed_test_user):
    response = client.post("/api/login", json={"username": TEST_USER["username"], "password": "incorrecta"})

    assert response.status_code == 401
    assert response.get_json()["message"] == "Nombre de usuario/correo electrónico o contraseña inválidos"


def test_login_without_json_body(client):
    response = client.post("/api/login", data="no es json", content_type="text/plain")

    assert response.status_code == 400
    assert "body" in response.get_json()["errors"]


def test_current_user_requires_session(client):
    response = client.get("/api/user")

    assert response.status_code == 401
    assert response.get_json() == {"message": "Usuario no autenticado."}


def test_csrf_token_endpoint(client):
    response = client.get("/api/csrf-token")

    assert response.status_code == 200
    assert response.get_json()["csrfToken"]
