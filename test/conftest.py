import pytest
from config import TestingConfig
from crm import create_app, get_storage
from crm.directory import StaticUserDirectory
from crm.storage import CrmStorage
import logging
import mongomock

# Desactivar la propagación de logs para evitar duplicados en la consola de pytest
logging.getLogger("werkzeug").setLevel(logging.ERROR)
logging.getLogger("flask_limiter").setLevel(logging.ERROR)

TEST_PASSWORD = "ThisIsA-Valid-Password123!"
TEST_USER = {"username": "testuser", "email": "ana@gestoria-ejemplo.es"}


@pytest.fixture(scope="function")
def database():
    """Base de datos mongomock nueva para cada test."""
    return mongomock.MongoClient()["crm_test"]


@pytest.fixture(scope="function")
def app(database, tmp_path, monkeypatch):
    """Crea y configura una instancia de la aplicación Flask para cada test."""
    monkeypatch.setattr(TestingConfig, "LOG_DIR", str(tmp_path / "logs"))
    app = create_app('testing', database=database)
    yield app


@pytest.fixture(scope="function")
def client(app):
    """Cliente de prueba simple para la aplicación Flask."""
    return app.test_client()


@pytest.fixture(scope="function")
def app_storage(app):
    """La capa de datos que usan las rutas de la aplicación."""
    with app.app_context():
        return get_storage()


@pytest.fixture(scope="function")
def storage(database):
    """Capa de datos sin aplicación Flask, para los tests de almacenamiento."""
    return CrmStorage.from_database(
        database,
        directory=StaticUserDirectory({"ana@gestoria-ejemplo.es": "Ana García"}),
    )


@pytest.fixture(scope="function")
def seed_test_user(app_storage):
    """Crea el usuario de prueba en la base de datos."""
    return app_storage.create_user(
        username=TEST_USER["username"], email=TEST_USER["email"], password=TEST_PASSWORD
    )


@pytest.fixture
def logged_in_client(client, seed_test_user):
    """Cliente de prueba que ya ha iniciado sesión con el usuario de prueba."""
    response = client.post(
        "/api/login",
        json={"username": TEST_USER["username"], "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    return client
