from crm.auth.models import User


def test_password_hashing():
    """
    Prueba que la contraseña se guarda hasheada y no en texto plano.
    """
    user = User(username="ana", email="ana@gestoria-ejemplo.es", password="mysecretpassword")

    assert user.password_hash is not None
    assert user.password_hash != "mysecretpassword"


def test_password_verification():
    """
    Prueba que check_password() funciona correctamente.
    """
    user = User(username="ana", email="ana@gestoria-ejemplo.es")
    assert user.check_password("supersecret") is False

    user.set_password("supersecret")
    assert user.check_password("supersecret") is True
    assert user.check_password("wrongpassword") is False


def test_user_from_stored_document():
    """
    Prueba que el usuario se reconstruye desde el documento guardado sin rehashear.
    """
    original = User(username="ana", email="ana@gestoria-ejemplo.es", password="supersecret")
    stored = {
        "id": 7,
        "username": "ana",
        "email": "ana@gestoria-ejemplo.es",
        "password_hash": original.password_hash,
        "createdAt": None,
    }

    user = User(**stored)

    assert user.get_id() == "7"
    assert user.check_password("supersecret") is True
    assert user.to_dict() == {"id": 7, "username": "ana", "email": "ana@gestoria-ejemplo.es"}
    assert "password_hash" not in user.to_dict()
