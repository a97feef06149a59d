from crm.directory import StaticUserDirectory
from config import DEFAULT_USER_DIRECTORY, parse_user_directory


def test_known_email_resolves_to_display_name():
    directory = StaticUserDirectory(DEFAULT_USER_DIRECTORY)

    assert directory.display_name("ana@gestoria-ejemplo.es") == "Ana García"
    assert directory.display_name("JAVIER@gestoria-ejemplo.es") == "Javier López"


def test_unknown_email_falls_back_to_email():
    directory = StaticUserDirectory(DEFAULT_USER_DIRECTORY)

    assert directory.display_name("otro@example.com") == "otro@example.com"


def test_empty_email_has_no_name():
    assert StaticUserDirectory().display_name(None) is None
    assert StaticUserDirectory().display_name("") is None


def test_parse_user_directory():
    raw = "Ana@Gestoria-Ejemplo.es: Ana García , javier@gestoria-ejemplo.es:Javier López,roto,sin-nombre@example.com:"

    assert parse_user_directory(raw) == {
        "ana@gestoria-ejemplo.es": "Ana García",
        "javier@gestoria-ejemplo.es": "Javier López",
    }
    assert parse_user_directory(None) == {}
