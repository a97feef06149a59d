# crm/commands.py

from flask import current_app
from flask.cli import with_appcontext
import click
import pymongo
import secrets
import string

from crm import get_storage
from crm.exceptions import ValidationError

SEED_USERS = [
    {'username': 'ana', 'email': 'ana@gestoria-ejemplo.es'},
    {'username': 'javier', 'email': 'javier@gestoria-ejemplo.es'},
]

DEFAULT_CATEGORIES = [
    {'name': 'Autónomo', 'description': 'Servicios para trabajadores autónomos y freelancers', 'color': '#3B82F6'},
    {'name': 'Impuestos', 'description': 'Gestión de declaraciones fiscales y tributación', 'color': '#EF4444'},
    {'name': 'Informe', 'description': 'Elaboración de informes contables y financieros', 'color': '#10B981'},
]


def generate_password(length=16):
    alphabet = string.ascii_letters + string.digits + string.punctuation
    return ''.join(secrets.choice(alphabet) for _ in range(length))


@click.command("init-db-data")
@with_appcontext
def init_db_data_command():
    """Inicializa la base de datos con las cuentas fijas y las categorías por defecto."""
    storage = get_storage()
    click.echo("Iniciando carga de datos iniciales para MongoDB...")

    try:
        # --- Cargar Usuarios ---
        for user_data in SEED_USERS:
            username = user_data['username']
            if storage.users.find_by_username(username):
                click.echo(f"El usuario '{username}' ya existe.")
                continue
            if storage.users.find_by_email(user_data['email']):
                click.echo(f"El correo '{user_data['email']}' ya está registrado con otro usuario.")
                continue

            password = generate_password()
            storage.create_user(username=username, email=user_data['email'], password=password)
            click.echo(f"Usuario '{username}' creado con éxito.")
            click.echo(f"  -> Contraseña para '{username}': {password}")

        # --- Cargar Categorías ---
        if not storage.get_categories():
            click.echo("Cargando categorías iniciales...")
            for category in DEFAULT_CATEGORIES:
                storage.create_category(category)
            click.echo("Categorías cargadas.")
        else:
            click.echo("Las Categorías ya existen.")

        click.echo("\nCarga de datos iniciales finalizada con éxito.")

    except ValidationError as e:
        current_app.logger.warning(f"Datos iniciales inválidos: {e.errors}")
        raise click.ClickException(f"No se pudieron cargar los datos iniciales: {e.message}")
    except pymongo.errors.PyMongoError as e:
        current_app.logger.error(f"Error de base de datos durante la inicialización: {e}", exc_info=True)
        raise click.ClickException(f"Ocurrió un error de base de datos durante la inicialización: {e}")
