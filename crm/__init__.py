# crm/__init__.py

from flask import Flask, current_app, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_pymongo import PyMongo
from flask_wtf.csrf import CSRFProtect
from pymongo.errors import ConnectionFailure, ConfigurationError, PyMongoError
from werkzeug.exceptions import HTTPException
from datetime import datetime
import logging
from logging.handlers import RotatingFileHandler
from config import DevelopmentConfig, ProductionConfig, TestingConfig
import os
import sys

from crm.exceptions import AuthenticationError, BaseAppException, DatabaseQueryError
from crm.utils import as_utc

# --- Instancias de Extensiones ---
mongo = PyMongo()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)


class CrmJSONProvider(DefaultJSONProvider):
    """Serializa las fechas en ISO 8601 (UTC) en lugar del formato HTTP por defecto."""
    ensure_ascii = False

    @staticmethod
    def default(o):
        if isinstance(o, datetime):
            return as_utc(o).isoformat()
        return DefaultJSONProvider.default(o)


def get_storage():
    """Devuelve la capa de datos asociada a la aplicación actual."""
    return current_app.extensions["crm_storage"]


# --- Funciones Auxiliares para Modularizar la Configuración ---

def connect_database(app):
    """
    Inicializa Flask-PyMongo y devuelve la base de datos indicada en MONGO_URI.
    """
    mongo_uri = app.config.get("MONGO_URI")
    if not mongo_uri:
        raise RuntimeError("FATAL: La variable de entorno MONGO_URI no está configurada.")

    app.logger.info("Intentando conectar a MongoDB...")

    try:
        mongo.init_app(app)
        mongo.cx.server_info()  # Fuerza la conexión para verificarla
        app.logger.info("Conexión a MongoDB establecida exitosamente.")
    except (ConnectionFailure, ConfigurationError) as e:
        app.logger.error(f"Error al conectar o configurar MongoDB: {e}")
        raise RuntimeError(f"No se pudo conectar a la base de datos: {e}")
    if mongo.db is None:
        raise RuntimeError("FATAL: MONGO_URI debe incluir el nombre de la base de datos.")
    return mongo.db


def init_app_extensions(app, database=None):
    """
    Inicializa las extensiones de Flask y construye la capa de datos.
    Si se recibe `database` (p. ej. una base mongomock en los tests) se usa tal cual.
    """
    from crm.directory import StaticUserDirectory
    from crm.repositories import ensure_indexes
    from crm.storage import CrmStorage

    csrf.init_app(app)
    limiter.init_app(app)

    if database is None:
        database = connect_database(app)

    ensure_indexes(database)
    app.extensions["crm_storage"] = CrmStorage.from_database(
        database,
        directory=StaticUserDirectory(app.config.get("USER_DIRECTORY")),
        default_phrase=app.config["DEFAULT_MOTIVATIONAL_PHRASE"],
    )

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return get_storage().get_user(user_id)
        except PyMongoError as e:
            app.logger.error(f"Error en load_user para user_id {user_id}: {e}")
        return None

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthenticationError()


def register_app_blueprints(app):
    """
    Registra todos los Blueprints de la aplicación.
    """
    from crm.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api')

    from crm.categories import categories_bp
    app.register_blueprint(categories_bp, url_prefix='/api/categories')

    from crm.clients import clients_bp
    app.register_blueprint(clients_bp, url_prefix='/api/clients')

    from crm.tasks import tasks_bp
    app.register_blueprint(tasks_bp, url_prefix='/api/tasks')

    from crm.notifications import notifications_bp
    app.register_blueprint(notifications_bp, url_prefix='/api')


def configure_app_logging(app):
    """
    Configura el sistema de logging de la aplicación.
    """
    log_dir = app.config.get("LOG_DIR", "logs")
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    for handler in app.logger.handlers[:]:
        app.logger.removeHandler(handler)

    file_handler = RotatingFileHandler(os.path.join(log_dir, "app.log"), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    if not app.debug and not app.testing:
        file_handler.setLevel(logging.INFO)
        stream_handler.setLevel(logging.INFO)
        app.logger.setLevel(logging.INFO)
    else:
        file_handler.setLevel(logging.DEBUG)
        stream_handler.setLevel(logging.DEBUG)
        app.logger.setLevel(logging.DEBUG)

    # app.logger es el logger "crm": recoge también los de crm.storage, crm.clients.routes, etc.
    app.logger.addHandler(file_handler)
    app.logger.addHandler(stream_handler)
    app.logger.info("Logging inicializado")


def register_app_error_handlers(app):
    """
    Registra los manejadores de errores globales. Todas las respuestas son JSON.
    """
    @app.errorhandler(BaseAppException)
    def app_exception(error):
        if error.status_code >= 500:
            current_app.logger.error(f"Error de aplicación: {error}", exc_info=True)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_exception(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(PyMongoError)
    def database_error(error):
        current_app.logger.error(f"Error de base de datos: {error}", exc_info=True)
        return jsonify(DatabaseQueryError().to_dict()), 500

    @app.errorhandler(Exception)
    def internal_server_error(error):
        current_app.logger.error(f"Internal Server Error: {error}", exc_info=True)
        return jsonify({"message": "Error interno del servidor."}), 500


# --- Función de Fábrica de Aplicación (create_app) ---
def create_app(config_class="development", database=None):
    """
    Función de fábrica para crear y configurar la instancia de la aplicación Flask.
    """
    app = Flask(__name__)
    app.json = CrmJSONProvider(app)

    config_map = {
        'testing': TestingConfig,
        'production': ProductionConfig,
        'development': DevelopmentConfig
    }
    app.config.from_object(config_map.get(config_class, DevelopmentConfig))

    configure_app_logging(app)
    init_app_extensions(app, database=database)
    register_app_blueprints(app)
    register_app_error_handlers(app)

    from crm import commands as commands
    app.cli.add_command(commands.init_db_data_command)

    return app
