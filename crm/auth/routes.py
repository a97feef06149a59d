from flask import jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
import logging

from crm import get_storage, limiter
from crm.auth import auth_bp
from crm.auth.forms import RegistrationForm, LoginForm
from crm.exceptions import AuthenticationError
from crm.forms import validate_json

logger = logging.getLogger(__name__)


@auth_bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    """Token para la cabecera X-CSRFToken cuando la protección CSRF está activa."""
    return jsonify({"csrfToken": generate_csrf()})


@auth_bp.route("/register", methods=["POST"])
def register():
    data = validate_json(RegistrationForm, "Datos de registro inválidos")
    user = get_storage().create_user(
        username=data["username"],
        email=data["email"].strip().lower(),
        password=data["password"],
    )
    login_user(user)
    logger.info(f"Usuario '{user.username}' registrado e identificado.")
    return jsonify(user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    data = validate_json(LoginForm, "Datos de inicio de sesión inválidos")
    user = get_storage().find_user_for_login(data["username"])

    if user is None or not user.check_password(data["password"]):
        logger.warning(
            f"Intento de inicio de sesión fallido para el usuario/email '{data['username']}'"
        )
        raise AuthenticationError("Nombre de usuario/correo electrónico o contraseña inválidos")

    login_user(user)
    logger.info(f"Usuario '{user.username}' inició sesión.")
    return jsonify(user.to_dict())


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"Usuario '{username}' cerró sesión.")
    return jsonify({"message": "Has cerrado sesión correctamente."})


@auth_bp.route("/user", methods=["GET"])
@login_required
def user():
    return jsonify(current_user.to_dict())
