from flask import jsonify
from flask_login import login_required, current_user

from crm import get_storage
from crm.auth.decorators import session_user_required
from crm.forms import validate_json
from crm.notifications import notifications_bp
from crm.notifications.forms import MotivationalPhraseForm


@notifications_bp.route('/notifications/count', methods=['GET'])
@session_user_required
def notifications_count():
    return jsonify({"count": get_storage().get_pending_tasks_count(current_user.email)})


@notifications_bp.route('/notifications/tasks', methods=['GET'])
@session_user_required
def notifications_tasks():
    return jsonify(get_storage().get_pending_tasks_for_user(current_user.email))


@notifications_bp.route('/motivational-phrase', methods=['GET'])
@session_user_required
def get_motivational_phrase():
    return jsonify({"phrase": get_storage().get_motivational_phrase(current_user.email)})


@notifications_bp.route('/motivational-phrase', methods=['PUT'])
@session_user_required
def update_motivational_phrase():
    data = validate_json(MotivationalPhraseForm, "La frase es obligatoria y debe ser un texto")
    updated = get_storage().update_motivational_phrase(current_user.email, data["phrase"])
    return jsonify({"phrase": updated["phrase"]})


@notifications_bp.route('/stats', methods=['GET'])
@login_required
def stats():
    return jsonify(get_storage().get_stats())
