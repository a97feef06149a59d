from flask import jsonify
from flask_login import login_required

from crm import get_storage
from crm.categories import categories_bp
from crm.categories.forms import CategoryForm
from crm.exceptions import NotFoundError
from crm.forms import validate_json


@categories_bp.route('', methods=['GET'])
@login_required
def list_categories():
    return jsonify(get_storage().get_categories())


@categories_bp.route('', methods=['POST'])
@login_required
def create_category():
    data = validate_json(CategoryForm, "Datos de categoría inválidos")
    category = get_storage().create_category(data)
    return jsonify(category), 201


@categories_bp.route('/<string:category_id>', methods=['PUT'])
@login_required
def update_category(category_id):
    data = validate_json(CategoryForm, "Datos de categoría inválidos", partial=True)
    category = get_storage().update_category(category_id, data)
    if category is None:
        raise NotFoundError("Categoría no encontrada")
    return jsonify(category)


@categories_bp.route('/<string:category_id>', methods=['DELETE'])
@login_required
def delete_category(category_id):
    if not get_storage().delete_category(category_id):
        raise NotFoundError("Categoría no encontrada")
    return '', 204
