# crm/forms.py
#
# Validación de la entrada JSON de la API con Flask-WTF. Los formularios se
# alimentan con el cuerpo JSON de la petición; en las actualizaciones parciales
# solo se validan los campos que vienen en el cuerpo.

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import Field, StringField
from wtforms.validators import AnyOf, Optional, StopValidation

from crm.exceptions import ValidationError
from crm.models import enum_values
from crm.utils import parse_datetime


class TextField(StringField):
    """StringField que conserva null y rechaza valores JSON que no son texto."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if value is not None and not isinstance(value, str):
            self.data = None
            raise ValueError("Debe ser un texto.")
        self.data = value


class IsoDateTimeField(Field):
    """Fecha y hora en formato ISO 8601. null o "" dejan el campo vacío."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        value = valuelist[0]
        if value is None or value == "":
            self.data = None
            return
        self.data = parse_datetime(value) if isinstance(value, str) else None
        if self.data is None:
            raise ValueError("Formato de fecha y hora inválido.")


class OptionalValue(Optional):
    """Como Optional, pero también detiene la validación con un null de JSON."""

    def __call__(self, form, field):
        if field.raw_data and field.raw_data[0] is None:
            field.errors[:] = []
            raise StopValidation()
        super().__call__(form, field)


def one_of(enum_cls):
    """Validador de conjunto cerrado para los campos de tipo enumerado."""
    values = enum_values(enum_cls)
    return AnyOf(values, message=f"Debe ser uno de: {', '.join(values)}.")


class ApiForm(FlaskForm):
    """
    Formulario base de la API. La protección CSRF la aplica CSRFProtect a nivel
    de aplicación (cabecera X-CSRFToken), no cada formulario.
    """

    class Meta:
        csrf = False

    def validate_partial(self, payload):
        """Valida solo los campos presentes en el payload."""
        success = True
        for name in payload:
            field = self._fields.get(name)
            if field is None:
                continue
            inline = getattr(self.__class__, f"validate_{name}", None)
            extra = (inline,) if inline is not None else ()
            if not field.validate(self, extra):
                success = False
        return success

    def submitted_data(self, payload):
        """Datos ya convertidos de los campos que vienen en el payload."""
        return {name: self._fields[name].data for name in payload if name in self._fields}


def get_json_payload():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError(
            "El cuerpo de la petición debe ser un objeto JSON.",
            errors={"body": ["Se esperaba un objeto JSON."]},
        )
    return payload


def validate_json(form_class, message, partial=False):
    """
    Construye el formulario a partir del cuerpo JSON, lo valida y devuelve los
    datos de los campos enviados. Lanza ValidationError con los errores por campo.
    """
    payload = get_json_payload()
    # Una lista del JSON es un único valor (inválido), no varios valores del campo.
    form = form_class(formdata=MultiDict(list(payload.items())))
    valid = form.validate_partial(payload) if partial else form.validate()
    if not valid:
        raise ValidationError(message, errors=form.errors)
    if partial:
        return form.submitted_data(payload)
    return form.submitted_data(form._fields)
