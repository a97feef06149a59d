from wtforms.validators import DataRequired, Email, Length

from crm.forms import ApiForm, TextField


class RegistrationForm(ApiForm):
    username = TextField('Nombre de Usuario', validators=[DataRequired(message="Este campo es obligatorio"), Length(min=3, max=50)])
    email = TextField('Correo Electrónico', validators=[DataRequired(message="Este campo es obligatorio"), Email(message="Correo electrónico inválido.")])
    password = TextField('Contraseña', validators=[DataRequired(message="Este campo es obligatorio"), Length(min=8, message="La contraseña debe tener al menos 8 caracteres.")])


class LoginForm(ApiForm):
    username = TextField('Nombre de Usuario o Correo Electrónico', validators=[DataRequired(message="Este campo es obligatorio")])
    password = TextField('Contraseña', validators=[DataRequired(message="Este campo es obligatorio")])
