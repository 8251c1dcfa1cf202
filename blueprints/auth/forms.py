"""
Authentication forms using Flask-WTF.
Accepts form posts and JSON bodies alike.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired, Length


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('E-mail', validators=[
        DataRequired(message='O e-mail é obrigatório'),
        Length(max=255)
    ])

    password = PasswordField('Senha', validators=[
        DataRequired(message='A senha é obrigatória')
    ])

    remember_me = BooleanField('Lembrar-me')
