"""
Authentication routes: login, logout, current user.
Session login for the JSON API.
"""

import logging

from flask import Blueprint
from flask_login import login_user, logout_user, login_required, current_user

from blueprints.auth.forms import LoginForm
from models.user import User, get_user_by_email, update_last_login, check_password
from utils.api_response import api_success, api_error, form_errors
from utils.messages import MESSAGES
from utils.validators import validate_email

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log a user in.

    Body: {"email": str, "password": str, "remember_me": bool}
    """
    form = LoginForm()

    if not form.validate_on_submit():
        return api_error(MESSAGES['data_required'], status=400, errors=form_errors(form))

    email = form.email.data.strip().lower()
    if not validate_email(email):
        return api_error(MESSAGES['invalid_credentials'], status=401)

    user_dict = get_user_by_email(email)

    # Check credentials
    if user_dict is None or not check_password(user_dict, form.password.data):
        logger.info(f"Failed login for {email}")
        return api_error(MESSAGES['invalid_credentials'], status=401)

    # Check if user is active
    if not user_dict.get('active'):
        return api_error(MESSAGES['account_inactive'], status=403)

    user = User(user_dict)
    login_user(user, remember=form.remember_me.data)
    update_last_login(user.id)

    logger.info(f"User {user.id} logged in ({user.role})")
    return api_success(
        data=user.to_dict(),
        message=MESSAGES['login_success'].format(name=user.name)
    )


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """Logout current user."""
    logout_user()
    return api_success(message=MESSAGES['logout_success'])


@auth_bp.route('/me')
@login_required
def me():
    """Current user profile."""
    return api_success(data=current_user.to_dict())
