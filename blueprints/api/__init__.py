"""
API routes package.
Split into smaller modules by entity for maintainability.
"""

from flask import Blueprint

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Import and register routes from submodules
from blueprints.api import routes
from blueprints.api import resources
from blueprints.api import reservations
from blueprints.api import packages
from blueprints.api import settings
from blueprints.api import reports

# Register all route functions on the blueprint
routes.register_routes(api_bp)
resources.register_routes(api_bp)
reservations.register_routes(api_bp)
packages.register_routes(api_bp)
settings.register_routes(api_bp)
reports.register_routes(api_bp)
