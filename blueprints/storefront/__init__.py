# blueprints/storefront/__init__.py
from flask import Blueprint

bp = Blueprint("storefront", __name__)

from . import routes  # noqa: E402,F401
