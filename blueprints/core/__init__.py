from flask import Blueprint

bp = Blueprint("core", __name__)
api_bp = Blueprint("core_api", __name__)
# Critical: import the module so the routes get registered
from . import routes  # noqa: E402,F401
