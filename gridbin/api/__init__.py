"""
HTTP Layer

The JSON endpoints (upload, delete) are flask-restx resources with their
Swagger UI at /docs; the browser routes (viewer page, raw download) are a
plain blueprint.
"""

from flask import Blueprint
from flask_restx import Api

from .errors import register_api_error_handlers, register_error_handlers
from .viewer import viewer_bp

api_bp = Blueprint("api", __name__)

api = Api(
    api_bp,
    version="1.0",
    title="gridbin API",
    description="Anonymous file hosting on MongoDB GridFS",
    doc="/docs",
)

# Import namespaces after api is created to avoid circular imports
from .namespaces import files_ns  # noqa: E402

api.add_namespace(files_ns)
register_api_error_handlers(api)

__all__ = ["api", "api_bp", "register_error_handlers", "viewer_bp"]
