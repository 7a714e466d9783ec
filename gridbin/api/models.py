"""
API Models for response documentation
"""

from flask_restx import fields

from gridbin.api import api

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "link": fields.String(
            description="Viewer page of the stored file",
            example="https://files.example.com/aB3xY",
        ),
        "deletion_link": fields.String(
            description="Visiting this link deletes the file",
            example="https://files.example.com/delete/Qw9-Zk_12T",
        ),
    },
)

delete_response = api.model(
    "DeleteResponse",
    {"status": fields.String(description="Outcome", example="deleted")},
)

error_response = api.model(
    "ErrorResponse",
    {"error": fields.String(description="User-facing error message", example="File not found")},
)
