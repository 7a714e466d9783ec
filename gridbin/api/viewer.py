"""
Viewer and Raw Download Routes

Browser-facing routes. Errors are plain text rather than JSON.
"""

from flask import Blueprint, Response, current_app, render_template

from gridbin.application.transfer_service import TransferService
from gridbin.domain.errors import DomainError, ErrorCategory

from .errors import text_domain_error, text_error

viewer_bp = Blueprint("viewer", __name__)


@viewer_bp.route("/<short_id>", methods=["GET"])
def view(short_id: str):
    """Render the viewer page for a file, chosen by its kind."""
    service = current_app.container.resolve(TransferService)
    try:
        file_view = service.view(short_id)
    except DomainError as e:
        return text_domain_error(e, f"View of {short_id!r} failed")

    return render_template("viewer.html", **file_view.to_dict())


@viewer_bp.route("/raw/<short_id>", methods=["GET"])
def raw(short_id: str):
    """
    Stream a file's bytes as an attachment.

    The body is produced chunk by chunk from the store; the read handle is
    released when the response is closed, including on client disconnect.
    """
    service = current_app.container.resolve(TransferService)
    try:
        result = service.retrieve_raw(short_id)
    except DomainError as e:
        return text_domain_error(e, f"Raw download of {short_id!r} failed")

    response = Response(
        result.iter_content(),
        status=200,
        content_type=result.content_type,
        headers={
            "Content-Disposition": result.content_disposition,
            "Content-Length": str(result.length),
        },
        direct_passthrough=True,
    )
    response.call_on_close(result.close)
    return response


@viewer_bp.route("/raw/", methods=["GET"])
def raw_without_id():
    return text_error(ErrorCategory.INVALID_REQUEST, message="No file id")
