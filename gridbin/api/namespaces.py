"""
API Namespaces

Upload and delete. Both answer JSON, including on failure.
"""

import os
from typing import Optional

from flask import current_app, request
from flask_restx import Namespace, Resource
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from gridbin.application.transfer_service import TransferService
from gridbin.domain.errors import (
    DomainError,
    ErrorCategory,
    InvalidUploadError,
    create_error_response,
)

from .errors import domain_error_response
from .models import delete_response, error_response, upload_response

files_ns = Namespace("files", description="Upload and delete files", path="/")

UPLOAD_FIELD = "file"

upload_parser = files_ns.parser()
upload_parser.add_argument(
    UPLOAD_FIELD, location="files", type=FileStorage, required=True, help="File to store"
)


def _declared_size(upload: FileStorage) -> Optional[int]:
    """Size of the spooled upload part, or None if its stream cannot seek."""
    stream = upload.stream
    try:
        position = stream.tell()
        size = stream.seek(0, os.SEEK_END)
        stream.seek(position)
    except (OSError, ValueError, AttributeError):
        return None
    return size


def _upload_part() -> Optional[FileStorage]:
    """
    The ``file`` part of the request, or None when absent or unnamed.

    Raises:
        InvalidUploadError: If the multipart body cannot be parsed
    """
    try:
        upload_part = request.files.get(UPLOAD_FIELD)
    except BadRequest as e:
        raise InvalidUploadError(f"Malformed upload body: {e.description}", e) from e
    if upload_part is None or not upload_part.filename:
        return None
    return upload_part


@files_ns.route("/upload")
class Upload(Resource):
    @files_ns.doc("upload_file")
    @files_ns.expect(upload_parser)
    @files_ns.response(200, "Success", upload_response)
    @files_ns.response(400, "Bad Request", error_response)
    @files_ns.response(500, "Store failure", error_response)
    def post(self):
        """
        Store the multipart field ``file`` and return its links.

        A part without a filename counts as missing.
        """
        try:
            upload_part = _upload_part()
        except InvalidUploadError as e:
            return domain_error_response(e, "Upload rejected")

        if upload_part is None:
            current_app.logger.info("Upload rejected: multipart field 'file' missing")
            return create_error_response(ErrorCategory.MISSING_FILE)

        service = current_app.container.resolve(TransferService)
        try:
            result = service.ingest(
                upload_part.stream,
                _declared_size(upload_part),
                upload_part.filename,
                upload_part.content_type,
            )
        except DomainError as e:
            return domain_error_response(e, "Upload failed")
        except Exception as e:
            current_app.logger.exception(f"Unexpected error in /upload: {e}")
            return create_error_response(ErrorCategory.SYSTEM_ERROR, str(e))
        finally:
            upload_part.close()

        return result.to_dict(), 200

    @files_ns.response(405, "Method Not Allowed", error_response)
    def get(self):
        """Uploads are POST only."""
        # Without this method GET /upload would fall through to the viewer route.
        body, status_code = create_error_response(ErrorCategory.METHOD_NOT_ALLOWED)
        return body, status_code, {"Allow": "POST"}


@files_ns.route("/delete/<string:delete_token>")
@files_ns.param("delete_token", "Token from the deletion link")
class Delete(Resource):
    def _revoke(self, delete_token: str):
        service = current_app.container.resolve(TransferService)
        try:
            service.revoke(delete_token)
        except DomainError as e:
            return domain_error_response(e, "Delete failed")
        except Exception as e:
            current_app.logger.exception(f"Unexpected error in /delete: {e}")
            return create_error_response(ErrorCategory.SYSTEM_ERROR, str(e))

        return {"status": "deleted"}, 200

    @files_ns.doc("delete_file")
    @files_ns.response(200, "Deleted", delete_response)
    @files_ns.response(404, "No file owns this token", error_response)
    def get(self, delete_token):
        """Delete the file owning delete_token; a used token is not found."""
        return self._revoke(delete_token)

    @files_ns.doc("delete_file_post")
    @files_ns.response(200, "Deleted", delete_response)
    @files_ns.response(404, "No file owns this token", error_response)
    def post(self, delete_token):
        """Same as GET."""
        return self._revoke(delete_token)


@files_ns.route("/delete/")
class DeleteWithoutToken(Resource):
    @files_ns.response(400, "Bad Request", error_response)
    def get(self):
        return create_error_response(ErrorCategory.INVALID_REQUEST, message="No delete token")

    @files_ns.response(400, "Bad Request", error_response)
    def post(self):
        return create_error_response(ErrorCategory.INVALID_REQUEST, message="No delete token")
