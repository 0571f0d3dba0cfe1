"""HTTP views for uploading and serving files."""

import logging
from http import HTTPStatus
from typing import Any, Final

from django.core.files.storage import default_storage
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST, require_safe
from django.views.static import serve

from server.apps.uploads.exceptions import IngestError
from server.apps.uploads.infrastructure.upload_handlers import (
    UPLOAD_FIELD_NAME,
    get_upload_rejection,
)
from server.apps.uploads.logic.ingest_operations import ingest
from server.apps.uploads.models import StoredFile, UploadCandidate

_SUCCESS_MESSAGE: Final = 'File uploaded successfully'
_UPLOAD_FAILED_MESSAGE: Final = 'Error uploading file'
_UNEXPECTED_MESSAGE: Final = 'An unexpected error occurred'

logger = logging.getLogger(__name__)


def _serialize_stored_file(
    request: HttpRequest,
    stored_file: StoredFile,
) -> dict[str, Any]:
    """Build the JSON description of a stored file.

    Args:
        request: Current request, used for the absolute URL.
        stored_file: Accepted upload.

    Returns:
        Dictionary with the public fields of the upload.
    """
    return {
        'filename': stored_file.stored_name,
        'originalname': stored_file.original_name,
        'mimetype': stored_file.mime_type,
        'size': stored_file.size_bytes,
        'path': stored_file.path,
        'url': request.build_absolute_uri(stored_file.path),
        'type': stored_file.type_tag,
    }


def _error_response(error: IngestError) -> JsonResponse:
    """Map an ingest error to its JSON response.

    Args:
        error: Rejection or storage failure.

    Returns:
        JsonResponse with the error's status code.
    """
    payload: dict[str, Any] = {'success': False, 'message': str(error)}
    if error.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        payload = {
            'success': False,
            'message': _UPLOAD_FAILED_MESSAGE,
            'error': str(error),
        }
    return JsonResponse(payload, status=error.status_code)


@csrf_exempt
@require_POST
def upload_view(request: HttpRequest) -> JsonResponse:
    """Accept a single file from the ``file`` multipart field.

    Args:
        request: Multipart POST request.

    Returns:
        200 with the stored file, 400 for a missing or disallowed file,
        413 for a file over the size limit, 500 on storage failure.
    """
    try:
        uploaded = request.FILES.get(UPLOAD_FIELD_NAME)
        rejection = get_upload_rejection(request)
        if rejection is not None:
            raise rejection

        candidate = None
        if uploaded is not None:
            candidate = UploadCandidate.from_uploaded_file(uploaded)
        stored_file = ingest(candidate)
    except IngestError as error:
        return _error_response(error)
    except Exception as error:
        logger.exception('Upload error')
        return JsonResponse(
            {
                'success': False,
                'message': _UPLOAD_FAILED_MESSAGE,
                'error': str(error),
            },
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    return JsonResponse({
        'success': True,
        'message': _SUCCESS_MESSAGE,
        'file': _serialize_stored_file(request, stored_file),
    })


@require_safe
def serve_upload_view(request: HttpRequest, stored_name: str) -> HttpResponse:
    """Serve a stored file's raw bytes.

    Directory indexes are never rendered, and names that escape the
    storage root are rejected by Django's static serve.

    Args:
        request: GET or HEAD request.
        stored_name: Name of the stored file.

    Returns:
        FileResponse with the file content, or 404.
    """
    return serve(
        request,
        stored_name,
        document_root=default_storage.location,
        show_indexes=False,
    )


def server_error_view(request: HttpRequest) -> JsonResponse:
    """Answer unhandled exceptions with JSON instead of an HTML page.

    Args:
        request: Request that failed.

    Returns:
        500 JsonResponse.
    """
    return JsonResponse(
        {
            'success': False,
            'message': _UNEXPECTED_MESSAGE,
            'error': 'Internal server error',
        },
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
    )
