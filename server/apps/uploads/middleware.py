"""Request logging middleware."""

import logging
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Log method, path and status of every request."""

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize middleware.

        Args:
            get_response: Next handler in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Log the request after the response is produced.

        Args:
            request: Incoming request.

        Returns:
            Response from the rest of the chain.
        """
        response = self.get_response(request)
        logger.info(
            '%s %s -> %d',
            request.method,
            request.path,
            response.status_code,
        )
        return response
