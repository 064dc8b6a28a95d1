"""
Request middleware: request ids, size and header checks, and access logging.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from homelyhub.services.error_handler import ErrorHandlerService
from homelyhub.utils.exceptions import (
    APIException,
    PayloadTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_QUERY_VALUE_LENGTH = 1000


class ValidationMiddleware(BaseHTTPMiddleware):
    """
    Assigns every request an id (echoed in ``X-Request-ID`` and in error bodies),
    rejects oversized or malformed requests before routing and logs each exchange.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_request_size: int = 12 * 1024 * 1024,
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.max_request_size = max_request_size
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()

        try:
            self._validate_request_size(request)
            self._validate_headers(request)
            self._validate_query_parameters(request)
        except APIException as exc:
            response = ErrorHandlerService.handle_api_exception(exc, request)
            response.headers["X-Request-ID"] = request_id
            return response

        if self.enable_request_logging:
            self._log_request(request, request_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        if self.enable_request_logging:
            self._log_response(request, response, request_id, time.time() - start_time)

        response.headers["X-Request-ID"] = request_id
        return response

    def _validate_request_size(self, request: Request) -> None:
        """
        Validate request content length.

        Raises:
            ValidationError: If the header is not a number
            PayloadTooLargeError: If the declared size exceeds the limit
        """
        content_length = request.headers.get("content-length")
        if not content_length:
            return

        try:
            size = int(content_length)
        except ValueError:
            raise ValidationError("Invalid content-length header")

        if size > self.max_request_size:
            raise PayloadTooLargeError(size, self.max_request_size)

    def _validate_headers(self, request: Request) -> None:
        """API write requests must carry JSON, form or multipart bodies."""
        if request.method not in ("POST", "PUT", "PATCH"):
            return

        content_type = request.headers.get("content-type", "")
        if not content_type or not request.url.path.startswith("/api/"):
            return

        accepted = ("application/json", "multipart/form-data", "application/x-www-form-urlencoded")
        if not content_type.startswith(accepted):
            raise ValidationError(
                f"Unsupported content type '{content_type}'. Expected 'application/json'"
            )

    def _validate_query_parameters(self, request: Request) -> None:
        for key, value in request.query_params.multi_items():
            if len(value) > MAX_QUERY_VALUE_LENGTH:
                raise ValidationError(f"Query parameter '{key}' exceeds maximum length")

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    def _log_request(self, request: Request, request_id: str) -> None:
        logger.info(
            f"Request [{request_id}]: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": self._get_client_ip(request),
                "user_agent": request.headers.get("user-agent", "unknown")
            }
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        processing_time: float
    ) -> None:
        logger.info(
            f"Response [{request_id}]: {request.method} {request.url.path} "
            f"{response.status_code} - {processing_time:.3f}s",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "processing_time": processing_time,
                "path": request.url.path,
                "method": request.method
            }
        )
