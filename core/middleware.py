from __future__ import annotations

import logging
import time
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - started) * 1000
        view_name = None
        if getattr(request, "resolver_match", None):
            view_name = request.resolver_match.view_name
        logger.info(
            "%s %s -> %s (%.1fms) view=%s",
            request.method,
            request.path,
            response.status_code,
            duration_ms,
            view_name,
        )
        return response
