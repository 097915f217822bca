# Blacken
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Blacken.
#
# Blacken is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
Blacken -- HTTP API

Lets editors without a subprocess API format buffers over HTTP.

Run with: uvicorn blacken.api.server:app --port 8765
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from blacken import __version__
from blacken.api._shared import _get_blacken_log
from blacken.api.routes.format import router as format_router

app = FastAPI(
    title="Blacken API",
    description="Format buffers with an external formatter",
    version=__version__,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, and latency."""
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        latency_ms = int((time.time() - start) * 1000)
        log = _get_blacken_log()
        if log:
            path = request.url.path
            if path not in ("/api/health",):
                log.http_request(
                    method=request.method,
                    path=path,
                    status=response.status_code,
                    latency_ms=latency_ms,
                )
        return response


app.add_middleware(RequestLoggingMiddleware)
app.include_router(format_router)
