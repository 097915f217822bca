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
"""Blacken -- Format and Health Routes."""

import dataclasses

from fastapi import APIRouter, Depends, HTTPException

from blacken import __version__
from blacken.api._shared import (
    EscapedJSONResponse,
    FormatRequest,
    FormatResponse,
    _get_blacken_log,
    get_settings,
)
from blacken.core.config import FormatterSettings
from blacken.core.editing import (
    DiagnosticsView,
    Failed,
    TextBuffer,
    format_buffer,
    format_region,
)

router = APIRouter()


@router.get("/api/health")
def health(settings: FormatterSettings = Depends(get_settings)):
    """Liveness plus the executable requests will use."""
    return {"status": "ok", "version": __version__, "executable": settings.executable}


# Sync handler: FastAPI runs it in the threadpool, so the blocking
# formatter call never stalls the event loop.
@router.post("/api/format", response_model=FormatResponse, response_class=EscapedJSONResponse)
def format_text(request: FormatRequest, settings: FormatterSettings = Depends(get_settings)):
    """Format ``text`` (or a region of it) and return the new text and cursor."""
    if request.line_length is not None:
        settings = dataclasses.replace(settings, line_length=request.line_length)

    buffer = TextBuffer(request.text, point=request.point, window_start=request.window_start)
    diagnostics = DiagnosticsView()

    if request.region is not None:
        start, end = request.region.start, request.region.end
        if end < start or end > len(buffer):
            raise HTTPException(status_code=400, detail="Invalid region")
        outcome = format_region(
            buffer, start, end, settings, display_errors=request.display_errors, diagnostics=diagnostics
        )
    else:
        outcome = format_buffer(buffer, settings, display_errors=request.display_errors, diagnostics=diagnostics)

    result = outcome.result
    log = _get_blacken_log()
    if log:
        log.format_run(
            "api",
            status=outcome.status.value,
            exit_status=result.exit_status if result else None,
            duration=result.duration_seconds if result else 0.0,
        )

    cursor = buffer.cursor()
    return FormatResponse(
        status=outcome.status.value,
        text=buffer.text(),
        point=cursor.point,
        window_start=cursor.window_start,
        message=outcome.message,
        diagnostic=diagnostics.text if isinstance(outcome, Failed) and diagnostics.visible else None,
        exit_status=result.exit_status if result else None,
    )
