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
Blacken -- Shared API Utilities

Pydantic models and settings access shared across route modules.
"""

import json
import logging
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from blacken.core.config import FormatterSettings, load_formatter_settings

logger = logging.getLogger("blacken.api.server")


# =============================================================================
# RUN LOGGER
# =============================================================================

def _get_blacken_log():
    """Lazy-init the BlackenLogger; None if the log directory is unusable."""
    try:
        from blacken.core.logging import get_logger
        return get_logger()
    except OSError as e:
        logger.warning("Run log unavailable: %s", e)
        return None


# =============================================================================
# SETTINGS
# =============================================================================

def get_settings() -> FormatterSettings:
    """Settings for one request; re-read so edits apply without a restart."""
    return load_formatter_settings()


# =============================================================================
# MODELS
# =============================================================================

class Region(BaseModel):
    start: int = Field(ge=0)
    end: int = Field(ge=0)


class FormatRequest(BaseModel):
    text: str
    point: int = 0
    window_start: int = 0
    region: Optional[Region] = None
    line_length: Optional[int] = Field(default=None, gt=0)
    display_errors: bool = False


class FormatResponse(BaseModel):
    status: str
    text: str
    point: int
    window_start: int
    message: str
    diagnostic: Optional[str] = None
    exit_status: Optional[int] = None


class EscapedJSONResponse(JSONResponse):
    """JSON body with every non-ASCII character escaped.

    Buffer text may hold lone surrogates that cannot be encoded as UTF-8;
    ``\\uXXXX`` escapes carry them back to the client unchanged.
    """

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=True, allow_nan=False, separators=(",", ":")).encode("ascii")
