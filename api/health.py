"""
Health check routes.
"""

from __future__ import annotations

import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


def _base() -> Dict[str, Any]:
    return {
        "success": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
    }


@router.get("")
async def health() -> Dict[str, Any]:
    return {**_base(), "message": "Server is healthy"}


@router.get("/detailed")
async def health_detailed() -> Dict[str, Any]:
    return {
        **_base(),
        "message": "Detailed health check",
        "version": sys.version.split()[0],
        "platform": sys.platform,
        "arch": platform.machine(),
    }
