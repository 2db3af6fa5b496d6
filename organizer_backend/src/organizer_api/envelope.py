from __future__ import annotations

from typing import Any, Dict, Optional


# PUBLIC_INTERFACE
def success_envelope(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Wrap a successful result.

    Response format:
        {"success": true, "data": ..., "message": "..."}
    """
    body: Dict[str, Any] = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    return body


# PUBLIC_INTERFACE
def error_envelope(error: str, message: Optional[str] = None, details: Any = None) -> Dict[str, Any]:
    """
    Wrap a failure.

    Response format:
        {"success": false, "error": "...", "message": "...", "details": [...]}
    """
    body: Dict[str, Any] = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    if details is not None:
        body["details"] = details
    return body
