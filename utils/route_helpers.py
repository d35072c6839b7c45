"""
Shared route helper utilities.

Reduces boilerplate in routes.py for validation failures and manager calls.
"""
import logging
from typing import Any, Callable, List

from fastapi import HTTPException


def raise_for_issues(issues: List[str]) -> None:
    """
    Turn configuration validation issues into a 400 response.

    Raises:
        HTTPException: If there is at least one issue
    """
    if issues:
        raise HTTPException(status_code=400, detail={"issues": issues})


def manager_operation(func: Callable[..., Any], *args: Any, error_context: str = "operation") -> Any:
    """
    Call a manager method with standard error handling.

    Args:
        func: Manager method to call
        *args: Positional arguments for the call
        error_context: Context string for error logging

    Returns:
        Whatever the manager method returns

    Raises:
        HTTPException: 500 on unexpected errors; HTTPExceptions pass through
    """
    try:
        return func(*args)
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"Failed to {error_context}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
