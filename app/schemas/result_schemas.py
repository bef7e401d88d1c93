from typing import Any, Dict, List, Optional
from fastapi import status
from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """
    Envelope returned by every front desk action.

    ``error`` maps a field path (or ``_errors``) to messages. ``status_code``
    is kept for the HTTP layer and is not serialized.
    """

    success: bool
    data: Optional[Any] = None
    error: Optional[Dict[str, List[str]]] = None
    status_code: int = Field(default=status.HTTP_200_OK, exclude=True)

    @classmethod
    def ok(cls, data: Any = None, status_code: int = status.HTTP_200_OK) -> "ActionResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: Dict[str, List[str]], status_code: int) -> "ActionResult":
        return cls(success=False, error=error, status_code=status_code)
