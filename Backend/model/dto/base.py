from typing import Any
from pydantic import BaseModel


class BaseResponseDTO(BaseModel):
    """Envelope shared by every HTTP response."""

    data: Any | None = None
    errors: list[Any] | None = None
    message: str
