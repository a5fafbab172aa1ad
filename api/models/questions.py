"""Question-bank Pydantic models."""
from pydantic import BaseModel, Field


class ImportRequest(BaseModel):
    """Model for importing pasted question text.

    Either ``categoryId`` (append to an existing category) or ``categoryName``
    (create one) must be given.
    """

    text: str = Field(..., min_length=1)
    categoryId: str | None = None
    categoryName: str | None = None
    merge: bool = False
