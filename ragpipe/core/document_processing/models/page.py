"""
Page model: one page (or pseudo-page) of extracted text.

Dependencies: pydantic
System role: Unit of work for the ingestion loop
"""

from pydantic import BaseModel, Field


class Page(BaseModel):
    """Extracted text of a single 1-based page."""

    number: int = Field(ge=1, description="1-based page index (synthetic for windowed text)")
    text: str = Field(default="", description="Raw extracted text")

    @property
    def is_empty(self) -> bool:
        return not self.text or not self.text.strip()
