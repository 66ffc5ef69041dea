"""
Chunk domain model for document processing pipeline.

Represents a token-bounded unit of page text, the atomic object that gets
embedded and stored.

Dependencies: pydantic
System role: Data structure handed from chunk assembly to embedding
"""

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """Assembled chunk text with its token count."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Trimmed chunk text")
    token_count: int = Field(ge=0, description="tokenizer.count(text) at assembly time")
