"""Configuration for chunking."""

from pydantic import BaseModel, Field, model_validator


class ChunkingConfig(BaseModel):
    """Sliding-window chunking parameters.

    ``boundary_lookahead`` bounds how far past ``chunk_size`` a window may
    grow while looking for whitespace to end on.
    """

    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    max_chunks: int = Field(default=20, ge=1)
    boundary_lookahead: int = Field(default=100, ge=0)

    @model_validator(mode="after")
    def _check_overlap(self) -> "ChunkingConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
