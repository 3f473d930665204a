"""
app/loaders package marker.
"""

from app.loaders.batch_loader import DEFAULT_CHUNK_SIZE, BatchLoader, iter_chunks

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "BatchLoader",
    "iter_chunks",
]
