"""
Ejecucion concurrente de cargas de chunks.
"""
from app.infrastructure.executor.chunk_executor import ChunkDispatcher

__all__ = ["ChunkDispatcher"]
