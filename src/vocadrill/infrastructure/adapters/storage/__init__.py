# Infrastructure Storage Adapters Package
from .json_store import JsonFileReviewRepository
from .memory_store import InMemoryReviewRepository

__all__ = ["JsonFileReviewRepository", "InMemoryReviewRepository"]
