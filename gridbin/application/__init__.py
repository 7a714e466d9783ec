"""
Application Layer

Orchestrates domain services for the HTTP layer.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .transfer_result import DownloadResult, UploadResult
from .transfer_service import TransferService

__all__ = [
    "DependencyContainer",
    "DependencyNotFoundError",
    "DownloadResult",
    "TransferService",
    "UploadResult",
]
