"""HTTP service for dumping and restoring databases of a containerized MongoDB."""

__version__ = "0.1.0"
__author__ = "mongo-backup contributors"

from .backup import BackupOrchestrator

__all__ = ["BackupOrchestrator", "__version__"]
