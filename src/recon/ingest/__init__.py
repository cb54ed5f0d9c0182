"""Document ingestion — text normalization and batch address extraction."""

from recon.ingest.batch import BatchFileProcessor, BatchSummary, FileOutcome
from recon.ingest.normalizer import DocumentFormat, detect_format, normalize

__all__ = [
    "BatchFileProcessor",
    "BatchSummary",
    "DocumentFormat",
    "FileOutcome",
    "detect_format",
    "normalize",
]
