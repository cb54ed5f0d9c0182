"""Named, persistent address collections."""

from recon.collection.service import (
    AddAddressesReport,
    CollectionDetail,
    CollectionService,
    CollectionSummary,
    UploadReport,
)

__all__ = [
    "AddAddressesReport",
    "CollectionDetail",
    "CollectionService",
    "CollectionSummary",
    "UploadReport",
]
