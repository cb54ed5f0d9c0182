"""Address extraction endpoints: uploaded files and social threads."""

from __future__ import annotations

import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import Field, field_validator

from recon.address.models import CamelModel
from recon.api.deps import get_thread_harvester, read_uploads, require_api_key
from recon.ingest import BatchFileProcessor
from recon.settings import get_settings
from recon.social import ThreadHarvester

logger = logging.getLogger(__name__)

extraction_router = APIRouter(tags=["extraction"], dependencies=[Depends(require_api_key)])

_STATUS_URL_RE = re.compile(r"twitter\.com/.*/status/\d+|x\.com/.*/status/\d+")


class ExtractTweetsRequest(CamelModel):
    """Body of ``POST /extract-tweets``."""

    tweet_url: str = Field(..., min_length=1, description="Link to an X (Twitter) post.")

    @field_validator("tweet_url")
    @classmethod
    def _status_url(cls, v: str) -> str:
        if not _STATUS_URL_RE.search(v):
            raise ValueError("URL must be a valid Twitter/X status URL")
        return v


@extraction_router.post("/extract")
def extract_from_files(files: list[UploadFile] | None = File(None)) -> dict[str, Any]:
    """Extract unique addresses from up to ``extraction.max_files`` uploaded files."""
    documents = read_uploads(files or [], max_files=get_settings().extraction.max_files)
    summary = BatchFileProcessor().process(documents)
    return summary.to_result().to_response()


@extraction_router.post("/extract-tweets")
def extract_from_thread(
    req: ExtractTweetsRequest,
    harvester: ThreadHarvester = Depends(get_thread_harvester),
) -> dict[str, Any]:
    """Extract addresses from a post and its replies."""
    result = harvester.harvest(req.tweet_url)
    return result.to_result().to_response()
