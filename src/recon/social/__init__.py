"""Social thread ingestion."""

from recon.social.thread_harvester import HarvestResult, ThreadHarvester, parse_post_id

__all__ = ["HarvestResult", "ThreadHarvester", "parse_post_id"]
