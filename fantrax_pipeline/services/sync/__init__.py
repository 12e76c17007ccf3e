"""Writes scraped batches into the store."""

from fantrax_pipeline.services.sync.coordinator import BatchResult, ReconciliationCoordinator
from fantrax_pipeline.services.sync.identity_resolver import IdentityResolver

__all__ = ["BatchResult", "ReconciliationCoordinator", "IdentityResolver"]
