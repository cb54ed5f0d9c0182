"""Reconciliation of eligible address sets against minted sets."""

from recon.reconcile.reconciler import ComparisonAudit, ComparisonService, reconcile

__all__ = ["ComparisonAudit", "ComparisonService", "reconcile"]
