"""
Reconciliation package for Compose API operations.

Compose applies whitelist writes asynchronously. The strategies here wait
for the read endpoints to converge with a write before it is reported as done.
"""

from api.reconciliation.whitelist_reconciliation_strategy import (
    WhitelistReconciliationStrategy,
)

__all__ = ["WhitelistReconciliationStrategy"]
