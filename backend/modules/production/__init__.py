# backend/modules/production/__init__.py
"""Production batch records referenced by the quality modules."""

from .models import ProductionBatch, ProductionBatchStatus

__all__ = ["ProductionBatch", "ProductionBatchStatus"]
