# backend/modules/production/models/__init__.py

from .production_models import ProductionBatch, ProductionBatchStatus

__all__ = ["ProductionBatch", "ProductionBatchStatus"]
