from attribution_service.services.attribution.engine import (
    AttributionEngine,
    AttributionResult,
)
from attribution_service.services.attribution.roi import compute_product_roi
from attribution_service.services.attribution.windows import AttributionWindow

__all__ = [
    "AttributionEngine",
    "AttributionResult",
    "AttributionWindow",
    "compute_product_roi",
]
