"""Chart metadata (``Chart.yaml``) loading.

Public API::

    from chartlock.core.chart import ChartMetadata, load_chart_metadata
"""

from __future__ import annotations

from chartlock.core.chart.loader import (
    CHART_FILE,
    ChartMetadata,
    load_chart_metadata,
)

__all__ = [
    "CHART_FILE",
    "ChartMetadata",
    "load_chart_metadata",
]
