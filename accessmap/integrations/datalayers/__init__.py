"""
Data Layers for Accessibility integration package
==================================================

Typical usage::

    from accessmap.integrations.datalayers import (
        DataLayersClient,
        ReportSubmissionError,
    )
"""

from accessmap.integrations.datalayers.dataLayersService import (
    DataLayerLocation,
    DataLayersClient,
    ReportSubmissionError,
)

__all__ = [
    "DataLayerLocation",
    "DataLayersClient",
    "ReportSubmissionError",
]
