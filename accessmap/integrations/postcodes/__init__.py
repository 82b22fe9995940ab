"""
postcodes.io integration package
=================================

Typical usage::

    from accessmap.integrations.postcodes import PostcodesClient
"""

from accessmap.integrations.postcodes.postcodesService import PostcodesClient

__all__ = ["PostcodesClient"]
