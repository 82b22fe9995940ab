"""
Google Places integration package
==================================

Typical usage::

    from accessmap.integrations.places import GooglePlacesClient
"""

from accessmap.integrations.places.googlePlacesService import GooglePlacesClient

__all__ = ["GooglePlacesClient"]
