"""
what3words integration package
===============================

Typical usage::

    from accessmap.integrations.what3words import What3WordsClient
"""

from accessmap.integrations.what3words.what3wordsService import What3WordsClient

__all__ = ["What3WordsClient"]
