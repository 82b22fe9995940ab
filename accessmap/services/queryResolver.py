"""
Search Query Resolver
=====================

Turns a raw search string into a uniform list of ``SearchResult``
candidates and turns a picked candidate into a ``Coordinate``.

Flow::

    query --classify--> three-word | postcode | place
          --dispatch--> collaborator.suggest / lookup
          --wrap------> ThreeWordResult | PostalCodeResult | PlaceResult

Failure policy: every collaborator call is wrapped so that a
``ResolutionFailure`` degrades to "no results" for that source (listing)
or "no selection made" (selection).  Nothing raised by a collaborator
propagates past this module.

Staleness: ``SearchSession`` drives debounced, last-write-wins searches.
Each call to ``search()`` gets a new generation and cancels the previous
``CancellationToken``.  Cancellation is soft: an in-flight HTTP request
is not aborted, its results are simply never published.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Protocol, Sequence

from accessmap.core.config import Settings
from accessmap.integrations.httpClient import ResolutionFailure
from accessmap.models import (
    Coordinate,
    PlaceResult,
    PostalCodeResult,
    SearchResult,
    ThreeWordResult,
)
from accessmap.services.queryClassifier import QueryKind, classify

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: float = 0.3


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class ThreeWordResolver(Protocol):
    async def suggest(self, prefix: str) -> list[dict[str, str]]: ...

    async def resolve(self, words: str) -> Coordinate | None: ...


class PostalCodeResolver(Protocol):
    async def lookup(self, code: str) -> Coordinate | None: ...


class PlacesResolver(Protocol):
    async def suggest(self, text: str, region: str) -> list[dict[str, str]]: ...

    async def resolve_coordinate(self, place_ref: str) -> Coordinate | None: ...


class Recenterable(Protocol):
    async def recenter(self, coordinate: Coordinate) -> None: ...


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class CancellationToken:
    """Marks one search generation; cancelled once a newer one starts."""

    def __init__(self, generation: int = 0) -> None:
        self.generation = generation
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class QueryResolver:
    """Classifies queries and dispatches them to the matching collaborator."""

    def __init__(
        self,
        three_words: ThreeWordResolver,
        postcodes: PostalCodeResolver,
        places: PlacesResolver,
        region: str = "gb",
    ) -> None:
        self._three_words = three_words
        self._postcodes = postcodes
        self._places = places
        self._region = region

    async def resolve(
        self,
        query: str,
        token: CancellationToken | None = None,
    ) -> AsyncIterator[SearchResult]:
        """Yield search candidates for ``query``.

        Empty or whitespace-only queries yield nothing and make no external
        call.  Iteration stops early once ``token`` is cancelled.
        """
        trimmed = query.strip()
        if not trimmed or (token is not None and token.cancelled):
            return

        kind = classify(trimmed)
        logger.debug("Query '%s' classified as %s", trimmed, kind.value)
        results = await self._dispatch(kind, trimmed)

        for result in results:
            if token is not None and token.cancelled:
                logger.debug(
                    "Dropping remaining results for superseded generation %d",
                    token.generation,
                )
                return
            yield result

    async def _dispatch(self, kind: QueryKind, query: str) -> Sequence[SearchResult]:
        try:
            if kind is QueryKind.THREE_WORD:
                suggestions = await self._three_words.suggest(query)
                return [
                    ThreeWordResult(words=s["words"], display_label=s["display_label"])
                    for s in suggestions
                ]

            if kind is QueryKind.POSTAL_CODE:
                coordinate = await self._postcodes.lookup(query)
                if coordinate is None:
                    return []
                return [
                    PostalCodeResult(
                        coordinate=coordinate,
                        display_label=f"{query} (Postcode)",
                    )
                ]

            predictions = await self._places.suggest(query, self._region)
            return [
                PlaceResult(place_ref=p["place_ref"], display_label=p["display_label"])
                for p in predictions
            ]
        except (ResolutionFailure, KeyError, ValueError) as exc:
            logger.warning("%s lookup failed for '%s': %s", kind.value, query, exc)
            return []

    async def resolve_selection(self, result: SearchResult) -> Coordinate | None:
        """Resolve a picked candidate to a coordinate.

        Postcode results already carry one.  Three-word and place results
        need a second lookup; if it fails or finds nothing, None is returned
        and the caller must treat the selection as not made.
        """
        if isinstance(result, PostalCodeResult):
            return result.coordinate

        try:
            if isinstance(result, ThreeWordResult):
                return await self._three_words.resolve(result.words)
            if isinstance(result, PlaceResult):
                return await self._places.resolve_coordinate(result.place_ref)
        except ResolutionFailure as exc:
            logger.warning("Could not resolve selection '%s': %s", result.display_label, exc)
            return None

        raise TypeError(f"Unsupported search result type: {type(result).__name__}")


# ---------------------------------------------------------------------------
# Debounced search session
# ---------------------------------------------------------------------------


class SearchSession:
    """Debounced, last-write-wins search over a ``QueryResolver``.

    One session per search box.  ``results`` always holds the output of the
    most recent query whose resolution completed without being superseded.
    """

    def __init__(
        self,
        resolver: QueryResolver,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._resolver = resolver
        self.debounce_seconds = debounce_seconds
        self._generation = 0
        self._token: CancellationToken | None = None
        self.results: list[SearchResult] = []
        self.published_generation = 0

    @classmethod
    def from_settings(cls, resolver: QueryResolver, settings: Settings) -> SearchSession:
        return cls(resolver, debounce_seconds=settings.search_debounce_seconds)

    @property
    def generation(self) -> int:
        return self._generation

    def _start_generation(self) -> CancellationToken:
        if self._token is not None:
            self._token.cancel()
        self._generation += 1
        self._token = CancellationToken(self._generation)
        return self._token

    def is_current(self, token: CancellationToken) -> bool:
        return not token.cancelled and token.generation == self._generation

    def _publish(self, token: CancellationToken, results: list[SearchResult]) -> bool:
        if not self.is_current(token):
            logger.debug(
                "Discarding stale results for generation %d (current %d)",
                token.generation,
                self._generation,
            )
            return False
        self.results = results
        self.published_generation = token.generation
        return True

    async def search(self, query: str) -> list[SearchResult] | None:
        """Run a debounced search.

        Returns:
            The published results, or None when a newer query superseded
            this one (during the quiescence window or while resolving).
        """
        token = self._start_generation()

        if not query.strip():
            self._publish(token, [])
            return []

        if self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
        if not self.is_current(token):
            return None

        results = [result async for result in self._resolver.resolve(query, token)]
        if not self._publish(token, results):
            return None
        return results

    def cancel(self) -> None:
        """Abandon any pending search (e.g. when the search box unmounts)."""
        if self._token is not None:
            self._token.cancel()

    async def select(
        self,
        result: SearchResult,
        map_surface: Recenterable,
    ) -> Coordinate | None:
        """Resolve a picked candidate and recenter the map on it.

        The result list is cleared once a selection has been made.  On
        failure the map is left untouched and None is returned.
        """
        self.cancel()
        coordinate = await self._resolver.resolve_selection(result)
        if coordinate is None:
            logger.info("Selection '%s' could not be resolved; ignoring", result.display_label)
            return None

        await map_surface.recenter(coordinate)
        self.results = []
        return coordinate
