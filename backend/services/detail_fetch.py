"""
Detail fetch coordination.

Every lookup is tagged with a fetch token taken from a monotonically
increasing counter, and the most recently issued token is the only one
allowed to change the selection. A slow first lookup that completes after a
faster second one is therefore dropped: last request wins, not last
response. Stale lookups are not aborted; their results are simply ignored
when they arrive.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from domain.errors import DetailFetchFailed
from domain.models import Place
from services.place_normalizer import DEFAULT_PHOTO_MAX_WIDTH, normalize
from services.places_client import DETAIL_FIELDS, PlacesService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one lookup. `place` is None on failure and whenever `stale`."""
    token: int
    place: Optional[Place]
    stale: bool


class DetailFetchCoordinator:
    def __init__(
        self,
        service: PlacesService,
        fields: Sequence[str] = DETAIL_FIELDS,
        photo_max_width: int = DEFAULT_PHOTO_MAX_WIDTH,
    ):
        self._service = service
        self._fields = tuple(fields)
        self._photo_max_width = photo_max_width
        self._tokens = itertools.count(1)
        self._current: Optional[int] = None

    @property
    def current_token(self) -> Optional[int]:
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    def begin(self) -> int:
        """Issue a new token and make it current."""
        token = next(self._tokens)
        self._current = token
        return token

    def supersede(self) -> None:
        """Invalidate any in-flight lookup without starting a new one."""
        self._current = None

    async def resolve(self, raw_ref: Any, token: Optional[int] = None) -> Resolution:
        """
        Fetch details for `raw_ref` and normalize them into a Place.

        One attempt only. Failures resolve to `place=None` and never raise.
        """
        if token is None:
            token = self.begin()
        place: Optional[Place] = None
        try:
            detail = await self._service.fetch_details(raw_ref, self._fields)
            place = normalize(
                raw_ref,
                detail,
                photo_url_for=getattr(self._service, "photo_url", None),
                photo_max_width=self._photo_max_width,
            )
        except DetailFetchFailed as exc:
            logger.warning("Detail fetch failed for %r: %s", raw_ref, exc)
        except Exception:
            logger.exception("Unexpected error fetching details for %r", raw_ref)

        if not self.is_current(token):
            logger.debug("Discarding stale result for %r (token=%s current=%s)", raw_ref, token, self._current)
            return Resolution(token=token, place=None, stale=True)
        return Resolution(token=token, place=place, stale=False)
