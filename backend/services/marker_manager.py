"""
Marker lifecycle management.

Keeps exactly one live marker handle per visible entity. The arena is a
dict keyed by entity id (the place id for selected and saved places), and
create / move / remove are the only operations performed on the surface.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional

from domain.models import LatLng
from services.map_surface import MapSurface, MarkerHandle

logger = logging.getLogger(__name__)

KIND_SELECTED = "selected"
KIND_SAVED = "saved"
KIND_MY_LOCATION = "my_location"

# Place ids never start with "@".
MY_LOCATION_KEY = "@my-location"


@dataclass(frozen=True)
class MarkerSpec:
    position: LatLng
    kind: str
    clickable: bool = True


class MarkerManager:
    def __init__(self, surface: MapSurface):
        self._surface = surface
        self._handles: Dict[str, MarkerHandle] = {}
        self._specs: Dict[str, MarkerSpec] = {}

    @property
    def surface(self) -> MapSurface:
        return self._surface

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: object) -> bool:
        return key in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def handle_for(self, key: str) -> Optional[MarkerHandle]:
        return self._handles.get(key)

    def show(
        self,
        key: str,
        position: Optional[LatLng],
        kind: str,
        *,
        clickable: bool = True,
    ) -> Optional[MarkerHandle]:
        """
        Create or update the marker for `key`.

        A missing position means the entity cannot be drawn, so any existing
        marker for it is removed and no handle is created.
        """
        if position is None:
            self.remove(key)
            return None
        handle = self._handles.get(key)
        if handle is not None and (handle.owner_id is not None) != clickable:
            # Ownership is fixed at creation; a clickability change needs a new handle.
            self.remove(key)
            handle = None
        if handle is None:
            handle = self._surface.create_marker(
                position, owner_id=key if clickable else None, kind=kind
            )
            self._handles[key] = handle
            logger.debug("Marker created key=%s handle=%s", key, handle.handle_id)
        else:
            if handle.position != position:
                self._surface.move_marker(handle, position)
            if handle.kind != kind:
                self._surface.restyle_marker(handle, kind)
        self._specs[key] = MarkerSpec(position=position, kind=kind, clickable=clickable)
        return handle

    def remove(self, key: str) -> bool:
        self._specs.pop(key, None)
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        self._surface.remove_marker(handle)
        logger.debug("Marker removed key=%s handle=%s", key, handle.handle_id)
        return True

    def reconcile(self, desired: Mapping[str, MarkerSpec]) -> None:
        """Make the arena hold exactly the entities in `desired`."""
        for key in list(self._handles):
            if key not in desired:
                self.remove(key)
        for key, spec in desired.items():
            self.show(key, spec.position, spec.kind, clickable=spec.clickable)

    def replace_surface(self, surface: MapSurface) -> None:
        """
        Switch to a new surface (e.g. after a remount).

        Handles on the old surface are invalid and are not touched; every
        entity gets a fresh handle on the new surface.
        """
        specs = dict(self._specs)
        self._handles.clear()
        self._surface = surface
        for key, spec in specs.items():
            self._handles[key] = surface.create_marker(
                spec.position, owner_id=key if spec.clickable else None, kind=spec.kind
            )
        logger.debug("Recreated %d markers on surface %s", len(specs), surface.surface_id)

    def owner_of(self, handle_id: str) -> Optional[str]:
        """Resolve a clicked handle back to the id of the entity that owns it."""
        for handle in self._handles.values():
            if handle.handle_id == handle_id:
                return handle.owner_id
        return None

    def teardown(self) -> None:
        for key in list(self._handles):
            self.remove(key)
