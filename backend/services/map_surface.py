"""
Map rendering surface.

The browser draws the map; the backend keeps the marker layer. A surface
hands out opaque `MarkerHandle`s and the front end renders the markers
the session reports. Only the MarkerManager should call the mutating
methods.
"""
import uuid
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from domain.models import LatLng


@dataclass
class MarkerHandle:
    handle_id: str
    surface_id: str
    position: LatLng
    owner_id: Optional[str]  # None for markers that are not clickable places
    kind: str
    released: bool = False


class MapSurface(Protocol):
    surface_id: str

    def create_marker(self, position: LatLng, *, owner_id: Optional[str], kind: str) -> MarkerHandle:
        ...

    def move_marker(self, handle: MarkerHandle, position: LatLng) -> None:
        ...

    def restyle_marker(self, handle: MarkerHandle, kind: str) -> None:
        ...

    def remove_marker(self, handle: MarkerHandle) -> None:
        ...


class InMemoryMapSurface:
    """Marker layer held in process memory."""

    def __init__(self) -> None:
        self.surface_id = uuid.uuid4().hex
        self._handles: Dict[str, MarkerHandle] = {}

    def _require_live(self, handle: MarkerHandle) -> None:
        if handle.surface_id != self.surface_id or self._handles.get(handle.handle_id) is not handle:
            raise ValueError(f"Marker handle {handle.handle_id} does not belong to this surface")

    def create_marker(self, position: LatLng, *, owner_id: Optional[str], kind: str) -> MarkerHandle:
        handle = MarkerHandle(
            handle_id=uuid.uuid4().hex,
            surface_id=self.surface_id,
            position=position,
            owner_id=owner_id,
            kind=kind,
        )
        self._handles[handle.handle_id] = handle
        return handle

    def move_marker(self, handle: MarkerHandle, position: LatLng) -> None:
        self._require_live(handle)
        handle.position = position

    def restyle_marker(self, handle: MarkerHandle, kind: str) -> None:
        self._require_live(handle)
        handle.kind = kind

    def remove_marker(self, handle: MarkerHandle) -> None:
        self._require_live(handle)
        del self._handles[handle.handle_id]
        handle.released = True

    def get(self, handle_id: str) -> Optional[MarkerHandle]:
        return self._handles.get(handle_id)

    def __len__(self) -> int:
        return len(self._handles)

    def destroy(self) -> None:
        """Tear the surface down; every handle on it becomes invalid."""
        for handle in self._handles.values():
            handle.released = True
        self._handles.clear()
