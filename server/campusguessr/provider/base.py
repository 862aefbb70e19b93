"""Location provider interface (port) for round photos and their ground truth."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from campusguessr.core.models import LocationImage


class ProviderError(Exception):
    """The provider could not hand out a photo."""


class LocationProvider(Protocol):
    """Port: supplies the photo and true location for the next round."""

    async def fetch_next_target(self) -> LocationImage: ...
