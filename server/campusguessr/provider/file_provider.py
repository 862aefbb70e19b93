"""File-based location provider.

Reads approved photos from a JSON Lines catalog, one photo document per line:

    {"id": "...", "url": "...", "correctLocation": {"x": 35, "y": 45},
     "correctFloor": 2, "description": "..."}

The catalog is re-read on every fetch so newly approved photos show up
without a restart. An empty, missing or unreadable catalog falls back to the
built-in sample photos.
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from campusguessr.provider.sample_provider import SampleLocationProvider, parse_catalog_entry

if TYPE_CHECKING:
    from campusguessr.core.models import LocationImage

log = structlog.get_logger()


class FileLocationProvider:
    """LocationProvider backed by a JSON Lines catalog on disk."""

    def __init__(self, catalog_path: str | Path, rng: random.Random | None = None) -> None:
        self._catalog_path = Path(catalog_path)
        self._rng = rng or random.Random()
        self._samples = SampleLocationProvider(rng=self._rng)

    def read_catalog(self) -> list[LocationImage]:
        """Parse every non-blank line of the catalog. Raises on I/O or JSON errors."""
        if not self._catalog_path.exists():
            return []
        images = []
        with open(self._catalog_path) as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                entry = json.loads(line)
                if not isinstance(entry, dict):
                    raise ValueError(f"catalog line is not an object: {line[:80]}")
                images.append(parse_catalog_entry(entry))
        return images

    async def fetch_next_target(self) -> LocationImage:
        try:
            images = self.read_catalog()
        except (OSError, ValueError):
            log.warning("catalog_unreadable", path=str(self._catalog_path), exc_info=True)
            return self._samples.pick()

        if not images:
            log.info("catalog_empty_using_samples", path=str(self._catalog_path))
            return self._samples.pick()

        image = self._rng.choice(images)
        log.debug("catalog_image_picked", image=image.image_ref, catalog_size=len(images))
        return image
