"""
Image asset cache with graceful fallback.

Screens ask for an image by name and size. A missing or unreadable image
yields None and the caller draws its fallback (a colored box or a simple
vector icon) instead.
"""

from pathlib import Path
from typing import Dict, Optional, Set, Tuple, Union

import pygame

from ..core.exceptions import AssetLoadingError, handle_error
from ..core.logging import get_logger


class AssetCache:
    """Loads, scales and caches images from a directory."""

    def __init__(self, assets_dir: Union[str, Path]):
        self.assets_dir = Path(assets_dir)
        self.logger = get_logger("ui.assets")
        self._originals: Dict[str, pygame.Surface] = {}
        self._scaled: Dict[Tuple[str, int, int], pygame.Surface] = {}
        self._missing: Set[str] = set()

    def get(self, name: str, size: Optional[Tuple[int, int]] = None) -> Optional[pygame.Surface]:
        """
        Get an image, scaled to ``size`` if given.

        Args:
            name: File name relative to the assets directory
            size: Target (width, height) in pixels

        Returns:
            The image surface, or None if it cannot be loaded
        """
        original = self._load(name)
        if original is None or size is None:
            return original

        width, height = max(1, int(size[0])), max(1, int(size[1]))
        key = (name, width, height)
        if key not in self._scaled:
            self._scaled[key] = pygame.transform.smoothscale(original, (width, height))
        return self._scaled[key]

    def has(self, name: str) -> bool:
        return self._load(name) is not None

    def clear(self) -> None:
        self._originals.clear()
        self._scaled.clear()
        self._missing.clear()

    def _load(self, name: str) -> Optional[pygame.Surface]:
        if name in self._originals:
            return self._originals[name]
        if name in self._missing:
            return None

        path = self.assets_dir / name
        if not path.is_file():
            self.logger.debug("Image not found, using fallback", extra={"path": str(path)})
            self._missing.add(name)
            return None

        try:
            image = pygame.image.load(str(path))
            # convert_alpha needs a display mode
            if pygame.display.get_surface() is not None:
                image = image.convert_alpha()
        except (pygame.error, OSError) as e:
            self._missing.add(name)
            handle_error(AssetLoadingError(name, cause=e, context={"path": str(path)}))
            return None

        self._originals[name] = image
        return image
