"""
In-memory index of image types and their linked image profiles.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from imgvariant.models import ImageProfileSpec, ImageTypeProfileLink, ImageTypeSpec

logger = logging.getLogger(__name__)

IndexRecords = Tuple[
    Iterable[ImageTypeSpec], Iterable[ImageProfileSpec], Iterable[ImageTypeProfileLink]
]


class VariantIndex:
    """
    Read-only snapshot mapping image types to linked image profiles.

    Profiles linked to a type keep the order in which their links were
    given; profile selection relies on that order for tie-breaks.
    """

    def __init__(
        self,
        types_by_id: Dict[str, ImageTypeSpec],
        profiles_by_id: Dict[str, ImageProfileSpec],
        profiles_by_name: Dict[str, List[ImageProfileSpec]],
    ):
        self.types_by_id = types_by_id
        self.profiles_by_id = profiles_by_id
        self.profiles_by_name = profiles_by_name

    @classmethod
    def build(
        cls,
        types: Iterable[ImageTypeSpec],
        profiles: Iterable[ImageProfileSpec],
        links: Iterable[ImageTypeProfileLink],
    ) -> "VariantIndex":
        """
        Build an index from raw type, profile and link records.

        Input records are copied, never mutated. Links whose type or
        profile is unknown are logged and skipped.
        """
        types_by_id = {
            image_type.id: replace(image_type, profiles={}) for image_type in types
        }

        profiles_by_id: Dict[str, ImageProfileSpec] = {}
        profiles_by_name: Dict[str, List[ImageProfileSpec]] = {}
        for profile in profiles:
            profile = replace(profile, has_webp=False)
            profiles_by_id[profile.id] = profile
            profiles_by_name.setdefault(profile.image_profile_name, []).append(profile)

        # Mark profiles that have a webp sibling under the same name
        for name, group in profiles_by_name.items():
            if len(group) < 2:
                continue
            if not any(profile.file_type == "webp" for profile in group):
                continue
            for i, profile in enumerate(group):
                if profile.file_type != "webp":
                    marked = replace(profile, has_webp=True)
                    group[i] = marked
                    profiles_by_id[marked.id] = marked

        for link in links:
            image_type = types_by_id.get(link.image_type_id)
            profile = profiles_by_id.get(link.image_profile_id)
            if image_type is None or profile is None:
                logger.debug(
                    f"Skipping link {link.image_type_id} -> {link.image_profile_id}: "
                    f"{'image type' if image_type is None else 'image profile'} not found"
                )
                continue
            image_type.profiles[profile.id] = profile

        return cls(types_by_id, profiles_by_id, profiles_by_name)

    @classmethod
    def empty(cls) -> "VariantIndex":
        return cls({}, {}, {})

    def get_type_by_id(self, image_type_id: Optional[str]) -> Optional[ImageTypeSpec]:
        if image_type_id is None:
            return None
        return self.types_by_id.get(str(image_type_id))

    def get_type_by_name(self, image_type_name: str) -> Optional[ImageTypeSpec]:
        for image_type in self.types_by_id.values():
            if image_type.image_type_name == image_type_name:
                return image_type
        return None

    def find_type(self, key: str) -> Optional[ImageTypeSpec]:
        """Look up an image type by id, falling back to its name."""
        return self.get_type_by_id(key) or self.get_type_by_name(key)

    def list_types(self) -> List[ImageTypeSpec]:
        return list(self.types_by_id.values())

    def list_profiles(self, image_type: ImageTypeSpec) -> List[ImageProfileSpec]:
        return list(image_type.profiles.values())


class VariantIndexProvider:
    """
    Owns the current VariantIndex snapshot and rebuilds it periodically.

    Readers call get() and may receive a snapshot up to refresh_interval
    seconds old. A rebuild swaps in a new index; snapshots already handed
    out are never modified.
    """

    def __init__(
        self,
        loader: Callable[[], IndexRecords],
        refresh_interval: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.loader = loader
        self.refresh_interval = refresh_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._index: Optional[VariantIndex] = None
        self._loaded_at = 0.0

    def get(self) -> VariantIndex:
        index = self._index
        if index is not None and not self._stale():
            return index
        with self._lock:
            if self._index is None:
                self._reload()
            elif self._stale():
                try:
                    self._reload()
                except Exception as e:
                    # Serve the previous snapshot, retry on the next interval
                    logger.error(f"Failed to reload variant index: {e}")
                    self._loaded_at = self._clock()
            return self._index

    def refresh(self) -> VariantIndex:
        """Rebuild the index now."""
        with self._lock:
            self._reload()
            return self._index

    def _stale(self) -> bool:
        return self._clock() - self._loaded_at >= self.refresh_interval

    def _reload(self) -> None:
        types, profiles, links = self.loader()
        index = VariantIndex.build(types, profiles, links)
        logger.info(
            f"Loaded variant index: {len(index.types_by_id)} image types, "
            f"{len(index.profiles_by_id)} image profiles"
        )
        self._index = index
        self._loaded_at = self._clock()
