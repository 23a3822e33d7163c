"""
Naming for stored images and their variants.
Builds storage keys and public src strings of the form
[{host}/][{path}/]{fileName}-{imageId}[-{profileName}].{fileType}
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Union

from imgvariant.errors import ConfigurationError

_EXTENSION_RE = re.compile(r"\.\w{3,4}$")
_CHUNK_RE = re.compile(r"[^\W_]+")


def split_words(value: str) -> List[str]:
    """
    Split a name into words at non-alphanumeric characters and case changes.

    "holidayPicture2018" gives ["holiday", "Picture2018"] and "HTMLPage"
    gives ["HTML", "Page"]. Letters outside ASCII are kept.
    """
    words = []
    for chunk in _CHUNK_RE.findall(value):
        start = 0
        for i in range(1, len(chunk)):
            prev, char = chunk[i - 1], chunk[i]
            following = chunk[i + 1] if i + 1 < len(chunk) else ""
            if char.isupper() and (
                prev.islower()
                or prev.isdigit()
                or (prev.isupper() and following.islower())
            ):
                words.append(chunk[start:i])
                start = i
        words.append(chunk[start:])
    return words


def param_case(value: str) -> str:
    """Convert "My Photo_2018" to "my-photo-2018"."""
    return "-".join(word.lower() for word in split_words(value))


def title_case(value: str) -> str:
    """Convert "my-photo-2018" to "My Photo 2018"."""
    return " ".join(word.capitalize() for word in split_words(value))


def file_name_for(meta: Mapping[str, Any]) -> str:
    """
    Build the file name for an upload from client metadata.
    """
    name = meta.get("image_name") or meta.get("file_name") or "New Image"
    name = param_case(_EXTENSION_RE.sub("", name))
    # Names made only of punctuation leave nothing to key on
    return name or "new-image"


def image_name_for(meta: Mapping[str, Any]) -> str:
    """
    Build the display name for an upload, preferring the client's name.
    """
    image_name = meta.get("image_name")
    if isinstance(image_name, str) and image_name:
        return image_name
    return title_case(file_name_for(meta))


class SourceLocator:
    """
    Builds storage keys and src strings for images.
    """

    def __init__(
        self,
        host: str = "",
        base: str = "",
        path_property: Union[str, List[str], None] = None,
    ):
        """
        Args:
            host: Prefix for public src strings, empty for relative src
            base: Base directory for stored images
            path_property: Session property (or list of properties to try in
                order) whose value is appended to base
        """
        self.host = host or ""
        self.base = base or ""
        self.path_property = path_property

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "SourceLocator":
        image_config = config["image"]
        return cls(
            host=image_config.get("host") or "",
            base=image_config.get("base") or "",
            path_property=image_config.get("path_property"),
        )

    def save_as(
        self,
        path: Optional[str],
        file_name: str,
        file_type: str,
        image_id: str,
        profile_name: Optional[str] = None,
    ) -> str:
        """
        Storage key for an image or one of its variants.
        """
        key = f"{path}/{file_name}-{image_id}" if path else f"{file_name}-{image_id}"
        if isinstance(profile_name, str) and profile_name:
            key = f"{key}-{profile_name}"
        return f"{key}.{file_type}"

    def build_src(
        self,
        path: Optional[str],
        file_name: str,
        file_type: str,
        image_id: str,
        profile_name: Optional[str] = None,
    ) -> str:
        """
        Public src for an image or one of its variants.
        """
        src = self.save_as(path, file_name, file_type, image_id, profile_name)
        if self.host:
            src = f"{self.host}/{src}"
        return src

    def get_path(self, session: Optional[Mapping[str, Any]] = None) -> str:
        """
        Directory for a new upload, derived from the session.

        Raises:
            ConfigurationError: path_property is set but the session has no
                value for it
        """
        if self.path_property is None:
            return self.base

        session = session or {}
        value = None
        if isinstance(self.path_property, str):
            value = session.get(self.path_property)
        else:
            for name in self.path_property:
                if session.get(name) is not None:
                    value = session[name]
                    break

        if value is None:
            raise ConfigurationError(
                f"path value missing from session {self.path_property}"
            )

        return f"{self.base}/{value}" if self.base else str(value)
