"""Loader description for the 4wings tile format."""
import pathlib
from dataclasses import dataclass, field
from typing import Tuple

from . import __version__
from .parse import parse_fourwings


@dataclass(frozen=True)
class Loader:
    """Describes a tile format and how to parse it.

    Attributes
    ----------
    name : str
        Human readable format name.
    id : str
        Short identifier.
    module : str
        Package providing the parser.
    version : str
        Parser version.
    extensions : tuple of str
        File extensions of tiles in this format.
    mime_types : tuple of str
        Content types the tile server may answer with.
    category : str
        Kind of data produced.
    binary : bool
        Whether tiles are binary payloads.
    """
    name: str
    id: str
    module: str
    version: str
    extensions: Tuple[str, ...] = field(default_factory=tuple)
    mime_types: Tuple[str, ...] = field(default_factory=tuple)
    category: str = "geometry"
    binary: bool = True

    def parse(self, data, options):
        """Decode an in-memory tile."""
        return parse_fourwings(data, options)

    def parse_file(self, path, options):
        """Read a tile from disk and decode it."""
        return self.parse(pathlib.Path(path).read_bytes(), options)

    def accepts(self, path_or_mime):
        """Return True if a file name or content type belongs to this format."""
        value = str(path_or_mime).lower()
        if value in self.mime_types:
            return True
        return pathlib.PurePath(value).suffix.lstrip(".") in self.extensions


# The API serves protobuf messages with a .pbf extension
FourwingsLoader = Loader(
    name="fourwings tiles",
    id="fourwings",
    module="fourwings",
    version=__version__,
    extensions=("pbf",),
    mime_types=("application/x-protobuf", "application/octet-stream",
                "application/protobuf"),
)
