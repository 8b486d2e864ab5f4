"""
Sparse record of user block edits

Edits are keyed by chunk coordinates plus chunk-local block coordinates and
outlive the chunks they were made in, so a regenerated chunk can replay them.
"""
import re
from typing import Dict, Iterator, Mapping, Optional, Tuple

from voxelcraft.constants import MAX_BLOCK_ID
from voxelcraft.storage import PersistenceError

ChunkKey = Tuple[int, int]
LocalKey = Tuple[int, int, int]

# Coordinates are written by _format_key, so only its plain form is accepted
_COORDINATE = re.compile(r'0|-?[1-9][0-9]*')


class OverlayLoadError(PersistenceError):
    """A serialized overlay could not be restored"""


def _format_key(cx: int, cz: int, lx: int, ly: int, lz: int) -> str:
    return f"{cx},{cz},{lx},{ly},{lz}"


def _parse_key(key: str) -> Tuple[int, int, int, int, int]:
    if not isinstance(key, str):
        raise OverlayLoadError(f"overlay key must be a string, got {key!r}")
    parts = key.split(',')
    if len(parts) != 5:
        raise OverlayLoadError(f"overlay key '{key}' does not have 5 coordinates")
    if not all(_COORDINATE.fullmatch(part) for part in parts):
        raise OverlayLoadError(f"overlay key '{key}' has a non-integer coordinate")
    cx, cz, lx, ly, lz = (int(part) for part in parts)
    return cx, cz, lx, ly, lz


class EditOverlay:
    """Block ids the user has placed or removed, overriding generated ones"""

    def __init__(self):
        # Grouped by chunk so a chunk can replay its edits without a full scan
        self.chunks: Dict[ChunkKey, Dict[LocalKey, int]] = {}

    def __len__(self) -> int:
        return sum(len(edits) for edits in self.chunks.values())

    def get(self, cx: int, cz: int, lx: int, ly: int, lz: int) -> Optional[int]:
        """
        Get the edited block id at a position

        Returns:
            The stored block id, or None if the position was never edited
        """
        edits = self.chunks.get((cx, cz))
        if edits is None:
            return None
        return edits.get((lx, ly, lz))

    def contains(self, cx: int, cz: int, lx: int, ly: int, lz: int) -> bool:
        return self.get(cx, cz, lx, ly, lz) is not None

    def set(self, cx: int, cz: int, lx: int, ly: int, lz: int, block_id: int) -> None:
        self.chunks.setdefault((cx, cz), {})[(lx, ly, lz)] = int(block_id)

    def clear(self) -> None:
        self.chunks = {}

    def entries_for_chunk(self, cx: int, cz: int) -> Iterator[Tuple[int, int, int, int]]:
        """Yield (lx, ly, lz, block_id) for every edit inside one chunk"""
        for (lx, ly, lz), block_id in self.chunks.get((cx, cz), {}).items():
            yield lx, ly, lz, block_id

    def dump(self) -> Dict[str, int]:
        """Flatten to a JSON-friendly mapping of "cx,cz,lx,ly,lz" to block id"""
        data = {}
        for (cx, cz), edits in self.chunks.items():
            for (lx, ly, lz), block_id in edits.items():
                data[_format_key(cx, cz, lx, ly, lz)] = block_id
        return data

    def restore(self, data: Mapping[str, int]) -> None:
        """
        Replace the overlay with a dumped mapping

        The whole mapping is validated before anything is replaced, so a
        malformed dump leaves the current edits as they were.

        Raises:
            OverlayLoadError: if the mapping or any key or value is malformed
        """
        if not isinstance(data, Mapping):
            raise OverlayLoadError("overlay data must be a mapping")

        chunks: Dict[ChunkKey, Dict[LocalKey, int]] = {}
        for key, block_id in data.items():
            cx, cz, lx, ly, lz = _parse_key(key)
            if isinstance(block_id, bool) or not isinstance(block_id, int):
                raise OverlayLoadError(f"block id for '{key}' must be an integer, got {block_id!r}")
            if not 0 <= block_id <= MAX_BLOCK_ID:
                raise OverlayLoadError(f"block id {block_id} for '{key}' is out of range")
            chunks.setdefault((cx, cz), {})[(lx, ly, lz)] = block_id

        self.chunks = chunks
