"""
Rendering hooks

The world never draws anything itself. A renderer subclasses ChunkRenderer
and is told when chunks appear and disappear and when a block inside a
loaded chunk gains or loses its visual representation.
"""


class ChunkRenderer:
    """Receives visibility notifications from a World; every hook is a no-op by default"""

    def chunk_loaded(self, chunk) -> None:
        """Called once a chunk is generated; its visible blocks are in chunk.iter_visible_blocks()"""

    def chunk_disposed(self, chunk) -> None:
        """Called when a chunk is dropped; release anything built for it"""

    def block_shown(self, chunk, x: int, y: int, z: int, block_id: int) -> None:
        """A block at chunk-local (x, y, z) became visible"""

    def block_hidden(self, chunk, x: int, y: int, z: int) -> None:
        """A block at chunk-local (x, y, z) stopped being visible"""
