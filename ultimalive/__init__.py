"""Map definitions, block checksums, hash-query handling and byte-signature search for a tile-map game client."""

__version__ = "0.1.0"

__all__ = ["atlas", "checksums", "map_definition", "signatures"]