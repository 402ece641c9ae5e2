"""ChunkVault - audio capture with chunked, crash-recoverable auto-save."""

__version__ = "0.1.0"
