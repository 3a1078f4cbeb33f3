"""Error kinds raised by the export pipeline.

Source and output failures abort an export. Texture derivation and image
normalization failures are isolated to the texture they belong to.
"""

from __future__ import annotations

from pathlib import Path


class ExportError(Exception):
    """Base class for all export pipeline errors."""


class SourceReadFailure(ExportError):
    """Input model (or, in strict mode, a texture) could not be read."""

    def __init__(self, source: str | Path, reason: str):
        self.source = str(source)
        self.reason = reason
        super().__init__(f"Cannot read source '{source}': {reason}")


class TextureDerivationFailure(ExportError):
    """A height/blur/composite step failed for a single texture."""


class TextureReadError(TextureDerivationFailure):
    """The texture decoder could not resolve or decode a texture reference."""

    def __init__(self, ref: str, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"Cannot decode texture '{ref}': {reason}")


class ImageNormalizationFailure(ExportError):
    """Re-encoding an emitted image failed; the file keeps its original encoding."""


class OutputWriteFailure(ExportError):
    """A mesh, material or image file could not be written."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot write '{path}': {reason}")
