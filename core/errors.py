"""Error taxonomy for an indexing run.

Only `PathNotFound` and `WriteError` stop a run. The remaining errors are
absorbed where they occur and end up as warnings in the run report.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for all indexing errors."""


class PathNotFound(IndexerError):
    """Root (or a referenced) folder does not exist or is not a directory."""


class ConfigParseError(IndexerError):
    """A per-folder override file is malformed or unreadable."""


class PreviousDescriptorParseError(IndexerError):
    """The descriptor left by a previous run could not be read back."""


class ImageMetadataError(IndexerError):
    """The image service could not identify an image."""


class ThumbnailError(IndexerError):
    """The image service could not render a thumbnail."""


class WriteError(IndexerError):
    """A descriptor or thumbnail directory could not be written."""
