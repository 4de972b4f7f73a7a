"""
Exceptions raised while loading the Boston Housing data.
"""


class BostonHousingError(Exception):
    """Base class for errors raised by this package."""


class DatasetDownloadError(BostonHousingError):
    """A dataset resource could not be fetched."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download {url}: {reason}")


class DatasetFormatError(BostonHousingError):
    """A dataset resource was fetched but its contents are malformed."""
