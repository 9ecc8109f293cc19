"""Error taxonomy for the video conversion workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nftmovie.services.batch_converter import BatchResult


class ConversionError(Exception):
    """Base class for conversion errors."""


class InvalidRequestError(ConversionError):
    """Request is missing fields or carries malformed values. No job was launched."""


class RemoteSubmissionError(ConversionError):
    """The generation service rejected or never received a job submission."""


class RemoteQueryError(ConversionError):
    """A status query against the generation service failed."""


class AllItemsFailedError(ConversionError):
    """Every job in a batch ended in failure."""

    def __init__(self, result: BatchResult, message: str = "No videos were successfully generated."):
        super().__init__(message)
        self.result = result
