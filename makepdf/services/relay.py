"""
Attachment relay between a chat or upload front-end and the pipeline.

Decides which incoming files are converted, how the converted file is
named, and which notice the user sees.
"""

import threading
from dataclasses import dataclass

from loguru import logger

from makepdf.exceptions import ConversionError
from makepdf.models.conversion import ConversionRequest
from makepdf.services.pipeline import ConversionPipeline
from makepdf.services.retriever import output_extension

SUCCESS_NOTICE = "`📎` Here is your converted **{label} file**:"
FAILURE_NOTICE = "`😢` Sorry, the conversion **has failed**"


def file_extension(filename: str) -> str:
    """Text after the last dot, lower-cased; empty when there is no dot."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


@dataclass(frozen=True)
class RelayOutcome:
    """What to post back for one attachment."""

    content: str
    filename: str | None = None
    data: bytes | None = None
    error: ConversionError | None = None

    @property
    def succeeded(self) -> bool:
        return self.data is not None


class AttachmentRelay:
    """Converts allow-listed attachments and shapes the reply."""

    def __init__(
        self,
        allowed_formats: list[str],
        pipeline: ConversionPipeline | None = None,
        target_format: str = ".pdf",
    ):
        """
        Initialize the relay.

        Args:
            allowed_formats: Extensions (without dots) that get converted
            pipeline: Conversion pipeline
            target_format: Dot-prefixed target format for every conversion
        """
        self.allowed_formats = {fmt.lstrip(".").lower() for fmt in allowed_formats}
        self.pipeline = pipeline or ConversionPipeline()
        self.target_format = target_format

    def accepts(self, filename: str) -> bool:
        """True if the file's extension is on the allow-list."""
        return file_extension(filename) in self.allowed_formats

    def converted_name(self, filename: str) -> str:
        """
        Name of the converted file: the original stem with the target extension.

        ``report.final.docx`` becomes ``report.final.pdf``.
        """
        stem = filename.rsplit(".", 1)[0] if "." in filename else filename
        return f"{stem}.{output_extension(self.target_format)}"

    def relay(
        self,
        filename: str,
        document: bytes,
        cancel_event: threading.Event | None = None,
    ) -> RelayOutcome:
        """
        Convert one attachment and build the reply.

        Args:
            filename: Original attachment name
            document: Attachment bytes
            cancel_event: Event that aborts the conversion when set

        Returns:
            RelayOutcome with the renamed file, or the failure notice

        Raises:
            ValueError: If the attachment is not on the allow-list
        """
        if not self.accepts(filename):
            raise ValueError(f"Extension not allowed: {filename}")

        request = ConversionRequest(document=document, target_format=self.target_format)
        result = self.pipeline.run(request, cancel_event)

        if not result.succeeded:
            logger.error(f"Error converting file {filename}: {result.error}")
            return RelayOutcome(content=FAILURE_NOTICE, error=result.error)

        label = output_extension(self.target_format).upper()
        return RelayOutcome(
            content=SUCCESS_NOTICE.format(label=label),
            filename=self.converted_name(filename),
            data=result.output,
        )
