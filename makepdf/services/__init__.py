"""
Services package for the MakePDF conversion service.

This package contains the conversion engine integration.
"""

from .invoker import ConversionInvoker, engine_format_argument
from .locator import BinaryLocator, HostPlatform
from .pipeline import ConversionPipeline, convert, convert_async
from .relay import FAILURE_NOTICE, AttachmentRelay, RelayOutcome
from .retriever import OutputRetriever, output_extension
from .workspace import Workspace

__all__ = [
    # Engine location
    "BinaryLocator",
    "HostPlatform",
    # Workspaces
    "Workspace",
    # Invocation and retrieval
    "ConversionInvoker",
    "engine_format_argument",
    "OutputRetriever",
    "output_extension",
    # Pipeline
    "ConversionPipeline",
    "convert",
    "convert_async",
    # Attachment relay
    "AttachmentRelay",
    "RelayOutcome",
    "FAILURE_NOTICE",
]
