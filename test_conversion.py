#!/usr/bin/env python3
"""
Script to run a document conversion directly.

This script bypasses the API server and runs the conversion pipeline directly.

Usage: python test_conversion.py path/to/document.docx [.pdf]
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from loguru import logger

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ConversionError
from makepdf.models.conversion import ConversionRequest
from makepdf.services.pipeline import ConversionPipeline
from makepdf.services.retriever import output_extension


def main():
    """Run one conversion and write the result next to the input."""
    if len(sys.argv) < 2:
        logger.error("Usage: python test_conversion.py <document> [target_format]")
        return 2

    input_file = Path(sys.argv[1])
    target_format = sys.argv[2] if len(sys.argv) > 2 else ".pdf"

    if not input_file.is_file():
        logger.error(f"Input file not found: {input_file}")
        return 1

    logger.info(f"Found input file: {input_file}")
    logger.info(f"File size: {input_file.stat().st_size / 1024:.1f} KB")

    settings = EngineSettings()
    pipeline = ConversionPipeline(settings)

    try:
        engine_path = pipeline.locator.locate()
    except ConversionError as exc:
        logger.error(f"✗ {exc}")
        return 1
    logger.info(f"Using engine: {engine_path}")
    logger.info(f"Timeout: {settings.conversion_timeout}s")

    request = ConversionRequest(document=input_file.read_bytes(), target_format=target_format)
    result = pipeline.run(request)

    if not result.succeeded:
        logger.error(f"✗ Conversion failed: {result.error}")
        if result.error and result.error.details:
            for key, value in result.error.details.items():
                logger.error(f"  {key}: {value}")
        return 1

    output_file = input_file.with_suffix(f".{output_extension(target_format)}")
    output_file.write_bytes(result.output)

    logger.info(f"✓ Conversion completed in {result.duration_seconds:.2f}s")
    logger.info(f"Output: {output_file} ({len(result.output):,} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
