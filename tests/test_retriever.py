"""
Tests for output retrieval.
"""

import time
from unittest.mock import patch

import pytest

from makepdf.configs.engine import EngineSettings
from makepdf.exceptions import ErrorTypes, ReadFailureError
from makepdf.services.retriever import OutputRetriever, output_extension
from makepdf.services.workspace import Workspace


@pytest.fixture
def workspace(workspace_root):
    with Workspace.open(workspace_root) as ws:
        yield ws


class TestOutputExtension:
    """Test mapping target formats to output file extensions."""

    @pytest.mark.parametrize(
        "target_format, expected",
        [
            (".pdf", "pdf"),
            (".pdf:writer_pdf_Export", "pdf"),
            (".odt", "odt"),
        ],
    )
    def test_extension(self, target_format, expected):
        assert output_extension(target_format) == expected


class TestOutputRetriever:
    """Test the retry window around reading the output file."""

    def test_defaults_come_from_settings(self):
        """Test attempts and interval default to the engine settings."""
        retriever = OutputRetriever(settings=EngineSettings(retrieval_attempts=5, retrieval_interval=0.5))
        assert retriever.attempts == 5
        assert retriever.interval == 0.5

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            OutputRetriever(attempts=0)

    def test_reads_immediately_available_output(self, workspace):
        """Test a file present on the first attempt is returned without sleeping."""
        workspace.output_file("pdf").write_bytes(b"PDF-OK")

        with patch("makepdf.services.retriever.time.sleep") as mock_sleep:
            data = OutputRetriever(attempts=3, interval=0.2).retrieve(workspace, ".pdf")

        assert data == b"PDF-OK"
        mock_sleep.assert_not_called()

    def test_output_appearing_late_is_picked_up(self, workspace):
        """Test output that appears after the first attempt is read on the second."""
        output = workspace.output_file("pdf")

        def appear(_interval):
            output.write_bytes(b"PDF-OK")

        with patch("makepdf.services.retriever.time.sleep", side_effect=appear) as mock_sleep:
            data = OutputRetriever(attempts=3, interval=0.2).retrieve(workspace, ".pdf")

        assert data == b"PDF-OK"
        mock_sleep.assert_called_once_with(0.2)

    def test_filter_qualifier_is_not_part_of_the_filename(self, workspace):
        """Test .pdf:writer_pdf_Export reads source.pdf."""
        workspace.output_file("pdf").write_bytes(b"PDF-OK")

        data = OutputRetriever(attempts=1).retrieve(workspace, ".pdf:writer_pdf_Export")

        assert data == b"PDF-OK"

    def test_missing_output_fails_after_all_attempts(self, workspace):
        """Test exactly `attempts` reads and a sleep only between them."""
        retriever = OutputRetriever(attempts=3, interval=0.05)

        start = time.monotonic()
        with patch.object(retriever, "_read", wraps=retriever._read) as mock_read:
            with pytest.raises(ReadFailureError) as exc_info:
                retriever.retrieve(workspace, ".pdf")
        elapsed = time.monotonic() - start

        assert mock_read.call_count == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.error_type == ErrorTypes.READ_FAILURE
        assert exc_info.value.path == str(workspace.output_file("pdf"))
        # two pauses, no trailing one
        assert 0.1 <= elapsed < 1.0

    def test_empty_output_is_retried(self, workspace):
        """Test a zero-byte file counts as not yet written."""
        output = workspace.output_file("pdf")
        output.write_bytes(b"")

        def fill(_interval):
            output.write_bytes(b"PDF-OK")

        with patch("makepdf.services.retriever.time.sleep", side_effect=fill) as mock_sleep:
            data = OutputRetriever(attempts=3, interval=0.2).retrieve(workspace, ".pdf")

        assert data == b"PDF-OK"
        assert mock_sleep.call_count == 1

    def test_always_empty_output_fails(self, workspace):
        workspace.output_file("pdf").write_bytes(b"")

        with patch("makepdf.services.retriever.time.sleep"):
            with pytest.raises(ReadFailureError) as exc_info:
                OutputRetriever(attempts=2, interval=0.2).retrieve(workspace, ".pdf")

        assert "empty" in str(exc_info.value.details)
