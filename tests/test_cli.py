"""Tests for the command-line interface and CSV batch export."""

import csv
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import pytesseract
from PIL import Image

from medform.cli import (
    _find_documents,
    _print_summary,
    _write_csv,
    _write_record,
    extract_single,
    extract_text_file,
    main,
    process_folder,
    split_pages,
)
from medform.extraction.models import ExtractionRecord, TemplateId
from medform.ocr.document_processor import DocumentResult
from medform.ocr.errors import OCRProcessingError
from medform.utils.config import AppConfig


def _make_doc_result(text: str, filename: str = "test.png") -> DocumentResult:
    """Create a DocumentResult with a single recognised page."""
    return DocumentResult(source_file=filename, page_texts=[text], combined_text=text)


class TestFindDocuments:
    """Tests for document discovery."""

    def test_find_png_files(self, tmp_path: Path) -> None:
        (tmp_path / "doc1.png").touch()
        (tmp_path / "doc2.png").touch()
        (tmp_path / "readme.txt").touch()
        files = _find_documents(tmp_path)
        assert len(files) == 2
        assert all(f.suffix == ".png" for f in files)

    def test_find_mixed_extensions(self, tmp_path: Path) -> None:
        for name in ("doc.png", "doc.jpg", "doc.pdf", "doc.tiff"):
            (tmp_path / name).touch()
        assert len(_find_documents(tmp_path)) == 4

    def test_find_uppercase_extensions(self, tmp_path: Path) -> None:
        (tmp_path / "SCAN.PDF").touch()
        assert len(_find_documents(tmp_path)) == 1


class TestWriteCsv:
    """Tests for CSV writing."""

    def test_write_csv_content(self, tmp_path: Path) -> None:
        results = [
            {
                "filename": "test.png",
                "status": "success",
                "error": None,
                "common.patientName": "Ramesh Kumar",
                "template": "handover_sheet_ot",
            }
        ]
        output = tmp_path / "results.csv"
        _write_csv(results, output)

        with open(output) as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 1
        assert rows[0]["common.patientName"] == "Ramesh Kumar"

    def test_meta_columns_first(self, tmp_path: Path) -> None:
        results = [
            {
                "common.age": "54",
                "filename": "test.png",
                "status": "success",
                "template": "unknown",
            }
        ]
        output = tmp_path / "results.csv"
        _write_csv(results, output)

        with open(output) as f:
            headers = next(csv.reader(f))
        assert headers == ["filename", "status", "template", "common.age"]

    def test_write_csv_empty_results(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([], output)
        assert not output.exists()

    def test_write_csv_creates_parent_dirs(self, tmp_path: Path) -> None:
        output = tmp_path / "subdir" / "results.csv"
        _write_csv([{"filename": "test.png", "status": "success"}], output)
        assert output.exists()


class TestPrintSummary:
    """Tests for summary printing."""

    def test_print_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        _print_summary({"total": 3, "successful": 2, "failed": 1}, Path("out.csv"))
        captured = capsys.readouterr()
        assert "Batch Extraction Complete" in captured.out
        assert "Total:      3" in captured.out
        assert "Failed:     1" in captured.out
        assert "out.csv" in captured.out


class TestProcessFolder:
    """Tests for batch folder processing."""

    @patch("medform.cli.DocumentProcessor")
    @patch("medform.cli.load_config")
    def test_process_folder_success(
        self,
        mock_config: MagicMock,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
        handover_text: str,
        admission_text: str,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_processor_cls.return_value.process.side_effect = [
            _make_doc_result(handover_text, "doc1.png"),
            _make_doc_result(admission_text, "doc2.png"),
        ]
        (tmp_path / "doc1.png").touch()
        (tmp_path / "doc2.png").touch()
        output_csv = tmp_path / "output.csv"

        summary = process_folder(tmp_path, output_csv)

        assert summary == {"total": 2, "successful": 2, "failed": 0}
        with open(output_csv) as f:
            rows = list(csv.DictReader(f))
        assert [r["template"] for r in rows] == [
            "handover_sheet_ot",
            "general_admission_treatment_consent_obstetric",
        ]
        assert rows[0]["handoverSheetOT.assessment.bp"] == "130/80"
        assert rows[1]["common.patientName"] == "Lakshmi Devi"

    @patch("medform.cli.DocumentProcessor")
    @patch("medform.cli.load_config")
    def test_process_folder_with_failure(
        self,
        mock_config: MagicMock,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
        handover_text: str,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_processor_cls.return_value.process.side_effect = [
            _make_doc_result(handover_text),
            OCRProcessingError("Text recognition failed"),
        ]
        (tmp_path / "doc1.png").touch()
        (tmp_path / "doc2.png").touch()
        output_csv = tmp_path / "output.csv"

        summary = process_folder(tmp_path, output_csv)

        assert summary["successful"] == 1
        assert summary["failed"] == 1
        with open(output_csv) as f:
            rows = list(csv.DictReader(f))
        assert rows[1]["status"] == "failed"
        assert rows[1]["error"] == "Text recognition failed"

    @patch("medform.cli.DocumentProcessor")
    @patch("medform.cli.load_config")
    def test_template_hint_applies_to_all_files(
        self,
        mock_config: MagicMock,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_processor_cls.return_value.process.return_value = _make_doc_result(
            "no headings"
        )
        (tmp_path / "doc1.png").touch()
        output_csv = tmp_path / "output.csv"

        process_folder(tmp_path, output_csv, template_hint="handover_sheet_ot")

        with open(output_csv) as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["template"] == "handover_sheet_ot"

    @patch("medform.cli.load_config")
    def test_process_folder_empty(self, mock_config: MagicMock, tmp_path: Path) -> None:
        mock_config.return_value = AppConfig()
        summary = process_folder(tmp_path, tmp_path / "output.csv")
        assert summary["total"] == 0

    @patch("medform.cli.DocumentProcessor")
    @patch("medform.cli.load_config")
    def test_process_folder_verbose(
        self,
        mock_config: MagicMock,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_processor_cls.return_value.process.return_value = _make_doc_result("")
        (tmp_path / "doc1.png").touch()

        process_folder(tmp_path, tmp_path / "output.csv", verbose=True)

        assert "Processing [1/1]" in capsys.readouterr().out


class TestExtractSingle:
    """Tests for single document extraction."""

    @patch("medform.cli.DocumentProcessor")
    @patch("medform.cli.load_config")
    def test_extract_single(
        self,
        mock_config: MagicMock,
        mock_processor_cls: MagicMock,
        tmp_path: Path,
        admission_text: str,
    ) -> None:
        mock_config.return_value = AppConfig()
        mock_processor_cls.return_value.process.return_value = _make_doc_result(
            admission_text
        )
        doc_path = tmp_path / "scan.png"
        doc_path.touch()

        record = extract_single(doc_path)

        assert record.template == TemplateId.GENERAL_ADMISSION
        assert record.common.uhid_no == "HN-7788"
        _, kwargs = mock_processor_cls.return_value.process.call_args
        assert callable(kwargs["on_progress"])


class TestTextInput:
    """Tests for extracting already recognised text files."""

    def test_split_pages_on_form_feed(self) -> None:
        assert split_pages("page one\fpage two\f") == ["page one", "page two"]

    def test_split_pages_without_form_feed(self) -> None:
        assert split_pages("single page") == ["single page"]

    def test_split_pages_blank_text(self) -> None:
        assert split_pages("") == [""]

    def test_extract_text_file(self, tmp_path: Path, handover_text: str) -> None:
        path = tmp_path / "scan.txt"
        path.write_text(handover_text, encoding="utf-8")

        record = extract_text_file(path)

        assert record.template == TemplateId.HANDOVER_SHEET_OT
        assert record.handover_sheet_ot.signatures.handed_over_by == "Dr. Smith"


class TestWriteRecord:
    """Tests for JSON output of a record."""

    def test_prints_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        _write_record(ExtractionRecord(), None)
        data = json.loads(capsys.readouterr().out)
        assert data["template"] == "unknown"

    def test_writes_file(self, tmp_path: Path) -> None:
        output = tmp_path / "out.json"
        _write_record(ExtractionRecord(), output)
        assert json.loads(output.read_text())["handoverSheetOT"]

    def test_directory_gets_timestamped_name(self, tmp_path: Path) -> None:
        _write_record(ExtractionRecord(), tmp_path)
        written = list(tmp_path.glob("extraction_*.json"))
        assert len(written) == 1


class TestCLIMain:
    """Tests for the CLI argument parser and main entry point."""

    def test_no_command_shows_help(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0

    def test_batch_nonexistent_directory(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["batch", "/nonexistent/path"])
        assert exc_info.value.code == 1
        assert "not a directory" in capsys.readouterr().err

    def test_extract_nonexistent_file(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["extract", "/nonexistent/file.png"])
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_invalid_template_choice(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["text", str(tmp_path), "-t", "invoice"])
        assert exc_info.value.code == 2

    @patch("medform.cli.process_folder")
    def test_batch_with_options(self, mock_pf: MagicMock, tmp_path: Path) -> None:
        mock_pf.return_value = {"total": 1, "successful": 1, "failed": 0}
        output = tmp_path / "out.csv"
        main(["batch", str(tmp_path), "-o", str(output), "-t", "handover_sheet_ot"])
        mock_pf.assert_called_once_with(tmp_path, output, "handover_sheet_ot", False)

    def test_text_command_prints_json(
        self,
        tmp_path: Path,
        handover_text: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "scan.txt"
        path.write_text(handover_text, encoding="utf-8")

        main(["text", str(path)])

        data = json.loads(capsys.readouterr().out)
        assert data["template"] == "handover_sheet_ot"
        assert data["common"]["patientName"] == "Ramesh Kumar"

    @patch("medform.cli.extract_single")
    def test_extract_ocr_error_exits(
        self,
        mock_extract: MagicMock,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_extract.side_effect = OCRProcessingError("PDF conversion failed")
        doc_path = tmp_path / "scan.pdf"
        doc_path.touch()

        with pytest.raises(SystemExit) as exc_info:
            main(["extract", str(doc_path)])

        assert exc_info.value.code == 1
        assert "PDF conversion failed" in capsys.readouterr().err

    def test_text_command_invalid_utf8_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "scan.txt"
        path.write_bytes(b"\xff\xfe")

        with pytest.raises(SystemExit) as exc_info:
            main(["text", str(path)])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    @patch("medform.ocr.tesseract_engine.pytesseract.image_to_string")
    def test_extract_missing_tesseract_exits(
        self,
        mock_to_string: MagicMock,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        mock_to_string.side_effect = pytesseract.TesseractNotFoundError()
        doc_path = tmp_path / "scan.png"
        Image.new("RGB", (60, 40), color="white").save(doc_path)

        with pytest.raises(SystemExit) as exc_info:
            main(["extract", str(doc_path)])

        assert exc_info.value.code == 1
        assert "Text recognition failed" in capsys.readouterr().err

    @patch("medform.cli.setup_logging")
    @patch("medform.cli.load_config")
    def test_log_level_from_config(
        self, mock_config: MagicMock, mock_setup: MagicMock
    ) -> None:
        mock_config.return_value = AppConfig(log_level="DEBUG")

        with pytest.raises(SystemExit):
            main(["batch", "/nonexistent/path"])

        assert mock_setup.call_args[0] == ("DEBUG",)
