"""Command-line interface for clinical form extraction.

Provides subcommands to extract a single scanned document or an already
recognised text file to JSON, and to batch-process a folder of documents
into a CSV with one column per field path.
"""

import argparse
import csv
import sys
import time
from pathlib import Path

from medform.extraction.export import export_filename, flatten_record, record_to_json
from medform.extraction.extractor import extract_data
from medform.extraction.models import ExtractionRecord, TemplateHint
from medform.ocr.document_processor import DocumentProcessor
from medform.ocr.errors import OCRProcessingError, UnsupportedFormatError
from medform.utils.config import AppConfig, load_config
from medform.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = (
    "*.png",
    "*.jpg",
    "*.jpeg",
    "*.tiff",
    "*.tif",
    "*.bmp",
    "*.pdf",
)
_META_COLUMNS = [
    "filename",
    "status",
    "page_count",
    "processing_time_s",
    "template",
    "error",
]
_HINT_CHOICES = [hint.value for hint in TemplateHint]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported document files in a directory.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of document file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def process_folder(
    input_dir: Path,
    output_csv: Path,
    template_hint: str = TemplateHint.AUTO.value,
    verbose: bool = False,
) -> dict[str, int]:
    """Extract every document in a folder and export the fields to CSV.

    Args:
        input_dir: Directory containing document files.
        output_csv: Path for the output CSV file.
        template_hint: ``auto`` or an explicit template id for all files.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = load_config()
    processor = DocumentProcessor(config)

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))

    results: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = _process_single_file(file_path, processor, config, template_hint)
            result["processing_time_s"] = round(time.time() - start_time, 2)
            results.append(result)
            successful += 1
        except Exception as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _process_single_file(
    file_path: Path,
    processor: DocumentProcessor,
    config: AppConfig,
    template_hint: str,
) -> dict[str, object]:
    """Recognise and extract one document into a flat CSV row.

    Args:
        file_path: Path to the document file.
        processor: Document processor instance.
        config: Application configuration.
        template_hint: Template hint for extraction.

    Returns:
        Row with metadata columns followed by dotted field paths.
    """
    doc_result = processor.process(file_path, file_path.name)
    record = extract_data(
        doc_result.page_texts,
        template_hint,
        delimiter=config.extraction.page_delimiter,
    )

    result: dict[str, object] = {
        "filename": file_path.name,
        "status": "success",
        "page_count": doc_result.page_count,
        "error": None,
    }
    result.update(flatten_record(record))
    return result


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write extraction rows to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    all_keys: set[str] = set()
    for r in results:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Extraction Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(
    file_path: Path, template_hint: str = TemplateHint.AUTO.value
) -> ExtractionRecord:
    """Recognise a scanned document and extract its fields.

    Args:
        file_path: Path to a PDF or image file.
        template_hint: ``auto`` or an explicit template id.

    Returns:
        The extraction record.
    """
    config = load_config()
    processor = DocumentProcessor(config)

    def _log_progress(message: str, progress: float) -> None:
        logger.info("[%3d%%] %s", round(progress * 100), message)

    doc_result = processor.process(file_path, file_path.name, on_progress=_log_progress)
    return extract_data(
        doc_result.page_texts,
        template_hint,
        delimiter=config.extraction.page_delimiter,
    )


def split_pages(text: str) -> list[str]:
    """Split recognised text into pages on form feeds.

    Tesseract ends every page with a form feed, so empty trailing pages
    are dropped.
    """
    pages = [page for page in text.split("\f") if page.strip()]
    return pages or [text]


def extract_text_file(
    file_path: Path, template_hint: str = TemplateHint.AUTO.value
) -> ExtractionRecord:
    """Extract fields from a plain-text file of already recognised pages."""
    config = load_config()
    pages = split_pages(file_path.read_text(encoding="utf-8"))
    return extract_data(
        pages, template_hint, delimiter=config.extraction.page_delimiter
    )


def _write_record(record: ExtractionRecord, output: Path | None) -> None:
    """Print the record as JSON or write it to a file or directory.

    A directory output receives a timestamped ``extraction_<ms>.json`` file.
    """
    config = load_config()
    output_str = record_to_json(record, indent=config.export.indent)
    if output is None:
        print(output_str)
        return

    if output.is_dir():
        output = output / export_filename(config.export.filename_prefix)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(output_str)
    print(f"Output written to {output}")


def _add_hint_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--template",
        choices=_HINT_CHOICES,
        default=TemplateHint.AUTO.value,
        dest="template_hint",
        help="Template hint (default: auto)",
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Clinical Form Extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser(
        "extract", help="Extract a scanned PDF or image"
    )
    single_parser.add_argument("file", type=Path, help="Document file to process")
    _add_hint_argument(single_parser)
    single_parser.add_argument(
        "-o", "--output", type=Path, help="Output JSON file or directory"
    )

    text_parser = subparsers.add_parser(
        "text", help="Extract a text file of recognised pages"
    )
    text_parser.add_argument("file", type=Path, help="Text file to process")
    _add_hint_argument(text_parser)
    text_parser.add_argument(
        "-o", "--output", type=Path, help="Output JSON file or directory"
    )

    batch_parser = subparsers.add_parser("batch", help="Process a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with documents"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    _add_hint_argument(batch_parser)
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level, stream=sys.stderr)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            args.template_hint,
            args.verbose,
        )
    elif args.command in ("extract", "text"):
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            if args.command == "extract":
                record = extract_single(args.file, args.template_hint)
            else:
                record = extract_text_file(args.file, args.template_hint)
        except (UnsupportedFormatError, OCRProcessingError, UnicodeDecodeError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _write_record(record, args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
