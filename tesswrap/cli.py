"""
tesswrap -- Command Line Interface
====================================
Commands:
  scan            -- OCR an image (or a PDF, page by page)
  langs           -- List the languages tesseract has data for
  version         -- Print the tesseract version
  doctor          -- Check that tesseract and its language data are installed
  fetch-tessdata  -- Download traineddata files into a local directory

Usage examples:
  tesswrap scan page.png
  tesswrap scan page.png -l deu fra --psm 6
  tesswrap scan page.png -o out -f page --format pdf hocr
  tesswrap doctor

Environment:
  TESSWRAP_TESSERACT   -- tesseract executable to run (default: tesseract)
  TESSWRAP_OUTPUT_DIR  -- output directory for file mode (default: temp dir)
  TESSDATA_PREFIX      -- ignored when it does not contain traineddata files
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from tesswrap.config import (
    DEFAULT_BINARY,
    DEFAULT_TIMEOUT,
    InvokerConfig,
    OutputFormat,
    RecognitionConfig,
)
from tesswrap.diagnostics.requirements import DOCS_URL, check_startup_requirements
from tesswrap.diagnostics.tessdata import DEFAULT_LANGS, download_tessdata, looks_like_tessdata_dir
from tesswrap.exceptions import OCRError
from tesswrap.ocr.options import OEM_MODES, PSM_MODES
from tesswrap.process.invoker import Invoker
from tesswrap.recognition import Recognition

logger = logging.getLogger(__name__)

LOCAL_TESSDATA = "tessdata"


def _local_tessdata() -> Path:
    """./tessdata relative to the directory the command runs in."""
    return Path.cwd() / LOCAL_TESSDATA


def setup_logging(verbose: bool = False) -> None:
    """Configure root logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _configure_tessdata_prefix() -> None:
    """Best-effort Tesseract language data setup.

    If `TESSDATA_PREFIX` points to a directory without language data it is
    removed so tesseract falls back to its built-in locations; if it is
    unset, a local ./tessdata populated by `fetch-tessdata` is used.
    """
    current = os.environ.get("TESSDATA_PREFIX")
    if current:
        if looks_like_tessdata_dir(Path(current)):
            return
        logger.warning("Ignoring TESSDATA_PREFIX=%s: no traineddata files found", current)
        os.environ.pop("TESSDATA_PREFIX", None)

    local = _local_tessdata()
    if looks_like_tessdata_dir(local):
        os.environ["TESSDATA_PREFIX"] = str(local)


def _build_config(args: argparse.Namespace) -> RecognitionConfig:
    output_dir = os.environ.get("TESSWRAP_OUTPUT_DIR")
    return RecognitionConfig(
        invoker=InvokerConfig(
            binary=os.environ.get("TESSWRAP_TESSERACT", DEFAULT_BINARY),
            timeout=getattr(args, "timeout", DEFAULT_TIMEOUT),
        ),
        output_dir=Path(output_dir) if output_dir else None,
    )


# ===================================================================
# Command handlers
# ===================================================================

def cmd_scan(args: argparse.Namespace) -> int:
    config = _build_config(args)
    options = {
        "dpi": args.dpi,
        "psm": args.psm,
        "oem": args.oem,
        "languages": args.lang,
        "tessdata_dir": args.tessdata_dir,
        "user_words": args.user_words,
        "user_patterns": args.user_patterns,
        "output_formats": args.format,
    }

    if args.image.lower().endswith(".pdf"):
        recognition = Recognition(config=config).set_config(options)
        result = recognition.scan_pdf(args.image)
        sys.stdout.write(result.text)
        logger.info("Scanned %d page(s), %d characters", result.total_pages, result.char_count)
        return 0

    recognition = Recognition(args.image, args.output_dir, args.file, config=config)
    recognition.set_config(options)
    stdin = sys.stdin.buffer.read() if args.image == "-" else None
    result = recognition.scan(stdin=stdin)

    if isinstance(result, bytes):
        sys.stdout.buffer.write(result)
    elif isinstance(result, Path):
        print(result)
    else:
        sys.stdout.write(result)
    return 0


def cmd_langs(args: argparse.Namespace) -> int:
    invoker = Invoker(_build_config(args).invoker)
    for lang in invoker.supported_languages():
        print(lang)
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    invoker = Invoker(_build_config(args).invoker)
    print(invoker.version())
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    invoker = Invoker(_build_config(args).invoker)
    issues = check_startup_requirements(invoker, required_langs=args.lang)
    if not issues:
        print("All requirements satisfied.")
        return 0

    for issue in issues:
        prefix = "[WARNING]" if issue.severity == "warning" else "[ERROR]"
        print(f"{prefix} {issue.title}")
        print(f"    {issue.details}")
    print(f"\nSee {DOCS_URL}")
    return 1 if any(issue.severity == "error" for issue in issues) else 0


def cmd_fetch_tessdata(args: argparse.Namespace) -> int:
    dest = args.dest or _local_tessdata()
    paths = download_tessdata(args.langs or DEFAULT_LANGS, dest)
    print(f"Downloaded {len(paths)} language file(s) to {dest}")
    print("If needed, point Tesseract to this directory:")
    print(f'  export TESSDATA_PREFIX="{dest}"')
    return 0


# ===================================================================
# Argument parser
# ===================================================================

def _describe_modes() -> str:
    lines = ["page segmentation modes (--psm):"]
    lines += [f"  {mode:>2}  {text}" for mode, text in PSM_MODES.items()]
    lines.append("OCR engine modes (--oem):")
    lines += [f"  {mode:>2}  {text}" for mode, text in OEM_MODES.items()]
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tesswrap",
        description="Run the tesseract OCR command line tool with validated options.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser(
        "scan",
        help="OCR an image or PDF",
        epilog=_describe_modes(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    scan.add_argument("image", help="Image, list file, PDF, or - for stdin")
    scan.add_argument("-o", "--output-dir", default=None, help="Directory for file output")
    scan.add_argument("-f", "--file", default=None, help="Output file name; omit to stream to stdout")
    scan.add_argument("--dpi", type=int, default=None, help="Input resolution (80-600)")
    scan.add_argument("--psm", type=int, default=None, help="Page segmentation mode (0-13)")
    scan.add_argument("--oem", type=int, default=None, help="OCR engine mode (0-3)")
    scan.add_argument("-l", "--lang", nargs="+", default=None, help="Language codes, e.g. eng deu")
    scan.add_argument("--tessdata-dir", default=None, help="Location of traineddata files")
    scan.add_argument("--user-words", default=None, help="User words file")
    scan.add_argument("--user-patterns", default=None, help="User patterns file")
    scan.add_argument(
        "--format",
        nargs="+",
        default=None,
        choices=[fmt.value for fmt in OutputFormat],
        help="Output formats (default: txt)",
    )
    scan.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Seconds before tesseract is killed")
    scan.set_defaults(handler=cmd_scan)

    langs = sub.add_parser("langs", help="List installed languages")
    langs.set_defaults(handler=cmd_langs)

    version = sub.add_parser("version", help="Print the tesseract version")
    version.set_defaults(handler=cmd_version)

    doctor = sub.add_parser("doctor", help="Check system requirements")
    doctor.add_argument("-l", "--lang", nargs="+", default=["eng"], help="Languages that must be installed")
    doctor.set_defaults(handler=cmd_doctor)

    fetch = sub.add_parser("fetch-tessdata", help="Download traineddata files")
    fetch.add_argument("langs", nargs="*", help=f"Language codes (default: {' '.join(DEFAULT_LANGS)})")
    fetch.add_argument("--dest", type=Path, default=None, help="Target directory (default: ./tessdata)")
    fetch.set_defaults(handler=cmd_fetch_tessdata)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    _configure_tessdata_prefix()

    try:
        return args.handler(args)
    except OCRError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
