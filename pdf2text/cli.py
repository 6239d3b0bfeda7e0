from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import pdf2text
from pdf2text.extractors.data_types import PdfContent
from pdf2text.extractors.pdf_extractor import PdfExtractionOptions
from pdf2text.extractors.serialization import serialize_extraction

# printed in place of the text of a page that failed to extract
PAGE_ERROR_PLACEHOLDER = "ERROR"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf2text",
        description="Extract the text of every PDF page to stdout (or JSON with --json).",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the PDF file to extract.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit structured JSON instead of plain page text.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first page that cannot be extracted.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug diagnostics to stderr.",
    )
    return parser


def _serialize_pages(result: PdfContent) -> str:
    blocks = []
    for page_num, page in enumerate(result.pages):
        text = PAGE_ERROR_PLACEHOLDER if page.failed else page.text
        blocks.append(f"=== PAGE {page_num} ===\n\n{text}\n\n")
    return "".join(blocks)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = PdfExtractionOptions(fail_fast=bool(args.strict))
        results = list(pdf2text.read_file(args.path, options=options))
        if not results:
            raise RuntimeError(f"No extraction results for {args.path}")
        if args.json:
            json.dump(serialize_extraction(results[0]), sys.stdout)
            sys.stdout.write("\n")
        else:
            sys.stdout.write(_serialize_pages(results[0]))
        return 0
    except Exception as exc:
        print(f"pdf2text: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
