"""Command line drafting of SKP documents

Each brief is a plain-text promo description. The script fills a fresh draft
from it with the extraction service, prints the SKP to PDF and archives it.

Usage:
    python -m skp.main briefs/promo_march.txt
    python -m skp.main briefs/*.txt --output-dir out
    python -m skp.main briefs/promo.txt --dry-run   # PDF only, no archive
    python -m skp.main --list
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .archive import ArchiveStore
from .config import OUTPUT_DIR
from .errors import SKPError
from .llm_extractor import LLMExtractor
from .pdf_renderer import SKPPrinter
from .print_projector import RenderMode
from .session import EditingSession

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def process_brief(
    brief_path: Path,
    archive: ArchiveStore,
    extractor: LLMExtractor,
    output_dir: Path,
    dry_run: bool = False,
    printer: Optional[SKPPrinter] = None,
) -> Path:
    """Draft, print and archive one SKP from a brief file

    Returns:
        Path of the generated PDF
    """
    print(f"Processing: {brief_path}")
    text = brief_path.read_text(encoding="utf-8")

    session = EditingSession(archive, extractor=extractor)
    doc = asyncio.run(session.ai_fill(text))

    print(f"    No. Surat: {doc.number}")
    print(f"    Principal: {doc.principal.name}")
    print(f"    Distributor: {doc.distributor.name}")
    print(f"    Periode: {doc.period_start} s.d {doc.period_end}")
    print(f"    Produk: {len(doc.products)}")
    for product in doc.products[:5]:
        print(f"      - {product.name} ({product.promo_mechanism})")
    if len(doc.products) > 5:
        print(f"      ... {len(doc.products) - 5} more")

    printer = printer or SKPPrinter()
    safe_number = doc.number.replace("/", "_")
    pdf_path = printer.generate(session.preview(RenderMode.PRINT), output_dir / f"SKP_{safe_number}.pdf")
    print(f"    Output: {pdf_path}")

    if dry_run:
        print("  - [DRY RUN] archive not updated")
    else:
        session.save()
        print(f"  - Archived as {doc.number}")
    return pdf_path


def list_archive(archive: ArchiveStore) -> None:
    documents = archive.load()
    if not documents:
        print("Archive is empty")
        return
    for doc in documents:
        print(f"{doc.number:<28} {doc.status.value:<6} {doc.principal.name or '-':<30} "
              f"{doc.period_start or '?'} s.d {doc.period_end or '?'}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Draft Surat Kerjasama Promosi documents from promo briefs")
    parser.add_argument("briefs", nargs="*", help="plain-text promo briefs to process")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="directory for generated PDFs")
    parser.add_argument("--dry-run", action="store_true", help="generate PDFs without archiving")
    parser.add_argument("--list", action="store_true", help="list archived SKP documents and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    archive = ArchiveStore()
    if args.list:
        list_archive(archive)
        return 0

    if not args.briefs:
        parser.print_usage()
        print("No brief files given")
        return 1

    brief_files = [Path(f) for f in args.briefs]
    print(f"Briefs: {len(brief_files)}")
    print(f"Output: {args.output_dir}")
    if args.dry_run:
        print("Mode: DRY RUN (archive is not updated)")
    print("-" * 50)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    printer = SKPPrinter()

    success_count = 0
    error_count = 0
    generated_files = []

    for brief in brief_files:
        if not brief.exists():
            print(f"Error: file not found: {brief}")
            error_count += 1
            continue
        try:
            # one client per brief: asyncio.run() closes its loop after each file
            generated_files.append(
                process_brief(brief, archive, LLMExtractor(), args.output_dir, dry_run=args.dry_run, printer=printer)
            )
            success_count += 1
        except (SKPError, OSError) as e:
            logger.error("Failed to process %s: %s", brief, e)
            error_count += 1

    print("-" * 50)
    print(f"Done: {success_count} succeeded, {error_count} failed")
    if generated_files:
        print("\nGenerated PDFs:")
        for path in generated_files:
            print(f"  - {path}")
    return 0 if error_count == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
