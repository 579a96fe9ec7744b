"""
Command-line entry point for the ImageDisk reader.

Decodes an IMD file and prints a summary of its header, comment, geometry
and tracks. Optionally lists sectors, dumps sector contents, lists problem
sectors and writes a raw sector image.

Exit status:
    0 - image decoded
    1 - image is malformed or cannot be flattened
    2 - file or settings access failed
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from imagedisk import __version__
from imagedisk.analysis import ImageStatistics, compute_statistics
from imagedisk.core import Settings, SettingsError, LogLevel, load_settings
from imagedisk.imaging import (
    FormatError,
    Image,
    ImageGeometryError,
    ImageReadError,
    SectorType,
    Track,
    load_imd,
    to_raw_image,
)
from imagedisk.utils import hexdump_lines, log_operation, log_performance, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FORMAT_ERROR = 1
EXIT_ACCESS_ERROR = 2

# Short labels for the sector listing
TYPE_LABELS = {
    SectorType.NONE: "unavailable",
    SectorType.NORMAL: "normal",
    SectorType.DELETED: "deleted",
    SectorType.NORMAL_WITH_ERROR: "data error",
    SectorType.DELETED_WITH_ERROR: "deleted, data error",
}


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="imd-info",
        description="Decode an ImageDisk (.IMD) floppy image and print its contents.",
    )
    parser.add_argument("fname", help="IMD file to read")
    parser.add_argument("--sectors", action="store_true",
                        help="List every sector record")
    parser.add_argument("--hex", action="store_true",
                        help="Hex dump sector contents (implies --sectors)")
    parser.add_argument("--errors", action="store_true",
                        help="List unavailable, data-error and deleted sectors")
    parser.add_argument("--to-raw", metavar="OUT",
                        help="Write a raw sector image to OUT")
    parser.add_argument("--fill-byte", type=lambda v: int(v, 0), metavar="N",
                        help="Fill value for missing sectors in the raw image")
    parser.add_argument("--config", metavar="PATH",
                        help="Settings file (default: user settings file)")
    parser.add_argument("--log-level", choices=[level.value for level in LogLevel],
                        help="Logging level")
    parser.add_argument("--log-file", metavar="PATH", help="Also log to this file")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def apply_arguments(settings: Settings, args: argparse.Namespace) -> Settings:
    """Override loaded settings with command-line options."""
    if args.log_level:
        settings.logging.level = LogLevel(args.log_level)
    if args.log_file:
        settings.logging.log_file = args.log_file
    if args.fill_byte is not None:
        settings.export.fill_byte = args.fill_byte
    if args.sectors:
        settings.display.show_sectors = True
    if args.hex:
        settings.display.hexdump = True
    return settings


# =============================================================================
# Report Output
# =============================================================================

def print_summary(console: Console, image: Image, stats: ImageStatistics,
                  settings: Settings) -> None:
    """Print header, comment and geometry summary."""
    console.print(f"[bold]Header:[/bold]  {escape(image.header)}", highlight=False)
    if settings.display.show_comment:
        console.print("[bold]Comment:[/bold]")
        console.print(image.comment.rstrip("\r\n") or "(none)", markup=False,
                      highlight=False)
    console.print(
        f"Version {image.version}, {stats.track_count} tracks, "
        f"{stats.sector_count} sectors, geometry {stats.geometry_string} (C/H), "
        f"sector sizes {stats.sector_sizes}",
        highlight=False,
    )
    counts = ", ".join(
        f"{TYPE_LABELS[t]}: {n}" for t, n in stats.type_counts.items() if n
    )
    console.print(f"Sectors: {counts or 'none'} ({stats.compressed_sectors} compressed)",
                  highlight=False)
    console.print(
        f"Condition: {stats.condition.value} "
        f"({stats.readable_percentage:.1f}% read cleanly)",
        highlight=False,
    )


def track_table(image: Image) -> Table:
    """Build the per-track table."""
    table = Table(title="Tracks")
    table.add_column("#", justify="right")
    table.add_column("Cyl", justify="right")
    table.add_column("Head", justify="right")
    table.add_column("Mode", justify="right")
    table.add_column("Sectors", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Maps")
    table.add_column("Sector map")

    for index, track in enumerate(image.tracks):
        maps = []
        if track.has_cylinder_map:
            maps.append("cyl")
        if track.has_head_map:
            maps.append("head")
        table.add_row(
            str(index),
            str(track.cylinder),
            str(track.head),
            str(track.mode),
            str(track.sector_count),
            str(track.sector_size),
            ",".join(maps) or "-",
            " ".join(str(n) for n in track.sector_numbering_map),
        )
    return table


def print_sectors(console: Console, track: Track, hexdump: bool) -> None:
    """Print the sectors of one track in logical order."""
    console.print(f"==== C{track.cylinder}:H{track.head} ====", highlight=False)
    for sector in track.sectors_in_order():
        label = TYPE_LABELS[sector.type]
        if sector.compressed:
            label += f", fill 0x{sector.fill_byte:02X}"
        console.print(
            f"  {sector.cylinder:02}.{sector.head}.{sector.sector:02} "
            f"{sector.size:5} {label}",
            highlight=False,
        )
        if hexdump and sector.data is not None and not sector.compressed:
            for line in hexdump_lines(sector.data):
                console.print(f"    {line}", markup=False, highlight=False)


def print_problem_sectors(console: Console, stats: ImageStatistics) -> None:
    """List unavailable, data-error and deleted sectors."""
    groups = (
        ("Unavailable", stats.unavailable_sectors),
        ("Data error", stats.error_sectors),
        ("Deleted", stats.deleted_sectors),
    )
    for title, addresses in groups:
        console.print(f"{title}: {len(addresses)}", highlight=False)
        for c, h, s in addresses:
            console.print(f"  {c:02}.{h}.{s:02}", highlight=False)


def export_raw(image: Image, out_fname: str, fill_byte: int) -> int:
    """Write a raw sector image and return its size."""
    raw = to_raw_image(image, fill_byte=fill_byte)
    with open(out_fname, 'wb') as out:
        out.write(raw)
    log_operation("export_raw", f"{out_fname}: {len(raw)} bytes")
    return len(raw)


# =============================================================================
# Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for imd-info.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    console = Console()
    err_console = Console(stderr=True)

    try:
        settings = apply_arguments(load_settings(args.config), args)
    except (SettingsError, ValueError) as e:
        err_console.print(f"Settings error: {e}", markup=False, highlight=False)
        return EXIT_ACCESS_ERROR

    setup_logging(settings.logging.log_file, settings.logging.level.to_logging())
    logger.debug("Settings: %s", settings.model_dump())

    started = time.monotonic()
    try:
        image = load_imd(args.fname)
    except ImageReadError as e:
        err_console.print(f"Cannot read image: {e}", markup=False, highlight=False)
        return EXIT_ACCESS_ERROR
    except FormatError as e:
        err_console.print(f"Not a valid IMD image: {e}", markup=False, highlight=False)
        return EXIT_FORMAT_ERROR

    stats = compute_statistics(image)
    log_performance("decode", time.monotonic() - started,
                    tracks=stats.track_count, sectors=stats.sector_count)

    print_summary(console, image, stats, settings)
    console.print(track_table(image))

    if settings.display.show_sectors or settings.display.hexdump:
        for track in image.tracks:
            print_sectors(console, track, settings.display.hexdump)

    if args.errors:
        print_problem_sectors(console, stats)

    if args.to_raw:
        try:
            size = export_raw(image, args.to_raw, settings.export.fill_byte)
        except ImageGeometryError as e:
            err_console.print(f"Cannot export raw image: {e}", markup=False,
                              highlight=False)
            return EXIT_FORMAT_ERROR
        except OSError as e:
            err_console.print(f"Cannot write {args.to_raw}: {e}", markup=False,
                              highlight=False)
            return EXIT_ACCESS_ERROR
        console.print(f"Wrote {size} bytes to {Path(args.to_raw).name}", highlight=False)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
