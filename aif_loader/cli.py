"""Inspect an iBoot-family image without Binary Ninja.

Runs the synchronous part of the load against an in-memory host and prints
what the view would be set up with.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from aif_loader import log as loader_log
from aif_loader.coordinator import Rejected, open_image
from aif_loader.decoder import CapstoneArchitecture
from aif_loader.host import MemoryHost, RawImage
from aif_loader.settings import LoadSettings
from aif_loader.symbols import Durability


def _parse_int(text: str) -> int:
    return int(text, 0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aif-loader",
        description="Identify an iBoot-family image and predict its base address.",
    )
    parser.add_argument("image", type=Path, help="raw iBoot/iBEC/iBSS/SecureROM/AVPBooter image")
    parser.add_argument("--base", type=_parse_int, default=None, help="use this base address instead of predicting it")
    parser.add_argument("--no-fixed-symbols", action="store_true", help="do not define fixed-offset symbols")
    parser.add_argument(
        "--durability",
        choices=[d.value for d in Durability],
        default=Durability.AUTO.value,
        help="durability of fixed-offset symbols (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="show debug messages")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        data = args.image.read_bytes()
    except OSError as e:
        print(f"error: cannot read {args.image}: {e}", file=sys.stderr)
        return 1

    level = loader_log.DEBUG if args.verbose else loader_log.WARN
    log = loader_log.LoaderLog(loader_log.StderrSink(level))
    settings = LoadSettings(
        define_fixed_symbols=not args.no_fixed_symbols,
        use_function_heuristics=False,
        fixed_symbol_durability=Durability(args.durability),
        base_address=args.base,
    )

    host = MemoryHost(data)
    result = open_image(RawImage(data), host, CapstoneArchitecture(), log, settings)
    if isinstance(result, Rejected):
        print(f"error: {args.image}: not an iBoot-family image ({result.reason})", file=sys.stderr)
        return 1

    coordinator = result.coordinator
    print(f"variant:  {coordinator.name}{' (ROM)' if coordinator.variant.is_rom else ''}")
    if coordinator.build_info is not None:
        info = coordinator.build_info
        print(f"banner:   {info.banner}")
        print(f"style:    {info.style}{' (release)' if info.is_release else ''}")
        print(f"tag:      {info.tag}")
    print(f"base:     {hex(coordinator.base)}{'' if coordinator.base else ' (unknown)'}")

    for seg in host.segments:
        print(f"segment:  {hex(seg.start)}-{hex(seg.start + seg.length)} {seg.permissions}")
    for sec in host.sections:
        print(f"section:  {sec.name} {hex(sec.start)}-{hex(sec.start + sec.length)}")
    for sym in sorted(host.symbols.values(), key=lambda s: s.address):
        print(f"symbol:   {hex(sym.address)} {sym.kind.value:<8} {sym.name} ({sym.durability.value})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
