"""
Command line front end for the Huffman processor

How to run:
  python huffmain.py compress input.txt input.txt.hf
  python huffmain.py decompress input.txt.hf input.out --debug 4 --verbose
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bitstream import BitInputStream, BitOutputStream
from huff_errors import HuffException
from processor import HuffProcessor


def run(mode: str, src: Path, dst: Path, debug: int) -> int:
    processor = HuffProcessor(debug=debug)
    reader = BitInputStream.from_file(src)
    out = BitOutputStream()

    if mode == "compress":
        processor.compress(reader, out)
    else:
        processor.decompress(reader, out)

    in_bytes = src.stat().st_size
    out_bytes = out.write_to(dst)
    print(f"{mode}: {src} ({in_bytes} bytes) -> {dst} ({out_bytes} bytes)")
    if mode == "compress" and in_bytes:
        print(f"ratio: {out_bytes / in_bytes:.3f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman compress/decompress a file")
    ap.add_argument("mode", choices=("compress", "decompress"))
    ap.add_argument("input", type=str, help="File to read")
    ap.add_argument("output", type=str, help="File to write")
    ap.add_argument("--debug", type=int, default=0, help="Debug level (1 = statistics, 4 = every code)")
    ap.add_argument("--verbose", action="store_true", help="Show debug messages on stderr")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(message)s",
    )

    src = Path(args.input)
    if not src.is_file():
        print(f"error: no such file: {src}", file=sys.stderr)
        return 2

    try:
        return run(args.mode, src, Path(args.output), args.debug)
    except HuffException as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
