# compress.py

"""
Compress text files with a Huffman code

Each input is read whole, encoded, and the packed bytes are written verbatim
(no header, no code table). A short size / ratio / time report is printed per file.

How to run:
  python compress.py WarAndPeace.txt Ulysses.txt
  python compress.py book.txt --output book.huff --codes-csv book_codes.csv
  python compress.py *.txt --outdir compressed --encoding latin-1
"""

from __future__ import annotations

import argparse
import csv
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import huffman as huff


DEFAULT_INPUTS = ["WarAndPeace.txt", "Ulysses.txt"]


@dataclass
class CompressionStats:
    input_path: Path
    output_path: Path
    in_size_bytes: int
    out_size_bytes: int
    elapsed_ms: float

    @property
    def ratio_percent(self) -> int:
        return int(self.out_size_bytes * 100.0 / max(1, self.in_size_bytes) + 0.5)


def read_input(path: Path, encoding: str = "utf-8") -> str:
    return path.read_text(encoding=encoding)


def write_output(path: Path, encoding: huff.HuffmanEncoding) -> int:
    path.write_bytes(encoding.data)
    return path.stat().st_size # size on disk in bytes


def write_code_table(path: Path, encoding: huff.HuffmanEncoding) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["symbol", "codepoint", "frequency", "code"])
        # most frequent first, shortest codes on top
        for symbol, count in encoding.frequencies.most_common():
            w.writerow([symbol, ord(symbol), count, encoding.codes[symbol]])


def compress_file(input_path: Path, output_path: Path, encoding: str = "utf-8",
                  codes_csv: Optional[Path] = None) -> CompressionStats:
    t0 = time.perf_counter_ns()
    in_size = input_path.stat().st_size

    text = read_input(input_path, encoding)
    result = huff.compress(text)
    out_size = write_output(output_path, result)
    if codes_csv is not None:
        write_code_table(codes_csv, result)

    t1 = time.perf_counter_ns()
    return CompressionStats(
        input_path=input_path,
        output_path=output_path,
        in_size_bytes=in_size,
        out_size_bytes=out_size,
        elapsed_ms=(t1 - t0) / 1_000_000.0,
    )


def print_stats(stats: CompressionStats) -> None:
    print(f"Uncompressed file size: {stats.in_size_bytes} bytes.")
    print(f"Compressed file size: {stats.out_size_bytes} bytes.")
    print(f"Compression ratio: {stats.ratio_percent}%.")
    print(f"Running time: {int(stats.elapsed_ms)} milliseconds.")


def output_path_for(input_path: Path, outdir: Path) -> Path:
    return outdir / (input_path.stem + ".huff")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Huffman-compress text files")
    ap.add_argument("inputs", nargs="*", default=DEFAULT_INPUTS, help="Text files to compress")
    ap.add_argument("--outdir", type=str, default=".", help="Directory for <stem>.huff outputs")
    ap.add_argument("--output", type=str, default=None, help="Explicit output path (single input only)")
    ap.add_argument("--encoding", type=str, default="utf-8", help="Text encoding of the inputs")
    ap.add_argument("--codes-csv", type=str, default=None, help="Write the code table to this CSV (single input only)")
    args = ap.parse_args(argv)

    inputs = [Path(p) for p in args.inputs]
    if len(inputs) > 1 and (args.output or args.codes_csv):
        ap.error("--output and --codes-csv need exactly one input file")

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    codes_csv = Path(args.codes_csv) if args.codes_csv else None

    failures = 0
    for input_path in inputs:
        print(f'Opening: "{input_path}"')
        output_path = Path(args.output) if args.output else output_path_for(input_path, outdir)
        try:
            stats = compress_file(input_path, output_path, args.encoding, codes_csv)
        except FileNotFoundError:
            print(f"File not found: {input_path}")
            failures += 1
        except huff.InvalidInputError:
            print(f"Nothing to compress, {input_path} is empty")
            failures += 1
        except (OSError, UnicodeDecodeError) as e:
            print(f"Could not compress {input_path}: {e}")
            failures += 1
        else:
            print_stats(stats)
        print()

    print("Complete.")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
