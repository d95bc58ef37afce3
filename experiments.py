# experiments.py

"""
Huffman coding tree experiments

Runs the encoder over synthetic text, with repeated runs, to measure each
pipeline stage and how close the code gets to the entropy of the source

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 7 --exp1_size_kb 1024 --exp2_max_mb 4
  python experiments.py --outdir results --runs 3 --exp1_generators uniform256,zipf128,single_symbol --no_plots

Notes:
  Sizes are counted in symbols (characters), one symbol per input byte of a
  latin-1 file.
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Callable

import matplotlib.pyplot as plt

import huffman as huff


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: Dict[str, int]) -> float:
    """
    Bits per symbol of a memoryless source with these frequencies
    """
    total = sum(ft.values())
    return sum((c / total) * math.log2(total / c) for c in ft.values())


def _sample_cdf(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: List[float]) -> List[float]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    return cdf


# Synthetic dataset generators

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> str:
    rng = random.Random(seed)
    return ''.join(chr(rng.randrange(0, alphabet)) for _ in range(size))

def gen_repetitive(size: int, dominant: str = 'A', dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    other_symbols = [chr(i) for i in range(256) if chr(i) != dominant]
    out = []
    for _ in range(size):
        if rng.random() < dom_frac:
            out.append(dominant)
        else:
            out.append(rng.choice(other_symbols))
    return ''.join(out)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return ''.join(chr(_sample_cdf(rng, cdf)) for _ in range(size))

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)

    cdf = _cdf(weights)
    return ''.join(chars[_sample_cdf(rng, cdf)] for _ in range(size))

def gen_single_symbol(size: int, seed: int = 0) -> str:
    # degenerate one-leaf tree, every symbol costs exactly one bit
    return 'a' * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant='A', dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant='A', dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size: int, seed: int, strict: bool = False) -> Tuple[str, str]:
    """
    Helper: if a dataset name is not recognized, we fall back to uniform256
    so the run does not fail completely, unless strict is set
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        if strict:
            raise ValueError(f"unknown generator {name!r}, expected one of {sorted(GENERATOR_REGISTRY)}")
        return f"{name}_fallback_uniform256", gen_uniform(size, alphabet=256, seed=seed)
    return name, fn(size, seed)




# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    input_symbols: int
    run_id: int
    unique_symbols: int
    leaf_nodes: int
    internal_nodes: int
    max_code_length: int

    count_ms: float
    build_tree_ms: float
    derive_codes_ms: float
    encode_ms: float
    pack_ms: float
    total_ms: float

    bit_length: int
    compressed_bytes: int
    pad_bits: int
    compression_ratio: float
    avg_code_length: float
    entropy_bits: float
    efficiency: float

    accounting_ok: int  # 1 or 0


def run_one(text: str) -> MetricRow:
    t0 = now_ns()
    ft = huff.count_frequencies(text)
    t1 = now_ns()
    root = huff.build_huffman_tree(ft)
    t2 = now_ns()
    code_map = huff.generate_huffman_codes(root)
    t3 = now_ns()
    bits = huff.huffman_encode(text, code_map)
    t4 = now_ns()
    packed = huff.pack_bits(bits)
    t5 = now_ns()

    leaves, internal = huff.count_nodes(root)
    n = len(ft)

    # Every output bit is accounted for by a code, every byte by 8 bits, and the tree is full
    accounting_ok = int(
        len(bits) == huff.weighted_path_length(ft, code_map)
        and len(packed) == math.ceil(len(bits) / 8)
        and leaves == n
        and internal == n - 1
    )

    avg_code_length = len(bits) / len(text)
    entropy = shannon_entropy(ft)
    # a single symbol source has zero entropy but still costs one bit per symbol
    efficiency = entropy / avg_code_length

    return MetricRow(
        exp_name="",
        dataset_name="",
        input_symbols=len(text),
        run_id=0,
        unique_symbols=n,
        leaf_nodes=leaves,
        internal_nodes=internal,
        max_code_length=max(len(c) for c in code_map.values()),
        count_ms=ns_to_ms(t1 - t0),
        build_tree_ms=ns_to_ms(t2 - t1),
        derive_codes_ms=ns_to_ms(t3 - t2),
        encode_ms=ns_to_ms(t4 - t3),
        pack_ms=ns_to_ms(t5 - t4),
        total_ms=ns_to_ms(t5 - t0),
        bit_length=len(bits),
        compressed_bytes=len(packed),
        pad_bits=huff.padding_bits(len(bits)),
        compression_ratio=len(packed) / len(text),
        avg_code_length=avg_code_length,
        entropy_bits=entropy,
        efficiency=efficiency,
        accounting_ok=accounting_ok,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = [
    "compression_ratio", "avg_code_length", "entropy_bits", "efficiency",
    "build_tree_ms", "encode_ms", "pack_ms", "total_ms",
]

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, input_symbols and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.input_symbols)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "input_symbols", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("accounting_ok_rate")

    def mean_stdev(vals: List[float]) -> Tuple[float, float]:
        if len(vals) == 1:
            return vals[0], 0.0
        return statistics.mean(vals), statistics.stdev(vals)

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "input_symbols": size,
                "n_runs": len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            row["accounting_ok_rate"] = sum(x.accounting_ok for x in items) / len(items)
            w.writerow(row)



# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [mean_for(d, "compression_ratio") for d in datasets], marker="o")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Input Symbols")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(x, [mean_for(d, "avg_code_length") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="o", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length_vs_entropy.png", dpi=200)
    plt.close()

    stages = ["count_ms", "build_tree_ms", "derive_codes_ms", "encode_ms", "pack_ms"]
    plt.figure()
    bottom = [0.0] * len(datasets)
    for stage in stages:
        y = [mean_for(d, stage) for d in datasets]
        plt.bar(x, y, bottom=bottom, label=stage[:-3])
        bottom = [b + v for b, v in zip(bottom, y)]
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Experiment 1: Time per Stage by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_stage_time.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    distributions = sorted(set(r.dataset_name for r in exp_rows))

    for dist in distributions:
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.input_symbols for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.input_symbols == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for field in ("encode_ms", "pack_ms", "total_ms"):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=field[:-3])
        plt.xlabel("Input Size (symbols)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Runtime vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()

        plt.figure()
        plt.plot(sizes, [mean_size(s, "compression_ratio") for s in sizes], marker="o")
        plt.xlabel("Input Size (symbols)")
        plt.ylabel("Compressed Bytes / Input Symbols")
        plt.title(f"Experiment 2: Compression Ratio vs Size ({dist})")
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_compression_ratio_{dist}.png", dpi=200)
        plt.close()


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_alphabet_size"]
    if not exp_rows:
        return

    alphabets = sorted(set(r.unique_symbols for r in exp_rows))

    def mean_alpha(n: int, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.unique_symbols == n]
        return statistics.mean(vals) if vals else float("nan")

    plt.figure()
    plt.plot(alphabets, [mean_alpha(n, "build_tree_ms") for n in alphabets], marker="o", label="build tree")
    plt.plot(alphabets, [mean_alpha(n, "derive_codes_ms") for n in alphabets], marker="o", label="derive codes")
    plt.xscale("log", base=2)
    plt.xlabel("Distinct Symbols")
    plt.ylabel("Time (ms)")
    plt.title("Experiment 3: Tree Cost vs Alphabet Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp3_tree_time.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(alphabets, [mean_alpha(n, "max_code_length") for n in alphabets], marker="o", label="max code length")
    plt.plot(alphabets, [mean_alpha(n, "avg_code_length") for n in alphabets], marker="o", label="avg code length")
    plt.xscale("log", base=2)
    plt.xlabel("Distinct Symbols")
    plt.ylabel("Bits")
    plt.title("Experiment 3: Code Length vs Alphabet Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp3_code_length.png", dpi=200)
    plt.close()





# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    def record(row: MetricRow, exp_name: str, dataset_name: str, run_id: int) -> None:
        row.exp_name = exp_name
        row.dataset_name = dataset_name
        row.run_id = run_id
        rows.append(row)

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, text = generate_dataset(gen_name, fixed_size, args.seed + run_id, args.strict)
                record(run_one(text), "exp1_distribution", dataset_name, run_id)

    # Experiment 2: size scaling (multiple sizes, powers of 2)
    if not args.no_exp2:
        min_size = max(1, args.exp2_min_kb) * 1024
        max_size = max(1, args.exp2_max_mb) * 1024 * 1024

        sizes: List[int] = []
        s = min_size
        while s <= max_size:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, text = generate_dataset(gen_name, size, args.seed + 10_000 + size + run_id, args.strict)
                    record(run_one(text), "exp2_size_scaling", dataset_name, run_id)

    # Experiment 3: alphabet size sweep on uniform text
    if not args.no_exp3:
        size = max(1, args.exp3_size_kb) * 1024
        alphabet = 2
        while alphabet <= args.exp3_max_alphabet:
            for run_id in range(1, args.runs + 1):
                text = gen_uniform(size, alphabet=alphabet, seed=args.seed + 200_000 + alphabet + run_id)
                record(run_one(text), "exp3_alphabet_size", f"uniform{alphabet}", run_id)
            alphabet *= 2

    return rows

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--strict", action="store_true", help="Fail on unknown generator names instead of falling back")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (alphabet size)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=512, help="Experiment 1 fixed input size in K symbols")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single_symbol",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in K symbols (power-of-two growth)")
    ap.add_argument("--exp2_max_mb", type=int, default=4, help="Experiment 2 max size in M symbols (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_size_kb", type=int, default=256, help="Experiment 3 input size in K symbols")
    ap.add_argument("--exp3_max_alphabet", type=int, default=4096, help="Experiment 3 largest alphabet (powers of two from 2)")
    return ap

def main(argv: List[str] = None) -> int:
    args = build_parser().parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows = run_experiments(args)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)
        plot_experiment_3(rows, outdir)

    ok_rate = sum(r.accounting_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Bit accounting rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
