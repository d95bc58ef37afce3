import csv
import math

import pytest

import experiments as exp


@pytest.mark.parametrize("name", sorted(exp.GENERATOR_REGISTRY))
def test_generators_are_sized_and_seeded(name):
    dataset_name, text = exp.generate_dataset(name, 2048, seed=5)
    assert dataset_name == name
    assert isinstance(text, str)
    assert len(text) == 2048
    assert exp.generate_dataset(name, 2048, seed=5)[1] == text


def test_unknown_generator_falls_back():
    dataset_name, text = exp.generate_dataset("nope", 100, seed=1)
    assert dataset_name == "nope_fallback_uniform256"
    assert len(text) == 100


def test_unknown_generator_strict_raises():
    with pytest.raises(ValueError):
        exp.generate_dataset("nope", 100, seed=1, strict=True)


def test_shannon_entropy():
    assert exp.shannon_entropy({"a": 1, "b": 1}) == pytest.approx(1.0)
    assert exp.shannon_entropy({"a": 1, "b": 1, "c": 1, "d": 1}) == pytest.approx(2.0)
    assert exp.shannon_entropy({"a": 10}) == pytest.approx(0.0)


def test_run_one_metrics():
    text = exp.gen_english_like(5000, seed=3)
    row = exp.run_one(text)

    assert row.accounting_ok == 1
    assert row.input_symbols == 5000
    assert row.leaf_nodes == row.unique_symbols
    assert row.internal_nodes == row.unique_symbols - 1
    assert row.compressed_bytes == math.ceil(row.bit_length / 8)
    assert row.pad_bits == row.compressed_bytes * 8 - row.bit_length
    # Huffman stays within one bit of the entropy
    assert row.entropy_bits <= row.avg_code_length < row.entropy_bits + 1
    assert 0 < row.efficiency <= 1


def test_run_one_single_symbol():
    row = exp.run_one("a" * 100)
    assert row.accounting_ok == 1
    assert row.unique_symbols == 1
    assert row.internal_nodes == 0
    assert row.bit_length == 100
    assert row.compressed_bytes == 13
    assert row.max_code_length == 1
    assert row.efficiency == 0


def test_csv_outputs(tmp_path):
    rows = []
    for run_id in (1, 2):
        row = exp.run_one(exp.gen_uniform(1000, alphabet=16, seed=run_id))
        row.exp_name = "exp1_distribution"
        row.dataset_name = "uniform16"
        row.run_id = run_id
        rows.append(row)

    metrics = tmp_path / "metrics.csv"
    summary = tmp_path / "summary.csv"
    exp.write_csv(metrics, rows)
    exp.group_summary(rows, summary)

    with metrics.open(newline="", encoding="utf-8") as f:
        assert len(list(csv.DictReader(f))) == 2
    with summary.open(newline="", encoding="utf-8") as f:
        grouped = list(csv.DictReader(f))
    assert len(grouped) == 1
    assert grouped[0]["n_runs"] == "2"
    assert float(grouped[0]["accounting_ok_rate"]) == 1.0


def test_main_csv_only(tmp_path, capsys):
    outdir = tmp_path / "results"
    status = exp.main([
        "--outdir", str(outdir), "--runs", "1", "--no_plots",
        "--exp1_size_kb", "1", "--exp1_generators", "zipf64,single_symbol",
        "--no_exp2",
        "--exp3_size_kb", "1", "--exp3_max_alphabet", "8",
    ])

    assert status == 0
    assert (outdir / "metrics.csv").exists()
    assert (outdir / "summary.csv").exists()
    assert not list(outdir.glob("*.png"))
    printed = capsys.readouterr().out
    # 2 generators for exp1, alphabets 2/4/8 for exp3
    assert "Wrote 5 rows" in printed
    assert "Bit accounting rate across all runs: 1.000" in printed


def test_main_with_plots(tmp_path):
    outdir = tmp_path / "results"
    exp.main([
        "--outdir", str(outdir), "--runs", "1",
        "--exp1_size_kb", "1", "--exp1_generators", "english_like",
        "--no_exp2",
        "--exp3_size_kb", "1", "--exp3_max_alphabet", "4",
    ])
    assert (outdir / "exp1_compression_ratio.png").exists()
    assert (outdir / "exp3_code_length.png").exists()
