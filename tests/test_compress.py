import csv

import pytest

import compress


def test_compress_file_writes_packed_bytes(tmp_path):
    src = tmp_path / "book.txt"
    src.write_text("aabbbcc", encoding="utf-8")
    out = tmp_path / "book.huff"

    stats = compress.compress_file(src, out)

    assert out.read_bytes() == bytes([0xA1, 0xE0])
    assert stats.in_size_bytes == 7
    assert stats.out_size_bytes == 2
    assert stats.ratio_percent == 29
    assert stats.elapsed_ms >= 0


def test_compress_file_writes_code_table(tmp_path):
    src = tmp_path / "book.txt"
    src.write_text("aabbbcc", encoding="utf-8")
    codes_csv = tmp_path / "codes.csv"

    compress.compress_file(src, tmp_path / "book.huff", codes_csv=codes_csv)

    with codes_csv.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0] == {"symbol": "b", "codepoint": "98", "frequency": "3", "code": "0"}
    assert {r["symbol"]: r["code"] for r in rows} == {"a": "10", "b": "0", "c": "11"}


def test_ratio_percent_rounds_half_up():
    stats = compress.CompressionStats(None, None, in_size_bytes=200, out_size_bytes=101, elapsed_ms=0.0)
    assert stats.ratio_percent == 51
    stats = compress.CompressionStats(None, None, in_size_bytes=8, out_size_bytes=1, elapsed_ms=0.0)
    assert stats.ratio_percent == 13


def test_output_path_for(tmp_path):
    assert compress.output_path_for(tmp_path / "dir" / "Ulysses.txt", tmp_path) == tmp_path / "Ulysses.huff"


def test_main_reports_each_file(tmp_path, capsys):
    first = tmp_path / "one.txt"
    second = tmp_path / "two.txt"
    first.write_text("hello world\n", encoding="utf-8")
    second.write_text("aaaaaaaa", encoding="utf-8")
    outdir = tmp_path / "out"

    assert compress.main([str(first), str(second), "--outdir", str(outdir)]) == 0

    assert (outdir / "one.huff").exists()
    assert (outdir / "two.huff").read_bytes() == b"\xff"
    printed = capsys.readouterr().out
    assert f'Opening: "{first}"' in printed
    assert "Uncompressed file size: 8 bytes." in printed
    assert "Compressed file size: 1 bytes." in printed
    assert "Compression ratio: 13%." in printed
    assert printed.rstrip().endswith("Complete.")


def test_main_explicit_output(tmp_path):
    src = tmp_path / "in.txt"
    src.write_text("abc", encoding="utf-8")
    out = tmp_path / "custom.bin"

    assert compress.main([str(src), "--output", str(out)]) == 0
    assert out.exists()


def test_main_missing_file_continues(tmp_path, capsys):
    good = tmp_path / "good.txt"
    good.write_text("abc", encoding="utf-8")
    missing = tmp_path / "missing.txt"

    status = compress.main([str(missing), str(good), "--outdir", str(tmp_path)])

    assert status == 1
    printed = capsys.readouterr().out
    assert f"File not found: {missing}" in printed
    assert (tmp_path / "good.huff").exists()


def test_main_empty_file_is_reported(tmp_path, capsys):
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")

    assert compress.main([str(empty), "--outdir", str(tmp_path)]) == 1
    assert "is empty" in capsys.readouterr().out
    assert not (tmp_path / "empty.huff").exists()


def test_main_rejects_output_with_several_inputs(tmp_path):
    with pytest.raises(SystemExit):
        compress.main(["a.txt", "b.txt", "--output", str(tmp_path / "x")])
