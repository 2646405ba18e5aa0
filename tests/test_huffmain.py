from huffmain import main


def test_compress_then_decompress(tmp_path, capsys):
    src = tmp_path / "in.txt"
    packed = tmp_path / "in.txt.hf"
    restored = tmp_path / "out.txt"
    src.write_bytes(b"the quick brown fox jumps over the lazy dog\n" * 50)

    assert main(["compress", str(src), str(packed)]) == 0
    assert "ratio:" in capsys.readouterr().out
    assert packed.stat().st_size < src.stat().st_size

    assert main(["decompress", str(packed), str(restored), "--debug", "4"]) == 0
    assert restored.read_bytes() == src.read_bytes()


def test_empty_file(tmp_path):
    src = tmp_path / "empty"
    packed = tmp_path / "empty.hf"
    restored = tmp_path / "empty.out"
    src.write_bytes(b"")

    assert main(["compress", str(src), str(packed)]) == 0
    assert packed.stat().st_size == 6
    assert main(["decompress", str(packed), str(restored)]) == 0
    assert restored.read_bytes() == b""


def test_decompress_garbage_fails(tmp_path, capsys):
    src = tmp_path / "garbage"
    src.write_bytes(b"definitely not compressed")

    assert main(["decompress", str(src), str(tmp_path / "out")]) == 1
    assert "HUFF_TREE invalid" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_missing_input(tmp_path, capsys):
    assert main(["compress", str(tmp_path / "nope"), str(tmp_path / "out")]) == 2
    assert "no such file" in capsys.readouterr().err
