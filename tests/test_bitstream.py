from bitstream import EOF, BitInputStream, BitOutputStream


def test_read_bits_msb_first():
    reader = BitInputStream(b"\xa5")
    assert reader.read_bits(4) == 0b1010
    assert reader.read_bits(4) == 0b0101
    assert reader.read_bits(1) == EOF


def test_short_read_does_not_advance():
    reader = BitInputStream(b"\xff\x00")
    assert reader.read_bits(12) == 0xFF0
    assert reader.read_bits(8) == EOF
    assert reader.bits_read == 12
    assert reader.read_bits(4) == 0


def test_reset():
    reader = BitInputStream(b"AB")
    assert reader.read_bits(8) == 65
    reader.reset()
    assert reader.read_bits(16) == 0x4142


def test_empty_input():
    assert BitInputStream(b"").read_bits(1) == EOF


def test_write_bits_pads_last_byte():
    out = BitOutputStream()
    out.write_bits(3, 0b101)
    out.write_bits(5, 0b00001)
    out.write_bits(2, 0b11)
    assert out.bits_written == 10
    assert out.getvalue() == b"\xa1\xc0"


def test_write_bits_keeps_low_bits_only():
    out = BitOutputStream()
    out.write_bits(4, 0xFF)
    out.write_bits(0, 1)
    assert out.getvalue() == b"\xf0"


def test_write_to_and_from_file(tmp_path):
    out = BitOutputStream()
    out.write_bits(32, 0xDEADBEEF)
    path = tmp_path / "bits.bin"
    assert out.write_to(path) == 4
    assert BitInputStream.from_file(path).read_bits(32) == 0xDEADBEEF
