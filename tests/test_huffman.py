import pytest

from bitstream import BitInputStream
from huff_errors import AlphabetError
from huffman import (
    PSEUDO_EOF,
    Internal,
    Leaf,
    build_huffman_tree,
    count_frequencies,
    generate_huffman_codes,
    tree_leaves,
)


class FakeReader:
    def __init__(self, words):
        self.words = list(words)

    def read_bits(self, n):
        return self.words.pop(0) if self.words else -1


def test_count_frequencies():
    reader = BitInputStream(b"abracadabra")
    assert count_frequencies(reader) == {97: 5, 98: 2, 114: 2, 99: 1, 100: 1}
    # reader is exhausted until reset
    assert reader.read_bits(8) == -1


def test_count_frequencies_empty():
    assert count_frequencies(BitInputStream(b"")) == {}


def test_count_frequencies_rejects_word_outside_alphabet():
    with pytest.raises(AlphabetError):
        count_frequencies(FakeReader([1, 2, 300]))


def test_empty_table_gives_single_eof_leaf():
    root = build_huffman_tree({})
    assert root == Leaf(PSEUDO_EOF, 1)
    assert generate_huffman_codes(root) == {PSEUDO_EOF: ""}


def test_single_repeated_byte():
    root = build_huffman_tree({65: 5})
    assert isinstance(root, Internal)
    assert root.weight == 6
    # lighter node is popped first and becomes the left child
    assert root.left == Leaf(PSEUDO_EOF, 1)
    assert root.right == Leaf(65, 5)
    assert generate_huffman_codes(root) == {PSEUDO_EOF: "0", 65: "1"}


def test_zero_weights_are_skipped():
    root = build_huffman_tree({1: 0, 2: 3})
    assert sorted(leaf.symbol for leaf in tree_leaves(root)) == [2, PSEUDO_EOF]


def test_full_alphabet():
    root = build_huffman_tree({s: 1 for s in range(256)})
    leaves = tree_leaves(root)
    assert len(leaves) == 257
    assert len({leaf.symbol for leaf in leaves}) == 257
    codes = generate_huffman_codes(root)
    assert len(codes) == 257
    assert all(len(code) >= 1 for code in codes.values())


def test_weights_sum_to_total():
    freq = {10: 7, 20: 3, 30: 3, 40: 1}
    root = build_huffman_tree(freq)
    assert root.weight == sum(freq.values()) + 1


def test_tree_is_deterministic():
    freq = {s: (s * 7) % 5 + 1 for s in range(40)}
    assert build_huffman_tree(freq) == build_huffman_tree(dict(reversed(list(freq.items()))))


def test_codes_are_prefix_free():
    freq = {s: (s * 31) % 17 + 1 for s in range(100)}
    codes = list(generate_huffman_codes(build_huffman_tree(freq)).values())
    for i, a in enumerate(codes):
        for j, b in enumerate(codes):
            if i != j:
                assert not b.startswith(a)


def test_frequent_symbols_get_shorter_codes():
    codes = generate_huffman_codes(build_huffman_tree({1: 1000, 2: 10, 3: 10, 4: 10}))
    assert len(codes[1]) == 1
    assert all(len(codes[s]) > 1 for s in (2, 3, 4, PSEUDO_EOF))
