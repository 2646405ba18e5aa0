"""
Two-pass Huffman compressor and the matching decompressor

Compressed layout:
  - 32-bit magic number HUFF_TREE
  - pre-order tree: 0 = internal node, 1 + 9-bit symbol = leaf
  - concatenated codes of every input byte, then the PSEUDO_EOF code
  - zero bits up to the next byte boundary
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from bitstream import EOF, BitInputStream, BitOutputStream
from huff_errors import (
    AlphabetError,
    BadHeaderError,
    HuffException,
    IncompletePayloadError,
    IncompleteTreeHeaderError,
    MalformedTreeError,
)
from huffman import (
    BITS_PER_INT,
    BITS_PER_WORD,
    PSEUDO_EOF,
    SYMBOL_BITS,
    Internal,
    Leaf,
    Node,
    build_huffman_tree,
    count_frequencies,
    generate_huffman_codes,
)

logger = logging.getLogger(__name__)

HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1

DEBUG_LOW = 1
DEBUG_HIGH = 4


def write_tree(root: Node, out: BitOutputStream) -> None:
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            out.write_bits(1, 1)
            out.write_bits(SYMBOL_BITS, node.symbol)
        else:
            out.write_bits(1, 0)
            # right first so the left subtree is written next
            stack.append(node.right)
            stack.append(node.left)


def read_tree(reader: BitInputStream) -> Node:
    """
    Rebuild a tree written by write_tree

    Uses an explicit stack of half-built internal nodes ([left]) so the
    depth of a corrupted header never touches the interpreter's recursion limit.
    Leaf symbols must be unique, which also caps the tree at ALPH_SIZE + 1 leaves,
    and one of them must be PSEUDO_EOF.
    Weights are not stored: leaves get 1, internal nodes the sum of their children.
    """
    pending: List[List[Optional[Node]]] = []
    seen: Set[int] = set()

    while True:
        bit = reader.read_bits(1)
        if bit == EOF:
            raise IncompleteTreeHeaderError("Huffman tree input incomplete: expected node, got EOF")

        if bit == 0:
            pending.append([None])
            continue

        symbol = reader.read_bits(SYMBOL_BITS)
        if symbol == EOF:
            raise IncompleteTreeHeaderError("Huffman tree input incomplete: expected word, got EOF")
        if symbol > PSEUDO_EOF:
            raise MalformedTreeError(f"Invalid Huffman tree: leaf symbol {symbol} is outside the alphabet")
        if symbol in seen:
            raise MalformedTreeError(f"Invalid Huffman tree: leaf symbol {symbol} appears twice")
        seen.add(symbol)

        node: Node = Leaf(symbol, 1)
        # attach the finished subtree, closing every parent it completes
        while pending:
            parent = pending[-1]
            if parent[0] is None:
                parent[0] = node
                break
            left = parent[0]
            pending.pop()
            node = Internal(left.weight + node.weight, left, node)
        else:
            if PSEUDO_EOF not in seen:
                raise MalformedTreeError("Invalid Huffman tree: no PSEUDO_EOF leaf")
            return node


@dataclass
class HuffResult:
    ok: bool
    data: bytes = b""
    error: Optional[HuffException] = None


class HuffProcessor:
    """
    Compresses and decompresses byte streams with a per-stream Huffman tree

    debug: 0 is silent, DEBUG_LOW logs tree and size statistics,
    DEBUG_HIGH also logs every code. Messages go to this module's logger at DEBUG level.
    """

    def __init__(self, debug: int = 0):
        self.debug = debug

    def _log(self, level: int, msg: str, *args) -> None:
        if self.debug >= level:
            logger.debug(msg, *args)

    # Compress

    def make_tree(self, reader: BitInputStream) -> Node:
        freq = count_frequencies(reader)
        self._log(DEBUG_LOW, "alphabet size %d (+1 for PSEUDO_EOF)", len(freq))
        return build_huffman_tree(freq)

    def write_output(self, root: Node, codes: Dict[int, str], reader: BitInputStream,
                     out: BitOutputStream) -> None:
        out.write_bits(BITS_PER_INT, HUFF_TREE)
        write_tree(root, out)
        header_bits = out.bits_written
        self._log(DEBUG_LOW, "header written: %d bits", header_bits)

        # codes as (length, value) pairs so each symbol is a single write
        packed = {symbol: (len(code), int(code, 2) if code else 0) for symbol, code in codes.items()}
        while True:
            val = reader.read_bits(BITS_PER_WORD)
            if val == EOF:
                val = PSEUDO_EOF
            entry = packed.get(val)
            if entry is None:
                raise AlphabetError(f"Unexpected word in input with value {val}: no code in table")
            out.write_bits(*entry)
            if val == PSEUDO_EOF:
                break

        self._log(DEBUG_LOW, "payload written: %d bits", out.bits_written - header_bits)

    def compress(self, reader: BitInputStream, out: BitOutputStream) -> None:
        root = self.make_tree(reader)
        codes = generate_huffman_codes(root)
        self._log(DEBUG_LOW, "tree has %d leaves", len(codes))
        for symbol in sorted(codes):
            self._log(DEBUG_HIGH, "code %d -> %s", symbol, codes[symbol] or "(empty)")
        reader.reset()
        self.write_output(root, codes, reader, out)

    # Decompress

    def read_compressed_bits(self, root: Node, reader: BitInputStream, out: BitOutputStream) -> None:
        # A tree that is a single leaf only comes from empty input: the leaf is PSEUDO_EOF
        if isinstance(root, Leaf):
            if root.symbol == PSEUDO_EOF:
                return
            raise MalformedTreeError("Invalid Huffman tree: only 1 word exists which is not PSEUDO_EOF")

        decoded = 0
        current: Node = root
        while True:
            bit = reader.read_bits(1)
            if bit == EOF:
                raise IncompletePayloadError(
                    "Compressed input incomplete: actual EOF encountered before PSEUDO_EOF")

            current = current.left if bit == 0 else current.right
            if current is None:
                raise MalformedTreeError("Invalid compressed input: traversed out of Huffman tree")

            if isinstance(current, Leaf):
                if current.symbol == PSEUDO_EOF:
                    self._log(DEBUG_LOW, "decoded %d words", decoded)
                    return
                out.write_bits(BITS_PER_WORD, current.symbol)
                decoded += 1
                current = root

    def decompress(self, reader: BitInputStream, out: BitOutputStream) -> None:
        magic = reader.read_bits(BITS_PER_INT)
        if magic != HUFF_TREE:
            raise BadHeaderError(f"HUFF_TREE invalid, expected {HUFF_TREE:#010x} got {magic:#x}")
        root = read_tree(reader)
        self._log(DEBUG_LOW, "tree header read: %d bits", reader.bits_read)
        self.read_compressed_bits(root, reader, out)

    # Buffers

    def compress_bytes(self, data: bytes) -> bytes:
        out = BitOutputStream()
        self.compress(BitInputStream(data), out)
        return out.getvalue()

    def decompress_bytes(self, data: bytes) -> bytes:
        out = BitOutputStream()
        self.decompress(BitInputStream(data), out)
        return out.getvalue()

    def try_compress(self, data: bytes) -> HuffResult:
        try:
            return HuffResult(True, self.compress_bytes(data))
        except HuffException as e:
            return HuffResult(False, error=e)

    def try_decompress(self, data: bytes) -> HuffResult:
        try:
            return HuffResult(True, self.decompress_bytes(data))
        except HuffException as e:
            return HuffResult(False, error=e)


def compress_bytes(data: bytes) -> bytes:
    return HuffProcessor().compress_bytes(data)


def decompress_bytes(data: bytes) -> bytes:
    return HuffProcessor().decompress_bytes(data)
