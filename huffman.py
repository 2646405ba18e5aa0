import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Union

from bitstream import EOF
from huff_errors import AlphabetError

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD # 256 byte values
PSEUDO_EOF = ALPH_SIZE # synthetic end-of-stream symbol (256)
SYMBOL_BITS = BITS_PER_WORD + 1 # 9 bits hold 0..256 in the serialized tree


@dataclass
class Leaf: # Huffman tree leaf
    symbol: int
    weight: int


@dataclass
class Internal: # Huffman tree internal node, always has both children
    weight: int
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


def count_frequencies(reader) -> Dict[int, int]: # reader: BitInputStream positioned at the start of the data
    freq: Dict[int, int] = {}
    while True:
        val = reader.read_bits(BITS_PER_WORD)
        if val == EOF:
            break
        if not 0 <= val < ALPH_SIZE:
            raise AlphabetError(f"Unexpected word in input with value {val}")
        freq[val] = freq.get(val, 0) + 1
    return freq


def build_huffman_tree(frequency_table: Dict[int, int]) -> Node: # frequency_table: dict of symbol -> frequency
    counter = itertools.count() # insertion order breaks weight ties
    priority_queue = [(weight, next(counter), Leaf(symbol, weight))
                      for symbol, weight in sorted(frequency_table.items()) if weight > 0]
    priority_queue.append((1, next(counter), Leaf(PSEUDO_EOF, 1)))
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged = Internal(left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged.weight, next(counter), merged))

    return priority_queue[0][2] # root of the tree


def generate_huffman_codes(root: Node) -> Dict[int, str]:
    """
    Walk the tree with an explicit stack, 0 = left and 1 = right
    A tree that is a single leaf gives that symbol the empty code
    """
    codes: Dict[int, str] = {}
    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        if isinstance(node, Leaf):
            codes[node.symbol] = path
        else:
            stack.append((node.right, path + "1"))
            stack.append((node.left, path + "0"))
    return codes


def tree_leaves(root: Node) -> List[Leaf]: # leaves in left-to-right order
    leaves: List[Leaf] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            leaves.append(node)
        else:
            stack.append(node.right)
            stack.append(node.left)
    return leaves
