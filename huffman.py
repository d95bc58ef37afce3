import heapq
import itertools
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Sequence, Tuple, Union


class InvalidInputError(ValueError):
    """Raised when a coding tree is requested for an input with no symbols."""


@dataclass(frozen=True)
class Leaf: # one symbol of the input alphabet
    symbol: Hashable
    weight: int


@dataclass(frozen=True)
class Internal: # merge point, weight is the sum of both children
    weight: int
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


def count_frequencies(data: Iterable[Hashable]) -> Counter: # single pass, symbol -> occurrence count
    return Counter(data)


def build_huffman_tree(frequency_table: Dict[Hashable, int]) -> Node:
    """
    Greedily merge the two lightest nodes until one root remains.

    Equal weights leave the heap in insertion order: leaves are pushed in the
    table's iteration order, each merged node takes the next sequence number.
    The first node popped becomes the left child.
    """
    if not frequency_table:
        raise InvalidInputError("cannot build a coding tree from an empty frequency table")

    sequence = itertools.count()
    priority_queue = [(weight, next(sequence), Leaf(symbol, weight)) for symbol, weight in frequency_table.items()]
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged_weight = left_weight + right_weight
        heapq.heappush(priority_queue, (merged_weight, next(sequence), Internal(merged_weight, left, right)))

    return priority_queue[0][2] # root of the tree, a bare Leaf for a one-symbol alphabet


def count_nodes(root: Node) -> Tuple[int, int]: # (leaves, internal nodes)
    leaves = internal = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            leaves += 1
        else:
            internal += 1
            stack.append(node.left)
            stack.append(node.right)
    return leaves, internal


def tree_depth(root: Node) -> int: # edges on the longest root-to-leaf path
    if isinstance(root, Leaf):
        return 0
    return 1 + max(tree_depth(root.left), tree_depth(root.right))


def generate_huffman_codes(root: Node) -> Dict[Hashable, str]:
    # A lone leaf has no path to take, give it a one bit code
    if isinstance(root, Leaf):
        return {root.symbol: "1"}

    codes = {}
    def generate_codes_helper(node, current_code): # left appends '0', right appends '1'
        if isinstance(node, Leaf):
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes # fresh mapping of symbols to their Huffman codes


def huffman_encode(data: Iterable[Hashable], code_map: Dict[Hashable, str]) -> str: # KeyError if code_map misses a symbol
    return ''.join(code_map[symbol] for symbol in data)


def padding_bits(bit_length: int) -> int:
    return (8 - bit_length % 8) % 8


def pack_bits(bitstring: str) -> bytes:
    """
    Pack a string of '0'/'1' into bytes, first bit of each group as the MSB.
    The last group is right-padded with zeros; the output is ceil(len / 8) bytes.
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for ch in bitstring:
        acc = (acc << 1) | (1 if ch == '1' else 0)
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc)
            acc = 0
            acc_bits = 0

    if acc_bits != 0:
        out.append(acc << padding_bits(acc_bits))

    return bytes(out)


def weighted_path_length(frequency_table: Dict[Hashable, int], code_map: Dict[Hashable, str]) -> int:
    return sum(len(code_map[symbol]) * count for symbol, count in frequency_table.items())


@dataclass
class HuffmanEncoding:
    """
    Result of one encoding session.

    ``data`` is the raw packed output: no header, no code table and no bit
    count, so ``codes`` and ``bit_length`` must travel separately for anyone
    who wants to read it back.
    """
    root: Node
    frequencies: Dict[Hashable, int]
    codes: Dict[Hashable, str]
    bits: str
    data: bytes

    @property
    def bit_length(self) -> int:
        return len(self.bits)

    @property
    def pad_bits(self) -> int:
        return padding_bits(self.bit_length)


def compress(data: Sequence[Hashable]) -> HuffmanEncoding:
    """
    Run the whole pipeline over ``data``: text -> frequencies -> tree -> codes -> bits -> bytes.

    Raises InvalidInputError when ``data`` is empty.
    """
    frequencies = count_frequencies(data)
    root = build_huffman_tree(frequencies)
    codes = generate_huffman_codes(root)
    bits = huffman_encode(data, codes)
    return HuffmanEncoding(
        root=root,
        frequencies=frequencies,
        codes=codes,
        bits=bits,
        data=pack_bits(bits),
    )
