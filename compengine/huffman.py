"""
Huffman entropy coder.

File layout (little-endian):
    [4B]  MAGIC "HUF1"
    [4B]  original_size (uint32)
    [2B]  symbol_count  (uint16)
    [5B each] symbol (uint8), frequency (uint32), ascending symbol order
    [N B] codes packed MSB-first, final byte zero-padded

The header stores the histogram rather than the tree. Decoding rebuilds
the tree with the same merge rule, so equal histograms always give equal
trees.
"""

import heapq
import struct
from collections import Counter
from typing import Dict, List, Optional, Tuple

from compengine.bitbuffer import BitBuffer
from compengine.bitreader import BitReader
from compengine.errors import CorruptStreamError, FormatError, InputError

MAGIC = b"HUF1"

_FIXED_HEADER = struct.Struct("<4sIH")
_SYMBOL_ENTRY = struct.Struct("<BI")

NO_CHILD = -1


class PrefixTree:
    """
    Huffman tree stored as an arena of nodes addressed by index.

    Leaves occupy indices 0..n-1 in ascending symbol order; every merge
    appends one internal node. Internal nodes have exactly two children.
    """

    def __init__(self) -> None:
        self.weights: List[int] = []
        self.symbols: List[int] = []
        self.left: List[int] = []
        self.right: List[int] = []
        self.root = NO_CHILD

    def __len__(self) -> int:
        return len(self.weights)

    def add_node(
        self, weight: int, symbol: int = -1, left: int = NO_CHILD, right: int = NO_CHILD
    ) -> int:
        """Append a node and return its index."""
        self.weights.append(weight)
        self.symbols.append(symbol)
        self.left.append(left)
        self.right.append(right)
        return len(self.weights) - 1

    def is_leaf(self, node: int) -> bool:
        return self.left[node] == NO_CHILD and self.right[node] == NO_CHILD


def build_frequency_table(data: bytes) -> Dict[int, int]:
    """Count byte occurrences, keyed in ascending byte order."""
    counts = Counter(data)
    return {symbol: counts[symbol] for symbol in sorted(counts)}


def build_prefix_tree(freqs: Dict[int, int]) -> Optional[PrefixTree]:
    """
    Build the prefix tree for a histogram.

    The two lowest-weight nodes are removed (ties go to the lower node
    index, i.e. the older node), the first becomes the left child and the
    second the right child of a new node weighing their sum.

    Args:
        freqs: Mapping of symbol to non-zero frequency

    Returns:
        The tree, or None for an empty histogram
    """
    if not freqs:
        return None

    tree = PrefixTree()
    heap: List[Tuple[int, int]] = []
    for symbol in sorted(freqs):
        node = tree.add_node(freqs[symbol], symbol)
        heap.append((freqs[symbol], node))
    heapq.heapify(heap)

    while len(heap) > 1:
        weight_a, a = heapq.heappop(heap)
        weight_b, b = heapq.heappop(heap)
        parent = tree.add_node(weight_a + weight_b, left=a, right=b)
        heapq.heappush(heap, (weight_a + weight_b, parent))

    tree.root = heap[0][1]
    return tree


def build_code_table(tree: PrefixTree) -> Dict[int, Tuple[int, int]]:
    """
    Derive symbol -> (code, bit length) by walking left=0, right=1.

    A single-leaf tree gets the one-bit code '0'.
    """
    if tree.is_leaf(tree.root):
        return {tree.symbols[tree.root]: (0, 1)}

    table: Dict[int, Tuple[int, int]] = {}
    stack = [(tree.root, 0, 0)]
    while stack:
        node, code, length = stack.pop()
        if tree.is_leaf(node):
            table[tree.symbols[node]] = (code, length)
            continue
        stack.append((tree.right[node], (code << 1) | 1, length + 1))
        stack.append((tree.left[node], code << 1, length + 1))
    return table


def pack_header(original_size: int, freqs: Dict[int, int]) -> bytes:
    """Serialize the magic, original size and histogram."""
    header = bytearray(_FIXED_HEADER.pack(MAGIC, original_size, len(freqs)))
    for symbol in sorted(freqs):
        header += _SYMBOL_ENTRY.pack(symbol, freqs[symbol])
    return bytes(header)


def parse_header(blob: bytes) -> Tuple[int, Dict[int, int], int]:
    """
    Parse a Huffman header.

    Args:
        blob: Complete compressed file contents

    Returns:
        (original_size, histogram, payload offset)

    Raises:
        FormatError: Bad magic, truncated or inconsistent histogram
    """
    if len(blob) < _FIXED_HEADER.size:
        raise FormatError(f"Huffman header needs {_FIXED_HEADER.size} bytes, got {len(blob)}")

    magic, original_size, symbol_count = _FIXED_HEADER.unpack_from(blob, 0)
    if magic != MAGIC:
        raise FormatError(f"Bad Huffman magic {magic!r}")
    if symbol_count > 256:
        raise FormatError(f"Symbol count {symbol_count} exceeds 256")

    offset = _FIXED_HEADER.size
    end = offset + symbol_count * _SYMBOL_ENTRY.size
    if len(blob) < end:
        raise FormatError(
            f"Histogram truncated: need {symbol_count} entries, "
            f"have {(len(blob) - offset) // _SYMBOL_ENTRY.size}"
        )

    freqs: Dict[int, int] = {}
    for symbol, freq in _SYMBOL_ENTRY.iter_unpack(blob[offset:end]):
        if symbol in freqs:
            raise FormatError(f"Duplicate symbol {symbol} in histogram")
        if freq == 0:
            raise FormatError(f"Zero frequency for symbol {symbol}")
        freqs[symbol] = freq

    if original_size > 0 and not freqs:
        raise FormatError(f"Original size {original_size} with an empty histogram")

    return original_size, freqs, end


def encode(data: bytes) -> bytes:
    """
    Compress a buffer.

    Args:
        data: Input bytes

    Returns:
        Header followed by the packed bitstream
    """
    if len(data) > 0xFFFFFFFF:
        raise InputError(f"Input of {len(data)} bytes exceeds the 32-bit size field")

    freqs = build_frequency_table(data)
    header = pack_header(len(data), freqs)
    if not data:
        return header

    codes = build_code_table(build_prefix_tree(freqs))

    output = BitBuffer()
    for byte in data:
        code, length = codes[byte]
        output.append_bits(code, length)

    return header + output.to_bytes()


def decode(blob: bytes) -> bytes:
    """
    Decompress a buffer produced by encode().

    Args:
        blob: Header followed by the packed bitstream

    Returns:
        Original bytes

    Raises:
        FormatError: Malformed header
        TruncatedStreamError: Bitstream ends before original_size symbols
        CorruptStreamError: Walk reaches a missing child
    """
    original_size, freqs, payload_offset = parse_header(blob)
    if original_size == 0:
        return b""

    tree = build_prefix_tree(freqs)
    reader = BitReader(blob[payload_offset:])
    output = bytearray()

    while len(output) < original_size:
        node = tree.root
        if tree.is_leaf(node):
            # Single-symbol stream: every symbol is the one-bit code '0'.
            if reader.next_code_bit():
                raise CorruptStreamError("Bit 1 has no child in a single-leaf tree")
        while not tree.is_leaf(node):
            if reader.next_code_bit():
                node = tree.right[node]
            else:
                node = tree.left[node]
        output.append(tree.symbols[node])

    return bytes(output)
