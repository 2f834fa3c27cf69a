#!/usr/bin/env python3
"""
Key normalization for decoded library trees.

iTunes exports use human-readable keys such as ``"Track ID"`` or
``"Library Persistent ID"``. Everything downstream works with snake_case
keys instead, so the whole tree is rewritten once right after decoding.
"""

import re
from typing import Any, List

_WHITESPACE = re.compile(r"\s")


def normalize_key(key: Any) -> Any:
    """Lowercase a key and replace each whitespace character with '_'."""
    if not isinstance(key, str):
        return key
    return _WHITESPACE.sub("_", key.lower())


def normalize_keys(tree: Any) -> Any:
    """
    Rewrite every dictionary key in ``tree`` in place.

    Dictionaries nested inside lists are visited as well; list and scalar
    values are otherwise left alone. Key order is preserved and, when two keys
    collapse onto the same normalized name, the later one wins.

    Args:
        tree: Decoded property list value (usually the root dictionary).

    Returns:
        The same ``tree`` object, for convenience.
    """
    # Iterative walk, depth is not limited by the recursion limit
    stack: List[Any] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            items = list(node.items())
            node.clear()
            for key, value in items:
                node[normalize_key(key)] = value
                if isinstance(value, (dict, list)):
                    stack.append(value)
        elif isinstance(node, list):
            stack.extend(item for item in node if isinstance(item, (dict, list)))
    return tree
