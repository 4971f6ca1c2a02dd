"""B-tree indexes mapping column values to row ids, and their binary format."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, Optional

from liminaldb.types import DatabaseError, ErrorCode

DEFAULT_DEGREE = 4

_KEY_INT = 0
_KEY_FLOAT = 1
_KEY_STRING = 2
_KEY_BOOL = 3


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _key_text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_keys(a: Any, b: Any) -> int:
    """Return -1, 0 or 1 ordering two index keys.

    Keys of the same kind compare by value; anything else compares by its
    text form.
    """
    if isinstance(a, bool) and isinstance(b, bool):
        return _sign(a, b)
    if _is_int(a) and _is_int(b):
        return _sign(a, b)
    if isinstance(a, float) and isinstance(b, float):
        return _sign(a, b)
    if isinstance(a, str) and isinstance(b, str):
        return _sign(a, b)
    return _sign(_key_text(a), _key_text(b))


@dataclass
class BTreeNode:
    """A node holding sorted keys, the row ids of each key and child nodes."""

    is_leaf: bool = True
    keys: list[Any] = field(default_factory=list)
    values: list[list[int]] = field(default_factory=list)
    children: list["BTreeNode"] = field(default_factory=list)


class BTree:
    """A B-tree of minimum degree ``degree``; a node holds at most 2*degree-1 keys."""

    def __init__(self, degree: int = DEFAULT_DEGREE, root: Optional[BTreeNode] = None) -> None:
        self.degree = degree if degree >= 2 else DEFAULT_DEGREE
        self.root = root if root is not None else BTreeNode(is_leaf=True)

    @property
    def _max_keys(self) -> int:
        return 2 * self.degree - 1

    def search(self, key: Any) -> Optional[list[int]]:
        """Return the row ids stored under key, or None if it is absent."""
        node = self.root
        while node is not None:
            i = 0
            while i < len(node.keys) and compare_keys(node.keys[i], key) < 0:
                i += 1
            if i < len(node.keys) and compare_keys(node.keys[i], key) == 0:
                return node.values[i]
            if node.is_leaf:
                return None
            node = node.children[i]
        return None

    def insert(self, key: Any, row_id: int) -> None:
        """Add row_id under key, creating the key if needed."""
        if len(self.root.keys) == self._max_keys:
            new_root = BTreeNode(is_leaf=False, children=[self.root])
            self._split_child(new_root, 0)
            self.root = new_root
        self._insert_non_full(self.root, key, row_id)

    def _insert_non_full(self, node: BTreeNode, key: Any, row_id: int) -> None:
        while True:
            i = len(node.keys) - 1
            while i >= 0 and compare_keys(node.keys[i], key) > 0:
                i -= 1
            if i >= 0 and compare_keys(node.keys[i], key) == 0:
                node.values[i].append(row_id)
                return
            pos = i + 1
            if node.is_leaf:
                node.keys.insert(pos, key)
                node.values.insert(pos, [row_id])
                return
            if len(node.children[pos].keys) == self._max_keys:
                self._split_child(node, pos)
                if compare_keys(node.keys[pos], key) < 0:
                    pos += 1
            node = node.children[pos]

    def _split_child(self, parent: BTreeNode, index: int) -> None:
        child = parent.children[index]
        mid = self.degree - 1
        sibling = BTreeNode(
            is_leaf=child.is_leaf,
            keys=child.keys[mid + 1:],
            values=child.values[mid + 1:],
        )
        if not child.is_leaf:
            sibling.children = child.children[mid + 1:]
            child.children = child.children[: mid + 1]

        up_key, up_values = child.keys[mid], child.values[mid]
        child.keys = child.keys[:mid]
        child.values = child.values[:mid]

        parent.keys.insert(index, up_key)
        parent.values.insert(index, up_values)
        parent.children.insert(index + 1, sibling)

    def delete(self, key: Any, row_id: int) -> None:
        """Remove row_id from key; the key goes once it holds no row ids.

        Raises KeyError if the key is not in the tree.
        """
        try:
            self._delete_from(self.root, key, row_id)
        finally:
            if not self.root.keys and not self.root.is_leaf:
                self.root = self.root.children[0]

    def _delete_from(self, node: BTreeNode, key: Any, row_id: int) -> None:
        i = 0
        while i < len(node.keys) and compare_keys(node.keys[i], key) < 0:
            i += 1

        if i < len(node.keys) and compare_keys(node.keys[i], key) == 0:
            if node.is_leaf:
                remaining = [v for v in node.values[i] if v != row_id]
                if remaining:
                    node.values[i] = remaining
                    return
                del node.keys[i]
                del node.values[i]
                return
            pred_key, pred_values = self._predecessor(node, i)
            node.keys[i] = pred_key
            node.values[i] = pred_values
            self._delete_from(node.children[i], pred_key, row_id)
            return

        if node.is_leaf:
            raise KeyError(f"key not found: {_key_text(key)}")

        if len(node.children[i].keys) < self.degree:
            self._fill_child(node, i)
        if i > len(node.children) - 1:
            i -= 1
        self._delete_from(node.children[i], key, row_id)

    @staticmethod
    def _predecessor(node: BTreeNode, index: int) -> tuple[Any, list[int]]:
        current = node.children[index]
        while not current.is_leaf:
            current = current.children[-1]
        return current.keys[-1], current.values[-1]

    def _fill_child(self, node: BTreeNode, index: int) -> None:
        if index > 0 and len(node.children[index - 1].keys) >= self.degree:
            self._borrow_from_prev(node, index)
        elif index < len(node.children) - 1 and len(node.children[index + 1].keys) >= self.degree:
            self._borrow_from_next(node, index)
        elif index < len(node.children) - 1:
            self._merge_children(node, index)
        else:
            self._merge_children(node, index - 1)

    @staticmethod
    def _borrow_from_prev(node: BTreeNode, index: int) -> None:
        child = node.children[index]
        sibling = node.children[index - 1]
        child.keys.insert(0, node.keys[index - 1])
        child.values.insert(0, node.values[index - 1])
        if not child.is_leaf:
            child.children.insert(0, sibling.children.pop())
        node.keys[index - 1] = sibling.keys.pop()
        node.values[index - 1] = sibling.values.pop()

    @staticmethod
    def _borrow_from_next(node: BTreeNode, index: int) -> None:
        child = node.children[index]
        sibling = node.children[index + 1]
        child.keys.append(node.keys[index])
        child.values.append(node.values[index])
        if not child.is_leaf:
            child.children.append(sibling.children.pop(0))
        node.keys[index] = sibling.keys.pop(0)
        node.values[index] = sibling.values.pop(0)

    @staticmethod
    def _merge_children(node: BTreeNode, index: int) -> None:
        child = node.children[index]
        sibling = node.children[index + 1]
        child.keys.append(node.keys[index])
        child.values.append(node.values[index])
        child.keys.extend(sibling.keys)
        child.values.extend(sibling.values)
        if not child.is_leaf:
            child.children.extend(sibling.children)
        del node.keys[index]
        del node.values[index]
        del node.children[index + 1]


@dataclass
class Index:
    """A named index over columns of a table."""

    name: str
    table_name: str
    columns: list[str] = field(default_factory=list)
    is_unique: bool = False
    tree: BTree = field(default_factory=BTree)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise DatabaseError("unexpected end of index data", ErrorCode.CORRUPT_FILE)
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def unpack(self, fmt: str) -> Any:
        st = struct.Struct("<" + fmt)
        return st.unpack(self.take(st.size))[0]

    def string(self) -> str:
        return self.take(self.unpack("H")).decode("utf-8")


def _pack(fmt: str, value: Any) -> bytes:
    try:
        return struct.pack("<" + fmt, value)
    except struct.error as exc:
        raise DatabaseError(f"cannot encode value {value!r}: {exc}") from exc


def _pack_string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _pack("H", len(raw)) + raw


def _serialize_key(key: Any) -> bytes:
    if isinstance(key, bool):
        return bytes([_KEY_BOOL, 1 if key else 0])
    if _is_int(key):
        return bytes([_KEY_INT]) + _pack("q", key)
    if isinstance(key, float):
        return bytes([_KEY_FLOAT]) + _pack("d", key)
    if isinstance(key, str):
        return bytes([_KEY_STRING]) + _pack_string(key)
    raise DatabaseError(f"unsupported key type: {type(key).__name__}")


def _serialize_node(node: BTreeNode) -> bytes:
    parts = [_pack("?", node.is_leaf), _pack("H", len(node.keys))]
    for key, row_ids in zip(node.keys, node.values):
        parts.append(_serialize_key(key))
        parts.append(_pack("H", len(row_ids)))
        parts.extend(_pack("q", row_id) for row_id in row_ids)
    parts.append(_pack("H", len(node.children)))
    for child in node.children:
        child_bytes = _serialize_node(child)
        parts.append(_pack("I", len(child_bytes)))
        parts.append(child_bytes)
    return b"".join(parts)


def _deserialize_key(reader: _Reader) -> Any:
    kind = reader.unpack("B")
    if kind == _KEY_INT:
        return reader.unpack("q")
    if kind == _KEY_FLOAT:
        return reader.unpack("d")
    if kind == _KEY_STRING:
        return reader.string()
    if kind == _KEY_BOOL:
        return reader.unpack("B") == 1
    raise DatabaseError(f"unsupported key type: {kind}", ErrorCode.CORRUPT_FILE)


def _deserialize_node(data: bytes) -> BTreeNode:
    reader = _Reader(data)
    node = BTreeNode(is_leaf=reader.unpack("?"))
    for _ in range(reader.unpack("H")):
        node.keys.append(_deserialize_key(reader))
        count = reader.unpack("H")
        node.values.append([reader.unpack("q") for _ in range(count)])
    for _ in range(reader.unpack("H")):
        size = reader.unpack("I")
        node.children.append(_deserialize_node(reader.take(size)))
    return node


def _serialize_tree(tree: BTree) -> bytes:
    node_bytes = _serialize_node(tree.root)
    return _pack("i", tree.degree) + _pack("I", len(node_bytes)) + node_bytes


def _deserialize_tree(data: bytes) -> BTree:
    reader = _Reader(data)
    degree = reader.unpack("i")
    size = reader.unpack("I")
    tree = BTree(root=_deserialize_node(reader.take(size)))
    tree.degree = degree
    return tree


def serialize_index(index: Index) -> bytes:
    """Encode an index and its tree in the little-endian index file format."""
    parts = [
        _pack_string(index.name),
        _pack_string(index.table_name),
        _pack("H", len(index.columns)),
    ]
    parts.extend(_pack_string(col) for col in index.columns)
    parts.append(_pack("?", index.is_unique))
    tree_bytes = _serialize_tree(index.tree)
    parts.append(_pack("I", len(tree_bytes)))
    parts.append(tree_bytes)
    return b"".join(parts)


def deserialize_index(data: bytes) -> Index:
    """Decode an index written by serialize_index."""
    reader = _Reader(data)
    try:
        name = reader.string()
        table_name = reader.string()
        columns = [reader.string() for _ in range(reader.unpack("H"))]
    except UnicodeDecodeError as exc:
        raise DatabaseError(f"invalid text in index data: {exc}", ErrorCode.CORRUPT_FILE) from exc
    is_unique = reader.unpack("B") != 0
    tree_size = reader.unpack("I")
    tree = _deserialize_tree(reader.take(tree_size))
    return Index(name=name, table_name=table_name, columns=columns, is_unique=is_unique, tree=tree)