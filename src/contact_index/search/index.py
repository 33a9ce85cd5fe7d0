"""Character trie mapping lower-cased names to contact ids."""


class TrieNode:
    """One character position in an indexed key.

    Attributes:
        children: Next character to child node.
        ids: Contact ids whose key terminates at this node.
    """

    __slots__ = ("children", "ids")

    def __init__(self) -> None:
        self.children: dict[str, TrieNode] = {}
        self.ids: set[int] = set()

    @property
    def is_terminal(self) -> bool:
        """True when at least one key ends here."""
        return bool(self.ids)


class SearchIndex:
    """In-memory prefix index over contact names.

    Keys are lower-cased on the way in, so every lookup is
    case-insensitive. A node can be terminal for one key and an
    interior node for longer keys at the same time.
    """

    def __init__(self) -> None:
        """Initialize an empty index."""
        self._root = TrieNode()
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def insert(self, key: str, contact_id: int) -> None:
        """Attach a contact id to a key.

        Blank keys are ignored. Inserting the same pair twice is a no-op.

        Args:
            key: Text to index (typically a contact name).
            contact_id: Identifier to attach at the end of the key.
        """
        if not key or not key.strip():
            return

        node = self._root
        for ch in key.lower():
            child = node.children.get(ch)
            if child is None:
                child = TrieNode()
                node.children[ch] = child
            node = child

        if contact_id not in node.ids:
            node.ids.add(contact_id)
            self._size += 1

    def remove(self, key: str, contact_id: int) -> None:
        """Detach a contact id from a key.

        Missing paths and ids that were never attached are silently
        ignored. Nodes left with no ids and no children are pruned.

        Args:
            key: Text the id was indexed under.
            contact_id: Identifier to detach.
        """
        if not key or not key.strip():
            return

        path: list[tuple[TrieNode, str]] = []
        node = self._root
        for ch in key.lower():
            child = node.children.get(ch)
            if child is None:
                return
            path.append((node, ch))
            node = child

        if contact_id not in node.ids:
            return
        node.ids.discard(contact_id)
        self._size -= 1

        for parent, ch in reversed(path):
            child = parent.children[ch]
            if child.ids or child.children:
                break
            del parent.children[ch]

    def search_prefix(self, prefix: str) -> set[int]:
        """Collect every id whose key starts with the prefix.

        Args:
            prefix: Leading characters to match, any case.

        Returns:
            Set of matching contact ids, empty for a blank or unknown prefix.
        """
        if not prefix or not prefix.strip():
            return set()

        node = self._root
        for ch in prefix.lower():
            child = node.children.get(ch)
            if child is None:
                return set()
            node = child

        results: set[int] = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.is_terminal:
                results.update(current.ids)
            stack.extend(current.children.values())
        return results

    def clear(self) -> None:
        """Drop every indexed key."""
        self._root = TrieNode()
        self._size = 0
