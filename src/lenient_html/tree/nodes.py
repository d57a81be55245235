"""Node types of the parsed document forest.

A parse produces a list of top-level nodes. Elements own their children
exclusively and hold no reference back to their parent; the forest is built
bottom-up and not mutated by the parser afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


class Node:
    """Base class of all forest nodes."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        raise NotImplementedError


@dataclass
class Text(Node):
    """A run of character data."""

    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "content": self.content}


@dataclass
class Comment(Node):
    """Comment content.

    The parser drops comments, so parsed forests never contain this type;
    it is available for callers that build forests by hand.
    """

    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "comment", "content": self.content}


@dataclass(eq=False, repr=False)
class Element(Node):
    """An element with attributes and ordered children.

    Attribute keys are lowercase and unique; their order is the order in
    which they first appeared in the start tag. Comparison, ``repr`` and
    :meth:`to_dict` walk the subtree with an explicit stack, so arbitrarily
    deep forests stay usable.
    """

    tag_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.tag_name:
            raise ValueError("Element tag name cannot be empty")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        pending: List[Tuple[Node, Node]] = [(self, other)]
        while pending:
            left, right = pending.pop()
            if isinstance(left, Element):
                if (
                    not isinstance(right, Element)
                    or left.tag_name != right.tag_name
                    or left.attributes != right.attributes
                    or len(left.children) != len(right.children)
                ):
                    return False
                pending.extend(zip(left.children, right.children))
            elif left != right:
                return False
        return True

    def __repr__(self) -> str:
        parts: List[str] = []
        # Items are either nodes still to render or literal text
        pending: List[Union[Node, str]] = [self]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, Element):
                parts.append(
                    f"{type(item).__name__}(tag_name={item.tag_name!r}, "
                    f"attributes={item.attributes!r}, children=["
                )
                pending.append("])")
                for index in range(len(item.children) - 1, -1, -1):
                    pending.append(item.children[index])
                    if index:
                        pending.append(", ")
            else:
                parts.append(repr(item))
        return "".join(parts)


    @property
    def elements(self) -> List["Element"]:
        """Direct children that are elements."""
        return [child for child in self.children if isinstance(child, Element)]

    @property
    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes in document order."""
        return "".join(
            node.content for node in self._iter_nodes() if isinstance(node, Text)
        )

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default; lookup ignores case."""
        return self.attributes.get(name.lower(), default)

    def has_attribute(self, name: str) -> bool:
        """Check if element has specific attribute."""
        return name.lower() in self.attributes

    def matches(self, tag_name: str) -> bool:
        """Check whether this element has ``tag_name``, ignoring case."""
        return self.tag_name.lower() == tag_name.lower()

    def iter_descendants(self) -> Iterator["Element"]:
        """Iterate over descendant elements in document order."""
        for node in self._iter_nodes():
            if isinstance(node, Element) and node is not self:
                yield node

    def find(self, tag_name: str) -> Optional["Element"]:
        """Find first descendant element with matching tag name."""
        return next(
            (element for element in self.iter_descendants() if element.matches(tag_name)),
            None,
        )

    def find_all(self, tag_name: str) -> List["Element"]:
        """Find all descendant elements with matching tag name."""
        return [
            element for element in self.iter_descendants() if element.matches(tag_name)
        ]

    def find_by_attribute(
        self, name: str, value: Optional[str] = None
    ) -> List["Element"]:
        """Find this element and descendants by attribute name and optionally value."""
        key = name.lower()
        candidates = [self]
        candidates.extend(self.iter_descendants())
        return [
            element for element in candidates
            if key in element.attributes
            and (value is None or element.attributes[key] == value)
        ]

    def to_dict(self) -> Dict[str, Any]:
        root = self._shallow_dict()
        pending: List[Tuple[Element, Dict[str, Any]]] = [(self, root)]
        while pending:
            element, data = pending.pop()
            if not element.children:
                continue
            children: List[Dict[str, Any]] = []
            for child in element.children:
                if isinstance(child, Element):
                    child_data = child._shallow_dict()
                    pending.append((child, child_data))
                else:
                    child_data = child.to_dict()
                children.append(child_data)
            data["children"] = children
        return root

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "type": "element",
            "tag_name": self.tag_name,
            "attributes": dict(self.attributes),
        }

    def _iter_nodes(self) -> Iterator[Node]:
        # Explicit stack keeps deeply nested input clear of the recursion limit
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Element):
                stack.extend(reversed(node.children))


def iter_elements(nodes: List[Node]) -> Iterator[Element]:
    """Iterate over every element of a forest in document order."""
    for node in nodes:
        if isinstance(node, Element):
            yield node
            yield from node.iter_descendants()
