"""ASCII directory map rendering for file sets.

Listing directories is the caller's job; this module only turns an already
listed tree into the ``<file_map>`` text embedded in a prompt.
"""

from typing import Literal, Sequence

from pydantic import BaseModel, Field


class TreeNode(BaseModel):
    """A file or directory in a listed tree."""

    name: str
    path: str
    type: Literal["file", "directory"]
    children: list["TreeNode"] = Field(default_factory=list)


TreeNode.model_rebuild()


def _sorted_children(node: TreeNode) -> list[TreeNode]:
    # Directories before files, then by name
    return sorted(node.children, key=lambda child: (child.type != "directory", child.name))


def _node_lines(node: TreeNode, prefix: str, is_last: bool) -> list[str]:
    marker = "└── " if is_last else "├── "
    label = f"[D] {node.name}" if node.type == "directory" else node.name
    lines = [prefix + marker + label]

    if node.type == "directory":
        children = _sorted_children(node)
        child_prefix = prefix + ("    " if is_last else "│   ")
        for index, child in enumerate(children):
            lines.extend(_node_lines(child, child_prefix, index == len(children) - 1))

    return lines


def render_directory_map(roots: Sequence[TreeNode]) -> str:
    """
    Render one ``<file_map>`` section per root directory.

    Args:
        roots: Root directories; each root's ``path`` heads its section

    Returns:
        Sections joined by a blank line, or "" when there are no roots

    Example:
        >>> print(render_directory_map([root]))
        <file_map>
        /home/me/project
        ├── [D] src
        │   └── main.py
        └── README.md
        </file_map>
    """
    sections = []
    for root in roots:
        lines = ["<file_map>", root.path]
        children = _sorted_children(root)
        for index, child in enumerate(children):
            lines.extend(_node_lines(child, "", index == len(children) - 1))
        lines.append("</file_map>")
        sections.append("\n".join(lines))
    return "\n\n".join(sections)
