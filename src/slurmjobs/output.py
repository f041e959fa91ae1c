"""Collection of per-node console/error output files."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Union

from .errors import InvalidJobHandle

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_TEMPLATE = "slurm_{index}.out"
NOT_FOUND = "[file not found]"


class OutputStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    READ_ERROR = "read_error"


@dataclass(frozen=True)
class NodeOutput:
    """What was found for a single node's output file."""

    index: int
    path: Path
    status: OutputStatus
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is OutputStatus.FOUND

    def display_text(self) -> str:
        if self.status is OutputStatus.FOUND:
            return self.content or ""
        if self.status is OutputStatus.NOT_FOUND:
            return NOT_FOUND
        return f"[error reading file: {self.error}]"


def tail_text(text: str, *, max_lines: int = 200, max_chars: int = 10_000) -> str:
    """Return a tail slice of the given text, noting any truncation."""
    if not text:
        return ""

    truncated_chars = len(text) > max_chars
    if truncated_chars:
        text = text[-max_chars:]

    lines = text.splitlines()
    truncated_lines = len(lines) > max_lines
    if truncated_lines:
        lines = lines[-max_lines:]

    rendered = "\n".join(lines)
    if truncated_chars or truncated_lines:
        note_parts = []
        if truncated_chars:
            note_parts.append(f"chars>{max_chars}")
        if truncated_lines:
            note_parts.append(f"lines>{max_lines}")
        return f"[... output truncated ({', '.join(note_parts)}) ...]\n{rendered}"
    return rendered


class OutputReport(Mapping[int, NodeOutput]):
    """Per-node output of a job, ordered by node index.

    Always holds exactly one entry per node, whether or not the node wrote
    a file.
    """

    def __init__(self, working_dir: Path, nodes: List[NodeOutput]) -> None:
        self.working_dir = working_dir
        self._nodes = {node.index: node for node in sorted(nodes, key=lambda n: n.index)}

    def __getitem__(self, index: int) -> NodeOutput:
        return self._nodes[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"OutputReport({self.working_dir!s}, {self.contents()!r})"

    def contents(self) -> Dict[int, str]:
        """Map each index to its text, or :data:`NOT_FOUND` / an error note."""
        return {index: node.display_text() for index, node in self._nodes.items()}

    @property
    def missing(self) -> List[int]:
        return [i for i, n in self._nodes.items() if n.status is OutputStatus.NOT_FOUND]

    @property
    def errors(self) -> Dict[int, str]:
        return {
            i: n.error or ""
            for i, n in self._nodes.items()
            if n.status is OutputStatus.READ_ERROR
        }

    def render(self, max_lines: Optional[int] = None) -> str:
        """Combine all nodes into one text report, one section per file.

        Args:
            max_lines: If given, only the last ``max_lines`` lines of each
                file are shown.
        """
        parts = []
        for node in self._nodes.values():
            text = node.display_text()
            if max_lines is not None and node.found:
                text = tail_text(text, max_lines=max_lines)
            parts.append(f"\n---- {node.path} ----\n\n{text}")
        return "".join(parts)


def _read_node(path: Path, index: int, encoding: str) -> NodeOutput:
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        logger.debug("No output file for node %d: %s", index, path)
        return NodeOutput(index, path, OutputStatus.NOT_FOUND)
    except OSError as exc:
        logger.warning("Could not read output of node %d (%s): %s", index, path, exc)
        return NodeOutput(index, path, OutputStatus.READ_ERROR, error=str(exc))

    # No newline translation; undecodable bytes become U+FFFD
    content = data.decode(encoding, errors="replace")
    logger.debug("Read %d chars from %s", len(content), path)
    return NodeOutput(index, path, OutputStatus.FOUND, content=content)


def collect_output(
    working_dir: Union[str, os.PathLike],
    node_count: int,
    filename_template: str = DEFAULT_OUTPUT_TEMPLATE,
    encoding: str = "utf-8",
) -> OutputReport:
    """Read every node's output file from a job's working directory.

    A missing file is recorded as not found; any other OS error is
    recorded for that node and collection moves on. This never waits for
    files to appear, so call it only once the job is terminal, otherwise
    the output may be truncated without any sign of it.

    Args:
        working_dir: The job's working directory.
        node_count: Number of nodes; files ``0..node_count-1`` are read.
        filename_template: ``str.format`` template with an ``index`` field.
        encoding: Text encoding of the output files. Invalid bytes are
            replaced rather than failing the node.

    Returns:
        OutputReport: Exactly ``node_count`` entries.

    Raises:
        InvalidJobHandle: If node_count is not a positive integer.
    """
    if isinstance(node_count, bool) or not isinstance(node_count, int) or node_count <= 0:
        raise InvalidJobHandle(f"node_count must be a positive integer, got {node_count!r}")

    directory = Path(working_dir)
    nodes = [
        _read_node(directory / filename_template.format(index=i), i, encoding)
        for i in range(node_count)
    ]
    return OutputReport(directory, nodes)
