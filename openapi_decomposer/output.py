"""
Input and output helpers around the splitter.

Reading documents from disk, rendering the virtual file tree and
materializing it as a directory or a zip archive.
"""

import os
import zipfile
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Union

from .core import OpenAPIDecomposerError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = ('.yaml', '.yml')

DEFAULT_ARCHIVE_NAME = 'openapi_structure.zip'


class InputFileError(OpenAPIDecomposerError):
    """Raised when an input file is rejected before splitting."""
    pass


class OutputError(OpenAPIDecomposerError):
    """Raised when split files cannot be written."""
    pass


@dataclass
class TreeNode:
    name: str
    path: str
    is_file: bool
    children: List['TreeNode'] = field(default_factory=list)


def read_document(input_file: Union[str, Path]) -> str:
    """
    Read an OpenAPI YAML document from disk.

    Args:
        input_file: Path to a .yaml or .yml file

    Returns:
        The file content

    Raises:
        InputFileError: If the file is missing, not YAML, or empty
    """
    input_file = Path(input_file)

    if not input_file.exists():
        raise InputFileError(f"Input file not found: {input_file}")

    if input_file.suffix.lower() not in YAML_SUFFIXES:
        raise InputFileError(f"{input_file.name} is not a YAML file")

    if input_file.stat().st_size == 0:
        raise InputFileError(f"File {input_file.name} is empty")

    try:
        content = input_file.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Error reading {input_file}: {e}") from e

    if not content.strip():
        raise InputFileError(f"Content of {input_file.name} is empty or whitespace only")

    logger.info(f"Loaded OpenAPI document from {input_file}")
    return content


def archive_entry_name(virtual_path: str) -> str:
    """Strip the leading slash of a virtual path."""
    return virtual_path[1:] if virtual_path.startswith('/') else virtual_path


def safe_entry_name(virtual_path: str) -> str:
    """
    Archive entry name of a virtual path that stays inside its root.

    Names come from the document itself, so a '..' segment is refused.

    Raises:
        OutputError: If the path climbs out of the output root
    """
    entry_name = archive_entry_name(virtual_path)
    if '..' in entry_name.replace('\\', '/').split('/'):
        raise OutputError(f"Refusing to write {virtual_path}: path leaves the output root")
    return entry_name


def build_tree(files: Dict[str, str], search: str = '') -> List[TreeNode]:
    """
    Build a hierarchical view of virtual file paths.

    Nodes keep the order in which they were first seen. With ``search``,
    only nodes whose name contains it (case-insensitive) or that have a
    matching descendant are kept.
    """
    root: List[TreeNode] = []

    for virtual_path in files:
        parts = [p for p in virtual_path.split('/') if p]
        current = root
        for i, part in enumerate(parts):
            node = next((n for n in current if n.name == part), None)
            if node is None:
                node = TreeNode(
                    name=part,
                    path='/' + '/'.join(parts[:i + 1]),
                    is_file=i == len(parts) - 1,
                )
                current.append(node)
            current = node.children

    if not search:
        return root
    return _filter_tree(root, search.lower())


def _filter_tree(nodes: List[TreeNode], needle: str) -> List[TreeNode]:
    kept = []
    for node in nodes:
        children = _filter_tree(node.children, needle)
        if needle in node.name.lower() or children:
            kept.append(TreeNode(node.name, node.path, node.is_file, children))
    return kept


def render_tree(nodes: List[TreeNode], depth: int = 0) -> str:
    """Render tree nodes as indented text, directories suffixed with '/'."""
    lines = []
    for node in nodes:
        suffix = '' if node.is_file else '/'
        lines.append(f"{'  ' * depth}{node.name}{suffix}")
        if node.children:
            lines.append(render_tree(node.children, depth + 1))
    return '\n'.join(lines)


def write_tree(files: Dict[str, str], output_dir: Union[str, Path]) -> List[Path]:
    """
    Write every split file below an output directory.

    Args:
        files: Mapping of virtual path to file content
        output_dir: Directory for output files

    Returns:
        List of created file paths

    Raises:
        OutputError: If a path leaves the output directory or a file cannot be written
    """
    output_dir = Path(output_dir)
    root = output_dir.resolve()
    created_files = []

    # Checked up front so a rejected document writes nothing
    targets = []
    for virtual_path, content in files.items():
        filepath = output_dir / safe_entry_name(virtual_path)
        try:
            filepath.resolve().relative_to(root)
        except ValueError:
            raise OutputError(f"Refusing to write {virtual_path}: path leaves {output_dir}") from None
        targets.append((filepath, content))

    for filepath, content in targets:
        try:
            os.makedirs(filepath.parent, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise OutputError(f"Error writing {filepath}: {e}") from e

        logger.debug(f"Created: {filepath}")
        created_files.append(filepath)

    logger.info(f"Wrote {len(created_files)} files to {output_dir}")
    return created_files


def write_archive(files: Dict[str, str], archive_path: Union[str, Path] = DEFAULT_ARCHIVE_NAME) -> Path:
    """
    Package split files into a zip archive.

    Entry names are the virtual paths without their leading slash.

    Raises:
        OutputError: If an entry name leaves the archive root or the archive cannot be written
    """
    archive_path = Path(archive_path)
    entries = [(safe_entry_name(virtual_path), content) for virtual_path, content in files.items()]

    try:
        if archive_path.parent != Path('.'):
            os.makedirs(archive_path.parent, exist_ok=True)
        with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for entry_name, content in entries:
                archive.writestr(entry_name, content)
    except OSError as e:
        raise OutputError(f"Error writing {archive_path}: {e}") from e

    logger.info(f"Created archive {archive_path} with {len(files)} files")
    return archive_path
