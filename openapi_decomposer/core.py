"""
Core logic for OpenAPI Decomposer.
This module splits a single OpenAPI document into a tree of small YAML documents.
"""

import re
import yaml
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Any, Tuple

# Configure logger
logger = logging.getLogger(__name__)

ROOT_FILE = '/openapi.yaml'

# Copied first, in this order, when present in the input
ROOT_FIELDS = ('openapi', 'info', 'servers', 'tags')

# Never passed through to the root document unless keep_unknown is set
RESERVED_ROOT_FIELDS = ROOT_FIELDS + ('security', 'x-tagGroups')

PARTITIONED_FIELDS = ('components', 'paths')

OTHER_COMPONENT_TYPES = ('responses', 'parameters', 'examples', 'requestBodies', 'headers')

COMPONENT_TYPES = ('schemas', 'securitySchemes') + OTHER_COMPONENT_TYPES

_SLASH_RUN = re.compile(r'/+')


class OpenAPIDecomposerError(Exception):
    """Base exception for OpenAPI Decomposer errors."""
    pass


class ParseErrorKind(Enum):
    MALFORMED = 'malformed'
    INVALID_STRUCTURE = 'invalid_structure'
    NOT_OPENAPI = 'not_openapi'


class ParseError(OpenAPIDecomposerError):
    """Raised when document text cannot be turned into an OpenAPI mapping."""

    def __init__(self, kind: ParseErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass
class SplitResult:
    """
    Outcome of a split.

    Exactly one of ``files`` (non-empty) and ``error`` carries the outcome;
    on failure ``files`` is always empty.
    """
    files: Dict[str, str] = field(default_factory=dict)
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Dict[str, str]:
        """Return the files, raising the stored error if the split failed."""
        if self.error is not None:
            raise self.error
        return self.files


def component_file_name(category: Any, name: Any) -> str:
    """Virtual path of a single component item."""
    return f"/components/{category}/{name}.yaml"


def path_file_name(path_key: Any) -> str:
    """
    Virtual path of a single path item.

    The key is a URL template that usually starts with ``/`` and may hold
    several segments; repeated slashes are collapsed.

    >>> path_file_name('/users/{id}')
    '/paths/users/{id}.yaml'
    """
    return _SLASH_RUN.sub('/', f"/paths{path_key}.yaml")


def _named_entries(container: Any, label: str) -> Tuple[Tuple[Any, Any], ...]:
    if container is None:
        return ()
    if not isinstance(container, dict):
        logger.warning(f"Skipping {label}: expected a mapping, got {type(container).__name__}")
        return ()
    return tuple(container.items())


class OpenAPIDecomposer:
    """
    Split an OpenAPI document into one file per logical unit.

    The transform is pure: an instance holds only its configuration and can
    be shared freely between callers and threads.
    """

    def __init__(self, indent: int = 2, keep_unknown: bool = False):
        """
        Initialize the OpenAPIDecomposer.

        Args:
            indent: Indentation width of the emitted YAML
            keep_unknown: Keep ``security``, ``x-tagGroups`` and unknown
                component categories instead of dropping them

        Raises:
            OpenAPIDecomposerError: If the indentation width is unsupported
        """
        if not isinstance(indent, int) or isinstance(indent, bool) or not 2 <= indent <= 9:
            raise OpenAPIDecomposerError(f"Invalid indent: {indent!r} (expected 2-9)")

        self.indent = indent
        self.keep_unknown = keep_unknown

    def serialize(self, value: Any) -> str:
        """
        Convert a document value into YAML text.

        Key order is kept as assembled and scalar types survive a reload.
        """
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=False,
                              allow_unicode=True, indent=self.indent, width=1000)

    def decode(self, document_text: str) -> Dict[str, Any]:
        """
        Decode document text and check the minimal OpenAPI shape.

        Returns:
            The decoded top-level mapping

        Raises:
            ParseError: If the text is malformed, not a mapping or not OpenAPI
        """
        try:
            spec = yaml.safe_load(document_text)
        except yaml.YAMLError as e:
            raise ParseError(ParseErrorKind.MALFORMED, f"Error parsing YAML: {e}") from e
        except RecursionError as e:
            raise ParseError(ParseErrorKind.MALFORMED, "Error parsing YAML: document is nested too deeply") from e

        if not isinstance(spec, dict):
            raise ParseError(
                ParseErrorKind.INVALID_STRUCTURE,
                f"Invalid YAML document: expected a mapping at the top level, got {type(spec).__name__}"
            )

        if not spec.get('openapi'):
            raise ParseError(ParseErrorKind.NOT_OPENAPI, "Not an OpenAPI specification: missing 'openapi' field")

        return spec

    def build_root_document(self, spec: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create the root document holding every non-partitioned field.

        Args:
            spec: Decoded OpenAPI document

        Returns:
            Root document dictionary
        """
        root = {key: spec[key] for key in ROOT_FIELDS if key in spec}

        skipped = ROOT_FIELDS if self.keep_unknown else RESERVED_ROOT_FIELDS
        for key, value in spec.items():
            if key in PARTITIONED_FIELDS or key in skipped:
                continue
            root[key] = value

        dropped = [key for key in RESERVED_ROOT_FIELDS if key in spec and key not in root]
        if dropped:
            logger.debug(f"Dropped root fields: {', '.join(dropped)}")

        return root

    def _store(self, files: Dict[str, str], file_path: str, document: Dict[Any, Any]) -> None:
        if file_path in files:
            logger.warning(f"Overwriting {file_path}: two entries map to the same file")
        files[file_path] = self.serialize(document)

    def _partition(self, files: Dict[str, str], category: Any, items: Any) -> None:
        for name, value in _named_entries(items, f"components.{category}"):
            self._store(files, component_file_name(category, name), {name: value})

    def partition_components(self, spec: Dict[str, Any]) -> Dict[str, str]:
        """
        Create one file per item of each handled component category.

        Args:
            spec: Decoded OpenAPI document

        Returns:
            Mapping of virtual path to serialized single-entry document
        """
        files = {}
        components = spec.get('components')
        if not components:
            return files
        if not isinstance(components, dict):
            logger.warning(f"Skipping components: expected a mapping, got {type(components).__name__}")
            return files

        for category in COMPONENT_TYPES:
            if components.get(category):
                self._partition(files, category, components[category])

        for category, items in components.items():
            if category in COMPONENT_TYPES:
                continue
            if self.keep_unknown:
                self._partition(files, category, items)
            else:
                logger.debug(f"Dropped unknown component category: {category}")

        return files

    def partition_paths(self, spec: Dict[str, Any]) -> Dict[str, str]:
        """
        Create one file per path item.

        Args:
            spec: Decoded OpenAPI document

        Returns:
            Mapping of virtual path to serialized single-entry document
        """
        files = {}
        if not spec.get('paths'):
            return files

        for path_key, methods in _named_entries(spec['paths'], 'paths'):
            self._store(files, path_file_name(path_key), {path_key: methods})

        return files

    def split(self, document_text: str) -> SplitResult:
        """
        Main split method.

        Args:
            document_text: Raw YAML text of an OpenAPI document

        Returns:
            SplitResult with the virtual file mapping, or the parse error
        """
        try:
            spec = self.decode(document_text)
            try:
                files = {ROOT_FILE: self.serialize(self.build_root_document(spec))}
                files.update(self.partition_components(spec))
                files.update(self.partition_paths(spec))
            except RecursionError as e:
                raise ParseError(
                    ParseErrorKind.MALFORMED, "Error serializing YAML: document is nested too deeply"
                ) from e
        except ParseError as e:
            logger.debug(f"Split failed ({e.kind.value}): {e}")
            return SplitResult(error=e)

        logger.info(f"Split complete. Produced {len(files)} files")
        return SplitResult(files=files)


def split(document_text: str) -> SplitResult:
    """Split document text with the default configuration."""
    return OpenAPIDecomposer().split(document_text)
