"""
OpenAPI Decomposer - Split an OpenAPI document into one small file per logical unit.

This package provides both CLI and SDK interfaces for decomposing an OpenAPI
specification into a root document plus one file per schema, security scheme,
reusable component and path.
"""

__version__ = "1.0.0"
__author__ = "OpenAPI Decomposer Contributors"
__email__ = "support@example.com"

from .core import (
    OpenAPIDecomposer,
    OpenAPIDecomposerError,
    ParseError,
    ParseErrorKind,
    SplitResult,
    split,
)
from .output import (
    InputFileError,
    OutputError,
    build_tree,
    read_document,
    render_tree,
    write_archive,
    write_tree,
)

__all__ = [
    'OpenAPIDecomposer',
    'OpenAPIDecomposerError',
    'ParseError',
    'ParseErrorKind',
    'SplitResult',
    'split',
    'InputFileError',
    'OutputError',
    'build_tree',
    'read_document',
    'render_tree',
    'write_archive',
    'write_tree',
    '__version__',
]
