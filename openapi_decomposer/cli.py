"""
Command-line interface for OpenAPI Decomposer.
"""

import argparse
import sys
import logging
from . import __version__
from .core import OpenAPIDecomposer, OpenAPIDecomposerError
from .output import (
    DEFAULT_ARCHIVE_NAME,
    InputFileError,
    build_tree,
    read_document,
    render_tree,
    write_archive,
    write_tree,
)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(message)s' if not verbose else '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description='Decompose an OpenAPI YAML document into one file per schema, component and path',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s openapi.yaml                    # Write files into split_specs/
  %(prog)s openapi.yaml -o my_output      # Custom output directory
  %(prog)s openapi.yaml --zip             # Package as openapi_structure.zip
  %(prog)s openapi.yaml --list -s pet     # Show the file tree, filtered
  cat openapi.yaml | %(prog)s -           # Read the document from stdin
        """
    )

    parser.add_argument(
        'input_file',
        help="Path to the input OpenAPI YAML file, or '-' to read from stdin"
    )

    parser.add_argument(
        '-o', '--output',
        default='split_specs',
        help='Output directory for split files (default: split_specs)'
    )

    parser.add_argument(
        '-z', '--zip',
        nargs='?',
        const=DEFAULT_ARCHIVE_NAME,
        default=None,
        metavar='FILE',
        help=f'Write a zip archive instead of a directory (default name: {DEFAULT_ARCHIVE_NAME})'
    )

    parser.add_argument(
        '-l', '--list',
        action='store_true',
        help='Print the file tree instead of writing files'
    )

    parser.add_argument(
        '-s', '--search',
        default='',
        help='Only list tree entries containing this text (case-insensitive)'
    )

    parser.add_argument(
        '-i', '--indent',
        type=int,
        default=2,
        help='Indentation width of the emitted YAML (default: 2)'
    )

    parser.add_argument(
        '--keep-unknown',
        action='store_true',
        help='Keep security, x-tagGroups and unknown component categories instead of dropping them'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def read_input(input_file: str) -> str:
    """Read document text from a file or, for '-', from stdin."""
    if input_file != '-':
        return read_document(input_file)

    try:
        content = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Error reading stdin: {e}") from e
    if not content.strip():
        raise InputFileError("No input on stdin")
    return content


def main(argv=None):
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        decomposer = OpenAPIDecomposer(indent=args.indent, keep_unknown=args.keep_unknown)
        document_text = read_input(args.input_file)

        files = decomposer.split(document_text).unwrap()

        if args.list:
            print(render_tree(build_tree(files, args.search)))
        elif args.zip:
            archive = write_archive(files, args.zip)
            print(f"Split into {len(files)} files. Archive: {archive}")
        else:
            created_files = write_tree(files, args.output)
            print(f"Split into {len(files)} files. Output files in: {args.output}")
            for filepath in created_files:
                print(f"Created: {filepath}")

    except OpenAPIDecomposerError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)


if __name__ == '__main__':
    main()
