"""
Unit tests for openapi_decomposer.output module.
"""

import unittest
import tempfile
import shutil
import zipfile
from pathlib import Path
from openapi_decomposer.core import OpenAPIDecomposerError, split
from openapi_decomposer.output import (
    InputFileError,
    OutputError,
    archive_entry_name,
    build_tree,
    read_document,
    render_tree,
    safe_entry_name,
    write_archive,
    write_tree,
)


SAMPLE_FILES = {
    '/openapi.yaml': 'openapi: 3.0.0\n',
    '/components/schemas/Pet.yaml': 'Pet:\n  type: object\n',
    '/components/schemas/User.yaml': 'User:\n  type: object\n',
    '/components/securitySchemes/apiKey.yaml': 'apiKey:\n  type: apiKey\n',
    '/paths/pets.yaml': "/pets:\n  get: {}\n",
    '/paths/users/{id}.yaml': "/users/{id}:\n  get: {}\n",
}

TRAVERSAL_DOCUMENT = """\
openapi: 3.0.0
paths:
  /../../escaped:
    get: {}
components:
  schemas:
    ../../../evil: {}
"""


class TestReadDocument(unittest.TestCase):
    """Test cases for reading input documents."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write(self, name, content):
        path = self.temp_dir / name
        path.write_text(content, encoding='utf-8')
        return path

    def test_read_yaml(self):
        path = self.write('spec.yaml', 'openapi: 3.0.0\n')
        self.assertEqual(read_document(path), 'openapi: 3.0.0\n')

    def test_read_yml_upper_case(self):
        path = self.write('spec.YML', 'openapi: 3.0.0\n')
        self.assertEqual(read_document(str(path)), 'openapi: 3.0.0\n')

    def test_missing_file(self):
        with self.assertRaises(InputFileError):
            read_document(self.temp_dir / 'missing.yaml')

    def test_wrong_extension(self):
        path = self.write('spec.json', '{"openapi": "3.0.0"}')
        with self.assertRaises(InputFileError) as ctx:
            read_document(path)
        self.assertIn('not a YAML file', str(ctx.exception))

    def test_zero_byte_file(self):
        path = self.write('empty.yaml', '')
        with self.assertRaises(InputFileError) as ctx:
            read_document(path)
        self.assertIn('empty', str(ctx.exception))

    def test_whitespace_only_file(self):
        path = self.write('blank.yaml', '  \n\t\n')
        with self.assertRaises(InputFileError):
            read_document(path)

    def test_errors_share_base_class(self):
        with self.assertRaises(OpenAPIDecomposerError):
            read_document(self.temp_dir / 'missing.yaml')


class TestTree(unittest.TestCase):
    """Test cases for the virtual file tree."""

    def test_build_tree(self):
        nodes = build_tree(SAMPLE_FILES)

        self.assertEqual([n.name for n in nodes], ['openapi.yaml', 'components', 'paths'])
        self.assertTrue(nodes[0].is_file)
        self.assertFalse(nodes[1].is_file)

        components = nodes[1]
        self.assertEqual([n.name for n in components.children], ['schemas', 'securitySchemes'])
        self.assertEqual(components.children[0].path, '/components/schemas')
        self.assertEqual([n.path for n in components.children[0].children],
                         ['/components/schemas/Pet.yaml', '/components/schemas/User.yaml'])

        paths = nodes[2]
        users = paths.children[1]
        self.assertEqual(users.name, 'users')
        self.assertEqual(users.children[0].name, '{id}.yaml')
        self.assertTrue(users.children[0].is_file)

    def test_search_keeps_ancestors(self):
        nodes = build_tree(SAMPLE_FILES, search='PET')

        self.assertEqual([n.name for n in nodes], ['components', 'paths'])
        self.assertEqual([n.name for n in nodes[0].children], ['schemas'])
        self.assertEqual([n.name for n in nodes[0].children[0].children], ['Pet.yaml'])
        self.assertEqual([n.name for n in nodes[1].children], ['pets.yaml'])

    def test_search_matching_directory_keeps_node(self):
        nodes = build_tree(SAMPLE_FILES, search='security')

        self.assertEqual([n.name for n in nodes], ['components'])
        self.assertEqual(nodes[0].children[0].name, 'securitySchemes')

    def test_search_without_match(self):
        self.assertEqual(build_tree(SAMPLE_FILES, search='nothing-here'), [])

    def test_render_tree(self):
        text = render_tree(build_tree({
            '/openapi.yaml': '',
            '/paths/users/{id}.yaml': '',
        }))
        self.assertEqual(text, 'openapi.yaml\npaths/\n  users/\n    {id}.yaml')

    def test_render_empty_tree(self):
        self.assertEqual(render_tree([]), '')


class TestWriters(unittest.TestCase):
    """Test cases for writing split files."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_archive_entry_name(self):
        self.assertEqual(archive_entry_name('/components/schemas/Pet.yaml'), 'components/schemas/Pet.yaml')
        self.assertEqual(archive_entry_name('openapi.yaml'), 'openapi.yaml')

    def test_write_tree(self):
        output_dir = self.temp_dir / 'out'
        created = write_tree(SAMPLE_FILES, output_dir)

        self.assertEqual(len(created), len(SAMPLE_FILES))
        for virtual_path, content in SAMPLE_FILES.items():
            filepath = output_dir / virtual_path.lstrip('/')
            self.assertTrue(filepath.exists())
            self.assertEqual(filepath.read_text(encoding='utf-8'), content)

    def test_write_tree_blocked_by_file(self):
        blocker = self.temp_dir / 'out'
        blocker.write_text('not a directory')

        with self.assertRaises(OutputError):
            write_tree(SAMPLE_FILES, blocker)

    def test_write_archive(self):
        archive_path = self.temp_dir / 'nested' / 'openapi_structure.zip'
        result = write_archive(SAMPLE_FILES, archive_path)

        self.assertEqual(result, archive_path)
        with zipfile.ZipFile(archive_path) as archive:
            self.assertEqual(sorted(archive.namelist()),
                             sorted(archive_entry_name(p) for p in SAMPLE_FILES))
            self.assertEqual(archive.read('paths/users/{id}.yaml').decode('utf-8'),
                             SAMPLE_FILES['/paths/users/{id}.yaml'])

    def test_safe_entry_name(self):
        self.assertEqual(safe_entry_name('/paths/a..b/{id}.yaml'), 'paths/a..b/{id}.yaml')
        for virtual_path in ('/paths/../../escaped.yaml', '/components/schemas/..\\..\\evil.yaml', '/..'):
            with self.subTest(path=virtual_path):
                with self.assertRaises(OutputError):
                    safe_entry_name(virtual_path)

    def test_write_tree_keeps_names_inside_output_dir(self):
        files = split(TRAVERSAL_DOCUMENT).unwrap()
        output_dir = self.temp_dir / 'work' / 'out'

        with self.assertRaises(OutputError):
            write_tree(files, output_dir)

        self.assertFalse(output_dir.exists())
        self.assertEqual(list(self.temp_dir.rglob('*.yaml')), [])

    def test_write_archive_refuses_parent_segments(self):
        files = split(TRAVERSAL_DOCUMENT).unwrap()
        archive_path = self.temp_dir / 'openapi_structure.zip'

        with self.assertRaises(OutputError):
            write_archive(files, archive_path)

        self.assertFalse(archive_path.exists())


if __name__ == '__main__':
    unittest.main()
