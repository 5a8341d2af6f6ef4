"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing core functionality,
including mock factories and prepared project paths.
"""

import pytest
from pathlib import Path

from core.enrichers import EnrichmentContext, prepare_project_path


@pytest.fixture
def project_root(tmp_path):
    """Create a temporary, existing project root for testing."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def bare_project_path(project_root):
    """An un-enriched ProjectPath for the existing `project_root`."""
    return prepare_project_path(EnrichmentContext(abs_project_path=project_root))


@pytest.fixture
def mock_file_reader_factory():
    """Factory for creating MockFileReader instances with file content mappings."""

    def _factory(file_contents: dict[str, str]):
        """
        Create a MockFileReader configured with file content mappings.

        Args:
            file_contents: Dictionary mapping file names to their content.
                Keys are file names (e.g., "settings.json"), values are file content strings.

        Returns:
            MockFileReader instance configured to return content based on file name.
        """
        from core.file_io import MockFileReader

        def read_file_side_effect(path: Path) -> str:
            return file_contents.get(path.name, "")

        return MockFileReader(read_file_fn=read_file_side_effect)

    return _factory
