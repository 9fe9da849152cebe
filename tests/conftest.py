# tests/conftest.py
"""
MdxForge 测试配置和共享 fixtures
"""

import os
import tempfile
from pathlib import Path

import pytest

from mdxforge.core.config import ForgeConfig
from mdxforge.core.models import NamedDocument
from mdxforge.core.project import DocProject
from snapstore import InMemorySnapshotStore


@pytest.fixture(scope="function")
def isolated_filesystem():
    """
    提供一个隔离的临时文件系统，并切换当前工作目录。
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        original_cwd = os.getcwd()
        os.chdir(temp_path)
        try:
            yield temp_path
        finally:
            os.chdir(original_cwd)


@pytest.fixture
def sample_documents():
    return [
        NamedDocument("introduction.mdx", "# Introduction\n\nWelcome to the Payments API.\n\n## Base URL\n\nhttps://api.example.com"),
        NamedDocument("authentication.mdx", "# Authentication\n\n## API Keys\n\n### Creating a key\n\nUse the dashboard.\n\n## OAuth"),
    ]


@pytest.fixture
def memory_store():
    return InMemorySnapshotStore()


@pytest.fixture
def forge_config():
    return ForgeConfig(project_id="payments", project_title="Payments API")


@pytest.fixture
def project(memory_store, forge_config):
    return DocProject("payments", memory_store, config=forge_config)


@pytest.fixture
def runner():
    """提供一个 Click CliRunner 实例用于测试 CLI 命令"""
    from click.testing import CliRunner
    return CliRunner()
