"""Test that all modules can be imported successfully."""


def test_core_imports():
    """Test core module imports."""
    from codeecho.core import Config, Entry, TreeNode, FileAnalyzer, TokenCounter

    config = Config(github_token="t")
    assert config.fetch_concurrency == 1

    node = TreeNode(name="test", path="test", type="file")
    assert node.is_file()

    assert Entry(path="x", kind="blob").is_blob()
    assert hasattr(FileAnalyzer(config), 'decode_blob')
    assert hasattr(TokenCounter(), 'count')


def test_utils_imports():
    """Test utils module imports."""
    from codeecho.utils import ExclusionFilter, FileTreeBuilder, PathUtils, format_size

    assert ExclusionFilter(["a"]).is_excluded("a/b")
    assert hasattr(FileTreeBuilder, 'render_ascii')
    assert PathUtils.split("a/b") == ["a", "b"]
    assert format_size(0) == "0 B"


def test_adapter_imports():
    """Test adapter module imports."""
    from codeecho.adapters import GitHubSource, RepositorySource, create_source

    assert issubclass(GitHubSource, RepositorySource)
    assert callable(create_source)


def test_entry_points():
    """Test CLI and API entry points import."""
    from codeecho.cli import main
    from codeecho.api import create_app

    assert main.name == "main"
    assert create_app().title == "codeecho"
