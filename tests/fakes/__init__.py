from tests.fakes.fake_embedder import FakeEmbedder
from tests.fakes.fake_filesystem import FakeFileSystem
from tests.fakes.fake_search_backend import FakeSearchBackend

__all__ = ["FakeEmbedder", "FakeFileSystem", "FakeSearchBackend"]
