from tests.fakes.failing_memo_store import FailingMemoStore
from tests.fakes.fake_annotator import FakeMemoAnnotator
from tests.fakes.fake_embedder import FakeEmbedder
from tests.fakes.fake_instructor import FakeInstructor

__all__ = ["FakeEmbedder", "FakeMemoAnnotator", "FakeInstructor", "FailingMemoStore"]
