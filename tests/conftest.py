"""Global test configuration for mdchunker tests."""

import pytest
import structlog

from mdchunker.chunking.resources import default_resources


@pytest.fixture(scope="session")
def resources():
    """Shared tokenizer resources, loaded once per test session."""
    return default_resources()


@pytest.fixture(autouse=True)
def reset_structlog():
    """CLI invocations bind logging to CliRunner streams; undo that after each test."""
    yield
    structlog.reset_defaults()


class WordCountResources:
    """Stand-in resources that count whitespace-separated words as tokens."""

    def count_tokens(self, text: str) -> int:
        return len(text.split())


@pytest.fixture
def word_resources():
    return WordCountResources()
