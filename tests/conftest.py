"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from atlas.config import Config
from atlas.gateway import CompletionGateway
from atlas.models import FileNode, RepoAnalysis
from atlas.session import Session
from atlas.system_prompt import SystemPromptBuilder
from atlas.utils.ignore import IgnoreRules


class FakeLLM:
    """Stands in for atlas.llm.LLM without touching the network."""

    def __init__(self, chunks=None, error=None, tool_payload=None):
        self.chunks = list(chunks or [])
        self.error = error
        self.tool_payload = tool_payload
        self.stream_calls = []
        self.complete_calls = []

    async def stream(self, messages, system=None, temperature=None, max_tokens=None):
        self.stream_calls.append({"messages": messages, "system": system})
        for chunk in self.chunks:
            await asyncio.sleep(0)
            yield chunk
        # Fail after the scripted chunks, like a stream dropping mid-reply
        if self.error is not None:
            raise self.error

    async def complete(self, messages, system=None, tools=None, tool_choice=None,
                       temperature=None, max_tokens=None):
        self.complete_calls.append({"messages": messages, "tools": tools, "tool_choice": tool_choice})
        if self.error is not None:
            raise self.error
        result = {"role": "assistant", "content": ""}
        if self.tool_payload is not None:
            result["tool_calls"] = [
                {"id": "toolu_1", "name": "report_repository", "arguments": self.tool_payload}
            ]
        return result


class ScriptedGateway:
    """Gateway double that replays chunks and canned analysis results."""

    def __init__(self, chunks=None, analysis=None, analysis_error=None, delay=0.0):
        self.chunks = list(chunks or [])
        self.analysis = analysis
        self.analysis_error = analysis_error
        self.delay = delay
        self.prompts = []
        self.histories = []
        self.analyzed = []

    async def stream_completion(self, prompt, history, on_chunk):
        self.prompts.append(prompt)
        self.histories.append(history)
        text = ""
        for chunk in self.chunks:
            await asyncio.sleep(self.delay)
            text += chunk
            on_chunk(chunk)
        return text

    async def analyze_remote_repository(self, url):
        self.analyzed.append(url)
        await asyncio.sleep(self.delay)
        if self.analysis_error is not None:
            raise self.analysis_error
        return self.analysis


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_project(temp_dir):
    """Create a test project structure."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "main.py").write_text("def hello():\n    return 'world'\n")
    (temp_dir / "src" / "utils.py").write_text("def add(a, b):\n    return a + b\n")

    (temp_dir / "tests").mkdir()
    (temp_dir / "tests" / "test_main.py").write_text(
        "def test_hello():\n    from src.main import hello\n    assert hello() == 'world'\n"
    )

    (temp_dir / "README.md").write_text("# Test Project\n")

    yield temp_dir


@pytest.fixture
def ignore_rules(test_project):
    """Create ignore rules for the test project."""
    return IgnoreRules(test_project)


@pytest.fixture
def small_forest():
    """Two roots: a directory with one file, and a top-level file."""
    return (
        FileNode(
            name="src",
            path="src",
            kind="directory",
            children=(
                FileNode(name="app.py", path="src/app.py", kind="file", content="print('hi')\n"),
            ),
        ),
        FileNode(name="README.md", path="README.md", kind="file", content="# Demo\n"),
    )


@pytest.fixture
def analysis():
    """A well-formed two-level repository analysis."""
    return RepoAnalysis.model_validate({
        "name": "flask",
        "summary": "A lightweight WSGI web framework.",
        "stack": ["Python", "Werkzeug", "Jinja2"],
        "structure": [
            {
                "name": "src",
                "path": "src",
                "type": "directory",
                "children": [
                    {"name": "app.py", "path": "src/app.py", "type": "file"},
                    {"name": "cli.py", "path": "src/cli.py", "type": "file"},
                ],
            },
            {"name": "tests", "path": "tests", "type": "directory", "children": []},
            {"name": "README.md", "path": "README.md", "type": "file"},
        ],
    })


@pytest.fixture
def scripted():
    """The ScriptedGateway class, for tests that need a custom script."""
    return ScriptedGateway


@pytest.fixture
def gateway():
    return ScriptedGateway(chunks=["Hello, ", "world"])


@pytest.fixture
def session(gateway, small_forest):
    return Session(gateway, forest=small_forest, reveal_interval=0.01)


@pytest.fixture
def make_gateway():
    """Build a real CompletionGateway around a FakeLLM."""
    def _make(**kwargs):
        llm = FakeLLM(**kwargs)
        return CompletionGateway(llm, SystemPromptBuilder()), llm
    return _make


@pytest.fixture
def mock_config(temp_dir):
    """Create a mock configuration."""
    return Config(
        anthropic_api_key="test_key",
        default_model="anthropic:claude-haiku-4-5",
        log_dir=temp_dir / "logs",
    )

