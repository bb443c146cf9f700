"""Tests for prompt assembly."""

import json

from atlas.agents import Agent
from atlas.models import Message
from atlas.prompt import assemble, history_for_gateway, strip_content, wants_structure
from atlas.state import SessionState, select_file


def test_plain_query(small_forest):
    """Test that a non-structural query with no active file is just the query."""
    state = SessionState(repo_forest=small_forest)

    assert assemble("Tell me a joke", state) == "Query: Tell me a joke"


def test_active_file_block(small_forest):
    """Test that the active file precedes the query."""
    state = select_file(SessionState(repo_forest=small_forest), "src/app.py")

    prompt = assemble("Explain this file", state)

    assert prompt == (
        "[CONTEXT] Active File: src/app.py\n[CONTENT]\nprint('hi')\n\n\n"
        "Query: Explain this file"
    )
    assert prompt.index("src/app.py") < prompt.index("Query:")


def test_structure_block_for_structural_queries(small_forest):
    """Test that the forest is attached without file contents."""
    state = SessionState(repo_forest=small_forest)

    prompt = assemble("Give me an Architecture overview", state)

    assert prompt.startswith("[PROJECT STRUCTURE]\n")
    assert prompt.endswith("Query: Give me an Architecture overview")
    assert "print('hi')" not in prompt

    payload = prompt[len("[PROJECT STRUCTURE]\n"):prompt.index("\n\nQuery:")]
    assert json.loads(payload) == strip_content(small_forest)


def test_structure_block_comes_before_file_block(small_forest):
    state = select_file(SessionState(repo_forest=small_forest), "README.md")

    prompt = assemble("audit this design", state)

    assert prompt.index("[PROJECT STRUCTURE]") < prompt.index("[CONTEXT] Active File: README.md")
    assert prompt.index("[CONTEXT]") < prompt.index("Query: audit this design")


def test_strip_content(small_forest):
    stripped = strip_content(small_forest)

    assert stripped == [
        {
            "name": "src",
            "path": "src",
            "type": "directory",
            "children": [{"name": "app.py", "path": "src/app.py", "type": "file"}],
        },
        {"name": "README.md", "path": "README.md", "type": "file"},
    ]


def test_wants_structure():
    assert wants_structure("Show the STRUCTURE")
    assert wants_structure("which design pattern is this")
    assert not wants_structure("explain auth")


def test_history_skips_empty_messages():
    """Test that the empty placeholder never reaches the gateway."""
    state = SessionState(messages=(
        Message(role="user", content="first"),
        Message(role="assistant", content="answer", agent=Agent.ORCHESTRATOR),
        Message(role="user", content="second"),
        Message(role="assistant", content="", agent=Agent.ORCHESTRATOR),
    ))

    assert history_for_gateway(state) == [
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "answer"},
        {"role": "user", "content": "second"},
    ]


def test_assemble_does_not_mutate(small_forest):
    state = select_file(SessionState(repo_forest=small_forest), "src/app.py")
    before = state.model_dump()

    assemble("architecture of this file", state)
    history_for_gateway(state)

    assert state.model_dump() == before
