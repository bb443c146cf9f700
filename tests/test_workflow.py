"""Tests for workflow dispatch."""

import pytest

from atlas.agents import Agent
from atlas.workflow import DEFAULT_WORKFLOW, WORKFLOW_TABLE, dispatch

SYNTHESIS = [Agent.ARCHITECT, Agent.GENERATOR, Agent.SECURITY]
REFACTORING = [Agent.REFACTORER, Agent.ARCHITECT]
IMPACT = [Agent.CHANGE_IMPACT, Agent.SECURITY, Agent.ARCHITECT]
AUDIT = [Agent.EXPLORER, Agent.ARCHITECT, Agent.EXPLAINER]
RETRIEVAL = [Agent.EXPLAINER]


def test_declared_bucket_order():
    """The tie-break depends on this exact order."""
    assert [list(workflow) for _, workflow in WORKFLOW_TABLE] == [
        SYNTHESIS,
        REFACTORING,
        IMPACT,
        AUDIT,
        RETRIEVAL,
    ]


@pytest.mark.parametrize(
    "query, expected",
    [
        ("Generate a login form", SYNTHESIS),
        ("Please refactor the parser", REFACTORING),
        ("Assess the impact on billing", IMPACT),
        ("Show me the architecture", AUDIT),
        ("Explain the auth module", RETRIEVAL),
    ],
)
def test_single_bucket(query, expected):
    """Test queries that hit exactly one bucket."""
    assert dispatch(query) == expected


@pytest.mark.parametrize(
    "triggers, workflow",
    WORKFLOW_TABLE,
)
def test_every_trigger_selects_its_bucket(triggers, workflow):
    for trigger in triggers:
        assert dispatch(f"please {trigger} now") == list(workflow)


@pytest.mark.parametrize(
    "query, expected",
    [
        ("explain how to refactor this", REFACTORING),
        ("Create a diagram of the architecture", SYNTHESIS),
        ("audit the change", IMPACT),
        ("What is the impact on billing?", IMPACT),
        ("describe the overall structure", AUDIT),
    ],
)
def test_first_declared_bucket_wins(query, expected):
    """Test that queries hitting two buckets use the earliest declared one."""
    assert dispatch(query) == expected


@pytest.mark.parametrize("query", ["hello there", "", "   ", "Who owns src/app.py?"])
def test_default_workflow(query):
    """Test fallback when nothing matches."""
    assert dispatch(query) == [Agent.EXPLORER]
    assert list(DEFAULT_WORKFLOW) == [Agent.EXPLORER]


def test_case_insensitive():
    assert dispatch("REFACTOR EVERYTHING") == REFACTORING


def test_dispatch_is_pure():
    """Test that results are fresh lists and repeat calls agree."""
    first = dispatch("Generate a service")
    first.append(Agent.EXPLORER)

    second = dispatch("Generate a service")

    assert second == SYNTHESIS
    assert dispatch("Generate a service") == second


def test_workflows_have_no_duplicates():
    for triggers, _ in WORKFLOW_TABLE:
        result = dispatch(triggers[0])
        assert result
        assert len(result) == len(set(result))
