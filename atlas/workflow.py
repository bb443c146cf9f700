"""Keyword dispatch from a user request to the agent workflow shown while answering."""

from atlas.agents import Agent

# Declaration order is the tie-break: the first bucket with a matching trigger wins.
WORKFLOW_TABLE: list[tuple[tuple[str, ...], tuple[Agent, ...]]] = [
    # Synthesis
    (
        ("generate", "create", "build", "synthesize", "write", "implement", "setup",
         "new module", "add feature"),
        (Agent.ARCHITECT, Agent.GENERATOR, Agent.SECURITY),
    ),
    # Structural refinement
    (
        ("refactor", "optimize", "improve", "clean", "simplify", "readability",
         "restructure", "dry"),
        (Agent.REFACTORER, Agent.ARCHITECT),
    ),
    # Predictive impact analysis
    (
        ("impact", "change", "blast radius", "predict", "consequence", "modify", "break",
         "risk"),
        (Agent.CHANGE_IMPACT, Agent.SECURITY, Agent.ARCHITECT),
    ),
    # Architectural audit
    (
        ("architecture", "structure", "overview", "audit", "design", "layers", "pattern",
         "diagram", "flowchart"),
        (Agent.EXPLORER, Agent.ARCHITECT, Agent.EXPLAINER),
    ),
    # Knowledge retrieval
    (
        ("explain", "describe", "what is", "how does", "tell me about", "find", "locate"),
        (Agent.EXPLAINER,),
    ),
]

DEFAULT_WORKFLOW: tuple[Agent, ...] = (Agent.EXPLORER,)


def dispatch(query: str) -> list[Agent]:
    """Map a free-text request to its ordered agent workflow.

    Args:
        query: Raw user request

    Returns:
        Non-empty list of agent labels, without duplicates
    """
    query_lower = query.lower()

    for triggers, workflow in WORKFLOW_TABLE:
        if any(trigger in query_lower for trigger in triggers):
            return list(dict.fromkeys(workflow))

    return list(DEFAULT_WORKFLOW)
