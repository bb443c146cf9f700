"""Agent labels narrated to the user while Atlas answers."""

from enum import Enum


class Agent(str, Enum):
    """Specialist persona label. Carries no behavior of its own."""

    ORCHESTRATOR = "Orchestrator"
    EXPLORER = "Explorer"
    EXPLAINER = "Explainer"
    ARCHITECT = "Architect"
    CHANGE_IMPACT = "ChangeImpact"
    SECURITY = "Security"
    GENERATOR = "Generator"
    REFACTORER = "Refactorer"

    @property
    def display_name(self) -> str:
        if self is Agent.ORCHESTRATOR:
            return "Atlas (Orchestrator)"
        return self.value


AGENT_ROLES = {
    Agent.ORCHESTRATOR: "Frames the request, sequences the specialists and writes the final reply.",
    Agent.EXPLORER: "Quickly locates relevant code artifacts and symbols in the codebase.",
    Agent.EXPLAINER: "Produces clear documentation and high-level summaries of complex logic.",
    Agent.ARCHITECT: "Reasons about design patterns, system integrity and structural consistency.",
    Agent.CHANGE_IMPACT: "Predicts the blast radius of additions or modifications.",
    Agent.SECURITY: "Identifies vulnerabilities, checks input validation and trust boundaries.",
    Agent.GENERATOR: (
        "Synthesizes production-ready modules that follow the requested architectural "
        "patterns, with docstrings, strict typing and integration instructions."
    ),
    Agent.REFACTORER: (
        "Detects deep nesting, primitive obsession and long methods. For every change it "
        "names the smell, explains the rationale and shows a Before and an After block."
    ),
}
