"""Session state snapshot and its transitions.

Every transition takes the previous snapshot and returns a new one. A
transition with nothing to do returns the very same object, so callers can
detect no-ops with ``is``.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from atlas.agents import Agent
from atlas.models import FileNode, Message
from atlas.tree import find_file, import_forest


class Phase(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    STREAMING = "streaming"


class SessionState(BaseModel):
    """Immutable snapshot of one chat session.

    Attributes:
        messages: Chat log in chronological order
        phase: Where the current turn is
        active_agents: Agent labels currently lit, in activation order
        current_file: File shown in the viewer and injected as context
        repo_forest: Root-level nodes of the repository tree
        is_importing: Busy flag of the remote import track
        epoch: Turn generation; bumped when a turn starts and when it ends
        pending_message_id: Id of the open assistant placeholder
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = ()
    phase: Phase = Phase.IDLE
    active_agents: tuple[Agent, ...] = ()
    current_file: Optional[FileNode] = None
    repo_forest: tuple[FileNode, ...] = ()
    is_importing: bool = False
    epoch: int = 0
    pending_message_id: Optional[str] = None

    @property
    def is_generating(self) -> bool:
        return self.phase is not Phase.IDLE

    @property
    def pending_message(self) -> Optional[Message]:
        if self.pending_message_id is None:
            return None
        for message in reversed(self.messages):
            if message.id == self.pending_message_id:
                return message
        return None


def begin_turn(state: SessionState, user_message: Message, placeholder: Message) -> SessionState:
    """Record the user message and open an empty assistant placeholder."""
    return state.model_copy(
        update={
            "messages": state.messages + (user_message, placeholder),
            "phase": Phase.DISPATCHING,
            "active_agents": (Agent.ORCHESTRATOR,),
            "epoch": state.epoch + 1,
            "pending_message_id": placeholder.id,
        }
    )


def start_streaming(state: SessionState) -> SessionState:
    if state.phase is not Phase.DISPATCHING:
        return state
    return state.model_copy(update={"phase": Phase.STREAMING})


def append_chunk(state: SessionState, text: str) -> SessionState:
    """Append streamed text to the open placeholder, keeping its id."""
    if not text or state.pending_message_id is None:
        return state

    messages = tuple(
        message.model_copy(update={"content": message.content + text})
        if message.id == state.pending_message_id
        else message
        for message in state.messages
    )
    return state.model_copy(update={"messages": messages})


def activate_agent(state: SessionState, agent: Agent, epoch: int) -> SessionState:
    """Light one more agent label, unless the turn that scheduled it is over."""
    if epoch != state.epoch or not state.is_generating or agent in state.active_agents:
        return state
    return state.model_copy(update={"active_agents": state.active_agents + (agent,)})


def complete_turn(state: SessionState) -> SessionState:
    if not state.is_generating:
        return state
    return state.model_copy(
        update={
            "phase": Phase.IDLE,
            "active_agents": (),
            "epoch": state.epoch + 1,
            "pending_message_id": None,
        }
    )


def begin_import(state: SessionState) -> SessionState:
    return state.model_copy(update={"is_importing": True})


def import_succeeded(state: SessionState, root: FileNode, summary: Message) -> SessionState:
    return state.model_copy(
        update={
            "repo_forest": import_forest(state.repo_forest, root),
            "messages": state.messages + (summary,),
            "is_importing": False,
        }
    )


def import_failed(state: SessionState, report: Message) -> SessionState:
    return state.model_copy(
        update={
            "messages": state.messages + (report,),
            "is_importing": False,
        }
    )


def post_message(state: SessionState, message: Message) -> SessionState:
    return state.model_copy(update={"messages": state.messages + (message,)})


def select_file(state: SessionState, path: str) -> SessionState:
    """Make the file at ``path`` the active file. Unknown paths are a no-op."""
    node = find_file(state.repo_forest, path)
    if node is None or node == state.current_file:
        return state
    return state.model_copy(update={"current_file": node})
