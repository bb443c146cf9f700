"""Session controller: drives state transitions from user actions and gateway events."""

import asyncio
from typing import Callable, Optional, Protocol, Sequence

from atlas import state as transitions
from atlas.agents import Agent
from atlas.constants import DEFAULT_REVEAL_INTERVAL
from atlas.gateway import ChunkCallback
from atlas.models import FileNode, Message, RepoAnalysis
from atlas.prompt import assemble, history_for_gateway
from atlas.remote import (
    InvalidRepoUrl,
    failure_message,
    normalize_repo_url,
    summarize_import,
    to_file_node,
)
from atlas.scheduler import AgentRevealScheduler
from atlas.state import SessionState
from atlas.tree import SEED_FOREST
from atlas.utils.logging import SessionLogger, get_logger
from atlas.workflow import dispatch

logger = get_logger()

Listener = Callable[[SessionState], None]


class Gateway(Protocol):
    async def stream_completion(
        self, prompt: str, history: list[dict[str, str]], on_chunk: ChunkCallback
    ) -> str: ...

    async def analyze_remote_repository(self, url: str) -> RepoAnalysis: ...


class Session:
    """Owns the single state snapshot of a chat session.

    All mutations go through ``_apply``, which runs a pure transition on the
    latest snapshot, so chunk arrivals and reveal timers never work from a
    stale copy.
    """

    def __init__(
        self,
        gateway: Gateway,
        forest: Optional[Sequence[FileNode]] = None,
        reveal_interval: float = DEFAULT_REVEAL_INTERVAL,
        transcript: Optional[SessionLogger] = None,
    ):
        """Initialize session.

        Args:
            gateway: Completion gateway to stream replies and analyze repositories
            forest: Initial repository forest (defaults to the seed forest)
            reveal_interval: Seconds between staggered agent activations
            transcript: Optional transcript logger
        """
        self.gateway = gateway
        self.state = SessionState(repo_forest=tuple(SEED_FOREST if forest is None else forest))
        self.reveal = AgentRevealScheduler(reveal_interval, self._reveal_agent)
        self.transcript = transcript
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for new snapshots. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _apply(self, transition: Callable[..., SessionState], *args) -> SessionState:
        new_state = transition(self.state, *args)
        if new_state is not self.state:
            self.state = new_state
            for listener in list(self._listeners):
                listener(new_state)
        return self.state

    async def submit(self, query: str) -> bool:
        """Run one chat turn to completion.

        Args:
            query: User request

        Returns:
            False when the query was rejected (empty, or a turn is in flight)
        """
        query = query.strip()
        if not query:
            return False
        if self.state.is_generating:
            logger.warning("submit_rejected", reason="turn_in_flight")
            return False

        workflow = dispatch(query)

        # Context comes from the snapshot before this turn's messages exist
        prompt = assemble(query, self.state)
        history = history_for_gateway(self.state)

        user_message = Message(role="user", content=query)
        placeholder = Message(role="assistant", content="", agent=Agent.ORCHESTRATOR)

        self._apply(transitions.begin_turn, user_message, placeholder)
        self.reveal.schedule(workflow, self.state.epoch)
        logger.debug("turn_started", epoch=self.state.epoch, workflow=[a.value for a in workflow])

        self._apply(transitions.start_streaming)
        try:
            reply = await self.gateway.stream_completion(prompt, history, self._on_chunk)
        finally:
            self.reveal.cancel()
            self._apply(transitions.complete_turn)

        if self.transcript:
            self.transcript.log_message("user", query, workflow=[a.value for a in workflow])
            self.transcript.log_message("assistant", reply, agent=Agent.ORCHESTRATOR.value)

        return True

    def _on_chunk(self, text: str) -> None:
        self._apply(transitions.append_chunk, text)

    def _reveal_agent(self, agent: Agent, epoch: int) -> None:
        self._apply(transitions.activate_agent, agent, epoch)

    async def import_repository(self, raw_url: str) -> bool:
        """Analyze a remote repository and graft it onto the forest.

        Failures never escape: they end up as a chat message.

        Args:
            raw_url: URL as typed by the user

        Returns:
            True when a new root was added
        """
        if self.state.is_importing:
            logger.warning("import_rejected", reason="import_in_flight")
            return False

        try:
            url = normalize_repo_url(raw_url)
        except InvalidRepoUrl as e:
            logger.info("import_invalid_url", url=raw_url)
            self._apply(transitions.post_message, self._failure(f"**Ingestion Failed:** {e}"))
            return False

        self._apply(transitions.begin_import)
        try:
            analysis = await self.gateway.analyze_remote_repository(url)
            root = to_file_node(analysis, url)
        except asyncio.CancelledError:
            # Release the busy flag before propagating
            self._apply(transitions.import_failed, self._failure(failure_message(url)))
            raise
        except Exception as e:
            logger.error("import_failed", url=url, error=str(e) or type(e).__name__)
            self._apply(transitions.import_failed, self._failure(failure_message(url)))
            if self.transcript:
                self.transcript.log_event("import_failed", url=url, error=str(e))
            return False

        summary = Message(
            role="assistant",
            content=summarize_import(analysis, root),
            agent=Agent.ARCHITECT,
        )
        self._apply(transitions.import_succeeded, root, summary)

        if self.transcript:
            self.transcript.log_event("import_succeeded", url=url, name=root.name)

        return True

    def _failure(self, content: str) -> Message:
        return Message(role="assistant", content=content, agent=Agent.ORCHESTRATOR, error=True)

    def select_file(self, path: str) -> Optional[FileNode]:
        """Open a file by path.

        Returns:
            The file node, or None when no file has that path (state untouched)
        """
        current = self._apply(transitions.select_file, path).current_file
        if current is None or current.path != path:
            return None
        return current

    async def refactor_current_file(self) -> bool:
        """Ask the Refactorer to rework the active file."""
        current = self.state.current_file
        if current is None or self.state.is_generating:
            return False
        return await self.submit(
            f"Refactor the current file ({current.path}) to optimize for readability and "
            "reduce complexity. Focus on applying guard clauses and decomposing long methods."
        )

    async def synthesize_module(self, description: str) -> bool:
        """Ask the Generator for a new module."""
        if not description.strip():
            return False
        return await self.submit(
            f"Synthesize New Module: {description.strip()}. Use strict architectural "
            "patterns and include an integration guide."
        )

    async def project_overview(self) -> bool:
        return await self.submit(
            "Perform a deep architectural audit of the project structure. "
            "Identify design patterns and primary data flows."
        )
