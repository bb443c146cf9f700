"""CLI and REPL for Atlas."""

import asyncio
import contextlib
import sys
from pathlib import Path
from typing import Any, Coroutine, Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text
from rich.tree import Tree

from atlas.agents import AGENT_ROLES, Agent
from atlas.config import Config
from atlas.constants import LANGUAGE_MAP
from atlas.gateway import CompletionGateway
from atlas.llm import LLM
from atlas.models import FileNode
from atlas.session import Session
from atlas.state import SessionState
from atlas.system_prompt import SystemPromptBuilder
from atlas.tree import build_forest, count_files
from atlas.utils.ignore import IgnoreRules
from atlas.utils.logging import SessionLogger, configure_logging
from atlas.workflow import dispatch

app = typer.Typer(help="Atlas - Multi-agent code wiki for your terminal")
console = Console()


def build_gateway(config: Config) -> CompletionGateway:
    descriptor = LLM.parse_model_string(config.default_model, temperature=config.temperature)
    return CompletionGateway(LLM(descriptor, config.anthropic_api_key), SystemPromptBuilder())


class REPL:
    """Interactive REPL for Atlas."""

    def __init__(self, session: Session, config: Config, source: str, logger: SessionLogger):
        """Initialize REPL.

        Args:
            session: Chat session to drive
            config: Configuration object
            source: Where the initial forest came from (for the banner)
            logger: Transcript logger
        """
        self.session = session
        self.config = config
        self.source = source
        self.logger = logger
        self.loop = asyncio.new_event_loop()
        self.running = True

    def start(self) -> None:
        """Start the REPL."""
        forest = self.session.state.repo_forest
        console.print(Panel.fit(
            "[bold cyan]Atlas[/bold cyan] - Multi-agent Code Wiki\n"
            f"Repository: {self.source} ({count_files(forest)} files)\n"
            f"Model: {self.config.default_model}\n"
            "\n"
            "Type /help for commands or /quit to exit",
            border_style="cyan"
        ))

        try:
            while self.running:
                try:
                    user_input = console.input("[bold cyan]atlas>[/bold cyan] ").strip()
                except KeyboardInterrupt:
                    console.print("\n[dim]Use /quit to exit[/dim]")
                    continue
                except EOFError:
                    break

                if not user_input:
                    continue

                self.handle_input(user_input)
        finally:
            self.loop.close()

        console.print("\n[cyan]Goodbye![/cyan]")

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Run a session coroutine on the REPL's event loop.

        Ctrl+C cancels the coroutine and waits for it to unwind, so the
        session always gets back to idle.
        """
        task = self.loop.create_task(coro)
        try:
            return self.loop.run_until_complete(task)
        except KeyboardInterrupt:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                self.loop.run_until_complete(task)
            console.print("\n[yellow]Interrupted[/yellow]")
            return None

    def handle_input(self, user_input: str) -> None:
        """Handle user input (command or natural language)."""
        if user_input.startswith("/"):
            self.handle_command(user_input)
        else:
            self.stream_turn(self.session.submit(user_input))

    def handle_command(self, command: str) -> None:
        """Handle slash command.

        Args:
            command: Command string (starting with /)
        """
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1].strip() if len(parts) > 1 else ""

        try:
            if cmd == "/help":
                self.show_help()
            elif cmd == "/quit" or cmd == "/exit":
                self.running = False
            elif cmd == "/tree":
                console.print(self.render_tree(self.session.state.repo_forest))
            elif cmd == "/open":
                if not args:
                    console.print("[red]Usage: /open <path>[/red]")
                    return
                node = self.session.select_file(args)
                if node is None:
                    console.print(f"[red]No file at {args}. Use /tree to list paths.[/red]")
                    return
                self.show_file(node)
            elif cmd == "/file":
                current = self.session.state.current_file
                if current is None:
                    console.print("[dim]No active file. Use /open <path>.[/dim]")
                else:
                    self.show_file(current)
            elif cmd == "/import":
                if not args:
                    console.print("[red]Usage: /import <host/owner/repo>[/red]")
                    return
                with console.status("[cyan]Atlas agents are scanning the repository...[/cyan]"):
                    self._run(self.session.import_repository(args))
                self.show_last_message()
            elif cmd == "/refactor":
                if self.session.state.current_file is None:
                    console.print("[red]Open a file first with /open <path>[/red]")
                    return
                self.stream_turn(self.session.refactor_current_file())
            elif cmd == "/generate":
                if not args:
                    console.print("[red]Usage: /generate <module description>[/red]")
                    return
                self.stream_turn(self.session.synthesize_module(args))
            elif cmd == "/overview":
                self.stream_turn(self.session.project_overview())
            elif cmd == "/agents":
                if args:
                    workflow = " -> ".join(agent.display_name for agent in dispatch(args))
                    console.print(f"[dim]Workflow:[/dim] {workflow}")
                else:
                    for agent in Agent:
                        console.print(f"[bold]{agent.display_name}[/bold]: {AGENT_ROLES[agent]}")
            elif cmd == "/model":
                if args:
                    previous = self.config.default_model
                    self.config.default_model = args
                    try:
                        self.session.gateway = build_gateway(self.config)
                        console.print(f"[green]Switched to model: {args}[/green]")
                    except ValueError as e:
                        self.config.default_model = previous
                        console.print(f"[red]{e}[/red]")
                else:
                    console.print(f"[dim]Current model: {self.config.default_model}[/dim]")
                    console.print("\nAvailable models:")
                    for model in LLM.list_models():
                        console.print(f"  - {model}")
            elif cmd == "/config":
                config_dict = self.config.to_dict()
                console.print(Panel(
                    "\n".join(f"{k}: {v}" for k, v in config_dict.items()),
                    title="Configuration",
                    border_style="blue"
                ))
            elif cmd == "/log":
                console.print(f"[dim]Session logs: {self.logger.get_log_path()}[/dim]")
            else:
                console.print(f"[red]Unknown command: {cmd}[/red]")
                console.print("[dim]Type /help for available commands[/dim]")

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")

    def stream_turn(self, coro: Coroutine[Any, Any, bool]) -> None:
        """Run a chat turn while rendering agent status and the streamed reply."""
        if self.session.state.is_generating:
            coro.close()
            console.print("[yellow]Atlas is still answering[/yellow]")
            return

        with Live(console=console, refresh_per_second=10, vertical_overflow="visible") as live:
            unsubscribe = self.session.subscribe(lambda state: live.update(self.render_turn(state)))
            try:
                self._run(coro)
            finally:
                unsubscribe()

    def render_turn(self, state: SessionState) -> Group:
        message = state.pending_message or (state.messages[-1] if state.messages else None)
        parts: list[Any] = []

        if state.is_generating:
            agents = " -> ".join(agent.display_name for agent in state.active_agents)
            parts.append(Text(f"Agents: {agents}", style="dim cyan"))

        if message is not None and message.role == "assistant" and message.content:
            parts.append(Markdown(message.content))
        elif state.is_generating:
            parts.append(Text("Thinking...", style="dim"))

        return Group(*parts)

    def render_tree(self, forest: tuple[FileNode, ...]) -> Tree:
        root = Tree(f"[bold]{self.source}[/bold]")
        self._add_branches(root, forest)
        return root

    def _add_branches(self, branch: Tree, nodes: tuple[FileNode, ...]) -> None:
        for node in nodes:
            if node.is_dir:
                child = branch.add(f"[bold blue]{node.name}/[/bold blue]")
                self._add_branches(child, node.children or ())
            else:
                branch.add(f"{node.name} [dim]{node.path}[/dim]")

    def show_file(self, node: FileNode) -> None:
        console.print(f"[bold]{node.path}[/bold]")
        if node.content is None:
            console.print("[dim](content not loaded)[/dim]")
            return
        lexer = LANGUAGE_MAP.get(Path(node.name).suffix.lower(), "text")
        console.print(Syntax(node.content, lexer, theme="monokai", line_numbers=True))

    def show_last_message(self) -> None:
        messages = self.session.state.messages
        if not messages:
            return
        last = messages[-1]
        console.print(Panel(
            Markdown(last.content),
            title=last.agent.display_name if last.agent else None,
            border_style="red" if last.error else "green",
        ))

    def show_help(self) -> None:
        """Show help message."""
        help_text = """
**Available Commands:**

- `/tree` - Show the repository tree
- `/open <path>` - Open a file and make it the active context
- `/file` - Show the active file again
- `/import <url>` - Analyze a public repository and add it to the tree
- `/refactor` - Ask the Refactorer to rework the active file
- `/generate <description>` - Ask the Generator for a new module
- `/overview` - Run an architectural audit of the project
- `/agents [query]` - List agents, or show the workflow a query would use
- `/model [name]` - Show or switch LLM model
- `/config` - Show current configuration
- `/log` - Show session log path
- `/help` - Show this help message
- `/quit` - Exit Atlas

Anything else is sent to Atlas as a question.

**Examples:**

```
/open services/api/auth.py
Explain how token validation works
/import github.com/pallets/flask
Give me an architecture overview
```
        """
        console.print(Markdown(help_text))


@app.command()
def main(
    path: Optional[str] = typer.Argument(
        None,
        help="Local repository to load (default: built-in sample repository)"
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model", "-m",
        help="Model to use (e.g., anthropic:claude-haiku-4-5)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Write debug diagnostics to stderr"
    ),
) -> None:
    """Start an Atlas interactive session."""
    configure_logging(verbose)

    project_root = Path(path).resolve() if path else None

    if project_root is not None and not project_root.is_dir():
        console.print(f"[red]Error: Not a directory: {project_root}[/red]")
        sys.exit(1)

    # Load configuration
    try:
        config = Config.load(project_root)
    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    # Override model if specified
    if model:
        config.default_model = model

    # Validate configuration
    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        sys.exit(1)

    forest = None
    source = "sample repository"
    if project_root is not None:
        console.print("\n[dim]Loading repository tree...[/dim]")
        rules = IgnoreRules(project_root, config.extra_ignores)
        forest = build_forest(project_root, rules, config.max_read_mb)
        source = project_root.name

    try:
        logger = SessionLogger(config.log_dir)
        session = Session(
            build_gateway(config),
            forest=forest,
            reveal_interval=config.reveal_interval,
            transcript=logger,
        )
        REPL(session, config, source, logger).start()
    except Exception as e:
        console.print(f"[red]Fatal error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    app()
