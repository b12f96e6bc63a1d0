"""
Console frontend for the paced-reveal chat.

Runs the delivery orchestrator on an asyncio event loop with a Rich console
and prompt_toolkit input. Conversations are kept in a JSON file.
"""

import argparse
import asyncio
import shlex
from rich.console import Console

from ..agents.orchestrator import DeliveryOrchestrator
from ..core.config import ChatConfig
from ..delivery.stores import JsonFileConversationStore
from ..interfaces.console_interface import ConsoleUserInterface, ConsoleLogger


HELP_TEXT = """Commands:
  /new                  Start a new chat
  /problem              Define your problem (guided conversation)
  /list                 List conversations
  /open <id>            Switch to a conversation
  /rename <id> <title>  Rename a conversation
  /delete <id>          Delete a conversation
  /state                Show session state
  /help                 Show this help
  /quit                 Leave the chat"""


def parse_arguments(defaults: ChatConfig):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Multi-turn LLM chat with paced answer reveal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m harmony_chat.frontends.console_frontend
  python -m harmony_chat.frontends.console_frontend --model gpt-4o-mini --language ar
        """
    )

    parser.add_argument(
        "--model",
        default=defaults.model,
        help=f"LLM model to use (default: {defaults.model})"
    )

    parser.add_argument(
        "--temperature",
        type=float,
        default=defaults.temperature,
        help=f"Temperature for LLM responses (default: {defaults.temperature})"
    )

    parser.add_argument(
        "--language",
        choices=["en", "ar"],
        default=defaults.language,
        help=f"Language of the guided problem flow (default: {defaults.language})"
    )

    parser.add_argument(
        "--reveal-cadence",
        type=float,
        default=defaults.reveal_cadence_ms,
        help=f"Milliseconds between revealed characters (default: {defaults.reveal_cadence_ms})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.completion_timeout,
        help=f"Seconds to wait for an answer (default: {defaults.completion_timeout})"
    )

    parser.add_argument(
        "--store",
        default=defaults.store_path,
        help=f"Path of the conversation file (default: {defaults.store_path})"
    )

    parser.add_argument(
        "--stream",
        action="store_true",
        default=defaults.stream,
        help="Request a streamed answer from the provider (still revealed at the paced cadence)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


async def handle_command(command: str, orchestrator: DeliveryOrchestrator, ui: ConsoleUserInterface) -> bool:
    """
    Run a slash command.

    Returns:
        False if the chat should end
    """
    try:
        parts = shlex.split(command)
    except ValueError as e:
        ui.display_error(str(e))
        return True
    name, args = parts[0].lower(), parts[1:]

    if name in ("/quit", "/exit"):
        return False
    if name == "/help":
        ui.console.print(HELP_TEXT)
    elif name == "/new":
        orchestrator.start_new_conversation()
        ui.display_info("New chat started. Ask your question or type /problem.")
    elif name == "/problem":
        if await orchestrator.start_problem_definition_flow():
            await orchestrator.wait_for_reveal()
    elif name == "/list":
        conversations = await orchestrator.list_conversations()
        ui.display_conversations(conversations, orchestrator.session.current_conversation_id)
    elif name == "/open" and len(args) == 1:
        if await orchestrator.select_conversation(args[0]):
            conversation = orchestrator.current_conversation
            ui.display_info(f"Opened '{conversation.title}'")
            for message in conversation.messages:
                if message.role == "user":
                    ui.console.print(f"[bold blue]👤 You:[/bold blue] {message.content}")
                else:
                    ui.display_chat_message(message)
    elif name == "/rename" and len(args) >= 2:
        if await orchestrator.rename_conversation(args[0], " ".join(args[1:])):
            ui.display_info("Conversation renamed.")
    elif name == "/delete" and len(args) == 1:
        if await orchestrator.delete_conversation(args[0]):
            ui.display_info("Conversation deleted.")
    elif name == "/state":
        ui.console.print(orchestrator.get_conversation_state())
    else:
        ui.display_warning(f"Unknown command: {command}. Type /help for help.")
    return True


async def run_chat(orchestrator: DeliveryOrchestrator, ui: ConsoleUserInterface):
    """Main conversation loop."""
    ui.initialize_session()
    try:
        while True:
            user_input = await ui.get_user_input()

            if user_input is None:
                break
            user_input = user_input.strip()
            if not user_input:
                continue

            if user_input.startswith("/"):
                if not await handle_command(user_input, orchestrator, ui):
                    break
                continue

            if not orchestrator.session.accepts_input:
                ui.display_warning("Input is locked. Type /new for a new chat or /problem to define your problem.")
                continue

            # The reveal opens its own live region, so no spinner here
            ui.console.print("[dim]Thinking...[/dim]")
            if await orchestrator.submit(user_input):
                await orchestrator.wait_for_reveal()
    finally:
        ui.cleanup_session()


def build_config(args, defaults: ChatConfig) -> ChatConfig:
    """Overlay command line options on the environment configuration."""
    return defaults.model_copy(update={
        "model": args.model,
        "temperature": args.temperature,
        "language": args.language,
        "reveal_cadence_ms": args.reveal_cadence,
        "completion_timeout": args.timeout,
        "store_path": args.store,
        "stream": args.stream,
    })


def main():
    """Main entry point."""
    defaults = ChatConfig.from_env()
    args = parse_arguments(defaults)
    config = build_config(args, defaults)

    # Initialize console and logger
    console = Console()
    ui = ConsoleUserInterface(console)
    logger = ConsoleLogger(console, verbose=args.verbose)

    orchestrator = DeliveryOrchestrator.from_config(
        config,
        store=JsonFileConversationStore(config.store_path),
        ui=ui,
        logger=logger
    )

    console.print("[bold cyan]💬 Chat started! Ask a question or type /problem to define your problem.[/bold cyan]")
    console.print("[dim]Type /help for commands, /quit to leave.[/dim]")
    console.print()

    asyncio.run(run_chat(orchestrator, ui))


if __name__ == "__main__":
    main()
