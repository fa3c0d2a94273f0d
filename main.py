import asyncio

from api.client_factory import initialize_client
from config.config import Config
from orchestrator.core import ChatOrchestrator
from tools.web import create_tools_service_from_env
from ui.console import ConsoleUI
from utils.logger import get_logger

logger = get_logger(__name__)

HELP_TEXT = """
=== Available Commands ===
help        - Show this help message
stats       - Show token usage statistics
history [N] - Show the last N turns of the conversation (default 10)
tools       - Show the tool calls made this session
reset       - Start a new conversation
summarize   - Summarize the pages read so far
read N      - Read the search result numbered N
stream      - Toggle streaming replies
cot         - Toggle chain-of-thought replies
thinking    - Toggle showing the reasoning part of replies
autoread    - Toggle reading suggested results after a search
exit/quit   - Exit the program
"""

TOGGLES = {
    "stream": "streaming",
    "cot": "enable_cot",
    "thinking": "show_thinking",
    "autoread": "auto_read",
}


def print_settings(orchestrator: ChatOrchestrator) -> None:
    settings = orchestrator.get_settings().to_dict()
    flags = ", ".join(f"{k}={'on' if v else 'off'}" for k, v in settings.items())
    print(f"[{flags}]\n")


def print_history(orchestrator: ChatOrchestrator, last_n: int = 10) -> None:
    print(f"\n{orchestrator.session.conversation.get_conversation_summary(last_n)}\n")


def print_tool_log(orchestrator: ChatOrchestrator) -> None:
    entries = orchestrator.get_tool_call_audit_log()
    print(f"\n=== Tool Calls ({len(entries)}) ===")
    for entry in entries:
        print(f"{entry.timestamp}  {entry.tool}  {entry.args}")
    print()


async def handle_command(command: str, orchestrator: ChatOrchestrator, ui: ConsoleUI) -> bool:
    """
    Run a REPL command.

    Returns:
        True if ``command`` was a command, False if it should go to the model
    """
    lowered = command.lower()

    if lowered == "help":
        print(HELP_TEXT)
    elif lowered == "stats":
        print("\n=== Token Usage ===")
        print(orchestrator.session.token_tracker.format_summary())
        print(f"Conversation total: {orchestrator.get_total_token_count()}\n")
    elif lowered == "history" or lowered.startswith("history "):
        count = lowered[len("history"):].strip()
        print_history(orchestrator, int(count) if count.isdigit() else 10)
    elif lowered == "tools":
        print_tool_log(orchestrator)
    elif lowered == "reset":
        orchestrator.reset_conversation()
        ui.reset_actions()
        print("\nConversation reset.\n")
    elif lowered == "summarize":
        if ui.summarize_action is not None:
            await ui.summarize_action()
        else:
            await orchestrator.summarize_snippets()
    elif lowered.startswith("read "):
        index = lowered[len("read "):].strip()
        if not index.isdigit() or not 1 <= int(index) <= len(ui.read_more_actions):
            print(f"\nNo search result {index}.\n")
        else:
            result, read_more = ui.read_more_actions[int(index) - 1]
            await read_more(result.url)
    elif lowered in TOGGLES:
        field = TOGGLES[lowered]
        current = getattr(orchestrator.get_settings(), field)
        orchestrator.update_settings(**{field: not current})
        print_settings(orchestrator)
    else:
        return False
    return True


async def run_chat(config: Config) -> None:
    client = initialize_client(config)
    tools = create_tools_service_from_env()
    ui = ConsoleUI()

    orchestrator = ChatOrchestrator(client, tools, ui)
    orchestrator.initialize(config.initial_settings())

    print(f"\n=== AI Chat - {config.get_model_info()} ===")
    print("Type 'exit' to quit, 'stats' to see token usage, or 'help' for commands")
    print_settings(orchestrator)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "You: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting...")
            break

        if not user_input:
            continue
        if user_input.lower() in ("exit", "quit"):
            print("\nGoodbye!")
            break
        if await handle_command(user_input, orchestrator, ui):
            continue

        ui.set_user_input(user_input)
        await orchestrator.send_message()

    if orchestrator.session.token_tracker.requests > 0:
        print("\n=== Final Token Usage ===")
        print(orchestrator.session.token_tracker.format_summary())


def main():
    config = Config()
    if not config.validate():
        return

    try:
        asyncio.run(run_chat(config))
    except ValueError as e:
        logger.error(f"Client initialization failed: {e}")
        print(f"Error initializing client: {str(e)}")
    except KeyboardInterrupt:
        print("\nExiting...")


if __name__ == "__main__":
    main()
