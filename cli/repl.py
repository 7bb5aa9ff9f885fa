"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    get_workspace,
    handle_delete,
    handle_endpoint,
    handle_info,
    handle_list,
    handle_rename,
    handle_serve,
    handle_status,
    handle_stop_server,
    handle_upload,
    handle_upload_control,
    handle_url,
)
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    DeleteCommand,
    EndpointCommand,
    InfoCommand,
    ListCommand,
    RenameCommand,
    ServeCommand,
    StatusCommand,
    StopServerCommand,
    UploadCommand,
    UploadControlCommand,
    UrlCommand,
)
from cli.parser import ParseError, parse_command

_HANDLERS = {
    ListCommand: handle_list,
    RenameCommand: handle_rename,
    DeleteCommand: handle_delete,
    InfoCommand: handle_info,
    UrlCommand: handle_url,
    ServeCommand: handle_serve,
    StopServerCommand: handle_stop_server,
    EndpointCommand: handle_endpoint,
    UploadCommand: handle_upload,
    UploadControlCommand: handle_upload_control,
    StatusCommand: handle_status,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj, workspace=None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = _HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, workspace)


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    completer = WordCompleter(COMMANDS, ignore_case=True)
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=completer, history=history, style=STYLE
    )

    clear_screen()
    show_welcome()

    try:
        while True:
            try:
                user_input = session.prompt([("class:prompt", PROMPT_TEXT)])

                if not user_input.strip():
                    continue

                if user_input.strip() == "exit":
                    print("Goodbye!")
                    break

                if user_input.strip() == "help":
                    print(HELP_TEXT)
                    continue

                if user_input.strip() == "clear":
                    clear_screen()
                    show_welcome()
                    continue

                cmd_obj = parse_command(user_input)
                print(dispatch_command(cmd_obj))

            except ParseError as e:
                print(f"Error: {e}")
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        get_workspace().close()
