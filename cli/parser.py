"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


_NO_ARGS = {
    "list": ListCommand,
    "serve": ServeCommand,
    "stop-server": StopServerCommand,
    "status": StatusCommand,
}

_ONE_NAME = {
    "delete": DeleteCommand,
    "info": InfoCommand,
    "url": UrlCommand,
    "upload": UploadCommand,
}

_UPLOAD_CONTROLS = ("pause", "resume", "cancel")


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name, args = tokens[0], tokens[1:]

    if command_name in _NO_ARGS:
        if args:
            raise ParseError(f"{command_name} takes no arguments")
        return _NO_ARGS[command_name]()
    elif command_name in _ONE_NAME:
        if len(args) != 1:
            raise ParseError(f"{command_name} requires exactly 1 argument: <name>")
        return _ONE_NAME[command_name](name=args[0])
    elif command_name in _UPLOAD_CONTROLS:
        if args:
            raise ParseError(f"{command_name} takes no arguments")
        return UploadControlCommand(action=command_name)
    elif command_name == "rename":
        return _parse_rename(args)
    elif command_name == "endpoint":
        return _parse_endpoint(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_rename(args: list[str]) -> RenameCommand:
    """Parse 'rename <name> <new-name>' command."""
    if len(args) != 2:
        raise ParseError("rename requires exactly 2 arguments: <name> <new-name>")

    name, new_name = args
    if "/" in new_name:
        raise ParseError("new name must not contain '/'")
    return RenameCommand(name=name, new_name=new_name)


def _parse_endpoint(args: list[str]) -> EndpointCommand:
    """Parse 'endpoint <url>' command."""
    if len(args) != 1:
        raise ParseError("endpoint requires exactly 1 argument: <url>")

    url = args[0]
    if not url.startswith(("http://", "https://")):
        raise ParseError("endpoint must be an http:// or https:// URL")
    return EndpointCommand(url=url)
