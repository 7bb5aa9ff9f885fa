"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "list", "rename", "delete", "info", "url", "serve", "stop-server",
    "endpoint", "upload", "pause", "resume", "cancel", "status",
    "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2E9BF0 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;46;155;240m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
  ==========================
   i p a d r o p
  ==========================
{RESET}"""

WELCOME_TITLE = "ipadrop - local package store"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "ipadrop> "

HELP_TEXT = """Available commands:
  list                        List packages (adopts new files from the inbox first)
  rename <name> <new-name>    Rename a package in the store
  delete <name>               Delete a package from the store
  info <name>                 Show the package's Info.plist as JSON
  url <name>                  Show the local download URL for a package
  serve                       Start the local file server
  stop-server                 Stop the local file server
  endpoint <url>              Set the remote upload endpoint
  upload <name>               Start uploading a package to the remote endpoint
  pause                       Pause the current upload
  resume                      Resume the current upload
  cancel                      Cancel the current upload
  status                      Show server and upload status
  clear                       Clear screen and redisplay welcome message
  help                        Show this help
  exit                        Exit REPL

Examples:
  list
  rename MyApp.ipa MyApp-1.2.ipa
  info MyApp-1.2.ipa
  serve
  url MyApp-1.2.ipa
  upload MyApp-1.2.ipa"""
