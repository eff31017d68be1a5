"""Main CLI client with REPL loop."""

import os

from .commands import (
    create_note,
    edit_note,
    empty_trash,
    list_notes,
    list_trash,
    login_user,
    logout_user,
    purge_note,
    register_user,
    restore_note,
    show_stats,
    toggle_flag,
    trash_note,
    view_note,
    whoami,
)
from .config import load_token

HELP = """
Auth Commands:
  /register - Create a new user account
  /login - Login to an existing account
  /logout - Logout
  /whoami - Show the logged-in account

Note Commands:
  /note - Create a new note
  /list [favorites|pinned] [#tag] [priority=alta|media|baja] [search words]
  /view <id> - Show a note
  /edit <id> - Edit a note's title, tags, priority, dates and content
  /complete <id> | /pin <id> | /favorite <id> - Toggle a flag
  /stats - Show statistics

Trash Commands:
  /delete <id> - Move a note to the trash
  /trash - List the trash
  /restore <id>|all - Restore from the trash
  /purge <id> - Delete a note permanently
  /empty - Empty the trash

Utility Commands:
  /help - Show this help
  /clear - Clear the terminal screen

Type 'exit' or 'quit' to leave.
"""

NO_ARG_COMMANDS = {
    "/register": register_user,
    "/login": login_user,
    "/logout": logout_user,
    "/whoami": whoami,
    "/note": create_note,
    "/stats": show_stats,
    "/trash": list_trash,
    "/empty": empty_trash,
}

ARG_COMMANDS = {
    "/list": list_notes,
    "/view": view_note,
    "/edit": edit_note,
    "/delete": trash_note,
    "/restore": restore_note,
    "/purge": purge_note,
}


def dispatch(user_input: str) -> bool:
    """Run one command line. Returns False when the user asked to quit."""
    command, _, args = user_input.partition(" ")
    command = command.lower()

    if command in ("exit", "quit"):
        return False

    if command in NO_ARG_COMMANDS:
        NO_ARG_COMMANDS[command]()
    elif command in ARG_COMMANDS:
        ARG_COMMANDS[command](args)
    elif command in ("/complete", "/pin", "/favorite"):
        toggle_flag(command[1:], args)
    elif command == "/help":
        print(HELP)
    elif command == "/clear":
        os.system("cls" if os.name == "nt" else "clear")
    else:
        print(f"Unknown command '{command}'. Type /help for the list.\n")
    return True


def main():
    """CLI client for the Jhonote API."""
    print("Welcome to Jhonote CLI!")
    print(HELP)
    print("Note: Make sure the API server is running (python -m api.server)\n")

    if load_token():
        print("✓ You are already logged in.\n")
    else:
        print("⚠ You are not logged in. Please /register or /login.\n")

    while True:
        try:
            user_input = input("jhonote> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue

        if not dispatch(user_input):
            print("\nGoodbye!")
            break


if __name__ == "__main__":
    main()
