"""CLI command handlers."""

from .auth import login_user, logout_user, register_user, whoami
from .notes import (
    create_note,
    edit_note,
    empty_trash,
    list_notes,
    list_trash,
    purge_note,
    restore_note,
    show_stats,
    toggle_flag,
    trash_note,
    view_note,
)

__all__ = [
    # Auth commands
    "login_user",
    "logout_user",
    "register_user",
    "whoami",
    # Notes commands
    "create_note",
    "edit_note",
    "list_notes",
    "show_stats",
    "toggle_flag",
    "view_note",
    # Trash commands
    "empty_trash",
    "list_trash",
    "purge_note",
    "restore_note",
    "trash_note",
]
