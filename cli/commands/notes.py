"""Notes and trash command handlers."""

import os
import shlex
import subprocess
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path

from ..api import call_api

PRIORITY_ICONS = {"alta": "🔴", "media": "🟡", "baja": "🟢"}
UNTITLED = "Sin título"

FLAG_ENDPOINTS = {
    "complete": ("completed", "completed"),
    "pin": ("pinned", "pinned"),
    "favorite": ("favorite", "is_favorite"),
}


def _get_editor():
    """Get the user's preferred text editor."""
    editor = os.environ.get("EDITOR") or os.environ.get("VISUAL")
    if editor:
        return editor

    if sys.platform == "win32":
        return "notepad"
    for editor_cmd in ["nano", "vim", "vi"]:
        try:
            subprocess.run(
                ["which", editor_cmd],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
            return editor_cmd
        except (subprocess.CalledProcessError, FileNotFoundError):
            continue

    return "vi"


def _edit_text(initial: str = "") -> str | None:
    """Open the editor on a temporary file and return what was saved."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".md", delete=False) as tmp_file:
        tmp_file.write(initial)
        tmp_path = Path(tmp_file.name)

    editor = _get_editor()
    print(f"\nOpening editor ({editor})... save and close it when you are done.\n")
    try:
        subprocess.run([editor, str(tmp_path)], check=True)
        return tmp_path.read_text(encoding="utf-8")
    except subprocess.CalledProcessError:
        print(f"\nError: Editor '{editor}' exited with an error.\n")
        return None
    except FileNotFoundError:
        print(f"\nError: Editor '{editor}' not found.")
        print("You can set your preferred editor with: export EDITOR=nano\n")
        return None
    finally:
        tmp_path.unlink(missing_ok=True)


def _parse_date(raw: str) -> str | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw).isoformat()
    except ValueError:
        print(f"Warning: ignoring invalid date '{raw}' (expected YYYY-MM-DD).")
        return None


def _format_timestamp(value: str | None) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def _print_note_line(note: dict):
    markers = ""
    if note.get("pinned"):
        markers += "📌 "
    if note.get("is_favorite"):
        markers += "⭐ "
    check = "[x]" if note.get("completed") else "[ ]"
    icon = PRIORITY_ICONS.get(note.get("priority", "media"), "")

    print(f"{check} {markers}{icon} {note.get('title') or UNTITLED}")
    print(f"  ID: {note['id']}")
    if note.get("tags"):
        print(f"  Tags: {' '.join('#' + tag for tag in note['tags'])}")
    if note.get("due_date"):
        print(f"  Due: {note['due_date']}")
    print(f"  Updated: {_format_timestamp(note.get('updated_at'))}\n")


def parse_list_args(args: str) -> dict:
    """Turn ``/list`` arguments into query parameters.

    Accepts ``favorites`` or ``pinned``, ``#tag``, ``priority=<alta|media|baja>``
    and any other words as the search term.
    """
    try:
        tokens = shlex.split(args or "")
    except ValueError:
        # Unbalanced quotes: fall back to plain whitespace splitting
        tokens = (args or "").split()

    params: dict = {}
    words = []
    for token in tokens:
        lowered = token.lower()
        if lowered in ("favorites", "pinned"):
            params["filter"] = lowered
        elif token.startswith("#") and len(token) > 1:
            params["tag"] = lowered[1:]
        elif lowered.startswith("priority="):
            params["priority"] = lowered.split("=", 1)[1]
        else:
            words.append(token)
    if words:
        params["search"] = " ".join(words)
    return params


def create_note():
    """Create a note, writing its content in an external editor."""
    print("\n=== Create New Note ===")

    title = input("Title (optional): ").strip()
    tags_input = input("Tags (comma-separated, optional): ").strip()
    tags = [tag.strip() for tag in tags_input.split(",") if tag.strip()]
    priority = input("Priority [alta/media/baja] (default media): ").strip().lower() or "media"
    if priority not in PRIORITY_ICONS:
        print(f"Error: Invalid priority '{priority}'.\n")
        return
    due_date = _parse_date(input("Due date (YYYY-MM-DD, optional): ").strip())

    content = _edit_text("")
    if content is None:
        return
    if not content.strip():
        print("\nError: Note content cannot be empty.\n")
        return

    payload = {
        "title": title or None,
        "content": content,
        "tags": tags,
        "priority": priority,
        "due_date": due_date,
    }
    note = call_api("POST", "/notes", "create the note", json=payload)
    if note is None:
        return

    print("\n✓ Note created successfully!")
    print(f"  Note ID: {note['id']}")
    print(f"  Title: {note.get('title') or UNTITLED}\n")


def list_notes(args: str = ""):
    """List active notes, optionally filtered."""
    params = parse_list_args(args)
    data = call_api("GET", "/notes", "list notes", params=params)
    if data is None:
        return

    notes = data.get("notes", [])
    if not notes:
        print("\nNo notes found.\n")
        return

    print(f"\n=== Your Notes ({data.get('total', len(notes))}) ===\n")
    for note in notes:
        _print_note_line(note)


def view_note(note_id: str):
    """Show one note in full."""
    note_id = (note_id or "").strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /view <note_id>\n")
        return

    note = call_api("GET", f"/notes/{note_id}", "retrieve the note")
    if note is None:
        return

    print(f"\n{'=' * 60}")
    _print_note_line(note)
    if note.get("start_date"):
        print(f"Start: {note['start_date']}")
    if note.get("deleted_at"):
        print(f"In trash since {_format_timestamp(note['deleted_at'])}")
    print(f"{'=' * 60}\n")
    print(note.get("content", ""))
    print(f"\n{'=' * 60}\n")


def _prompt_keep(label: str, current: str | None) -> str | None:
    """Prompt with the current value as default. ``-`` clears the field."""
    raw = input(f"{label} [{current or ''}]: ").strip()
    if not raw:
        return current
    if raw == "-":
        return None
    return raw


def edit_note(note_id: str):
    """Edit a note's fields at the prompt and its content in the external editor.

    Press Enter to keep a field as it is, or type ``-`` to clear it.
    """
    note_id = (note_id or "").strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /edit <note_id>\n")
        return

    note = call_api("GET", f"/notes/{note_id}", "retrieve the note")
    if note is None:
        return

    print("\n=== Edit Note (Enter keeps the current value, '-' clears it) ===")
    title = _prompt_keep("Title", note.get("title"))
    tags_input = _prompt_keep("Tags (comma-separated)", ", ".join(note.get("tags", [])))
    tags = [tag.strip() for tag in (tags_input or "").split(",") if tag.strip()]
    priority = _prompt_keep("Priority [alta/media/baja]", note.get("priority")) or "media"
    priority = priority.lower()
    if priority not in PRIORITY_ICONS:
        print(f"Error: Invalid priority '{priority}'.\n")
        return

    dates = {}
    for field, label in (("start_date", "Start date"), ("due_date", "Due date")):
        value = _prompt_keep(f"{label} (YYYY-MM-DD)", note.get(field))
        if value and value != note.get(field):
            value = _parse_date(value) or note.get(field)
        dates[field] = value

    content = _edit_text(note.get("content", ""))
    if content is None:
        return
    if not content.strip():
        print("\nError: Note content cannot be empty.\n")
        return

    payload = {
        "title": title,
        "content": content,
        "completed": note.get("completed", False),
        "tags": tags,
        "pinned": note.get("pinned", False),
        "is_favorite": note.get("is_favorite", False),
        "priority": priority,
        **dates,
    }
    if all(payload[field] == note.get(field) for field in payload):
        print("\nNo changes made.\n")
        return

    updated = call_api("PUT", f"/notes/{note_id}", "update the note", json=payload)
    if updated is not None:
        print("\n✓ Note updated.\n")


def toggle_flag(command: str, args: str):
    """Flip completed/pinned/favorite: ``/complete <id>``, ``/pin <id>``, ``/favorite <id>``."""
    endpoint, field = FLAG_ENDPOINTS[command]
    note_id = (args or "").strip()
    if not note_id:
        print(f"Error: Note ID is required. Usage: /{command} <note_id>\n")
        return

    note = call_api("GET", f"/notes/{note_id}", "retrieve the note")
    if note is None:
        return

    value = not note.get(field, False)
    updated = call_api(
        "PATCH", f"/notes/{note_id}/{endpoint}", f"update {endpoint}", json={"value": value}
    )
    if updated is not None:
        print(f"\n✓ {endpoint.capitalize()}: {'yes' if value else 'no'}\n")


def trash_note(note_id: str):
    """Move a note to the trash."""
    note_id = (note_id or "").strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /delete <note_id>\n")
        return

    if call_api("DELETE", f"/notes/{note_id}", "move the note to the trash") is not None:
        print("\n🗑️ Note moved to the trash. Use /restore to bring it back.\n")


def list_trash():
    """List trashed notes."""
    data = call_api("GET", "/notes/trash", "list the trash")
    if data is None:
        return

    notes = data.get("notes", [])
    if not notes:
        print("\nThe trash is empty.\n")
        return

    print(f"\n=== Trash ({len(notes)}) ===\n")
    for note in notes:
        print(f"{note.get('title') or UNTITLED}")
        print(f"  ID: {note['id']}")
        print(f"  Deleted: {_format_timestamp(note.get('deleted_at'))}\n")


def restore_note(note_id: str):
    """Restore one note, or the whole trash with ``/restore all``."""
    note_id = (note_id or "").strip()
    if not note_id:
        print("Error: Usage: /restore <note_id> | /restore all\n")
        return

    if note_id == "all":
        result = call_api("POST", "/notes/trash/restore", "restore the trash")
        if result is not None:
            print(f"\n♻️ Restored {result['affected']} note(s).\n")
        return

    if call_api("POST", f"/notes/{note_id}/restore", "restore the note") is not None:
        print("\n♻️ Note restored.\n")


def purge_note(note_id: str):
    """Delete a note permanently after confirmation."""
    note_id = (note_id or "").strip()
    if not note_id:
        print("Error: Note ID is required. Usage: /purge <note_id>\n")
        return

    if input("This cannot be undone. Type 'yes' to confirm: ").strip().lower() != "yes":
        print("Cancelled.\n")
        return

    if call_api("DELETE", f"/notes/{note_id}/purge", "delete the note") is not None:
        print("\n✓ Note permanently deleted.\n")


def empty_trash():
    """Permanently delete everything in the trash."""
    if input("Empty the trash? This cannot be undone. Type 'yes': ").strip().lower() != "yes":
        print("Cancelled.\n")
        return

    result = call_api("DELETE", "/notes/trash", "empty the trash")
    if result is not None:
        print(f"\n🗑️ Trash emptied ({result['affected']} note(s) deleted).\n")


def show_stats():
    """Print the dashboard counters."""
    stats = call_api("GET", "/notes/stats", "load statistics")
    if stats is None:
        return

    print("\n=== Statistics ===")
    print(f"  Total:     {stats['total']}")
    print(f"  Pending:   {stats['pending']}")
    print(f"  Completed: {stats['completed']}")
    print(f"  Due soon:  {stats['due_soon']}")
    print(f"  In trash:  {stats['trashed']}\n")
