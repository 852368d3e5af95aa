"""
Aegis User Interface Components

This module provides display and interaction utilities for the Aegis
credential vault: the banner and menu text, tabular display of decrypted
credentials, clipboard handling and the "press any key" pause between
menu actions.

Dependencies: pyperclip for cross-platform clipboard support,
              prompt_toolkit for single-keypress input
"""

import threading
import time
from typing import List, Sequence

import pyperclip
from prompt_toolkit import prompt
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys

from .models import CredentialEntry

# Seconds before a copied password is wiped from the clipboard
CLIPBOARD_CLEAR_SECONDS = 30

BANNER = r"""
    ___              _
   /   | ___  ____ _(_)____
  / /| |/ _ \/ __ `/ / ___/
 / ___ /  __/ /_/ / (__  )
/_/  |_\___/\__, /_/____/
           /____/
"""

ACCOUNT_MENU = """
Account Menu
  1. Log-in to an existing account
  2. Create a new account
  3. Quit program
"""

MAIN_MENU = """
Select from the following commands:
  1. Add new password
  2. View full list of entries
  3. Update an existing password
  4. Delete an existing password
  5. Search for an existing password
  6. Generate a random password
  7. Quit program
"""

# ==============================================================================
# CREDENTIAL DISPLAY
# ==============================================================================

def format_credentials_table(entries: Sequence[CredentialEntry]) -> List[str]:
    """
    Build the lines of an ASCII table for decrypted credentials.

    Columns are sized to their widest cell so long platform names or
    passwords are never truncated.

    Args:
        entries (Sequence[CredentialEntry]): Entries to render, in display order

    Returns:
        List[str]: Title, header, separator and one line per entry

    Example Output:
        Your Credentials
        ID   | Platform   | Username          | Password
        ---------------------------------------------------
        1    | GitHub     | dev@example.com   | s3cr3t!
    """
    headers = ['ID', 'Platform', 'Username', 'Password']
    rows = [
        [str(entry.id), entry.platform, entry.username, entry.password]
        for entry in entries
    ]

    col_widths = []
    for i, header in enumerate(headers):
        max_width = max([len(header)] + [len(row[i]) for row in rows])
        col_widths.append(max_width + 2)  # 2 spaces padding

    lines = ["Your Credentials"]
    lines.append(' | '.join(h.ljust(col_widths[i]) for i, h in enumerate(headers)).rstrip())

    separator_length = sum(col_widths) + (len(headers) - 1) * 3
    lines.append('-' * separator_length)

    for row in rows:
        lines.append(' | '.join(cell.ljust(col_widths[i]) for i, cell in enumerate(row)).rstrip())

    return lines


def display_credentials(entries: Sequence[CredentialEntry]) -> None:
    """
    Print decrypted credentials as a table.

    Raises:
        ValueError: If entries is None
    """
    if entries is None:
        raise ValueError("entries must not be None")

    print()
    for line in format_credentials_table(entries):
        print(line)

# ==============================================================================
# USER INTERACTION HELPERS
# ==============================================================================

def _any_key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add(Keys.Any, eager=True)
    @bindings.add(Keys.Enter, eager=True)
    def _(event):
        event.app.exit(result="")

    return bindings


def wait_for_key(message: str = "\nPress any key to return to the menu...") -> None:
    """Block until the user presses a single key."""
    prompt(message, key_bindings=_any_key_bindings())

# ==============================================================================
# CLIPBOARD MANAGEMENT
# ==============================================================================

def copy_to_clipboard(text: str, timeout: int = CLIPBOARD_CLEAR_SECONDS) -> bool:
    """
    Copy text to system clipboard with optional auto-clear timeout.

    A daemon thread clears the clipboard after the timeout, but only if it
    still contains the copied text.

    Args:
        text (str): The text to copy to clipboard
        timeout (int): Seconds after which to clear clipboard; 0 disables
                      auto-clear. Default: 30 seconds

    Returns:
        bool: True if text was successfully copied, False otherwise
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        print(f"\n[-] Failed to copy to clipboard: {e}")
        return False

    if timeout > 0:
        def clear_clipboard():
            time.sleep(timeout)
            try:
                if pyperclip.paste() == text:
                    pyperclip.copy("")
            except pyperclip.PyperclipException:
                # Clipboard went away (e.g. display closed); nothing to clear
                pass

        clear_thread = threading.Thread(target=clear_clipboard)
        clear_thread.daemon = True
        clear_thread.start()

    return True
