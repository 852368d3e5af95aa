#!/usr/bin/env python3
"""
Aegis Vault v1.0.0
A local, terminal-based credential vault. Each account has its own
encrypted SQLite vault; a master database holds account names, password
verifiers and salts.
"""

# ==============================================================================
# STANDARD LIBRARY IMPORTS
# ==============================================================================
import sys
import os
import argparse
import logging
import sqlite3
import time

# ==============================================================================
# THIRD-PARTY LIBRARY IMPORTS
# ==============================================================================
from prompt_toolkit import prompt
from prompt_toolkit.shortcuts import clear
from prompt_toolkit.validation import Validator, ValidationError
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory

# ==============================================================================
# CUSTOM MODULE IMPORTS
# ==============================================================================
from aegis_vault import crypto, database, password_generator, ui, validation
from aegis_vault.credentials import CredentialService
from aegis_vault.users import UserService, UserValidationError, UsernameTakenError

logger = logging.getLogger("aegis")

# ==============================================================================
# CONSTANTS AND GLOBAL CONFIGURATION
# ==============================================================================

DATA_DIRECTORY_NAME = "data"
MASTER_DATABASE_FILE_NAME = "aegis.db"
DATA_DIR_ENV_VAR = "AEGIS_DATA_DIR"

# Account menu: numbers, full names and abbreviations
ACCOUNT_ALIASES = {
    '1': 'login',
    'login': 'login',
    'log-in': 'login',
    '2': 'create',
    'create': 'create',
    'register': 'create',
    '3': 'quit',
    'quit': 'quit',
    'exit': 'quit',
    'q': 'quit',
}

# Main menu: numbers, full names and abbreviations
COMMAND_ALIASES = {
    '1': 'add',
    'add': 'add',
    '2': 'view',
    'view': 'view',
    'list': 'view',
    '3': 'update',
    'update': 'update',
    '4': 'delete',
    'delete': 'delete',
    '5': 'search',
    'search': 'search',
    '6': 'generate',
    'generate': 'generate',
    '7': 'quit',
    'quit': 'quit',
    'exit': 'quit',
    'q': 'quit',
}

# ==============================================================================
# VALIDATORS
# ==============================================================================

class NumberValidator(Validator):
    """Validator for entry ID input fields."""

    def validate(self, document):
        """Ensure input contains only digits."""
        text = document.text
        if text and not text.isdecimal():
            raise ValidationError(message='Please enter a valid number')

# ==============================================================================
# CONFIGURATION HELPERS
# ==============================================================================

def find_project_root(start=None):
    """
    Walk up from start looking for the directory that holds aegis_vault/.

    Returns:
        str or None: The project root, or None if not found
    """
    current = os.path.abspath(start or os.path.dirname(os.path.abspath(__file__)))

    while True:
        if os.path.isdir(os.path.join(current, "aegis_vault")):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def resolve_data_directory(cli_value=None):
    """
    Pick the directory that holds aegis.db and the per-user vaults.

    Precedence: --data-dir, then $AEGIS_DATA_DIR, then data/ under the
    project root, then data/ under the working directory.
    """
    if cli_value:
        return os.path.abspath(cli_value)

    env_value = os.environ.get(DATA_DIR_ENV_VAR)
    if env_value:
        return os.path.abspath(env_value)

    root = find_project_root() or os.getcwd()
    return os.path.join(root, DATA_DIRECTORY_NAME)

# ==============================================================================
# MAIN AEGIS CLASS
# ==============================================================================

class Aegis:
    """
    Main application controller for Aegis Vault.

    Owns the session: the master database, the logged-in user, the derived
    vault key and every database opened during the run so they can all be
    closed on exit.
    """

    def __init__(self, data_dir):
        """Prepare the data directory and the master database."""
        self.data_dir = data_dir
        os.makedirs(self.data_dir, exist_ok=True)

        self.databases = []
        self.current_user = None
        self.encryption_key = None
        self.credentials = None
        self.history = InMemoryHistory()

        self.master_db = self._open_database(
            os.path.join(self.data_dir, MASTER_DATABASE_FILE_NAME)
        )
        self.master_db.initialize_master_database()
        self.users = UserService(self.master_db)

    def _open_database(self, path):
        db = database.Database(path)
        self.databases.append(db)
        return db

    def vault_path(self, username):
        """Path of the vault database belonging to username."""
        return os.path.join(self.data_dir, f"{username}.db")

    # ==========================================================================
    # COMMAND RESOLUTION
    # ==========================================================================

    @staticmethod
    def _resolve_choice(choice_input, aliases):
        """
        Resolve user input to a menu action using aliases and prefix matching.

        Returns:
            str or None: Action name or None if invalid/ambiguous
        """
        if not choice_input:
            return None

        choice_input = choice_input.strip().lower()

        if choice_input in aliases:
            return aliases[choice_input]

        matches = {action for name, action in aliases.items()
                   if name.startswith(choice_input)}

        if len(matches) == 1:
            return matches.pop()
        elif len(matches) > 1:
            print(f"[-] Ambiguous choice '{choice_input}'. Could be: {', '.join(sorted(matches))}")
            return None

        print(f"[-] Unknown choice: '{choice_input}'")
        return None

    # ==========================================================================
    # ACCOUNT MANAGEMENT
    # ==========================================================================

    def account_menu(self):
        """
        Loop on the account menu until a user is logged in.

        Returns:
            bool: True once a session is established
        """
        completer = WordCompleter(sorted(a for a in ACCOUNT_ALIASES if not a.isdigit()))

        while self.current_user is None:
            print(ui.ACCOUNT_MENU)
            action = self._resolve_choice(
                prompt("Select [1-3]: ", completer=completer), ACCOUNT_ALIASES
            )

            if action == 'login':
                self.login()
            elif action == 'create':
                self.create_account()
            elif action == 'quit':
                self.exit_application()

        return True

    def create_account(self):
        """
        Create a new account and its vault, then start the session.

        Returns:
            bool: True if the account was created
        """
        print(
            "\nCreate Account:\n"
            f"Usernames can only contain letters and numbers with a minimum length of "
            f"{validation.MIN_USERNAME_LENGTH} characters and a maximum length of "
            f"{validation.MAX_USERNAME_LENGTH}."
        )
        username = prompt("Username: ").strip()
        password = prompt(
            f"\nMaster password needs to be at least {validation.MIN_PASSWORD_LENGTH} "
            f"characters long with a limit of {validation.MAX_PASSWORD_LENGTH} characters.\n"
            "Master password: ",
            is_password=True
        )

        try:
            user = self.users.create_user(username, password)
        except (UserValidationError, UsernameTakenError) as e:
            print(f"[-] Error: {e}")
            self.current_user = None
            return False

        vault_db = self._open_database(self.vault_path(user.username))
        vault_db.initialize_vault_database()

        self._start_session(user, vault_db)
        print("\n[+] Account successfully created.\n")
        return True

    def login(self):
        """
        Authenticate with up to MAX_LOGIN_ATTEMPTS tries.

        Exits the program with status 1 when every attempt fails.

        Returns:
            bool: True if authentication succeeded
        """
        max_attempts = validation.MAX_LOGIN_ATTEMPTS

        for attempt in range(1, max_attempts + 1):
            print("\nLog-in:")
            username = prompt("Username: ").strip()
            password = prompt("Master password: ", is_password=True)

            user = self.users.authenticate_user(username, password)
            if user is not None:
                vault_db = self._open_database(self.vault_path(user.username))
                vault_db.initialize_vault_database()
                self._start_session(user, vault_db)
                print("[+] Login successful!\n")
                time.sleep(0.5)
                return True

            remaining = max_attempts - attempt
            print(f"[-] Incorrect credentials. You have {remaining} attempts remaining.")

        print("[-] Too many failed login attempts. Exiting.")
        logger.warning("Maximum login attempts reached")
        self.cleanup()
        sys.exit(1)

    def _start_session(self, user, vault_db):
        self.current_user = user
        self.encryption_key = bytearray(
            crypto.derive_key_from_password(user.master_password, user.salt)
        )
        self.credentials = CredentialService(vault_db)

    # ==========================================================================
    # MAIN MENU
    # ==========================================================================

    def run_main_loop(self):
        """Show the main menu until the user quits."""
        completer = WordCompleter(sorted(a for a in COMMAND_ALIASES if not a.isdigit()))

        while True:
            print(ui.MAIN_MENU)
            action = self._resolve_choice(
                prompt(f"aegis@{self.current_user.username}/> ",
                       completer=completer, history=self.history,
                       auto_suggest=AutoSuggestFromHistory()),
                COMMAND_ALIASES
            )
            if action is None:
                continue

            self.process_choice(action)
            ui.wait_for_key()

    def process_choice(self, action):
        """Dispatch a resolved main-menu action."""
        if action == 'add':
            self.add_credential()
        elif action == 'view':
            self.view_credentials()
        elif action == 'update':
            self.update_credential()
        elif action == 'delete':
            self.delete_credential()
        elif action == 'search':
            self.search_credentials()
        elif action == 'generate':
            self.generate_password()
        elif action == 'quit':
            self.exit_application()

    def add_credential(self):
        """
        Prompt for a new credential and store it encrypted.

        Returns:
            int or None: The new entry ID
        """
        platform = prompt("\nPlatform name: ").strip()
        username = prompt("Username or email: ").strip()
        password = prompt("Password: ", is_password=True)

        is_valid, message = validation.validate_credential_fields(platform, username, password)
        if not is_valid:
            print(f"[-] {message}")
            return None

        entry_id = self.credentials.add_credential(platform, username, password, self.encryption_key)
        print(f"\n[+] Password successfully added (ID: {entry_id}).")
        return entry_id

    def view_credentials(self):
        """Display every stored credential."""
        entries = self.credentials.list_credentials(self.encryption_key)

        if not entries:
            print("[-] No entries found.")
            return

        ui.display_credentials(entries)

    def _prompt_entry_id(self, message):
        entry_id = prompt(message, validator=NumberValidator()).strip()

        is_valid, error = validation.validate_entry_id(entry_id)
        if not is_valid:
            print(f"[-] {error}")
            return None

        entry_id = int(entry_id)
        if not self.credentials.credential_exists(entry_id):
            print("\n[-] Entry ID not found.")
            return None

        return entry_id

    def update_credential(self):
        """
        Replace the password of an existing entry.

        Returns:
            bool: True if the password was updated
        """
        entry_id = self._prompt_entry_id("\nEnter the entry ID to update: ")
        if entry_id is None:
            return False

        new_password = prompt("Enter the new password: ", is_password=True)
        if not new_password:
            print("[-] Password cannot be empty")
            return False

        confirmation = prompt(
            f"Are you sure you want to update the password for entry ID {entry_id}? [y/N]: "
        ).strip().lower()
        if confirmation != 'y':
            print("[-] Update cancelled.")
            return False

        self.credentials.update_password(entry_id, new_password, self.encryption_key)
        print("\n[+] Password successfully updated.")
        return True

    def delete_credential(self):
        """
        Permanently delete an entry after confirmation.

        Returns:
            bool: True if the entry was deleted
        """
        entry_id = self._prompt_entry_id("\nEnter the entry ID to delete: ")
        if entry_id is None:
            return False

        confirmation = prompt(
            f"[!] Are you sure you want to permanently delete entry ID {entry_id}? [y/N]: "
        ).strip().lower()
        if confirmation != 'y':
            print("[-] Deletion cancelled.")
            return False

        self.credentials.delete_credential(entry_id)
        print("\n[+] Password successfully deleted.")
        return True

    def search_credentials(self):
        """Display credentials whose platform name contains the query."""
        query = prompt("\nEnter the platform name to search for: ").strip()

        matches = self.credentials.search_credentials(query, self.encryption_key)
        if not matches:
            print("[-] No matching entries found.")
            return

        ui.display_credentials(matches)

    def generate_password(self):
        """Generate a random password and optionally copy it to the clipboard."""
        generated = password_generator.generate_random_password()
        print(f"\nGenerated password: {generated}")

        copy = prompt("\nWould you like to copy this password to clipboard? [y/N]: ").strip().lower()
        if copy == 'y' and ui.copy_to_clipboard(generated):
            print(f"\n[+] Password copied to clipboard! ({ui.CLIPBOARD_CLEAR_SECONDS} second retention)")

        return generated

    # ==========================================================================
    # SHUTDOWN
    # ==========================================================================

    def cleanup(self):
        """Securely clean up sensitive data and close every database."""
        if self.encryption_key:
            crypto.secure_erase_key(self.encryption_key)
            self.encryption_key = None
        for db in self.databases:
            db.close()

    def exit_application(self):
        """Close databases and terminate the program with status 0."""
        print("\n[i] Closing databases...")
        self.cleanup()
        print("[+] Exiting program...")
        sys.exit(0)

# ==============================================================================
# MAIN ENTRY POINT
# ==============================================================================

def build_parser():
    """Command-line argument parser for the aegis script."""
    parser = argparse.ArgumentParser(
        description="Aegis is a local command-line credential vault. Each account stores "
                    "platform credentials encrypted with a key derived from its master password.",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        '--data-dir',
        help=f'Directory holding {MASTER_DATABASE_FILE_NAME} and user vaults '
             f'(default: ${DATA_DIR_ENV_VAR} or ./{DATA_DIRECTORY_NAME})'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging on stderr'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available operations'
    )

    gen_parser = subparsers.add_parser('generate', help='Generate a random password and exit')
    gen_parser.add_argument(
        '--length',
        type=int,
        default=password_generator.GENERATED_PASSWORD_LENGTH,
        help=f'Password length (default: {password_generator.GENERATED_PASSWORD_LENGTH})'
    )
    gen_parser.add_argument(
        '--copy',
        action='store_true',
        help='Copy the generated password to the clipboard'
    )

    return parser


def main(argv=None):
    """Main entry point for Aegis Vault."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == 'generate':
        try:
            generated = password_generator.generate_random_password(args.length)
        except password_generator.PasswordGenerationError as e:
            print(f"[-] {e}")
            return 1

        print(f"Generated password: {generated}")
        if args.copy and ui.copy_to_clipboard(generated):
            print(f"[+] Password copied to clipboard ({ui.CLIPBOARD_CLEAR_SECONDS} second retention)")
        return 0

    app = Aegis(resolve_data_directory(args.data_dir))

    try:
        clear()
        print(ui.BANNER)
        app.account_menu()
        app.run_main_loop()
    except (KeyboardInterrupt, EOFError):
        print("\n[-] Operation terminated and vault locked.")
    except crypto.CryptoError as e:
        logger.error("Vault decryption failed: %s", e)
        print(f"\n[-] Unable to read the vault: {e}")
        return 1
    except sqlite3.Error as e:
        logger.error("Database failure: %s", e)
        print(f"\n[-] Database error: {e}")
        return 1
    finally:
        app.cleanup()

    return 0


if __name__ == "__main__":
    sys.exit(main())
