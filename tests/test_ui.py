"""Tests for table rendering and clipboard handling."""

import pyperclip
import pytest

from aegis_vault import ui
from aegis_vault.models import CredentialEntry


ENTRIES = [
    CredentialEntry(1, "GitHub", "dev@example.com", "s3cr3t!"),
    CredentialEntry(12, "A much longer platform name", "me", "x"),
]


class TestCredentialsTable:

    def test_title_header_and_rows(self):
        lines = ui.format_credentials_table(ENTRIES)

        assert lines[0] == "Your Credentials"
        assert lines[1].split(" | ")[0].strip() == "ID"
        assert [c.strip() for c in lines[1].split("|")] == ["ID", "Platform", "Username", "Password"]
        assert set(lines[2]) == {"-"}
        assert len(lines) == 3 + len(ENTRIES)

    def test_values_are_not_truncated(self):
        lines = ui.format_credentials_table(ENTRIES)

        assert "A much longer platform name" in lines[4]
        assert [c.strip() for c in lines[3].split("|")] == ["1", "GitHub", "dev@example.com", "s3cr3t!"]

    def test_columns_are_aligned(self):
        lines = ui.format_credentials_table(ENTRIES)
        pipe_positions = {tuple(i for i, ch in enumerate(line) if ch == "|") for line in [lines[1]] + lines[3:]}
        assert len(pipe_positions) == 1

    def test_empty_list_renders_header_only(self):
        assert len(ui.format_credentials_table([])) == 3

    def test_display_prints_table(self, capsys):
        ui.display_credentials(ENTRIES)
        out = capsys.readouterr().out
        assert "Your Credentials" in out
        assert "s3cr3t!" in out

    def test_display_rejects_none(self):
        with pytest.raises(ValueError):
            ui.display_credentials(None)


class TestClipboard:

    def test_copy_success(self, monkeypatch):
        copied = []
        monkeypatch.setattr(ui.pyperclip, "copy", copied.append)

        assert ui.copy_to_clipboard("pw", timeout=0) is True
        assert copied == ["pw"]

    def test_copy_failure_reports_reason(self, monkeypatch, capsys):
        def broken(text):
            raise pyperclip.PyperclipException("no clipboard mechanism")

        monkeypatch.setattr(ui.pyperclip, "copy", broken)

        assert ui.copy_to_clipboard("pw", timeout=0) is False
        assert "Failed to copy to clipboard: no clipboard mechanism" in capsys.readouterr().out
