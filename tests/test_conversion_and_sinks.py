"""
Tests for markdown conversion and the console sink.
"""

import io
import webbrowser

import pyperclip
from rich.console import Console

from docs_store.conversion import append_html, markdown_to_html, markdown_to_html_body
from docsync import ConsoleSink


def recording_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestConversion:

    def test_full_document(self):
        html = markdown_to_html("# Hello\n\nSome *text*.")
        assert html.startswith("<!DOCTYPE html>")
        assert "<h1>Hello</h1>" in html
        assert "<em>text</em>" in html

    def test_tables_from_extra(self):
        body = markdown_to_html_body("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in body

    def test_append_before_body_end(self):
        assert append_html("<body><p>x</p></BODY>", "y") == "<body><p>x</p><p>y</p></BODY>"

    def test_append_without_body(self):
        assert append_html("<p>x</p>", "y") == "<p>x</p><p>y</p>"


class TestConsoleSink:

    def test_notify_prints(self):
        console = recording_console()
        ConsoleSink(console).notify("Document updated.")
        assert "Document updated." in console.file.getvalue()

    def test_copy_link(self, monkeypatch):
        copied = []
        monkeypatch.setattr(pyperclip, "copy", copied.append)
        ConsoleSink(recording_console()).copy_link("https://docs.google.com/document/d/x")
        assert copied == ["https://docs.google.com/document/d/x"]

    def test_copy_link_without_clipboard_prints(self, monkeypatch):
        def unavailable(text):
            raise pyperclip.PyperclipException("no clipboard")

        monkeypatch.setattr(pyperclip, "copy", unavailable)
        console = recording_console()
        ConsoleSink(console).copy_link("https://docs.google.com/document/d/x")
        assert "https://docs.google.com/document/d/x" in console.file.getvalue()

    def test_launch_failure_prints_url(self, monkeypatch):
        monkeypatch.setattr(webbrowser, "open", lambda url: False)
        console = recording_console()
        ConsoleSink(console).launch("https://accounts.example/authorize")
        assert "https://accounts.example/authorize" in console.file.getvalue()
