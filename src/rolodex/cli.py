"""Rolodex CLI - contact manager shell over the remote contact store.

Modes:
  - Interactive (default): `rolodex`
  - One command: `rolodex --once "open 3"`
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import shutil
import sys
from typing import Any, Optional

from rolodex.config.env_loader import load_env
from rolodex.config.settings import ContactsConfig
from rolodex.contacts.repository import ContactRepository
from rolodex.controllers.contact_detail import ContactDetailController
from rolodex.controllers.contact_form import ContactFormController
from rolodex.controllers.coordinator import (
    UnknownRouteError,
    ViewActionError,
    ViewCoordinator,
    ViewName,
)
from rolodex.controllers.state import ViewState
from rolodex.ui.render import render


# ANSI colors
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[36m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"


# Pager settings
PAGER_ENABLED = True
PAGER_LINES = 20  # Max lines before paging


def get_terminal_size() -> tuple[int, int]:
    """Get terminal width and height."""
    try:
        size = shutil.get_terminal_size()
        return size.columns, size.lines
    except OSError:
        return 80, 24


def paged_print(text: str) -> None:
    """Print text with paging for long outputs."""
    lines = text.split("\n")
    _, term_height = get_terminal_size()
    page_size = max(5, min(PAGER_LINES, term_height - 4))

    if not PAGER_ENABLED or len(lines) <= page_size:
        print(text)
        return

    for i in range(0, len(lines), page_size):
        print("\n".join(lines[i:i + page_size]))
        remaining = len(lines) - (i + page_size)
        if remaining > 0:
            try:
                prompt = f"{Colors.DIM}--- {remaining} more lines. Enter to continue, 'q' to skip ---{Colors.RESET}"
                if input(prompt).strip().lower() in {"q", "quit", "skip"}:
                    print(f"{Colors.DIM}(skipped){Colors.RESET}")
                    break
            except (EOFError, KeyboardInterrupt):
                print()
                break


def print_welcome(base_url: str) -> None:
    """Print welcome banner."""
    c = Colors
    print(f"""
{c.BOLD}{c.CYAN}Rolodex{c.RESET} {c.DIM}{base_url}{c.RESET}

{c.DIM}Commands:{c.RESET}
  • {c.GREEN}ls{c.RESET}                  → Contact list
  • {c.GREEN}filter <text>{c.RESET}       → Filter the list by first/last name
  • {c.GREEN}open <id>{c.RESET}           → Contact detail with map
  • {c.GREEN}new{c.RESET}                 → Create a contact
  • {c.GREEN}edit [id]{c.RESET}           → Edit a contact (default: the open one)
  • {c.GREEN}set <field> <value>{c.RESET} → Change a form field (e.g. set city Arlington)
  • {c.GREEN}save{c.RESET}                → Submit the form
  • {c.GREEN}delete{c.RESET}              → Delete the open contact
  • {c.GREEN}go <path>{c.RESET}           → Open a route (/, /contact/3, /edit/3, /create)
  • {c.GREEN}back{c.RESET} / {c.GREEN}forward{c.RESET}      → History
  • {c.GREEN}clear{c.RESET}               → Clear screen

{c.DIM}To exit: exit | quit | Ctrl+C{c.RESET}
""")


def clear_screen() -> None:
    """Clear terminal screen."""
    os.system("clear" if os.name != "nt" else "cls")


class ContactShell:
    """Turns shell commands into coordinator calls.

    ``handle()`` returns ``{"ok": bool, "text": str}`` so the loop and tests
    can treat every command the same way.
    """

    def __init__(self, coordinator: ViewCoordinator, *, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.coordinator = coordinator
        self._loop = loop or asyncio.new_event_loop()

    def close(self) -> None:
        if not self._loop.is_closed():
            self._loop.close()

    def _run(self, coro) -> Any:
        return self._loop.run_until_complete(coro)

    def _view(self, *, ok: Optional[bool] = None, note: str = "") -> dict[str, Any]:
        controller = self.coordinator.active
        text = render(controller)
        if ok is None:
            ok = controller is not None and controller.state is not ViewState.FAILED
            if not ok and controller is not None and controller.error is not None:
                note = note or f"Could not load: {controller.error}"
        if note:
            text = f"{text}\n{note}" if text else note
        return {"ok": ok, "text": text}

    def _go(self, path: str) -> dict[str, Any]:
        self._run(self.coordinator.navigate(path))
        return self._view()

    def handle(self, text: str) -> dict[str, Any]:
        parts = str(text or "").strip().split(maxsplit=2)
        if not parts:
            return {"ok": True, "text": ""}
        cmd = parts[0].lower()
        args = parts[1:]

        try:
            if cmd in {"ls", "list"}:
                return self._go("/")
            if cmd == "filter":
                route = self.coordinator.route
                if route is None or route.view is not ViewName.LIST:
                    self._run(self.coordinator.navigate("/"))
                self.coordinator.set_filter(" ".join(args))
                return self._view()
            if cmd in {"open", "show"} and args:
                return self._go(f"/contact/{args[0]}")
            if cmd == "show":
                return self._view()
            if cmd == "open":
                return {"ok": False, "text": "Usage: open <id>"}
            if cmd in {"new", "create"}:
                return self._go("/create")
            if cmd == "edit":
                contact_id = args[0] if args else self._open_contact_id()
                if contact_id is None:
                    return {"ok": False, "text": "Usage: edit <id> (or open a contact first)"}
                return self._go(f"/edit/{contact_id}")
            if cmd == "set":
                if len(args) < 1:
                    return {"ok": False, "text": "Usage: set <field> <value>"}
                value = args[1] if len(args) > 1 else ""
                self.coordinator.set_field(args[0], value)
                return self._view(ok=True)
            if cmd == "save":
                return self._save()
            if cmd in {"delete", "rm"}:
                return self._delete()
            if cmd == "go" and args:
                return self._go(args[0])
            if cmd == "back":
                if self._run(self.coordinator.back()) is None:
                    return {"ok": False, "text": "Nothing to go back to."}
                return self._view()
            if cmd == "forward":
                if self._run(self.coordinator.forward()) is None:
                    return {"ok": False, "text": "Nothing to go forward to."}
                return self._view()
        except (UnknownRouteError, ViewActionError, ValueError) as exc:
            return {"ok": False, "text": str(exc)}

        return {"ok": False, "text": f"Unknown command: {cmd} (help for the list)"}

    def _open_contact_id(self) -> Optional[str]:
        controller = self.coordinator.active
        if isinstance(controller, ContactDetailController) and controller.contact is not None:
            return str(controller.contact.id)
        return None

    def _save(self) -> dict[str, Any]:
        form = self.coordinator.active
        ok = self._run(self.coordinator.submit())
        if ok:
            return self._view(ok=True, note="Saved.")
        if isinstance(form, ContactFormController):
            if form.validation_error is not None and form.validation_error.fields:
                missing = ", ".join(form.validation_error.fields)
                return self._view(ok=False, note=f"Missing or invalid: {missing}")
            if form.error is not None:
                return self._view(ok=False, note=f"Could not save contact: {form.error}")
        return self._view(ok=False)

    def _delete(self) -> dict[str, Any]:
        detail = self.coordinator.active
        ok = self._run(self.coordinator.delete())
        if ok:
            return self._view(ok=True, note="Deleted.")
        if isinstance(detail, ContactDetailController) and detail.error is not None:
            return self._view(ok=False, note=f"Could not delete contact: {detail.error}")
        return self._view(ok=False)


def run_interactive(shell: ContactShell, base_url: str) -> int:
    """Run the interactive shell, starting on the contact list."""
    global PAGER_ENABLED

    clear_screen()
    print_welcome(base_url)
    _print_response(shell.handle("ls"))

    while True:
        try:
            text = input(f"{Colors.GREEN}>{Colors.RESET} ").strip()
        except (EOFError, KeyboardInterrupt):
            print(f"\n{Colors.DIM}Bye!{Colors.RESET}")
            break

        if not text:
            continue

        lowered = text.lower()
        if lowered in {"exit", "quit", ":q"}:
            break
        if lowered in {"clear", "cls"}:
            clear_screen()
            print_welcome(base_url)
            continue
        if lowered in {"help", "?"}:
            print_welcome(base_url)
            continue
        if lowered in {"pager", "pager on"}:
            PAGER_ENABLED = True
            print(f"{Colors.GREEN}✓{Colors.RESET} Pager on.")
            continue
        if lowered == "pager off":
            PAGER_ENABLED = False
            print(f"{Colors.GREEN}✓{Colors.RESET} Pager off.")
            continue

        _print_response(shell.handle(text))

    return 0


def _print_response(response: dict[str, Any]) -> None:
    text = response.get("text", "")
    if response.get("ok"):
        paged_print(f"\n{Colors.GREEN}✓{Colors.RESET} {text}\n")
    else:
        paged_print(f"\n{Colors.RED}✗{Colors.RESET} {text}\n")


def build_config(args: argparse.Namespace) -> ContactsConfig:
    """Environment first, then CLI flags for this run."""
    config = ContactsConfig.from_env()
    if args.base_url:
        config.resource_base = args.base_url
    if args.api_base:
        config.api_base = args.api_base
    if args.username:
        config.username = args.username
    if args.timeout is not None:
        config.timeout_seconds = args.timeout if args.timeout > 0 else None
    if args.audit_log:
        config.audit_log_path = args.audit_log
    return config


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    load_env()

    parser = argparse.ArgumentParser(
        prog="rolodex",
        description="Rolodex - manage contacts stored behind a remote HTTP resource",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rolodex                                   # Interactive shell
  rolodex --username alice                  # Alice's collection
  rolodex --once "ls"                       # Print the list and exit
  rolodex --once "open 3"                   # Print one contact and exit
  rolodex --base-url http://127.0.0.1:8000/contact --once ls
""",
    )
    parser.add_argument("--once", default=None, metavar="CMD", help="Run one command and exit")
    parser.add_argument("--base-url", default=None, help="Full contact collection URL (overrides --api-base/--username)")
    parser.add_argument("--api-base", default=None, help="Contact API host (default: ROLODEX_API_BASE)")
    parser.add_argument("--username", default=None, help="Collection owner path segment (default: ROLODEX_USERNAME)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (0 = none)")
    parser.add_argument("--audit-log", default=None, help="JSONL file receiving one line per request")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    config = build_config(args)
    repository = ContactRepository.from_config(config)
    shell = ContactShell(ViewCoordinator(repository))

    try:
        if args.once:
            response = shell.handle(args.once)
            print(response.get("text", ""))
            return 0 if response.get("ok") else 1
        return run_interactive(shell, config.contacts_url)
    except KeyboardInterrupt:
        print(f"\n{Colors.DIM}Interrupted.{Colors.RESET}")
        return 130
    finally:
        shell.close()
        repository.close()


if __name__ == "__main__":
    raise SystemExit(main())
