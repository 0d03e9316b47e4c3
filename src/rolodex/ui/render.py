"""Plain-text rendering of each contact view.

Layout follows the browser views: list with filter, detail with map and
actions, and the labelled create/edit form.
"""

from __future__ import annotations

import math
from typing import Optional

from rolodex.contacts.model import WIRE_NAMES, Contact
from rolodex.controllers.base import ViewController
from rolodex.controllers.contact_detail import ContactDetailController
from rolodex.controllers.contact_form import ContactFormController, FormMode
from rolodex.controllers.contact_list import ContactListController
from rolodex.controllers.state import ViewState

FIELD_LABELS: dict[str, str] = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "street": "Street",
    "city": "City",
    "email": "Email",
    "phone": "Phone",
    "latitude": "Latitude",
    "longitude": "Longitude",
}

LOADING_TEXT = "Loading..."


def _format_value(value) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "(not a number)"
        return f"{value:g}"
    return str(value)


def render_list(controller: ContactListController) -> str:
    lines = ["Contacts", "  (new) Create a contact"]
    if controller.filter_text:
        lines.append(f"  filter: {controller.filter_text!r}")

    visible = controller.visible_contacts()
    if controller.state is ViewState.LOADING:
        lines.append(f"  {LOADING_TEXT}")
    elif not visible:
        lines.append("  (no contacts)")
    for contact in visible:
        lines.append(f"  [{contact.id}] {contact.display_name}")
    return "\n".join(lines)


def render_detail(controller: ContactDetailController) -> str:
    contact: Optional[Contact] = controller.contact
    if contact is None:
        return LOADING_TEXT

    lines = [
        contact.display_name,
        f"  Email: {contact.email}",
        f"  Phone: {contact.phone}",
        f"  Street: {contact.street}",
        f"  City: {contact.city}",
    ]
    view = controller.map_view()
    if view is not None:
        x, y = view.tile
        lines.extend(
            [
                f"  Map: {view.latitude:.5f}, {view.longitude:.5f} (zoom {view.zoom}, tile {x}/{y})",
                f"       {view.tile_url()}",
                f"       {view.link}",
            ]
        )
    else:
        lines.append("  Map: position unavailable")
    lines.append("  (delete) Delete Contact  (edit) Edit Contact  (ls) Back to contact list")
    return "\n".join(lines)


def render_form(controller: ContactFormController) -> str:
    # A failed prefill stays on the loading indicator, like the detail view.
    if controller.mode is FormMode.EDIT and controller.state in {
        ViewState.UNLOADED,
        ViewState.LOADING,
        ViewState.FAILED,
    }:
        return LOADING_TEXT

    heading = "Create a new contact" if controller.mode is FormMode.CREATE else "Edit Contact"
    failing = set(controller.validation_error.fields) if controller.validation_error else set()
    width = max(len(label) for label in FIELD_LABELS.values())

    lines = [heading]
    for attr, label in FIELD_LABELS.items():
        marker = "  <- required" if attr in failing else ""
        value = _format_value(getattr(controller.draft, attr))
        lines.append(f"  {label + ':':<{width + 1}} {value}{marker}  [{WIRE_NAMES[attr]}]")

    action = "Create Contact" if controller.mode is FormMode.CREATE else "Update Contact"
    lines.append(f"  (save) {action}  (back) Cancel")
    return "\n".join(lines)


def render(controller: Optional[ViewController]) -> str:
    if isinstance(controller, ContactListController):
        return render_list(controller)
    if isinstance(controller, ContactDetailController):
        return render_detail(controller)
    if isinstance(controller, ContactFormController):
        return render_form(controller)
    return ""
