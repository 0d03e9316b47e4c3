"""Contact view controllers.

One controller instance per view-entry; the coordinator owns their
lifecycles and follows the navigation they request.
"""

from __future__ import annotations

from rolodex.controllers.base import ContactStore, ViewController
from rolodex.controllers.contact_detail import ContactDetailController
from rolodex.controllers.contact_form import ContactFormController, FormMode
from rolodex.controllers.contact_list import ContactListController
from rolodex.controllers.coordinator import (
    Route,
    UnknownRouteError,
    ViewActionError,
    ViewCoordinator,
    ViewName,
)
from rolodex.controllers.state import (
    TRANSITIONS,
    InvalidTransitionError,
    StateTransition,
    ViewState,
)

__all__ = [
    "ContactDetailController",
    "ContactFormController",
    "ContactListController",
    "ContactStore",
    "FormMode",
    "InvalidTransitionError",
    "Route",
    "StateTransition",
    "TRANSITIONS",
    "UnknownRouteError",
    "ViewActionError",
    "ViewController",
    "ViewCoordinator",
    "ViewName",
    "ViewState",
]
