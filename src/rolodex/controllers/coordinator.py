"""Route table and view coordinator.

Routes::

    /                 -> contact list
    /contact/{id}     -> contact detail
    /edit/{id}        -> edit form
    /create           -> create form

Every navigation builds a fresh controller and disposes the previous one,
so a response that arrives for a view the user already left is dropped by
that controller's generation guard.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union
from urllib.parse import quote, unquote

from rolodex.controllers.base import ContactStore, ViewController
from rolodex.controllers.contact_detail import ContactDetailController
from rolodex.controllers.contact_form import ContactFormController, FormMode
from rolodex.controllers.contact_list import ContactListController

logger = logging.getLogger(__name__)

__all__ = [
    "Route",
    "UnknownRouteError",
    "ViewActionError",
    "ViewCoordinator",
    "ViewName",
]


class ViewName(str, enum.Enum):
    LIST = "list"
    DETAIL = "detail"
    EDIT = "edit"
    CREATE = "create"


class UnknownRouteError(ValueError):
    """Path does not match any view."""


class ViewActionError(RuntimeError):
    """The active view does not support the requested action."""


@dataclass(frozen=True)
class Route:
    view: ViewName
    contact_id: Optional[str] = None

    @property
    def path(self) -> str:
        if self.view is ViewName.LIST:
            return "/"
        if self.view is ViewName.CREATE:
            return "/create"
        prefix = "contact" if self.view is ViewName.DETAIL else "edit"
        return f"/{prefix}/{quote(str(self.contact_id), safe='')}"

    @classmethod
    def parse(cls, path: str) -> "Route":
        raw = str(path or "").strip()
        parts = [p for p in raw.split("/") if p]
        if not parts:
            return cls(ViewName.LIST)
        if parts == ["create"]:
            return cls(ViewName.CREATE)
        if len(parts) == 2 and parts[0] in {"contact", "edit"}:
            contact_id = unquote(parts[1]).strip()
            if contact_id:
                view = ViewName.DETAIL if parts[0] == "contact" else ViewName.EDIT
                return cls(view, contact_id)
        raise UnknownRouteError(f"no view for path: {path!r}")


class ViewCoordinator:
    """Maps navigation events to controller lifecycles.

    Parameters
    ----------
    repository:
        Store handed to every controller it builds.
    on_change:
        Optional callback invoked after a view has been entered.
    """

    def __init__(
        self,
        repository: ContactStore,
        *,
        on_change: Optional[Callable[[Route, ViewController], None]] = None,
    ):
        self._repository = repository
        self._on_change = on_change
        self._active: Optional[ViewController] = None
        self._route: Optional[Route] = None
        self._back: List[Route] = []
        self._forward: List[Route] = []

    @property
    def active(self) -> Optional[ViewController]:
        return self._active

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def can_go_back(self) -> bool:
        return bool(self._back)

    @property
    def can_go_forward(self) -> bool:
        return bool(self._forward)

    # ── navigation ───────────────────────────────────────────────

    async def navigate(self, target: Union[str, Route]) -> ViewController:
        route = target if isinstance(target, Route) else Route.parse(target)
        if self._route is not None:
            self._back.append(self._route)
            self._forward.clear()
        return await self._enter(route)

    async def back(self) -> Optional[ViewController]:
        if not self._back:
            return None
        if self._route is not None:
            self._forward.append(self._route)
        return await self._enter(self._back.pop())

    async def forward(self) -> Optional[ViewController]:
        if not self._forward:
            return None
        if self._route is not None:
            self._back.append(self._route)
        return await self._enter(self._forward.pop())

    def _build(self, route: Route) -> ViewController:
        if route.view is ViewName.LIST:
            return ContactListController(self._repository)
        if route.view is ViewName.DETAIL:
            return ContactDetailController(self._repository)
        if route.view is ViewName.EDIT:
            return ContactFormController(self._repository, FormMode.EDIT)
        return ContactFormController(self._repository, FormMode.CREATE)

    async def _enter(self, route: Route) -> ViewController:
        if self._active is not None:
            self._active.dispose()

        controller = self._build(route)
        self._active = controller
        self._route = route
        logger.info("[Coordinator] Entering %s", route.path)

        if isinstance(controller, ContactListController):
            await controller.on_enter()
        elif isinstance(controller, ContactDetailController):
            await controller.on_enter(route.contact_id)
        elif isinstance(controller, ContactFormController):
            await controller.on_enter(route.contact_id)

        if self._on_change is not None and controller is self._active:
            self._on_change(route, controller)
        return controller

    # ── view events ──────────────────────────────────────────────

    def _require(self, kind: type, action: str) -> Any:
        controller = self._active
        if not isinstance(controller, kind):
            current = self._route.path if self._route else "nothing"
            raise ViewActionError(f"{action} is not available on {current}")
        return controller

    def set_filter(self, text: str) -> None:
        self._require(ContactListController, "filter").set_filter(text)

    def set_field(self, name: str, value: Any) -> None:
        self._require(ContactFormController, "set").set_field(name, value)

    async def submit(self) -> bool:
        controller = self._require(ContactFormController, "submit")
        ok = await controller.submit()
        await self._follow(controller)
        return ok

    async def delete(self) -> bool:
        controller = self._require(ContactDetailController, "delete")
        ok = await controller.delete()
        await self._follow(controller)
        return ok

    async def _follow(self, controller: ViewController) -> None:
        if controller is self._active and controller.navigation:
            await self.navigate(controller.navigation)
