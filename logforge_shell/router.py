"""Single-window navigation.

``Location`` holds the addressable page token (the window's equivalent of a
URL fragment). The ``Router`` listens to it, enforces that nothing but the
settings page is reachable until the backend is configured, and swaps page
content: clear the container, run the previous page's teardown, render the
next page. Each navigation does exactly one teardown and one render.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol

from logforge_shell.state import DEFAULT_PAGE, NavigationState, PageId


Teardown = Callable[[], None]
RenderFn = Callable[[Any, "PageContext"], "Teardown | None"]
LocationListener = Callable[[str], None]

_UNSET: Any = object()


class PageHost(Protocol):
    def clear_page(self) -> Any:
        """Remove the current page's content and return the empty container."""

    def mark_active(self, page_id: PageId) -> None: ...

    def set_nav_enabled(self, configured: bool) -> None: ...


class Location:
    def __init__(self, token: str = "") -> None:
        self._token = token
        self._listeners: list[LocationListener] = []

    @property
    def token(self) -> str:
        return self._token

    def subscribe(self, listener: LocationListener) -> None:
        self._listeners.append(listener)

    def set(self, token: str) -> None:
        token = str(token)
        if token == self._token:
            return
        self._token = token
        for listener in list(self._listeners):
            listener(token)


class PageRegistry:
    def __init__(self) -> None:
        self._pages: dict[PageId, RenderFn] = {}

    def register(self, page_id: PageId | str, render: RenderFn) -> None:
        self._pages[PageId(page_id)] = render

    def get(self, page_id: PageId) -> RenderFn | None:
        return self._pages.get(page_id)

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages

    def ids(self) -> list[PageId]:
        return list(self._pages)


class PageContext:
    """What a page render function gets besides its container."""

    def __init__(self, router: Router, page_id: PageId, services: Any = None) -> None:
        self.router = router
        self.page_id = page_id
        self.services = services

    @property
    def params(self) -> dict[str, Any] | None:
        return self.router.state.pending_params

    def consume_params(self) -> dict[str, Any] | None:
        return self.router.consume_params()

    def navigate(self, page: PageId | str, params: Mapping[str, Any] | None = _UNSET) -> None:
        self.router.navigate(page, params)


class Router:
    def __init__(
        self,
        registry: PageRegistry,
        host: PageHost,
        location: Location,
        logger: logging.Logger,
        state: NavigationState | None = None,
        services: Any = None,
    ) -> None:
        self._registry = registry
        self._host = host
        self._location = location
        self._logger = logger
        self._services = services
        self.state = state or NavigationState()
        self._teardown: Teardown | None = None
        self._location.subscribe(self.evaluate_route)

    @property
    def location(self) -> Location:
        return self._location

    @property
    def configured(self) -> bool:
        return self.state.configured

    def set_configured(self, configured: bool) -> None:
        self.state.configured = bool(configured)
        self._host.set_nav_enabled(self.state.configured)

    def evaluate_route(self, location_token: str | None = None) -> None:
        token = self._location.token if location_token is None else location_token
        token = str(token or "").strip().lstrip("#") or DEFAULT_PAGE.value
        if not self.state.configured and token != PageId.settings:
            self._logger.info("route_redirect", extra={"requested": token, "target": PageId.settings.value})
            self._redirect(PageId.settings)
            return
        self.activate(token)

    def request(self, page: PageId | str) -> bool:
        """Nav affordance click. Ignored while unconfigured, except for settings."""
        page_id = PageId.resolve(page)
        if not self.state.configured and page_id is not PageId.settings:
            return False
        self._redirect(page_id)
        return True

    def navigate(self, page: PageId | str, params: Mapping[str, Any] | None = _UNSET) -> None:
        page_id = PageId.resolve(page)
        if not self.state.configured and page_id is not PageId.settings:
            self._redirect(PageId.settings)
            return
        if params is not _UNSET:
            self.state.pending_params = dict(params or {})
        self._redirect(page_id)

    def force_settings(self) -> None:
        self._redirect(PageId.settings)

    def _redirect(self, page_id: PageId) -> None:
        if self._location.token == page_id.value:
            self.activate(page_id)
        else:
            # The location listener re-enters evaluate_route.
            self._location.set(page_id.value)

    def activate(self, page: PageId | str, params: Mapping[str, Any] | None = _UNSET) -> PageId:
        page_id = PageId.resolve(page)
        if page_id not in self._registry:
            page_id = DEFAULT_PAGE
        if not self.state.configured and page_id is not PageId.settings:
            self._logger.warning("activate_blocked_unconfigured", extra={"requested": page_id.value})
            page_id = PageId.settings
            params = _UNSET

        if params is not _UNSET:
            self.state.pending_params = dict(params or {})

        self.state.current_page = page_id
        self._host.mark_active(page_id)

        container = self._host.clear_page()
        self._run_teardown()

        render = self._registry.get(page_id)
        if render is None:
            self._logger.error("page_not_registered", extra={"page": page_id.value})
            return page_id
        teardown = render(container, PageContext(self, page_id, self._services))
        self._teardown = teardown if callable(teardown) else None
        self._logger.debug("page_activated", extra={"page": page_id.value})
        return page_id

    def consume_params(self) -> dict[str, Any] | None:
        params = self.state.pending_params
        self.state.pending_params = None
        return params

    def shutdown(self) -> None:
        self._run_teardown()

    def _run_teardown(self) -> None:
        teardown = self._teardown
        self._teardown = None
        if teardown is None:
            return
        try:
            teardown()
        except Exception:  # noqa: BLE001
            self._logger.exception("page_teardown_failed")
