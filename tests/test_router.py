from __future__ import annotations

import pytest

from logforge_shell.router import Location, PageRegistry, Router
from logforge_shell.state import PageId


class RecordingPages:
    def __init__(self) -> None:
        self.rendered: list[PageId] = []
        self.torn_down: list[PageId] = []
        self.contexts = []
        self.order: list[str] = []

    def register_all(self, registry: PageRegistry) -> None:
        for page_id in PageId:
            registry.register(page_id, self._render_for(page_id))

    def _render_for(self, page_id: PageId):
        def render(container, context):
            self.order.append(f"render:{page_id.value}")
            self.rendered.append(page_id)
            self.contexts.append(context)

            def teardown() -> None:
                self.order.append(f"teardown:{page_id.value}")
                self.torn_down.append(page_id)

            return teardown

        return render


@pytest.fixture
def pages() -> RecordingPages:
    return RecordingPages()


@pytest.fixture
def router(pages, view, logger) -> Router:
    registry = PageRegistry()
    pages.register_all(registry)
    return Router(registry, view, Location(), logger)


def test_unconfigured_redirects_every_page_to_settings(router, pages, view) -> None:
    router.set_configured(False)
    for token in ("sample", "batch", "projects", "#batch", "nonsense", ""):
        router.evaluate_route(token)
        assert router.state.current_page is PageId.settings
        assert view.active is PageId.settings
    assert set(pages.rendered) == {PageId.settings}
    assert router.location.token == "settings"


def test_configured_empty_location_renders_sample(router, pages) -> None:
    router.set_configured(True)
    router.evaluate_route("")
    assert pages.rendered == [PageId.sample]


def test_unknown_token_falls_back_to_sample(router, pages) -> None:
    router.set_configured(True)
    router.evaluate_route("does-not-exist")
    assert router.state.current_page is PageId.sample


def test_navigation_tears_down_exactly_once_per_render(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch)
    router.navigate(PageId.projects)
    router.navigate(PageId.sample)
    assert pages.rendered == [PageId.batch, PageId.projects, PageId.sample]
    assert pages.torn_down == [PageId.batch, PageId.projects]


def test_teardown_runs_after_clear_and_before_render(router, pages, view) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch)
    view.events.clear()
    pages.order.clear()
    router.navigate(PageId.projects)
    assert view.events[-1] == ("clear",)
    assert pages.order == ["teardown:batch", "render:projects"]


def test_nav_request_ignored_while_unconfigured(router, pages) -> None:
    router.set_configured(False)
    router.force_settings()
    assert router.request(PageId.batch) is False
    assert pages.rendered == [PageId.settings]
    assert router.request(PageId.settings) is True


def test_navigate_with_params_hands_them_to_next_page(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch, {"target_id": "t1"})
    context = pages.contexts[-1]
    assert context.params == {"target_id": "t1"}
    assert context.consume_params() == {"target_id": "t1"}
    assert context.consume_params() is None


def test_navigate_to_current_page_rerenders(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch)
    router.navigate(PageId.batch)
    assert pages.rendered == [PageId.batch, PageId.batch]
    assert pages.torn_down == [PageId.batch]


def test_location_change_drives_router(router, pages) -> None:
    router.set_configured(True)
    router.location.set("projects")
    assert pages.rendered == [PageId.projects]


def test_failing_teardown_does_not_block_navigation(view, logger) -> None:
    registry = PageRegistry()

    def broken(container, context):
        def teardown() -> None:
            raise RuntimeError("boom")

        return teardown

    rendered: list[str] = []
    registry.register(PageId.sample, broken)
    registry.register(PageId.batch, lambda container, context: rendered.append("batch"))
    router = Router(registry, view, Location(), logger)
    router.set_configured(True)
    router.navigate(PageId.sample)
    router.navigate(PageId.batch)
    assert rendered == ["batch"]


def test_set_configured_updates_nav(router, view) -> None:
    router.set_configured(False)
    assert view.nav_enabled is False
    router.set_configured(True)
    assert view.nav_enabled is True


def test_shutdown_runs_last_teardown(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.projects)
    router.shutdown()
    router.shutdown()
    assert pages.torn_down == [PageId.projects]


def test_passive_reroute_keeps_pending_params(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch, {"target_id": "t1"})
    router.navigate(PageId.projects)
    router.location.set("batch")
    assert pages.contexts[-1].params == {"target_id": "t1"}


def test_explicit_empty_params_replace_previous(router, pages) -> None:
    router.set_configured(True)
    router.navigate(PageId.batch, {"target_id": "t1"})
    router.navigate(PageId.projects, {})
    assert pages.contexts[-1].params == {}


def test_guarded_navigate_drops_params(router, pages) -> None:
    router.set_configured(False)
    router.navigate(PageId.batch, {"target_id": "t1"})
    assert router.state.current_page is PageId.settings
    assert router.state.pending_params is None

    router.set_configured(True)
    router.navigate(PageId.batch)
    assert pages.contexts[-1].params is None


def test_blocked_activate_drops_params(router) -> None:
    router.set_configured(False)
    assert router.activate(PageId.projects, {"target_id": "t1"}) is PageId.settings
    assert router.state.pending_params is None
