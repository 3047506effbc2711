from logforge_shell.router import PageRegistry
from logforge_shell.state import PageId
from logforge_shell.ui.pages import batch, projects, sample, settings

__all__ = ["register_pages"]


def register_pages(registry: PageRegistry) -> PageRegistry:
    registry.register(PageId.sample, sample.render)
    registry.register(PageId.batch, batch.render)
    registry.register(PageId.projects, projects.render)
    registry.register(PageId.settings, settings.render)
    return registry
