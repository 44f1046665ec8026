from contextlib import contextmanager
from contextvars import ContextVar

# DOM id prefix of an area's section in the live preview accordion.
PREVIEW_SECTION_PREFIX = "accordion-section-sidebar-widgets-"

_previewing: ContextVar[bool] = ContextVar("widget_previewing", default=False)


def is_previewing() -> bool:
    return _previewing.get()


@contextmanager
def preview_session():
    """Mark the current request as a live widget preview."""
    token = _previewing.set(True)
    try:
        yield
    finally:
        _previewing.reset(token)
