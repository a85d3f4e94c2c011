"""Base widget classes for reusable pipedeck components.

Standard Reactive Pattern:
- All stateful widgets inherit from StatefulWidget
- Reactive attributes: is_loading, error
- Watch methods: watch_is_loading, watch_error
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from textual.reactive import reactive
from textual.widget import Widget


class BaseWidget(Widget):
    """Base widget with ID pattern and default class support.

    Attributes:
        _id_pattern: Pattern for auto-generated IDs; ``{uuid}`` is replaced by
            a short random suffix.
        _default_classes: CSS classes added to every instance.
    """

    _id_pattern: ClassVar[str | None] = None
    _default_classes: ClassVar[str] = ""

    def __init__(self, *, id: str | None = None, classes: str = "", **kwargs) -> None:
        if id is None and self._id_pattern:
            id = self._id_pattern.format(uuid=uuid.uuid4().hex[:8])
        super().__init__(id=id, classes=classes, **kwargs)
        if self._default_classes:
            self.add_class(*self._default_classes.split())


class StatefulWidget(BaseWidget):
    """Base class for widgets that show loading and error state.

    Subclasses override ``watch_is_loading`` and ``watch_error`` to reflect
    the state in their children.
    """

    is_loading = reactive(False)
    error = reactive[str | None](None)

    def watch_is_loading(self, loading: bool) -> None:
        pass

    def watch_error(self, error: str | None) -> None:
        pass
