"""Strategies for pairing design components with rendered elements.

Matching is a best-effort heuristic. Elements are offered in tree
pre-order and the first hit wins, so the result is deterministic for a
given tree.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from .models import DesignComponent, StyleElement


@dataclass(frozen=True)
class LocatedElement:
    """An element paired with its descriptive locator."""

    element: StyleElement
    locator: str


class ComponentMatcher(ABC):
    """Finds the element that renders a design component."""

    @abstractmethod
    def match(
        self,
        elements: Sequence[LocatedElement],
        component: DesignComponent,
    ) -> LocatedElement | None:
        """Return the first matching element in pre-order, or None."""


class SubstringComponentMatcher(ComponentMatcher):
    """Case-insensitive substring match of the component name against the
    element id or class attribute."""

    def match(
        self,
        elements: Sequence[LocatedElement],
        component: DesignComponent,
    ) -> LocatedElement | None:
        name = component.name.strip().lower()
        if not name:
            return None

        for located in elements:
            element_id = (located.element.id or "").lower()
            class_name = located.element.class_name.lower()
            if name in element_id or name in class_name:
                return located
        return None
