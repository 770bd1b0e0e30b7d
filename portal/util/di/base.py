"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with a swappable test implementation
Component = Literal["persistence"]


class ProviderBase(Provider):
    """Common base for every provider in PROVIDERS.

    A provider with subclasses is a mockable component: exactly one subclass
    sets `__is_mock__ = True` (tests) and one leaves it False (production).
    `get_provider` picks between them.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
