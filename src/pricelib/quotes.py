"""
Market quotes and lazy recalculation.

Quotes notify registered observers when their value changes; objects
built on quotes mark themselves dirty and recalculate on next use.
"""

from collections.abc import Callable


class Observable:
    """Holds callbacks to run when the object changes."""

    def __init__(self):
        self._observers: list[Callable[[], None]] = []

    def register_observer(self, callback: Callable[[], None]) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def unregister_observer(self, callback: Callable[[], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def notify_observers(self) -> None:
        for callback in list(self._observers):
            callback()


class SimpleQuote(Observable):
    """A market quote whose value can be reset."""

    def __init__(self, value: float | None = None):
        super().__init__()
        self._value = value

    @property
    def value(self) -> float:
        if self._value is None:
            raise ValueError('invalid SimpleQuote')
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None

    def set_value(self, value: float | None) -> float:
        """Set a new value and notify observers if it changed; return the difference."""
        diff = 0.0
        if value != self._value:
            if value is not None and self._value is not None:
                diff = value - self._value
            self._value = value
            self.notify_observers()
        return diff

    def __repr__(self) -> str:
        return f'SimpleQuote({self._value})'


def as_quote(value: 'float | SimpleQuote') -> SimpleQuote:
    """Wrap a plain number in a SimpleQuote."""
    if isinstance(value, SimpleQuote):
        return value
    return SimpleQuote(float(value))


class LazyObject:
    """
    Mixin for objects that cache results derived from market data.

    ``update`` is registered with the quotes the object depends on;
    ``_calculate`` reruns ``_perform_calculations`` only when dirty.
    """

    _calculated = False

    def update(self) -> None:
        self._calculated = False

    def register_with(self, quote: Observable) -> None:
        quote.register_observer(self.update)

    def recalculate(self) -> None:
        self._calculated = False
        self._calculate()

    def _calculate(self) -> None:
        if not self._calculated:
            self._calculated = True
            try:
                self._perform_calculations()
            except Exception:
                self._calculated = False
                raise

    def _perform_calculations(self) -> None:
        raise NotImplementedError
