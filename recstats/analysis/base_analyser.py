"""Base analyzer class for all analysis components of the record toolbox."""

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from recstats.data.accessor import FieldSelector, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError


_R = TypeVar("_R")


class BaseAnalyser(ABC):
    """Abstract base class for analysis components.

    All analyzers must:
    1. Accept a RecordView (plus their parameters) in their constructor
    2. Validate parameters eagerly, raising ConfigurationError before any data scan
    3. Implement fit() to perform the analysis and return self for chaining
    4. Implement result() to return a frozen dataclass with results

    ---

    ### Adding a New Analyzer

    **1. Create analyzer class** (in `analysis/my_analyzer.py`):

    ```python
    @dataclass(frozen=True)
    class MyResult:
        '''Results package for MyAnalyzer.'''
        value: float

    class MyAnalyzer(BaseAnalyser):
        def __init__(self, view: RecordView, field: str):
            self._view = view
            self._field = field
            require_numeric(view, field, "my_analysis")
            self._result: MyResult | None = None

        def fit(self) -> "MyAnalyzer":
            self._result = MyResult(value=float(self._view.numeric(self._field).sum()))
            return self

        def result(self) -> MyResult:
            return require_fitted(self._result)
    ```

    **2. Add a factory method** to `RecordSet` (``make_my_analyzer``) and, for the
    common one-shot case, a convenience method calling ``fit().result()``.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Fit the analyzer to the data.

        Returns:
            Self for method chaining.
        """
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return analysis results as a frozen dataclass instance.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...


def require_fitted(result: _R | None) -> _R:
    """Return ``result`` or raise the standard not-fitted error."""
    if result is None:
        raise ValueError("Must call fit() before result()")
    return result


def require_numeric(view: RecordView, selector: FieldSelector | None, operation: str) -> None:
    """Raise :class:`ConfigurationError` if ``selector`` cannot feed a numeric operation.

    Empty views are accepted (the empty subset is routine); otherwise the field must
    hold at least one numeric value. Fields mixing numbers with other values pass, the
    non-numeric values are skipped during the scan.
    """
    if len(view) == 0:
        return
    profile = view.profile(selector)
    if not profile.kind.supports_numeric:
        raise ConfigurationError(
            f"'{operation}' requires a numeric field, but '{selector_name(selector)}' is {profile.kind}.",
        )


__all__ = ["BaseAnalyser", "require_fitted", "require_numeric"]
