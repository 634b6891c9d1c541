"""Categorical Naive Bayes with Laplace smoothing."""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Self

from recstats.data.accessor import MISSING, resolve_field
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted


logger = logging.getLogger(__name__)


def _category(value: Any) -> Hashable:
    """Hashable stand-in for a feature value."""
    return value if isinstance(value, Hashable) else repr(value)


@dataclass(frozen=True)
class NaiveBayesClassifier:
    r"""Trained categorical Naive Bayes model.

    A query :math:`q` is scored per label :math:`c` as

    .. math::
        \log P(c) + \sum_f \log \frac{n_{c,f,q_f} + \alpha}{n_c + \alpha V_f}

    where :math:`n_c` counts training records labeled :math:`c`, :math:`n_{c,f,v}`
    those of them with feature :math:`f = v`, and :math:`V_f` the distinct values of
    :math:`f` seen in training. Unseen values fall back to the smoothing floor
    :math:`\alpha / (n_c + \alpha V_f)` instead of zeroing the label out; features
    absent from the query are skipped.

    Attributes:
        labels: Labels in first-seen training order (ties resolve to the earliest).
        label_counts: Training records per label.
        value_counts: ``(label, feature) -> Counter`` of feature values.
        distinct_values: Distinct values per feature across the whole training set.
        feature_fields: Features used for scoring.
        alpha: Laplace smoothing constant.
    """

    labels: tuple[Hashable, ...]
    label_counts: Mapping[Hashable, int]
    value_counts: Mapping[tuple[Hashable, str], Counter]
    distinct_values: Mapping[str, int]
    feature_fields: tuple[str, ...]
    alpha: float = 1.0
    n_records: int = 0

    def prior(self, label: Hashable) -> float:
        return self.label_counts[label] / self.n_records

    def likelihood(self, label: Hashable, feature: str, value: Any) -> float:
        """Smoothed :math:`P(feature = value \\mid label)`."""
        count = self.value_counts[(label, feature)].get(_category(value), 0)
        return (count + self.alpha) / (self.label_counts[label] + self.alpha * self.distinct_values[feature])

    def scores(self, query: Mapping[str, Any]) -> dict[Hashable, float]:
        """Log-space score per label for ``query``."""
        present = [(f, query[f]) for f in self.feature_fields if f in query and query[f] is not MISSING]
        return {
            label: math.log(self.prior(label)) + sum(math.log(self.likelihood(label, f, v)) for f, v in present)
            for label in self.labels
        }

    def predict(self, query: Mapping[str, Any]) -> Hashable:
        """Most probable label for ``query``; never raises for unseen or missing features."""
        best_label, best_score = None, -math.inf
        for label, score in self.scores(query).items():
            if score > best_score:
                best_label, best_score = label, score
        return best_label

    __call__ = predict


class NaiveBayesAnalyzer(BaseAnalyser):
    """Count label and per-label feature value frequencies into a classifier.

    Records without a label are skipped. Absent feature values are not counted.
    """

    def __init__(
        self,
        view: RecordView,
        feature_fields: Sequence[str],
        label_field: str,
        alpha: float = 1.0,
    ) -> None:
        """Validate the training request before any counting.

        Raises:
            ConfigurationError: If ``alpha`` is not positive or no features are given.
        """
        if alpha <= 0:
            raise ConfigurationError(f"Laplace alpha must be positive, got {alpha}.")
        if not feature_fields:
            raise ConfigurationError("Naive Bayes needs at least one feature field.")
        self._view = view
        self._feature_fields = tuple(feature_fields)
        self._label_field = label_field
        self._alpha = alpha
        self._result: NaiveBayesClassifier | None = None

    def fit(self) -> Self:
        """Count frequencies over the view.

        Raises:
            ConfigurationError: If no record carries a label.
        """
        label_counts: Counter = Counter()
        value_counts: dict[tuple[Hashable, str], Counter] = {}
        distinct: dict[str, set[Any]] = {f: set() for f in self._feature_fields}

        for record in self._view.records:
            label = resolve_field(record, self._label_field)
            if label is MISSING or label is None:
                continue
            label_counts[label] += 1
            for feature in self._feature_fields:
                counter = value_counts.setdefault((label, feature), Counter())
                value = resolve_field(record, feature)
                if value is MISSING:
                    continue
                counter[_category(value)] += 1
                distinct[feature].add(_category(value))

        if not label_counts:
            raise ConfigurationError(f"No training record carries the label field '{self._label_field}'.")

        n_records = sum(label_counts.values())
        logger.debug("Trained Naive Bayes on %d records with %d labels", n_records, len(label_counts))
        self._result = NaiveBayesClassifier(
            labels=tuple(label_counts),
            label_counts=dict(label_counts),
            value_counts=value_counts,
            distinct_values={f: len(values) for f, values in distinct.items()},
            feature_fields=self._feature_fields,
            alpha=self._alpha,
            n_records=n_records,
        )
        return self

    def result(self) -> NaiveBayesClassifier:
        return require_fitted(self._result)


def train_naive_bayes(
    records: Any,
    feature_fields: Sequence[str],
    label_field: str,
    alpha: float = 1.0,
) -> NaiveBayesClassifier:
    """Train a :class:`NaiveBayesClassifier` over ``records`` (see :class:`NaiveBayesAnalyzer`)."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return NaiveBayesAnalyzer(view, feature_fields, label_field, alpha).fit().result()


def naive_bayes(records: Any, feature_fields: Sequence[str], label_field: str, alpha: float = 1.0):
    """Train a classifier and return its prediction function."""
    return train_naive_bayes(records, feature_fields, label_field, alpha).predict


__all__ = ["NaiveBayesAnalyzer", "NaiveBayesClassifier", "naive_bayes", "train_naive_bayes"]
