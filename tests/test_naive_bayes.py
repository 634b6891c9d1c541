"""Tests for the categorical Naive Bayes classifier."""

import math

import pytest

from recstats import MISSING, AnalysisConfig, ConfigurationError, RecordSet
from recstats.analysis.naive_bayes import NaiveBayesAnalyzer, NaiveBayesClassifier, naive_bayes, train_naive_bayes


FEATURES = ["outlook", "temp"]


@pytest.fixture
def classifier(weather_records) -> NaiveBayesClassifier:
    """Classifier trained with add-one smoothing."""
    return train_naive_bayes(weather_records, FEATURES, "play")


class TestTraining:
    """Counts collected from the training records."""

    def test_labels_in_first_seen_order(self, classifier) -> None:
        """Labels, label counts and distinct feature values after training."""
        assert classifier.labels == ("no", "yes")
        assert classifier.label_counts == {"no": 2, "yes": 3}
        assert classifier.distinct_values == {"outlook": 3, "temp": 2}

    def test_smoothed_likelihood(self, classifier) -> None:
        """Conditionals apply add-one smoothing."""
        assert classifier.likelihood("no", "outlook", "sunny") == pytest.approx(3 / 5)
        assert classifier.likelihood("yes", "outlook", "sunny") == pytest.approx(1 / 6)

    def test_unlabeled_records_are_skipped(self, weather_records) -> None:
        """Records without a label are not counted."""
        clf = train_naive_bayes([*weather_records, {"outlook": "sunny"}], FEATURES, "play")
        assert clf.n_records == 5

    def test_no_labeled_records(self) -> None:
        """Training without any label raises."""
        with pytest.raises(ConfigurationError):
            train_naive_bayes([{"outlook": "sunny"}], FEATURES, "play")

    def test_empty_training_set(self) -> None:
        """An empty training set raises."""
        with pytest.raises(ConfigurationError):
            train_naive_bayes([], FEATURES, "play")

    def test_invalid_alpha(self, weather_records) -> None:
        """Non-positive alpha is rejected."""
        with pytest.raises(ConfigurationError):
            train_naive_bayes(weather_records, FEATURES, "play", alpha=0)

    def test_alpha_from_config(self, weather_records) -> None:
        """RecordSet training takes alpha from its config."""
        rs = RecordSet(weather_records, config=AnalysisConfig(laplace_alpha=0.5))
        assert rs.train_naive_bayes(FEATURES, "play").alpha == 0.5


class TestPrediction:
    """Most probable label by log-space score."""

    def test_predicts_by_feature_evidence(self, classifier) -> None:
        """Feature evidence can outweigh the prior."""
        assert classifier.predict({"outlook": "sunny"}) == "no"
        assert classifier.predict({"outlook": "overcast", "temp": "hot"}) == "yes"

    def test_scores_are_log_probabilities(self, classifier) -> None:
        """Scores are log prior plus log likelihoods."""
        scores = classifier.scores({"outlook": "sunny"})
        assert scores["no"] == pytest.approx(math.log(0.4 * 0.6))
        assert scores["yes"] == pytest.approx(math.log(0.6 / 6))

    def test_empty_query_uses_priors(self, classifier) -> None:
        """Without features the most frequent label wins."""
        assert classifier.predict({}) == "yes"

    def test_unseen_value_does_not_raise(self, classifier) -> None:
        """Unseen values fall back to the smoothing floor."""
        assert classifier.predict({"outlook": "snowy", "temp": "freezing"}) in {"no", "yes"}

    def test_absent_and_unknown_fields_are_ignored(self, classifier) -> None:
        """MISSING values and untrained fields do not affect the score."""
        assert classifier.predict({"outlook": MISSING, "humidity": "high"}) == classifier.predict({})

    def test_ties_resolve_to_first_seen_label(self) -> None:
        """Equal scores resolve to the earliest label."""
        clf = train_naive_bayes([{"f": "a", "l": "x"}, {"f": "b", "l": "y"}], ["f"], "l")
        assert clf.predict({"f": "c"}) == "x"

    def test_prediction_function(self, weather_records) -> None:
        """naive_bayes returns a prediction function."""
        predict = naive_bayes(weather_records, FEATURES, "play")
        assert predict({"outlook": "sunny", "temp": "hot"}) == "no"
        assert RecordSet(weather_records).naive_bayes(FEATURES, "play")({"outlook": "rainy"}) == "yes"

    def test_classifier_is_callable(self, classifier) -> None:
        """Calling the classifier predicts."""
        assert classifier({"outlook": "sunny"}) == "no"


class TestNaiveBayesAnalyzer:
    """Training through the analyzer pattern."""

    def test_fit_result_returns_classifier(self, weather_records) -> None:
        """fit().result() yields the trained classifier."""
        analyzer = RecordSet(weather_records).make_naive_bayes_analyzer(FEATURES, "play")
        assert isinstance(analyzer, NaiveBayesAnalyzer)
        clf = analyzer.fit().result()
        assert isinstance(clf, NaiveBayesClassifier)
        assert clf.label_counts == {"no": 2, "yes": 3}

    def test_validation_happens_before_fit(self, weather_records) -> None:
        """Invalid requests fail at construction."""
        view = RecordSet(weather_records).view(fields=())
        with pytest.raises(ConfigurationError):
            NaiveBayesAnalyzer(view, [], "play")

    def test_result_before_fit(self, weather_records) -> None:
        """result() requires fit()."""
        view = RecordSet(weather_records).view(fields=())
        with pytest.raises(ValueError, match="Must call fit"):
            NaiveBayesAnalyzer(view, FEATURES, "play").result()
