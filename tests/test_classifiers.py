import numpy as np
import pandas as pd
import pytest

from casestudies.models.models_registry import get_classifier_factory, resolve_classifier_name


@pytest.fixture
def counts():
    idx = pd.Index(range(1, 41), name="doc_id")
    great = np.array([3, 0] * 20)
    boring = np.array([0, 4] * 20)
    X = pd.DataFrame({"great": great, "boring": boring, "plot": 1}, index=idx)
    y = pd.Series(["positive", "negative"] * 20, index=idx)
    return X, y


@pytest.mark.parametrize("name", ["decision_tree", "naive_bayes"])
def test_classifier_learns_separable_counts(counts, name):
    X, y = counts
    model = get_classifier_factory(name)({})
    model.fit(X, y)
    assert (model.predict(X) == y.to_numpy()).all()
    proba = model.predict_proba(X)
    assert proba.shape == (40, 2)
    assert np.allclose(proba.sum(axis=1), 1.0)


def test_predict_reorders_columns(counts):
    X, y = counts
    model = get_classifier_factory("tree")({"random_state": 0}).fit(X, y)
    shuffled = X[["plot", "boring", "great"]]
    assert (model.predict(shuffled) == model.predict(X)).all()
    with pytest.raises(KeyError):
        model.predict(X.drop(columns="great"))


def test_tree_describe_and_importances(counts):
    X, y = counts
    model = get_classifier_factory("decision_tree")({}).fit(X, y)
    rules = model.describe()
    assert "great" in rules or "boring" in rules
    imp = model.feature_importances(5)
    assert imp["importance"].sum() == pytest.approx(1.0)
    assert "plot" not in imp["feature"].tolist()


def test_naive_bayes_importances(counts):
    X, y = counts
    model = get_classifier_factory("nb")({"alpha": 0.5}).fit(X, y)
    imp = model.feature_importances(3)
    assert set(imp["feature"]) == {"great", "boring", "plot"}
    assert imp["feature"].iloc[-1] == "plot"


def test_unknown_classifier():
    with pytest.raises(ValueError):
        resolve_classifier_name("svm")
