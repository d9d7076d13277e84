# classifiers.py
from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.naive_bayes import MultinomialNB
from sklearn.tree import DecisionTreeClassifier, export_text


class _FrameClassifier:
    """Wraps an sklearn estimator so fit/predict take doc_id-indexed frames.

    Feature columns are remembered at fit time; predict reorders the incoming
    frame to that column order and fails on missing columns.
    """

    def __init__(self, **params: Dict[str, Any]):
        self.p = params
        self.model = None
        self.feature_names_ = None

    def _build(self):
        raise NotImplementedError

    def _matrix(self, X: pd.DataFrame) -> np.ndarray:
        missing = [c for c in self.feature_names_ if c not in X.columns]
        if missing:
            raise KeyError(f"missing feature columns: {missing[:5]}")
        return X[self.feature_names_].to_numpy(dtype=float)

    def fit(self, X: pd.DataFrame, y):
        self.feature_names_ = list(X.columns)
        self.model = self._build()
        self.model.fit(X.to_numpy(dtype=float), np.asarray(y))
        return self

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        return self.model.predict(self._matrix(X))

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        return self.model.predict_proba(self._matrix(X))

    @property
    def classes_(self):
        return self.model.classes_


class DecisionTreeCaseClassifier(_FrameClassifier):
    """Decision tree with rpart-like stopping rules.

    params:
      - max_depth: depth cap (None = grow until the split rules stop it)
      - min_samples_split: smallest node that may be split (rpart minsplit)
      - min_samples_leaf: smallest leaf (rpart minbucket = minsplit / 3)
      - ccp_alpha: cost-complexity pruning strength
      - random_state: seed for tie-breaking between equally good splits
    """

    def _build(self):
        return DecisionTreeClassifier(
            max_depth=self.p.get("max_depth", None),
            min_samples_split=self.p.get("min_samples_split", 20),
            min_samples_leaf=self.p.get("min_samples_leaf", 7),
            ccp_alpha=self.p.get("ccp_alpha", 0.0),
            criterion=self.p.get("criterion", "gini"),
            random_state=self.p.get("random_state", 42),
        )

    def feature_importances(self, n: int = 15) -> pd.DataFrame:
        imp = pd.DataFrame(
            {"feature": self.feature_names_, "importance": self.model.feature_importances_}
        )
        imp = imp[imp["importance"] > 0]
        return imp.sort_values("importance", ascending=False).head(n).reset_index(drop=True)

    def describe(self, max_depth: int = 6) -> str:
        return export_text(
            self.model, feature_names=self.feature_names_, max_depth=max_depth
        )


class NaiveBayesCaseClassifier(_FrameClassifier):
    """Multinomial naive Bayes over word counts (alpha = Laplace smoothing)."""

    def _build(self):
        return MultinomialNB(alpha=self.p.get("alpha", 1.0))

    def feature_importances(self, n: int = 15) -> pd.DataFrame:
        # log P(word | class) gap between the two classes
        logp = self.model.feature_log_prob_
        gap = logp[-1] - logp[0] if logp.shape[0] > 1 else logp[0]
        imp = pd.DataFrame({"feature": self.feature_names_, "importance": gap})
        imp["magnitude"] = imp["importance"].abs()
        imp = imp.sort_values("magnitude", ascending=False).head(n)
        return imp.drop(columns="magnitude").reset_index(drop=True)
