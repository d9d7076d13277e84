# models_registry.py
from typing import Any, Callable, Dict

from .classifiers import DecisionTreeCaseClassifier, NaiveBayesCaseClassifier

DEFAULT_CLASSIFIER_PARAMS: Dict[str, Dict[str, Any]] = {
    "decision_tree": {
        "max_depth": None,
        "min_samples_split": 20,
        "min_samples_leaf": 7,
        "ccp_alpha": 0.0,
        "criterion": "gini",
    },
    "naive_bayes": {
        "alpha": 1.0,
    },
}

_ALIASES = {
    "decision_tree": "decision_tree",
    "tree": "decision_tree",
    "dt": "decision_tree",
    "naive_bayes": "naive_bayes",
    "nb": "naive_bayes",
    "bayes": "naive_bayes",
}


def resolve_classifier_name(name: str) -> str:
    key = _ALIASES.get(name.lower())
    if key is None:
        raise ValueError(f"Unknown classifier: {name}")
    return key


def get_classifier_factory(name: str) -> Callable[[Dict[str, Any]], Any]:
    """
    返回 factory: params(dict) -> estimator。params 覆盖默认值。
    """
    key = resolve_classifier_name(name)
    cls = DecisionTreeCaseClassifier if key == "decision_tree" else NaiveBayesCaseClassifier

    def factory(params: Dict[str, Any] = None):
        merged = dict(DEFAULT_CLASSIFIER_PARAMS[key])
        merged.update(params or {})
        return cls(**merged)

    return factory
