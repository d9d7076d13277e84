# Classifier and topic-model wrappers for the case studies

from .classifiers import DecisionTreeCaseClassifier, NaiveBayesCaseClassifier
from .models_registry import (
    DEFAULT_CLASSIFIER_PARAMS,
    get_classifier_factory,
    resolve_classifier_name,
)
from .topic_model import (
    TopicCache,
    TopicModelResult,
    fit_topic_model,
    get_topic_model,
    load_topic_tables,
    topic_features,
)

__all__ = [
    "DecisionTreeCaseClassifier",
    "NaiveBayesCaseClassifier",
    "DEFAULT_CLASSIFIER_PARAMS",
    "get_classifier_factory",
    "resolve_classifier_name",
    "TopicCache",
    "TopicModelResult",
    "fit_topic_model",
    "get_topic_model",
    "load_topic_tables",
    "topic_features",
]
