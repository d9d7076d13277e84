# Core components for the text case studies

from .text import tokenize, build_stop_words, tokenize_documents, top_words
from .word_stats import (
    word_counts_by_class,
    log_odds_table,
    polarizing_words,
    top_words_by_class,
)
from .features import (
    document_term_matrix,
    covariate_features,
    merge_features,
    attach_labels,
)
from .splitting import train_test_split_frame, stratified_kfold_indices
from .metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    confusion_matrix,
    binary_counts,
    metrics_from_confusion,
    classification_report,
    compute_all_metrics,
)

__all__ = [
    "tokenize",
    "build_stop_words",
    "tokenize_documents",
    "top_words",
    "word_counts_by_class",
    "log_odds_table",
    "polarizing_words",
    "top_words_by_class",
    "document_term_matrix",
    "covariate_features",
    "merge_features",
    "attach_labels",
    "train_test_split_frame",
    "stratified_kfold_indices",
    "accuracy_score",
    "precision_score",
    "recall_score",
    "f1_score",
    "confusion_matrix",
    "binary_counts",
    "metrics_from_confusion",
    "classification_report",
    "compute_all_metrics",
]
