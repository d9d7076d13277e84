#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Classification metrics derived from a confusion matrix

This module computes the evaluation lines reported for each case study:
- Confusion Matrix (rows = actual, columns = predicted)
- Accuracy, Precision, Recall / Sensitivity, Specificity, F1
- False discovery rate, negative predictive value, prevalence
- Balanced accuracy and Cohen's kappa
- Classification Report

Binary metrics are taken with respect to one positive label. Ill-defined
ratios (zero denominator) print a warning and come back as nan.
"""

import numpy as np
from typing import Dict, List, Optional, Union


def confusion_matrix(
    y_true, y_pred, labels: Optional[List] = None
) -> np.ndarray:
    """
    Compute confusion matrix.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: List of labels to include in matrix (if None, use unique labels)

    Returns:
        Confusion matrix as 2D numpy array
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    if labels is None:
        labels = sorted(set(y_true) | set(y_pred))

    n_labels = len(labels)
    label_to_idx = {label: i for i, label in enumerate(labels)}

    cm = np.zeros((n_labels, n_labels), dtype=int)
    for true_label, pred_label in zip(y_true, y_pred):
        cm[label_to_idx[true_label], label_to_idx[pred_label]] += 1

    return cm


def _ratio(num: float, den: float, name: str) -> float:
    if den == 0:
        print(f"[warn] {name} is ill-defined (zero denominator); returning nan")
        return float("nan")
    return float(num / den)


def binary_counts(cm: np.ndarray, labels: List, positive) -> Dict[str, int]:
    """True/false positives/negatives of a 2x2 matrix for one positive label."""
    cm = np.asarray(cm)
    if cm.shape != (2, 2) or len(labels) != 2:
        raise ValueError("binary metrics require a 2x2 confusion matrix")
    if positive not in labels:
        raise ValueError(f"positive label {positive!r} not in {labels}")

    p = list(labels).index(positive)
    n = 1 - p
    return {
        "tp": int(cm[p, p]),
        "fn": int(cm[p, n]),
        "fp": int(cm[n, p]),
        "tn": int(cm[n, n]),
    }


def metrics_from_confusion(cm: np.ndarray, labels: List, positive) -> Dict[str, float]:
    """
    Every reported metric from a binary confusion matrix.

    Args:
        cm: 2x2 confusion matrix, rows actual, columns predicted
        labels: Row/column label order of cm
        positive: The label treated as the positive class

    Returns:
        Dictionary of metric name -> value
    """
    c = binary_counts(cm, labels, positive)
    tp, fp, fn, tn = c["tp"], c["fp"], c["fn"], c["tn"]
    total = tp + fp + fn + tn

    accuracy = float((tp + tn) / total) if total else 0.0
    precision = _ratio(tp, tp + fp, "precision")
    recall = _ratio(tp, tp + fn, "recall")
    specificity = _ratio(tn, tn + fp, "specificity")
    npv = _ratio(tn, tn + fn, "negative predictive value")

    if np.isnan(precision) or np.isnan(recall) or precision + recall == 0:
        f1 = float("nan")
        print("[warn] f1 is ill-defined; returning nan")
    else:
        f1 = 2 * precision * recall / (precision + recall)

    # Cohen's kappa: observed vs chance agreement
    if total:
        p_yes = ((tp + fp) / total) * ((tp + fn) / total)
        p_no = ((tn + fn) / total) * ((tn + fp) / total)
        expected = p_yes + p_no
        kappa = _ratio(accuracy - expected, 1 - expected, "kappa")
    else:
        kappa = float("nan")

    return {
        **c,
        "total": int(total),
        "accuracy": accuracy,
        "precision": precision,
        "recall": recall,
        "sensitivity": recall,
        "specificity": specificity,
        "f1": f1,
        "false_discovery_rate": 1.0 - precision,
        "negative_predictive_value": npv,
        "prevalence": _ratio(tp + fn, total, "prevalence"),
        "balanced_accuracy": (recall + specificity) / 2,
        "kappa": kappa,
    }


def accuracy_score(y_true, y_pred) -> float:
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)

    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    if len(y_true) == 0:
        return 0.0

    correct = np.sum(y_true == y_pred)
    return float(correct / len(y_true))


def _per_class(cm: np.ndarray, which: str) -> np.ndarray:
    out = []
    for i in range(cm.shape[0]):
        tp = cm[i, i]
        fp = np.sum(cm[:, i]) - tp
        fn = np.sum(cm[i, :]) - tp
        if which == "precision":
            den = tp + fp
        else:
            den = tp + fn
        out.append(tp / den if den else 0.0)
    return np.array(out, dtype=float)


def _average(values: np.ndarray, cm: np.ndarray, labels: List, average, positive):
    if average == "binary":
        if len(labels) != 2:
            raise ValueError("binary averaging requires exactly 2 classes")
        idx = list(labels).index(positive) if positive is not None else 1
        return float(values[idx])
    elif average == "macro":
        return float(np.mean(values))
    elif average == "weighted":
        support = np.sum(cm, axis=1)
        if np.sum(support) == 0:
            return 0.0
        return float(np.average(values, weights=support))
    elif average is None:
        return values
    else:
        raise ValueError(f"Unknown averaging strategy: {average}")


def precision_score(
    y_true, y_pred, average: Optional[str] = "binary",
    labels: Optional[List] = None, positive=None,
) -> Union[float, np.ndarray]:
    if labels is None:
        labels = sorted(set(np.asarray(y_true)) | set(np.asarray(y_pred)))
    cm = confusion_matrix(y_true, y_pred, labels)
    return _average(_per_class(cm, "precision"), cm, labels, average, positive)


def recall_score(
    y_true, y_pred, average: Optional[str] = "binary",
    labels: Optional[List] = None, positive=None,
) -> Union[float, np.ndarray]:
    if labels is None:
        labels = sorted(set(np.asarray(y_true)) | set(np.asarray(y_pred)))
    cm = confusion_matrix(y_true, y_pred, labels)
    return _average(_per_class(cm, "recall"), cm, labels, average, positive)


def f1_score(
    y_true, y_pred, average: Optional[str] = "binary",
    labels: Optional[List] = None, positive=None,
) -> Union[float, np.ndarray]:
    if labels is None:
        labels = sorted(set(np.asarray(y_true)) | set(np.asarray(y_pred)))
    cm = confusion_matrix(y_true, y_pred, labels)
    p = _per_class(cm, "precision")
    r = _per_class(cm, "recall")
    with np.errstate(divide="ignore", invalid="ignore"):
        f1 = np.where(p + r > 0, 2 * p * r / (p + r), 0.0)
    return _average(f1, cm, labels, average, positive)


def classification_report(
    y_true,
    y_pred,
    labels: Optional[List] = None,
    target_names: Optional[List[str]] = None,
    digits: int = 2,
) -> str:
    """
    Generate classification report.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: List of labels to include (if None, use unique labels)
        target_names: Names for labels (if None, use label values)
        digits: Number of decimal places to show

    Returns:
        Formatted classification report string
    """
    if labels is None:
        labels = sorted(set(np.asarray(y_true)) | set(np.asarray(y_pred)))

    if target_names is None:
        target_names = [str(label) for label in labels]

    if len(target_names) != len(labels):
        raise ValueError("target_names length must match number of labels")

    cm = confusion_matrix(y_true, y_pred, labels)
    precision = precision_score(y_true, y_pred, average=None, labels=labels)
    recall = recall_score(y_true, y_pred, average=None, labels=labels)
    f1 = f1_score(y_true, y_pred, average=None, labels=labels)
    support = np.sum(cm, axis=1)

    width = max(max(len(name) for name in target_names), len("weighted avg"))

    report = (
        f"{'':>{width}} {'precision':>9} {'recall':>9} {'f1-score':>9} {'support':>9}\n"
    )
    report += "\n"
    for name, p, r, f, s in zip(target_names, precision, recall, f1, support):
        report += f"{name:>{width}} {p:>9.{digits}f} {r:>9.{digits}f} {f:>9.{digits}f} {s:>9}\n"

    report += "\n"
    report += f"{'accuracy':>{width}} {'':>9} {'':>9} {accuracy_score(y_true, y_pred):>9.{digits}f} {np.sum(support):>9}\n"
    report += f"{'macro avg':>{width}} {np.mean(precision):>9.{digits}f} {np.mean(recall):>9.{digits}f} {np.mean(f1):>9.{digits}f} {np.sum(support):>9}\n"
    if np.sum(support):
        report += f"{'weighted avg':>{width}} {np.average(precision, weights=support):>9.{digits}f} {np.average(recall, weights=support):>9.{digits}f} {np.average(f1, weights=support):>9.{digits}f} {np.sum(support):>9}\n"

    return report


def compute_all_metrics(y_true, y_pred, labels: List, positive) -> Dict[str, float]:
    """Confusion-matrix metrics for label vectors (see metrics_from_confusion)."""
    cm = confusion_matrix(y_true, y_pred, labels)
    return metrics_from_confusion(cm, labels, positive)
