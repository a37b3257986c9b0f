# BaggedTree/bagged_tree/metrics.py
import warnings
import numpy as np


def _aligned_labels(observed, predicted):
    observed = np.asarray(observed).ravel()
    predicted = np.asarray(predicted).ravel()
    if observed.size != predicted.size:
        raise ValueError("Length of observed and predicted labels must be the same.")
    return (observed > 0).astype(int), (predicted > 0).astype(int)


def _safe_ratio(numerator, denominator, metric_name):
    if denominator == 0:
        warnings.warn(f"{metric_name} is undefined (zero denominator). Returning 0.0.", UserWarning)
        return 0.0
    return numerator / denominator


def confusion_matrix(observed, predicted):
    """
    2x2 confusion matrix indexed [observed, predicted], with label 1 as the
    positive class: [[TN, FP], [FN, TP]].
    """
    observed, predicted = _aligned_labels(observed, predicted)
    cm = np.zeros((2, 2), dtype=int)
    np.add.at(cm, (observed, predicted), 1)
    return cm


def precision(observed, predicted):
    """TP / (TP + FP)."""
    cm = confusion_matrix(observed, predicted)
    return _safe_ratio(cm[1, 1], cm[1, 1] + cm[0, 1], "Precision")


def recall(observed, predicted):
    """TP / (TP + FN)."""
    cm = confusion_matrix(observed, predicted)
    return _safe_ratio(cm[1, 1], cm[1, 1] + cm[1, 0], "Recall")


def accuracy(observed, predicted):
    """(TP + TN) / total."""
    cm = confusion_matrix(observed, predicted)
    return _safe_ratio(cm[0, 0] + cm[1, 1], cm.sum(), "Accuracy")


def classification_report(observed, predicted):
    """
    Confusion matrix plus precision, accuracy and recall in one dictionary.

    Args:
        observed (array-like): True 0/1 labels.
        predicted (array-like): Predicted 0/1 labels.

    Returns:
        dict: {'confusion_matrix', 'precision', 'accuracy', 'recall', 'num_samples'}
    """
    cm = confusion_matrix(observed, predicted)
    return {
        'confusion_matrix': cm,
        'precision': _safe_ratio(cm[1, 1], cm[1, 1] + cm[0, 1], "Precision"),
        'accuracy': _safe_ratio(cm[0, 0] + cm[1, 1], cm.sum(), "Accuracy"),
        'recall': _safe_ratio(cm[1, 1], cm[1, 1] + cm[1, 0], "Recall"),
        'num_samples': int(cm.sum()),
    }
