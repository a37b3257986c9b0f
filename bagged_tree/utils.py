# BaggedTree/bagged_tree/utils.py
import warnings
import numpy as np
import pandas as pd


class InvalidParameterError(ValueError):
    """Raised when a tree or ensemble is asked to grow with unusable arguments."""


def impurity(labels):
    """
    Two-class Gini-style impurity p0 * p1 of a 0/1 label vector.

    The score lies in [0, 0.25]: 0 for a single-class vector and 0.25 when
    exactly half of the labels belong to each class.
    An empty label vector has impurity 0.0.
    """
    labels = np.asarray(labels)
    n = labels.size
    if n == 0:
        return 0.0
    p0 = np.count_nonzero(labels == 0) / n
    p1 = np.count_nonzero(labels == 1) / n
    return float(p0 * p1)


def impurity_reduction(parent_labels, left_labels, right_labels):
    """
    Impurity of the parent minus the size-weighted impurity of its two children.

    An empty child contributes nothing to the weighted sum; an empty parent
    yields a reduction of 0.0.
    """
    n = len(parent_labels)
    if n == 0:
        return 0.0
    weighted_children = (
        (len(left_labels) / n) * impurity(left_labels)
        + (len(right_labels) / n) * impurity(right_labels)
    )
    return impurity(parent_labels) - weighted_children


def majority_label(labels):
    """
    Majority class of a label vector: 1 if strictly more than half of the
    labels are positive, else 0. Ties and empty vectors resolve to 0.
    """
    labels = np.asarray(labels)
    if labels.size == 0:
        return 0
    share_positive = np.count_nonzero(labels > 0) / labels.size
    return 1 if share_positive > 0.5 else 0


def majority_vote(predictions, rng):
    """
    Majority vote over 0/1 predictions. The label with strictly more votes
    wins; an exact tie is broken 50/50 using `rng`.
    """
    predictions = np.asarray(predictions)
    ones = int(np.count_nonzero(predictions == 1))
    zeros = predictions.size - ones
    if ones > zeros:
        return 1
    if zeros > ones:
        return 0
    return int(rng.integers(0, 2))


def check_random_state(random_state):
    """
    Turn `random_state` into a numpy Generator.

    Accepts None (fresh OS entropy), an int seed, a SeedSequence or an
    existing Generator (returned unchanged).
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    if random_state is None or isinstance(random_state, (int, np.integer, np.random.SeedSequence)):
        return np.random.default_rng(random_state)
    raise TypeError(f"Cannot build a random generator from {type(random_state).__name__}.")


def as_seed_sequence(random_state):
    """SeedSequence used to spawn independent per-tree generators."""
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        # Draw the entropy from the generator so a seeded Generator stays reproducible.
        return np.random.SeedSequence(int(random_state.integers(0, 2**63 - 1)))
    if random_state is None or isinstance(random_state, (int, np.integer)):
        return np.random.SeedSequence(random_state)
    raise TypeError(f"Cannot build a seed sequence from {type(random_state).__name__}.")


def is_pandas_dataframe(data):
    """Checks if the provided data is a Pandas DataFrame."""
    return isinstance(data, pd.DataFrame)


def as_feature_matrix(data, name="features"):
    """
    Converts a feature table (DataFrame, ndarray or list of rows) to a 2-D
    float array. Raises InvalidParameterError for empty, ragged or
    non-numeric tables.
    """
    if data is None:
        raise InvalidParameterError(f"{name} cannot be None.")

    if is_pandas_dataframe(data):
        values = data.to_numpy()
    elif isinstance(data, (np.ndarray, list, tuple)):
        values = data
    else:
        raise TypeError(f"{name} must be a Pandas DataFrame, a numpy array or a list of rows.")

    try:
        matrix = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{name} must be a rectangular table of numbers: {e}") from e

    if matrix.ndim == 1 and matrix.size > 0:
        # A flat sequence is a single row.
        matrix = matrix.reshape(1, -1)
    if matrix.ndim != 2 or matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise InvalidParameterError(f"{name} cannot be empty and must be two-dimensional.")
    if np.isnan(matrix).any():
        raise InvalidParameterError(f"{name} contains missing values.")
    return matrix


def as_label_vector(labels, name="labels"):
    """
    Converts labels to a 0/1 integer vector. Values > 0 become 1, everything
    else 0; a UserWarning flags vectors that were not already 0/1.
    """
    if labels is None:
        raise InvalidParameterError(f"{name} cannot be None.")
    if isinstance(labels, (pd.Series, pd.DataFrame)):
        labels = labels.to_numpy()

    try:
        values = np.asarray(labels, dtype=float).ravel()
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{name} must be numeric: {e}") from e

    if values.size == 0:
        raise InvalidParameterError(f"{name} cannot be empty.")
    if np.isnan(values).any():
        raise InvalidParameterError(f"{name} contains missing values.")

    binary = (values > 0).astype(int)
    if not np.isin(values, (0.0, 1.0)).all():
        warnings.warn(
            f"{name} contain values other than 0 and 1. Treating values > 0 as class 1.",
            UserWarning
        )
    return binary
