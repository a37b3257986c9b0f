# BaggedTree/bagged_tree/datasets.py
import numpy as np
import pandas as pd

from .utils import InvalidParameterError


def drop_columns(dataframe, positions):
    """Returns a copy of `dataframe` without the columns at the given positions."""
    positions = list(positions)
    if not positions:
        return dataframe.copy()
    n_columns = dataframe.shape[1]
    for position in positions:
        if not 0 <= position < n_columns:
            raise InvalidParameterError(f"Column position {position} is out of range for {n_columns} columns.")
    return dataframe.drop(columns=dataframe.columns[positions])


def binarize_labels(values):
    """Values > 0 become class 1, everything else class 0."""
    return (np.asarray(values, dtype=float) > 0).astype(int)


def load_csv(path, label_column, drop=(), sep=","):
    """
    Loads a delimited file into a numeric feature table and binary labels.

    Args:
        path (str or path-like): File to read.
        label_column (str or int): Name or position (after dropping) of the label column.
        drop (iterable of int): Positions of columns to discard first, e.g. identifiers.
        sep (str): Field delimiter.

    Returns:
        tuple: (X as float ndarray, y as 0/1 int ndarray, list of feature names)
    """
    dataframe = pd.read_csv(path, sep=sep)
    dataframe = drop_columns(dataframe, drop)

    if isinstance(label_column, int):
        if not 0 <= label_column < dataframe.shape[1]:
            raise InvalidParameterError(f"Label column position {label_column} is out of range.")
        label_column = dataframe.columns[label_column]
    if label_column not in dataframe.columns:
        raise InvalidParameterError(f"Label column '{label_column}' not found in {path}.")

    labels = binarize_labels(dataframe.pop(label_column).to_numpy())

    try:
        features = dataframe.to_numpy(dtype=float)
    except ValueError as e:
        raise InvalidParameterError(f"Non-numeric feature values in {path}: {e}") from e

    return features, labels, [str(c) for c in dataframe.columns]
