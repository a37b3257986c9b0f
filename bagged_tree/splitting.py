# BaggedTree/bagged_tree/splitting.py
import time # For performance logging
import numpy as np
from .utils import impurity_reduction


def find_best_split(feature_column, labels, min_samples_leaf=1):
    """
    Finds the threshold on one numeric column that maximises impurity reduction.

    Candidate thresholds are the midpoints between adjacent distinct sorted
    values. Rows with value <= threshold go left, the rest go right.

    Args:
        feature_column (array-like): Values of one feature for the node's rows.
        labels (array-like): 0/1 labels aligned with `feature_column`.
        min_samples_leaf (int): Candidates leaving fewer rows than this on
            either side are skipped.

    Returns:
        tuple or None: (threshold, reduction) for the strictly best candidate
        (the smallest threshold wins ties), or None when the column has
        fewer than two distinct values or no candidate reduces impurity.
    """
    values = np.asarray(feature_column, dtype=float)
    labels = np.asarray(labels)

    unique_sorted_values = np.unique(values)
    if unique_sorted_values.size < 2:
        return None

    split_values_to_test = (unique_sorted_values[:-1] + unique_sorted_values[1:]) / 2.0

    best_threshold = None
    best_reduction = 0.0
    for split_value in split_values_to_test:
        right_mask = values > split_value
        num_right = np.count_nonzero(right_mask)
        num_left = values.size - num_right

        if num_left < min_samples_leaf or num_right < min_samples_leaf:
            continue

        reduction = impurity_reduction(labels, labels[right_mask], labels[~right_mask])
        if reduction > best_reduction:
            best_reduction = reduction
            best_threshold = float(split_value)

    if best_threshold is None:
        return None
    return best_threshold, best_reduction


def sample_feature_indices(n_features, nfeat, rng):
    """
    Draws `nfeat` distinct column indices uniformly without replacement,
    sorted ascending. Returns every column when nfeat >= n_features.
    """
    if nfeat is None or nfeat >= n_features:
        return np.arange(n_features)
    return np.sort(rng.choice(n_features, size=nfeat, replace=False))


def find_best_split_for_node(
    feature_matrix: np.ndarray,
    labels: np.ndarray,
    indices_for_node: np.ndarray,
    feature_indices: np.ndarray,
    min_samples_leaf: int = 1,
    verbose: bool = False,
    node_id_for_logs = None,
    node_depth_for_logs: int = 0
):
    """
    Searches every sampled column of a node for its best threshold and keeps
    the single (column, threshold) pair with the strictly greatest impurity
    reduction over the node's labels. Ties keep the first column in
    ascending index order.

    Returns:
        dict: {'feature', 'value', 'impurity_reduction', 'left_indices',
        'right_indices'} with `feature` indexing the original columns, or
        an empty dict when no sampled column yields a split.
    """
    overall_best_split = {'impurity_reduction': 0.0}
    indent = "  " * (node_depth_for_logs + 1)

    node_labels = labels[indices_for_node]
    node_features = feature_matrix[indices_for_node]

    for feature_idx in feature_indices:
        if verbose:
            t_feat_split_start = time.time()

        column = node_features[:, feature_idx]
        column_split = find_best_split(column, node_labels, min_samples_leaf=min_samples_leaf)

        if column_split is None:
            if verbose:
                print(f"{indent}    Feature {feature_idx} did not yield a valid split. "
                      f"Took {time.time() - t_feat_split_start:.4f}s")
            continue

        threshold, _ = column_split
        left_mask = column <= threshold
        reduction = impurity_reduction(node_labels, node_labels[~left_mask], node_labels[left_mask])

        if verbose:
            print(f"{indent}    Feature {feature_idx} best split <= {threshold:.4f} "
                  f"(reduction: {reduction:.5f}). Took {time.time() - t_feat_split_start:.4f}s")

        if reduction > overall_best_split['impurity_reduction']:
            overall_best_split = {
                'feature': int(feature_idx),
                'value': threshold,
                'impurity_reduction': reduction,
                'left_indices': indices_for_node[left_mask],
                'right_indices': indices_for_node[~left_mask],
            }

    if 'feature' not in overall_best_split:
        if verbose:
            print(f"{indent}  No beneficial split found for Node {node_id_for_logs}.")
        return {}

    if verbose:
        print(f"{indent}  Overall best split for Node {node_id_for_logs}: Feature {overall_best_split['feature']} "
              f"<= {overall_best_split['value']:.4f}, reduction: {overall_best_split['impurity_reduction']:.5f}")
    return overall_best_split
