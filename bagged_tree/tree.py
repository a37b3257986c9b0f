# BaggedTree/bagged_tree/tree.py
import time
import numpy as np

from .utils import (
    InvalidParameterError,
    as_feature_matrix,
    as_label_vector,
    check_random_state,
    impurity,
    majority_label,
)
from .stopping import check_pre_split_stopping_conditions, check_post_split_stopping_condition
from .splitting import find_best_split_for_node, sample_feature_indices

# Work stack actions
_GROW = 0
_ATTACH = 1


class Node:
    def __init__(self, node_id, depth, indices, parent_id=None):
        self.id = node_id
        self.depth = depth
        self.indices = np.array(indices, dtype=int)
        self.parent_id = parent_id
        self.children_ids = []
        self.is_leaf = False
        self.leaf_reason = None
        self.split_rule = None

        self.num_samples = len(self.indices)

    def set_as_leaf(self, reason):
        self.is_leaf = True
        self.leaf_reason = reason

    def set_split_rule(self, feature, value, impurity_reduction, children_ids):
        if self.split_rule is not None or self.children_ids:
            raise RuntimeError(f"Node {self.id} has already been split.")
        self.split_rule = {
            'feature': feature,
            'value': value,
            'impurity_reduction': impurity_reduction
        }
        self.children_ids = list(children_ids)
        self.is_leaf = False

    def __repr__(self):
        if self.is_leaf:
            return (f"Node(id={self.id}, Leaf, depth={self.depth}, samples={self.num_samples}, "
                    f"reason='{self.leaf_reason}')")
        if self.split_rule is None:
            return f"Node(id={self.id}, Pending, depth={self.depth}, samples={self.num_samples})"
        rule = self.split_rule
        return (f"Node(id={self.id}, Split, depth={self.depth}, rule='x[{rule['feature']}]', "
                f"val={rule['value']:.3f}, samples={self.num_samples})")


class ClassificationTree:
    """
    Binary classification tree grown by impurity reduction.

    tree = ClassificationTree(nmin=2, minleaf=2, nfeat=None, random_state=0)
    tree.fit(X_train, y_train)
    y_pred = tree.predict(X_test)
    tree.print_tree()

    Args:
        nmin (int): Nodes with fewer rows than this are not split.
        minleaf (int): Minimum number of rows in a leaf.
        nfeat (int or None): Number of columns sampled as split candidates
            at each node. None uses every column.
        random_state: Seed, SeedSequence or numpy Generator driving the
            column sampling.
        verbose (bool): Print growth progress.
    """

    def __init__(
        self,
        nmin=2,
        minleaf=2,
        nfeat=None,
        random_state=None,
        verbose=False
    ):
        self.nmin = nmin
        self.minleaf = minleaf
        self.nfeat = nfeat
        self.random_state = random_state
        self.verbose = verbose

        self.root_id = None
        self.nodes = {}
        self.feature_matrix = None
        self.label_array = None
        self.n_features = None

    def _check_params(self, n_features):
        if self.minleaf is None or self.minleaf < 1:
            raise InvalidParameterError(f"minleaf must be at least 1, got {self.minleaf}.")
        if self.nmin is None or self.nmin <= 0:
            raise InvalidParameterError(f"nmin must be positive, got {self.nmin}.")
        if self.nfeat is not None:
            if self.nfeat < 1:
                raise InvalidParameterError(f"nfeat must be at least 1, got {self.nfeat}.")
            if self.nfeat > n_features:
                raise InvalidParameterError(
                    f"Cannot sample nfeat={self.nfeat} columns from {n_features} available columns."
                )

    def fit(self, X, y):
        if self.verbose:
            fit_start_time = time.time()

        feature_matrix = as_feature_matrix(X, name="features")
        label_array = as_label_vector(y, name="labels")
        n_samples, n_features = feature_matrix.shape
        if label_array.size != n_samples:
            raise InvalidParameterError(
                f"features have {n_samples} rows but labels have {label_array.size} values."
            )
        self._check_params(n_features)
        nfeat = n_features if self.nfeat is None else self.nfeat
        rng = check_random_state(self.random_state)

        if self.verbose:
            print(f"ClassificationTree.fit started. Data has {n_samples} rows and {n_features} columns.")

        # Built locally and published only once growth has finished.
        nodes = {}
        root_node = Node(node_id=0, depth=0, indices=np.arange(n_samples))
        nodes[root_node.id] = root_node

        pending_splits = {}
        stack = [(_GROW, root_node.id)]

        while stack:
            action, current_node_id = stack.pop()
            current_node = nodes[current_node_id]
            indent = "  " * (current_node.depth + 1)

            if action == _ATTACH:
                # Both child subtrees are complete at this point.
                best_split, children_ids = pending_splits.pop(current_node_id)
                current_node.set_split_rule(
                    feature=best_split['feature'], value=best_split['value'],
                    impurity_reduction=best_split['impurity_reduction'],
                    children_ids=children_ids
                )
                continue

            if self.verbose:
                print(f"{indent}Processing Node {current_node.id} (Depth {current_node.depth}): "
                      f"{current_node.num_samples} samples.")

            # 1. Check pre-split stopping conditions
            node_labels = label_array[current_node.indices]
            stop_reason = check_pre_split_stopping_conditions(
                node_labels=node_labels, nmin=self.nmin, minleaf=self.minleaf
            )
            if stop_reason:
                current_node.set_as_leaf(stop_reason)
                if self.verbose: print(f"{indent}  Node {current_node.id} becomes LEAF. Reason: {stop_reason}")
                continue

            # 2. Find the best split over a fresh column sample
            feature_indices = sample_feature_indices(n_features, nfeat, rng)
            best_split_found = find_best_split_for_node(
                feature_matrix=feature_matrix, labels=label_array,
                indices_for_node=current_node.indices, feature_indices=feature_indices,
                min_samples_leaf=self.minleaf, verbose=self.verbose,
                node_id_for_logs=current_node.id, node_depth_for_logs=current_node.depth
            )

            if not best_split_found:
                current_node.set_as_leaf("no_beneficial_split")
                if self.verbose: print(f"{indent}  Node {current_node.id} becomes LEAF. Reason: No split reduced impurity.")
                continue

            # 3. Guard: the search above already enforces minleaf on both children
            size_stop_reason = check_post_split_stopping_condition(
                num_left=best_split_found['left_indices'].size,
                num_right=best_split_found['right_indices'].size,
                minleaf=self.minleaf, verbose=self.verbose,
                node_id_for_logs=current_node.id, node_depth_for_logs=current_node.depth
            )
            if size_stop_reason:
                current_node.set_as_leaf(size_stop_reason)
                continue

            # 4. Create the children; they are grown before being attached
            if self.verbose:
                print(f"{indent}  Node {current_node.id} SPLIT on feature {best_split_found['feature']} "
                      f"<= {best_split_found['value']:.4f}.")

            left_child = Node(len(nodes), current_node.depth + 1, best_split_found['left_indices'],
                              parent_id=current_node.id)
            nodes[left_child.id] = left_child
            right_child = Node(len(nodes), current_node.depth + 1, best_split_found['right_indices'],
                               parent_id=current_node.id)
            nodes[right_child.id] = right_child

            pending_splits[current_node.id] = (best_split_found, [left_child.id, right_child.id])
            stack.append((_ATTACH, current_node.id))
            stack.append((_GROW, right_child.id))
            stack.append((_GROW, left_child.id))

        self.nodes = nodes
        self.root_id = root_node.id
        self.feature_matrix = feature_matrix
        self.label_array = label_array
        self.n_features = n_features

        if self.verbose:
            fit_end_time = time.time()
            print(f"ClassificationTree.fit completed in {fit_end_time - fit_start_time:.4f}s. Total nodes: {len(self.nodes)}")
        return self

    def node_labels(self, node_id):
        """Labels of the training rows held by a node."""
        return self.label_array[self.nodes[node_id].indices]

    def _traverse_tree(self, row):
        node = self.nodes[self.root_id]
        while node.children_ids:
            rule = node.split_rule
            if row[rule['feature']] <= rule['value']:
                node = self.nodes[node.children_ids[0]]
            else:
                node = self.nodes[node.children_ids[1]]
        return node

    def predict_one(self, row):
        if self.root_id is None: raise ValueError("Tree has not been fitted yet.")
        row = np.asarray(row, dtype=float).ravel()
        if row.size != self.n_features:
            raise ValueError(f"Row has {row.size} values, tree was grown on {self.n_features} columns.")
        leaf = self._traverse_tree(row)
        return majority_label(self.label_array[leaf.indices])

    def predict(self, X):
        if self.root_id is None: raise ValueError("Tree has not been fitted yet.")

        rows = as_feature_matrix(X, name="rows")
        if rows.shape[1] != self.n_features:
            raise ValueError(f"Rows have {rows.shape[1]} columns, tree was grown on {self.n_features} columns.")

        predictions = []
        for row in rows:
            leaf = self._traverse_tree(row)
            predictions.append(majority_label(self.label_array[leaf.indices]))
        return np.array(predictions, dtype=int)

    def leaf_ids(self):
        return [node_id for node_id, node in self.nodes.items() if node.is_leaf]

    def get_depth(self):
        return max(node.depth for node in self.nodes.values()) if self.nodes else 0

    def get_params(self, deep=True):
        return {
            'nmin': self.nmin,
            'minleaf': self.minleaf,
            'nfeat': self.nfeat,
            'random_state': self.random_state,
            'verbose': self.verbose
        }

    def print_tree(self, node_id=None, indent=""):
        if node_id is None: node_id = self.root_id
        if node_id not in self.nodes: return

        # Pre-order walk; the right child is pushed first so the left prints first.
        stack = [(node_id, indent)]
        while stack:
            current_id, current_indent = stack.pop()
            node = self.nodes[current_id]

            labels = self.node_labels(current_id)
            node_stats = (f"N={node.num_samples} | ones={int(np.count_nonzero(labels))} | "
                          f"impurity={impurity(labels):.4f} | majority={majority_label(labels)}")

            if node.is_leaf:
                print(f"{current_indent}Leaf: {node_stats} (Reason: {node.leaf_reason})")
                continue

            rule = node.split_rule
            condition = f"x[{rule['feature']}] <= {rule['value']:.3f}"
            print(f"{current_indent}Split: {condition} (reduction={rule['impurity_reduction']:.4f}) | {node_stats}")
            if node.children_ids:
                stack.append((node.children_ids[1], current_indent + "  +--R: "))
                stack.append((node.children_ids[0], current_indent + "  |--L: "))


def grow(features, labels, nmin=2, minleaf=2, nfeat=None, random_state=None, verbose=False):
    """
    Grows a classification tree on (features, labels).

    Raises:
        InvalidParameterError: features or labels are empty, their lengths
            differ, minleaf < 1, nmin <= 0 or nfeat exceeds the column count.
    """
    tree = ClassificationTree(
        nmin=nmin, minleaf=minleaf, nfeat=nfeat,
        random_state=random_state, verbose=verbose
    )
    return tree.fit(features, labels)


def classify(rows, tree):
    """Predicted 0/1 label for each row, in input order."""
    return tree.predict(rows)
