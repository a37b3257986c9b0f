# BaggedTree/bagged_tree/stopping.py
from .utils import impurity


def check_pre_split_stopping_conditions(
    node_labels,
    nmin,
    minleaf
    ):
    """
    Checks the structural stopping rules before attempting to find a split.
    This avoids the cost of split-finding for nodes that are already terminal.

    The rules are checked in this order:
        1. the node holds no rows,
        2. fewer rows than `nmin`,
        3. the node is pure (impurity 0),
        4. fewer rows than `minleaf`.

    Args:
        node_labels (np.ndarray): 0/1 labels of the rows in the current node.
        nmin (int): Minimum number of rows required in a node to consider splitting.
        minleaf (int): Minimum number of rows a leaf must hold.

    Returns:
        str or None: A string describing the reason for stopping, or None if no stopping condition is met.
    """
    node_num_samples = 0 if node_labels is None else len(node_labels)

    if node_num_samples == 0:
        return "empty_node"

    if node_num_samples < nmin:
        return f"nmin ({node_num_samples} < {nmin})"

    if impurity(node_labels) == 0:
        return "pure_node"

    if node_num_samples < minleaf:
        return f"minleaf ({node_num_samples} < {minleaf})"

    return None


def check_post_split_stopping_condition(
    num_left,
    num_right,
    minleaf,
    verbose=False,
    node_id_for_logs=None,
    node_depth_for_logs=0
):
    """
    Determines if a chosen split must be rejected because one of its
    children would hold fewer than `minleaf` rows.

    The split search already skips thresholds that leave fewer than
    `minleaf` rows on a side, so when called from `ClassificationTree.fit`
    this is a guard that should never trigger. It only rejects splits found
    by a search run with a smaller `min_samples_leaf`.

    Returns:
        str or None: A string describing the reason for stopping, or None if splitting should proceed.
    """
    indent = "  " * (node_depth_for_logs + 1)

    if num_left >= minleaf and num_right >= minleaf:
        return None

    if verbose:
        print(f"{indent}  Leaf size check (Node {node_id_for_logs}): children of "
              f"{num_left} and {num_right} rows, minleaf is {minleaf}. Stop splitting.")
    return f"minleaf_children ({min(num_left, num_right)} < {minleaf})"
