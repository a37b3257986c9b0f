# BaggedTree/bagged_tree/bagging.py
import time
import numpy as np
from joblib import Parallel, delayed

from .tree import ClassificationTree
from .utils import (
    InvalidParameterError,
    as_feature_matrix,
    as_label_vector,
    as_seed_sequence,
    check_random_state,
    majority_vote,
)


def bootstrap_sample(X, y, rng):
    """
    Resamples the rows of (X, y) with replacement. The resample always holds
    exactly as many rows as the original.
    """
    n_samples = X.shape[0]
    idxs = rng.integers(0, n_samples, size=n_samples)
    return X[idxs], y[idxs]


def _grow_one_tree(X, y, nmin, minleaf, nfeat, seed_sequence, verbose):
    # Each tree owns a generator; the shared dataset is only read.
    rng = np.random.default_rng(seed_sequence)
    X_sample, y_sample = bootstrap_sample(X, y, rng)
    tree = ClassificationTree(nmin=nmin, minleaf=minleaf, nfeat=nfeat, random_state=rng, verbose=verbose)
    return tree.fit(X_sample, y_sample)


class BaggedTreeClassifier:
    """
    Bootstrap-aggregated classification trees with majority vote.

    bag = BaggedTreeClassifier(m=100, nmin=15, minleaf=5, nfeat=41, random_state=0)
    bag.fit(X_train, y_train)
    y_pred = bag.predict(X_test)

    Args:
        m (int): Number of trees.
        nmin, minleaf, nfeat: Growth parameters passed to every tree.
        random_state: Seed, SeedSequence or numpy Generator. Each tree gets
            an independent generator spawned from it, so results do not
            depend on `n_jobs`.
        n_jobs (int): Trees grown in parallel (joblib, threading backend).
        verbose (bool): Print progress.
    """

    def __init__(
        self,
        m=10,
        nmin=2,
        minleaf=2,
        nfeat=None,
        random_state=None,
        n_jobs=1,
        verbose=False
    ):
        self.m = m
        self.nmin = nmin
        self.minleaf = minleaf
        self.nfeat = nfeat
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.verbose = verbose

        self.trees_ = []
        self._vote_rng = None

    def fit(self, X, y):
        if self.m is None or self.m < 1:
            raise InvalidParameterError(f"m must be at least 1, got {self.m}.")

        feature_matrix = as_feature_matrix(X, name="features")
        label_array = as_label_vector(y, name="labels")
        if label_array.size != feature_matrix.shape[0]:
            raise InvalidParameterError(
                f"features have {feature_matrix.shape[0]} rows but labels have {label_array.size} values."
            )
        # Fail on bad tree parameters before any tree is grown.
        ClassificationTree(nmin=self.nmin, minleaf=self.minleaf, nfeat=self.nfeat)._check_params(
            feature_matrix.shape[1]
        )

        if self.verbose:
            fit_start_time = time.time()
            print(f"BaggedTreeClassifier.fit started: m={self.m}, n_jobs={self.n_jobs}, "
                  f"{feature_matrix.shape[0]} rows.")

        seed_sequence = as_seed_sequence(self.random_state)
        tree_seeds = seed_sequence.spawn(self.m + 1)

        trees = Parallel(n_jobs=self.n_jobs, backend='threading')(
            delayed(_grow_one_tree)(
                feature_matrix, label_array, self.nmin, self.minleaf, self.nfeat, tree_seed, False
            )
            for tree_seed in tree_seeds[:self.m]
        )

        self.trees_ = list(trees)
        self._vote_rng = np.random.default_rng(tree_seeds[self.m])

        if self.verbose:
            total_nodes = sum(len(tree.nodes) for tree in self.trees_)
            print(f"BaggedTreeClassifier.fit completed in {time.time() - fit_start_time:.4f}s. "
                  f"Trees: {len(self.trees_)}, total nodes: {total_nodes}")
        return self

    def predict(self, X):
        if not self.trees_: raise ValueError("Ensemble has not been fitted yet.")
        return classify_bag(X, self.trees_, random_state=self._vote_rng)

    def get_params(self, deep=True):
        return {
            'm': self.m,
            'nmin': self.nmin,
            'minleaf': self.minleaf,
            'nfeat': self.nfeat,
            'random_state': self.random_state,
            'n_jobs': self.n_jobs,
            'verbose': self.verbose
        }


def grow_bag(features, labels, nmin=2, minleaf=2, nfeat=None, m=10, random_state=None, n_jobs=1, verbose=False):
    """
    Grows `m` trees, each on its own bootstrap resample of (features, labels).
    `nfeat=None` lets every tree consider all columns at each node (plain
    bagging); pass a smaller `nfeat` for random-forest style column sampling.

    Returns:
        list of ClassificationTree: The trees in growth order.

    Raises:
        InvalidParameterError: m < 1, or any parameter `grow` rejects.
    """
    bag = BaggedTreeClassifier(
        m=m, nmin=nmin, minleaf=minleaf, nfeat=nfeat,
        random_state=random_state, n_jobs=n_jobs, verbose=verbose
    )
    return bag.fit(features, labels).trees_


def classify_bag(rows, trees, random_state=None):
    """
    Majority vote of `trees` for each row, in input order. Exact ties are
    broken 50/50 with a generator built from `random_state`.
    """
    if not trees:
        raise InvalidParameterError("classify_bag needs at least one tree.")
    rng = check_random_state(random_state)

    rows = as_feature_matrix(rows, name="rows")
    # votes[i, j] is the prediction of tree i for row j
    votes = np.vstack([tree.predict(rows) for tree in trees])

    return np.array([majority_vote(votes[:, j], rng) for j in range(votes.shape[1])], dtype=int)
