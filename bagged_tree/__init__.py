# bagged_tree/__init__.py

"""
Bagged Classification Tree Package
"""

from .tree import ClassificationTree, Node, grow, classify
from .bagging import BaggedTreeClassifier, grow_bag, classify_bag, bootstrap_sample
from .utils import InvalidParameterError, impurity, impurity_reduction
from .splitting import find_best_split

VERSION = "0.1.0"
