# BaggedTree/tests/test_harness.py
import time
import xgboost as xgb
import pandas as pd
import numpy as np
from bagged_tree.tree import ClassificationTree
from bagged_tree.bagging import BaggedTreeClassifier
from bagged_tree.metrics import classification_report
from tests.generated_datasets.dataset_generator_numerical import TARGET_COLUMN, to_arrays


def _format_metric(value):
    """Formats a float for printing, using scientific notation if it is very small."""
    if isinstance(value, (float, np.floating)):
        if 0 < abs(value) < 0.0001:
            return f"{value:.4e}"
        return f"{value:.6f}"
    return value


def evaluate_predictions(model, test_data, feature_columns):
    """
    Evaluates a fitted tree or ensemble on generated test rows.

    Returns:
        dict: precision, accuracy, recall, confusion matrix and size statistics.
    """
    X_test, y_test = to_arrays(test_data, feature_columns)
    if not X_test:
        return {"num_test_samples": 0}

    predicted = model.predict(X_test)
    metrics = classification_report(y_test, predicted)
    metrics["num_test_samples"] = len(test_data)
    metrics["share_predicted_positive"] = float(np.mean(predicted))

    trees = model.trees_ if isinstance(model, BaggedTreeClassifier) else [model]
    metrics["num_leaf_nodes"] = sum(len(tree.leaf_ids()) for tree in trees)
    metrics["max_depth_reached"] = max(tree.get_depth() for tree in trees)
    return metrics


def run_test_scenario(
    dataset_name,
    train_data,
    test_data,
    feature_columns,
    tree_params,
    m=None,
    verbose=True
):
    """
    Runs a full test scenario: grow a tree (or a bag of `m` trees) and evaluate it.

    Args:
        dataset_name (str): Name of the dataset/scenario.
        train_data (list of dict): Training rows.
        test_data (list of dict): Test rows.
        feature_columns (list of str): Feature column names.
        tree_params (dict): nmin / minleaf / nfeat / random_state.
        m (int, optional): Grow a BaggedTreeClassifier with this many trees.
        verbose (bool): If True, prints information during the run.

    Returns:
        dict: tree parameters, training time and evaluation metrics.
    """
    if verbose:
        print(f"--- Running Test Scenario: {dataset_name} ---")
        print(f"Tree Params: {tree_params}, m={m}")
        print(f"Training data size: {len(train_data)}, Test data size: {len(test_data)}")

    X_train, y_train = to_arrays(train_data, feature_columns)
    if m is None:
        model = ClassificationTree(**tree_params)
    else:
        model = BaggedTreeClassifier(m=m, **tree_params)

    start_time = time.time()
    model.fit(X_train, y_train)
    training_time = time.time() - start_time

    evaluation_results = evaluate_predictions(model, test_data, feature_columns)

    if verbose:
        print(f"Training completed in {training_time:.2f} seconds.")
        print("Evaluation Results:")
        for key, value in evaluation_results.items():
            print(f"  {key}: {_format_metric(value)}")
        print("--- Scenario End ---")

    return {
        "dataset_name": dataset_name,
        "tree_params": tree_params,
        "training_time_seconds": training_time,
        "evaluation": evaluation_results,
        "model": model,
    }


def run_xgboost_peer_test(
    dataset_name,
    train_data,
    test_data,
    feature_columns,
    xgboost_params=None,
    verbose=True
):
    """
    Runs a peer test scenario using an XGBoost classifier on the same rows.
    """
    if xgboost_params is None:
        xgboost_params = {
            'n_estimators': 50,
            'max_depth': 3,
            'learning_rate': 0.1,
            'subsample': 0.8,
            'random_state': 42
        }
    if verbose:
        print(f"--- Running XGBoost Peer Test Scenario: {dataset_name} ---")
        print(f"XGBoost Params: {xgboost_params}")

    train_df = pd.DataFrame(train_data)
    test_df = pd.DataFrame(test_data)

    model = xgb.XGBClassifier(**xgboost_params)
    start_time = time.time()
    model.fit(train_df[feature_columns], train_df[TARGET_COLUMN])
    training_time = time.time() - start_time

    predicted = model.predict(test_df[feature_columns])
    evaluation_results = classification_report(test_df[TARGET_COLUMN].to_numpy(), predicted)
    evaluation_results["num_test_samples"] = len(test_data)

    if verbose:
        print("XGBoost Evaluation Results:")
        for key, value in evaluation_results.items():
            print(f"  {key}: {_format_metric(value)}")
        print("--- XGBoost Scenario End ---")

    return {
        "dataset_name": f"{dataset_name}_XGBoost",
        "tree_params": xgboost_params,
        "training_time_seconds": training_time,
        "evaluation": evaluation_results,
    }
