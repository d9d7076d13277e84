# splitting.py
from typing import List, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold, train_test_split


def train_test_split_frame(
    X: pd.DataFrame,
    y: pd.Series,
    test_size: float = 0.2,
    random_state: int = 42,
    stratify: bool = True,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """
    Seeded train/test split that keeps the doc_id index on every part.

    Args:
        X: Feature matrix indexed by doc_id
        y: Labels with the same index as X
        test_size: Fraction of rows held out, strictly between 0 and 1
        random_state: Seed for the shuffle
        stratify: Preserve class proportions in both parts

    Returns:
        X_train, X_test, y_train, y_test
    """
    if not 0.0 < test_size < 1.0:
        raise ValueError("test_size must be between 0 and 1")
    if not X.index.equals(y.index):
        raise ValueError("X and y must share the same doc_id index")

    # sklearn refuses to stratify when a class has a single member
    strat = y if stratify and y.value_counts().min() >= 2 else None
    if stratify and strat is None:
        print("[warn] a class has fewer than 2 rows; splitting without stratification")

    return train_test_split(
        X, y, test_size=test_size, random_state=random_state, stratify=strat
    )


def stratified_kfold_indices(y: List, k: int, seed: int = 42) -> List[Tuple[List[int], List[int]]]:
    """
    Seeded stratified k-fold positions for cross-validated accuracy.

    Every position is validated exactly once and every validation fold holds
    rows of each class, so k may not exceed the smallest class size.
    """
    if k < 2:
        raise ValueError("k must be at least 2")
    smallest = int(pd.Series(y).value_counts().min()) if len(y) else 0
    if k > smallest:
        raise ValueError(f"k={k} exceeds the smallest class size ({smallest})")

    skf = StratifiedKFold(n_splits=k, shuffle=True, random_state=seed)
    return [
        (train_idx.tolist(), val_idx.tolist())
        for train_idx, val_idx in skf.split(np.zeros(len(y)), y)
    ]
