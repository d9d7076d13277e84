# features.py
"""
Feature matrices keyed by document id.

Every frame produced here is indexed by doc_id; joins happen on that index with
``validate="one_to_one"`` so rows can never drift out of alignment.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.sparse import csr_matrix


def document_term_matrix(
    tokens: pd.DataFrame,
    vocabulary: Sequence[str],
    doc_ids: Iterable,
    id_col: str = "doc_id",
) -> pd.DataFrame:
    """
    Count matrix (documents x vocabulary terms), densified.

    Args:
        tokens: Long token table (id_col, word)
        vocabulary: Terms to keep, in column order
        doc_ids: All document ids; documents without vocabulary terms get zero rows
        id_col: Document identifier column in tokens

    Returns:
        DataFrame indexed by id_col with one integer column per term
    """
    vocabulary = list(dict.fromkeys(vocabulary))
    if not vocabulary:
        raise ValueError("empty vocabulary: no words survived filtering")

    doc_index = pd.Index(list(doc_ids), name=id_col)
    if doc_index.has_duplicates:
        raise ValueError("doc_ids must be unique")

    term_pos = {w: j for j, w in enumerate(vocabulary)}
    sub = tokens[tokens["word"].isin(vocabulary)]
    rows = doc_index.get_indexer(sub[id_col])
    keep = rows >= 0
    cols = sub["word"].map(term_pos).to_numpy()[keep]
    rows = rows[keep]

    X = csr_matrix(
        (np.ones(len(rows), dtype=np.int64), (rows, cols)),
        shape=(len(doc_index), len(vocabulary)),
    )
    X.sum_duplicates()
    return pd.DataFrame(X.toarray(), index=doc_index, columns=vocabulary)


def covariate_features(
    records: pd.DataFrame,
    categorical: Optional[List[str]] = None,
    numeric: Optional[List[str]] = None,
    id_col: str = "doc_id",
) -> pd.DataFrame:
    """One-hot categorical covariates (``<col>_<level>``) plus numeric columns."""
    frame = records.set_index(id_col)
    parts = []
    if categorical:
        dummies = pd.get_dummies(frame[categorical].astype(str), prefix=categorical)
        parts.append(dummies.astype(int))
    if numeric:
        parts.append(frame[numeric].apply(pd.to_numeric, errors="raise").fillna(0))
    if not parts:
        return pd.DataFrame(index=frame.index)
    return pd.concat(parts, axis=1)


def merge_features(*frames: pd.DataFrame) -> pd.DataFrame:
    """Join doc_id-indexed frames; documents missing from a frame get zeros."""
    frames = [f for f in frames if f is not None]
    if not frames:
        raise ValueError("merge_features needs at least one frame")

    out = frames[0]
    for other in frames[1:]:
        clash = out.columns.intersection(other.columns)
        if len(clash):
            raise ValueError(f"duplicate feature columns: {list(clash)[:5]}")
        out = pd.merge(
            out, other, left_index=True, right_index=True, how="left",
            validate="one_to_one",
        )
        out[other.columns] = out[other.columns].fillna(0)
    return out


def attach_labels(
    features: pd.DataFrame,
    records: pd.DataFrame,
    label_col: str,
    id_col: str = "doc_id",
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Join the class label onto each feature row by document id.

    Returns:
        (X, y) with identical doc_id index
    """
    # vocabulary words may equal the label column name ("status")
    tmp = "__label__"
    labels = records.set_index(id_col)[label_col].rename(tmp).to_frame()
    joined = pd.merge(
        features, labels, left_index=True, right_index=True, how="inner",
        validate="one_to_one",
    )
    y = joined.pop(tmp).rename(label_col)
    return joined, y
