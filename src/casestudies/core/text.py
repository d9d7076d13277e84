# text.py
"""Tokenisation into a long (doc_id, word) table."""
import re
from typing import FrozenSet, Iterable, List, Optional

import pandas as pd
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

TOKEN_RE = re.compile(r"[a-z0-9']+")
NUMERIC_RE = re.compile(r"^[0-9']+$")


def tokenize(text: str) -> List[str]:
    words = (w.strip("'") for w in TOKEN_RE.findall(str(text).lower()))
    return [w for w in words if w]


def build_stop_words(extra: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    return frozenset(ENGLISH_STOP_WORDS) | frozenset(w.lower() for w in (extra or []))


def tokenize_documents(
    df: pd.DataFrame,
    text_col: str,
    stop_words: Optional[FrozenSet[str]] = None,
    id_col: str = "doc_id",
) -> pd.DataFrame:
    """
    One row per token occurrence.

    Args:
        df: Record table
        text_col: Column holding the free text
        stop_words: Words to drop (see build_stop_words)
        id_col: Document identifier column

    Returns:
        DataFrame with columns [id_col, "word"]
    """
    stop_words = stop_words if stop_words is not None else build_stop_words()

    rows = []
    for doc_id, text in zip(df[id_col], df[text_col]):
        for w in tokenize(text):
            if w in stop_words or NUMERIC_RE.match(w):
                continue
            rows.append((doc_id, w))

    tokens = pd.DataFrame(rows, columns=[id_col, "word"])
    tokens[id_col] = tokens[id_col].astype(df[id_col].dtype)
    return tokens


def top_words(tokens: pd.DataFrame, n: int = 20) -> pd.DataFrame:
    counts = tokens["word"].value_counts()
    return counts.head(n).rename_axis("word").reset_index(name="count")
