#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Word statistics between two classes

- Word counts per class label
- Log base-2 count ratio per word (class polarity)
- Selection of the most polarizing words as a reduced vocabulary

A word seen in only one class gets an infinite ratio. That value is kept as is
and reported with a warning; callers decide whether to drop it.
"""

import numpy as np
import pandas as pd


def word_counts_by_class(
    tokens: pd.DataFrame,
    records: pd.DataFrame,
    label_col: str,
    id_col: str = "doc_id",
) -> pd.DataFrame:
    """
    Count words per class label.

    Args:
        tokens: Long token table (id_col, word)
        records: Record table holding id_col and label_col
        label_col: Class label column
        id_col: Document identifier

    Returns:
        DataFrame with columns [word, class, count]
    """
    labelled = tokens.merge(
        records[[id_col, label_col]], on=id_col, how="inner", validate="many_to_one"
    )
    counts = (
        labelled.groupby(["word", label_col], sort=True)
        .size()
        .reset_index(name="count")
        .rename(columns={label_col: "class"})
    )
    return counts


def log_odds_table(counts: pd.DataFrame, class_a: str, class_b: str) -> pd.DataFrame:
    """
    Per-word log2(count_a / count_b).

    Missing counts are filled with 0 before dividing, so a word absent from one
    class ends up with +inf or -inf.

    Args:
        counts: Output of word_counts_by_class
        class_a: Numerator class
        class_b: Denominator class

    Returns:
        DataFrame [word, count_<a>, count_<b>, total, log_ratio]
    """
    col_a, col_b = f"count_{class_a}", f"count_{class_b}"
    wide = counts.pivot_table(
        index="word", columns="class", values="count", aggfunc="sum", fill_value=0
    )
    table = pd.DataFrame(index=wide.index)
    table[col_a] = wide[class_a] if class_a in wide.columns else 0
    table[col_b] = wide[class_b] if class_b in wide.columns else 0
    table = table.astype(int)
    table["total"] = table[col_a] + table[col_b]
    table = table[table["total"] > 0]

    with np.errstate(divide="ignore", invalid="ignore"):
        table["log_ratio"] = np.log2(
            table[col_a].to_numpy(dtype=float) / table[col_b].to_numpy(dtype=float)
        )

    n_bad = int((~np.isfinite(table["log_ratio"])).sum())
    if n_bad:
        print(
            f"[warn] {n_bad} words occur in only one of "
            f"'{class_a}'/'{class_b}'; their log ratio is not finite"
        )
    return table.reset_index()


def polarizing_words(
    table: pd.DataFrame,
    min_total: int = 50,
    n_words: int = 100,
    finite_only: bool = False,
) -> pd.DataFrame:
    """Words with total >= min_total, strongest |log_ratio| first."""
    kept = table[table["total"] >= min_total].copy()
    if finite_only:
        kept = kept[np.isfinite(kept["log_ratio"])]
    kept["abs_ratio"] = kept["log_ratio"].abs()
    kept = kept.sort_values(
        ["abs_ratio", "total", "word"], ascending=[False, False, True]
    )
    return kept.drop(columns="abs_ratio").head(n_words).reset_index(drop=True)


def top_words_by_class(counts: pd.DataFrame, n: int = 20) -> pd.DataFrame:
    ordered = counts.sort_values(["class", "count", "word"], ascending=[True, False, True])
    return ordered.groupby("class", sort=True).head(n).reset_index(drop=True)
