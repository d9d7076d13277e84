#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Load a case-study CSV (IMDB reviews or Kiva loans):
- Detect pipe / comma delimiter from the header line
- Assign a synthetic doc_id (1..n), one per original record
- Strip markup tags from free text (Kiva narratives carry <br /> etc.)
- Describe class balance and label share per covariate level
"""
from __future__ import annotations
import json, re
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

TAG_RE = re.compile(r"<[^>]+>")
WS_RE = re.compile(r"\s+")


def detect_delimiter(path: str | Path) -> str:
    with open(path, "r", encoding="utf-8") as f:
        header = f.readline()
    return "|" if "|" in header else ","


def strip_markup(text: str) -> str:
    s = TAG_RE.sub(" ", str(text))
    return WS_RE.sub(" ", s).strip()


def load_records(
    path: str | Path,
    text_col: str,
    label_col: str,
    sep: Optional[str] = None,
    keep_cols: Optional[List[str]] = None,
    id_col: str = "doc_id",
    markup: bool = False,
) -> pd.DataFrame:
    """
    Read a delimited file into a record table.

    Args:
        path: CSV / pipe-delimited file
        text_col: Free-text column
        label_col: Class label column
        sep: Delimiter; detected from the header when None
        keep_cols: Extra columns (covariates) to keep
        id_col: Name of the synthetic identifier column
        markup: Strip <...> tags from the text column

    Returns:
        DataFrame with id_col, text_col, label_col and keep_cols
    """
    path = Path(path)
    if sep is None:
        sep = detect_delimiter(path)

    df = pd.read_csv(path, sep=sep)
    wanted = [text_col, label_col] + list(keep_cols or [])
    missing = [c for c in wanted if c not in df.columns]
    if missing:
        raise KeyError(f"{path.name} is missing columns: {missing}")

    df = df[wanted].copy()
    df[text_col] = df[text_col].fillna("").astype(str)
    df[label_col] = df[label_col].astype(str).str.strip()
    if markup:
        df[text_col] = df[text_col].map(strip_markup)

    df.insert(0, id_col, range(1, len(df) + 1))
    return df.reset_index(drop=True)


def describe_records(
    df: pd.DataFrame, label_col: str, by: Optional[List[str]] = None
) -> Dict[str, pd.DataFrame]:
    """Class balance plus, per covariate, the label share of each level."""
    out = {
        "class_balance": df[label_col]
        .value_counts()
        .rename_axis(label_col)
        .reset_index(name="n")
    }
    out["class_balance"]["share"] = out["class_balance"]["n"] / len(df)
    for col in by or []:
        tab = pd.crosstab(df[col], df[label_col], normalize="index")
        tab["n"] = df[col].value_counts()
        out[col] = tab.sort_values("n", ascending=False)
    return out


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Load and summarise a case-study file")
    parser.add_argument("--src", required=True, help="Path to the delimited data file")
    parser.add_argument("--text-col", required=True)
    parser.add_argument("--label-col", required=True)
    parser.add_argument("--strip-markup", action="store_true")

    args = parser.parse_args()

    df = load_records(
        args.src, args.text_col, args.label_col, markup=args.strip_markup
    )
    summary = describe_records(df, args.label_col)
    meta = {
        "src": str(args.src),
        "rows": int(len(df)),
        "class_balance": df[args.label_col].value_counts().to_dict(),
    }
    print(json.dumps(meta, ensure_ascii=False, indent=2))
    print(summary["class_balance"])


if __name__ == "__main__":
    main()
