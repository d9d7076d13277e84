#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
LDA topic features

Fits a gensim LdaModel over the full (stop-word filtered) vocabulary and turns
it into three tables:
  topic_terms.csv   topic, term, weight        (top terms per topic)
  doc_topics.csv    doc_id, topic, proportion  (per-document topic mixture)
  topic_names.csv   topic, name                (display name from top terms)

Fitting is slow, so results are cached on disk next to a manifest.json holding
a SHA-256 of the token table, the document ids and the fit parameters. A cache
whose key does not match the current input is refitted and overwritten.

Tables produced by an earlier topic-modelling run can be supplied instead with
load_topic_tables(); such a directory has no manifest and is never written to.
"""

import hashlib
import json
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, NamedTuple, Optional

import numpy as np
import pandas as pd
from gensim.corpora import Dictionary
from gensim.models import LdaModel

TABLE_FILES = {
    "topic_terms": "topic_terms.csv",
    "doc_topics": "doc_topics.csv",
    "topic_names": "topic_names.csv",
}
MANIFEST = "manifest.json"


class TopicModelResult(NamedTuple):
    topic_terms: pd.DataFrame
    doc_topics: pd.DataFrame
    topic_names: pd.DataFrame


def fit_topic_model(
    tokens: pd.DataFrame,
    n_topics: int = 10,
    passes: int = 10,
    random_state: int = 42,
    n_terms: int = 10,
    id_col: str = "doc_id",
    doc_ids: Optional[Iterable] = None,
) -> TopicModelResult:
    """
    Fit LDA on a long token table.

    Args:
        tokens: Long token table (id_col, word)
        n_topics: Number of latent topics
        passes: Passes over the corpus during training
        random_state: Seed for gensim
        n_terms: Top terms kept per topic
        id_col: Document identifier column
        doc_ids: Every document to score; ids without tokens get the model's
            prior topic mixture. Defaults to the ids present in tokens.

    Returns:
        TopicModelResult with topics numbered from 1
    """
    docs = tokens.groupby(id_col, sort=True)["word"].apply(list)
    if doc_ids is not None:
        docs = docs.reindex(pd.Index(list(doc_ids), name=id_col))
        docs = docs.map(lambda d: d if isinstance(d, list) else [])
    dictionary = Dictionary(docs.tolist())
    corpus = [dictionary.doc2bow(doc) for doc in docs]

    print(f"[topics] fitting LDA: docs={len(corpus)}, vocab={len(dictionary)}, k={n_topics}")
    lda = LdaModel(
        corpus=corpus,
        id2word=dictionary,
        num_topics=n_topics,
        random_state=random_state,
        chunksize=2000,
        passes=passes,
        alpha="auto",
    )

    term_rows, name_rows = [], []
    for t in range(n_topics):
        top = lda.show_topic(t, topn=n_terms)
        term_rows.extend((t + 1, term, float(w)) for term, w in top)
        name_rows.append((t + 1, " / ".join(term for term, _ in top[:3])))

    doc_rows = []
    for doc_id, bow in zip(docs.index, corpus):
        # an empty bow yields the normalised alpha prior
        for t, prob in lda.get_document_topics(bow, minimum_probability=0.0):
            doc_rows.append((doc_id, t + 1, float(prob)))

    return TopicModelResult(
        topic_terms=pd.DataFrame(term_rows, columns=["topic", "term", "weight"]),
        doc_topics=pd.DataFrame(doc_rows, columns=[id_col, "topic", "proportion"]),
        topic_names=pd.DataFrame(name_rows, columns=["topic", "name"]),
    )


def topic_features(
    result: TopicModelResult,
    id_col: str = "doc_id",
    doc_ids: Optional[Iterable] = None,
) -> pd.DataFrame:
    """
    Wide per-document proportions: one ``topic_<k>`` column per topic.

    When doc_ids is given, documents missing from the table get a uniform
    1/k row so every row stays a distribution over topics.
    """
    wide = result.doc_topics.pivot_table(
        index=id_col, columns="topic", values="proportion", aggfunc="sum", fill_value=0.0
    )
    wide.columns = [f"topic_{int(t)}" for t in wide.columns]

    if doc_ids is not None:
        index = pd.Index(list(doc_ids), name=id_col)
        missing = index.difference(wide.index)
        if len(missing):
            print(f"[warn] {len(missing)} documents have no topic mixture; using uniform 1/k")
        wide = wide.reindex(index).fillna(1.0 / wide.shape[1])
    return wide


def load_topic_tables(topic_dir, id_col: str = "doc_id") -> TopicModelResult:
    """Read the three tables of an earlier topic-modelling run as given."""
    topic_dir = Path(topic_dir)
    missing = [f for f in TABLE_FILES.values() if not (topic_dir / f).exists()]
    if missing:
        raise FileNotFoundError(f"{topic_dir} is missing topic tables: {missing}")

    result = TopicModelResult(
        **{name: pd.read_csv(topic_dir / f) for name, f in TABLE_FILES.items()}
    )
    expected = {
        "topic_terms": {"topic", "term", "weight"},
        "doc_topics": {id_col, "topic", "proportion"},
        "topic_names": {"topic", "name"},
    }
    for name, cols in expected.items():
        absent = cols - set(getattr(result, name).columns)
        if absent:
            raise KeyError(f"{TABLE_FILES[name]} is missing columns: {sorted(absent)}")
    print(f"[cache] using supplied topic tables from {topic_dir}")
    return result


def cache_key(tokens: pd.DataFrame, params: Dict[str, Any], doc_ids: Optional[Iterable] = None) -> str:
    h = hashlib.sha256()
    h.update(pd.util.hash_pandas_object(tokens, index=False).to_numpy().tobytes())
    if doc_ids is not None:
        h.update(pd.util.hash_array(np.asarray(list(doc_ids))).tobytes())
    h.update(json.dumps(params, sort_keys=True, default=str).encode("utf-8"))
    return h.hexdigest()


class TopicCache:
    """Directory holding the three topic tables and their manifest."""

    def __init__(self, cache_dir):
        self.cache_dir = Path(cache_dir)

    def _path(self, name: str) -> Path:
        return self.cache_dir / TABLE_FILES[name]

    def stored_key(self) -> Optional[str]:
        manifest = self.cache_dir / MANIFEST
        if not manifest.exists():
            return None
        return json.loads(manifest.read_text(encoding="utf-8")).get("key")

    def holds_unmanaged_tables(self) -> bool:
        """Topic CSVs present without a manifest, i.e. not written by this cache."""
        if (self.cache_dir / MANIFEST).exists():
            return False
        return any(self._path(n).exists() for n in TABLE_FILES)

    def load(self, key: str) -> Optional[TopicModelResult]:
        if self.stored_key() != key:
            return None
        if not all(self._path(n).exists() for n in TABLE_FILES):
            return None
        return TopicModelResult(
            topic_terms=pd.read_csv(self._path("topic_terms")),
            doc_topics=pd.read_csv(self._path("doc_topics")),
            topic_names=pd.read_csv(self._path("topic_names")),
        )

    def save(self, key: str, result: TopicModelResult, params: Dict[str, Any]) -> None:
        if self.holds_unmanaged_tables():
            raise FileExistsError(
                f"{self.cache_dir} holds topic tables without {MANIFEST}; "
                "pass them as supplied topic tables or choose another cache directory"
            )
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        for name in TABLE_FILES:
            getattr(result, name).to_csv(self._path(name), index=False)
        manifest = {"key": key, "params": params}
        (self.cache_dir / MANIFEST).write_text(
            json.dumps(manifest, indent=2, default=str), encoding="utf-8"
        )

    def clear(self) -> None:
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)


def get_topic_model(
    tokens: pd.DataFrame,
    cache: Optional[TopicCache] = None,
    force: bool = False,
    n_topics: int = 10,
    passes: int = 10,
    random_state: int = 42,
    n_terms: int = 10,
    id_col: str = "doc_id",
    doc_ids: Optional[Iterable] = None,
) -> TopicModelResult:
    """Read topics from cache when the key matches, otherwise fit and store them."""
    params = {
        "n_topics": n_topics,
        "passes": passes,
        "random_state": random_state,
        "n_terms": n_terms,
        "id_col": id_col,
    }
    doc_ids = list(doc_ids) if doc_ids is not None else None
    key = cache_key(tokens[[id_col, "word"]], params, doc_ids)

    if cache is not None and cache.holds_unmanaged_tables():
        # refuse before the slow fit, not after it
        raise FileExistsError(
            f"{cache.cache_dir} holds topic tables without {MANIFEST}; "
            "pass them as supplied topic tables or choose another cache directory"
        )

    if cache is not None and not force:
        cached = cache.load(key)
        if cached is not None:
            print(f"[cache] topic tables loaded from {cache.cache_dir}")
            return cached
        print(f"[cache] no valid topic cache in {cache.cache_dir}; refitting")

    result = fit_topic_model(
        tokens,
        n_topics=n_topics,
        passes=passes,
        random_state=random_state,
        n_terms=n_terms,
        id_col=id_col,
        doc_ids=doc_ids,
    )
    if cache is not None:
        cache.save(key, result, params)
        print(f"[cache] topic tables written to {cache.cache_dir}")
    return result
