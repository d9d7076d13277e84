#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Case Study Pipeline for IMDB review sentiment and Kiva loan default

One linear pass per case study:
1. Data loading (and markup stripping for Kiva)
2. Tokenisation and word-frequency description
3. Log-odds word polarity and polarizing vocabulary
4. Document-term matrix, topic proportions and covariates
5. Seeded train/test split and classifier fit
6. Confusion-matrix metrics on the test partition
7. Charts, results JSON and a Markdown report
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..config import get_case_study_config
from ..prepare_dataset import load_records, describe_records
from ..core.text import build_stop_words, tokenize_documents, top_words
from ..core.word_stats import (
    word_counts_by_class,
    log_odds_table,
    polarizing_words,
    top_words_by_class,
)
from ..core.features import (
    document_term_matrix,
    covariate_features,
    merge_features,
    attach_labels,
)
from ..core.splitting import train_test_split_frame, stratified_kfold_indices
from ..core.metrics import (
    confusion_matrix,
    metrics_from_confusion,
    accuracy_score,
    classification_report,
)
from ..models.models_registry import get_classifier_factory, resolve_classifier_name
from ..models.topic_model import (
    TopicCache,
    get_topic_model,
    load_topic_tables,
    topic_features,
)
from .visualization import (
    plot_top_words_by_class,
    plot_log_odds,
    plot_topic_terms,
    plot_confusion_matrix,
    export_summary_table,
)


def _banner(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def _json_safe(obj):
    """Plain-Python copy of obj with nan/inf replaced by None (JSON null)."""
    if isinstance(obj, dict):
        return {str(k): _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return _json_safe(obj.tolist())
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float) and not np.isfinite(obj):
        return None
    return obj


class CaseStudyPipeline:
    """
    Runs one case study end to end.

    Every stage reads its parameters from the config dict passed in; nothing is
    shared between pipeline instances.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the pipeline.

        Args:
            config: Resolved config, see casestudies.config.get_case_study_config
        """
        self.cfg = dict(config)
        if self.cfg["positive_label"] not in (self.cfg["class_a"], self.cfg["class_b"]):
            raise ValueError("positive_label must be class_a or class_b")

        self.id_col = self.cfg["id_col"]
        self.results_dir = Path(self.cfg["results_dir"]) / self.cfg["name"]
        self.labels = [self.cfg["class_a"], self.cfg["class_b"]]

        self.records: Optional[pd.DataFrame] = None
        self.tokens: Optional[pd.DataFrame] = None
        self.counts: Optional[pd.DataFrame] = None
        self.log_odds: Optional[pd.DataFrame] = None
        self.vocabulary: Optional[pd.DataFrame] = None
        self.topics = None
        self.X: Optional[pd.DataFrame] = None
        self.y: Optional[pd.Series] = None
        self.model = None
        self.results: Dict[str, Any] = {}
        self.tables: Dict[str, pd.DataFrame] = {}
        self.figures: Dict[str, Path] = {}

    def load_data(self):
        """Load the record table and keep rows of the two compared classes."""
        _banner("STEP 1: Loading Data")
        cfg = self.cfg
        keep = list(
            dict.fromkeys(
                cfg["covariates_categorical"] + cfg["covariates_numeric"] + cfg["describe_by"]
            )
        )
        df = load_records(
            cfg["data_path"],
            text_col=cfg["text_col"],
            label_col=cfg["label_col"],
            sep=cfg["sep"],
            keep_cols=keep,
            id_col=self.id_col,
            markup=cfg["strip_markup"],
        )

        in_scope = df[cfg["label_col"]].isin(self.labels)
        if not in_scope.all():
            print(f"[warn] dropping {int((~in_scope).sum())} rows with labels outside {self.labels}")
            df = df[in_scope].reset_index(drop=True)

        self.records = df
        summary = describe_records(df, cfg["label_col"], by=cfg["describe_by"])
        self.tables.update({f"describe_{k}": v for k, v in summary.items()})
        self.results["n_records"] = int(len(df))
        self.results["class_balance"] = {
            str(k): int(v) for k, v in df[cfg["label_col"]].value_counts().items()
        }

        print(f"[data] rows={len(df)}, balance={self.results['class_balance']}")
        print("\nSample data:")
        print(df.head())
        return df

    def describe_words(self):
        """Tokenise and count words overall and per class."""
        _banner("STEP 2: Tokenising and Word Frequencies")
        cfg = self.cfg
        stop_words = build_stop_words(cfg["extra_stop_words"])
        self.tokens = tokenize_documents(
            self.records, cfg["text_col"], stop_words, id_col=self.id_col
        )
        self.counts = word_counts_by_class(
            self.tokens, self.records, cfg["label_col"], id_col=self.id_col
        )
        self.tables["top_words"] = top_words(self.tokens, cfg["n_top_words"])
        self.tables["top_words_by_class"] = top_words_by_class(self.counts, cfg["n_top_words"])

        self.results["n_tokens"] = int(len(self.tokens))
        self.results["n_distinct_words"] = int(self.tokens["word"].nunique())
        print(
            f"[info] tokens={self.results['n_tokens']}, "
            f"distinct words={self.results['n_distinct_words']}"
        )
        print(self.tables["top_words"].head(10))

    def select_vocabulary(self):
        """Log-odds table and the most polarizing words."""
        _banner("STEP 3: Log-Odds Word Polarity")
        cfg = self.cfg
        self.log_odds = log_odds_table(self.counts, cfg["class_a"], cfg["class_b"])
        self.vocabulary = polarizing_words(
            self.log_odds,
            min_total=cfg["min_total_count"],
            n_words=cfg["n_polarizing_words"],
            finite_only=cfg["finite_only"],
        )
        self.tables["polarizing_words"] = self.vocabulary
        self.results["n_vocabulary"] = int(len(self.vocabulary))
        self.results["n_nonfinite_ratio"] = int(
            (~np.isfinite(self.log_odds["log_ratio"])).sum()
        )
        print(f"[info] polarizing vocabulary: {len(self.vocabulary)} words "
              f"(total >= {cfg['min_total_count']})")
        print(self.vocabulary.head(10))
        return self.vocabulary

    def build_features(self):
        """Document-term matrix plus optional topic and covariate columns."""
        _banner("STEP 4: Building Features")
        cfg = self.cfg
        frames = [
            document_term_matrix(
                self.tokens,
                self.vocabulary["word"].tolist(),
                self.records[self.id_col],
                id_col=self.id_col,
            )
        ]

        if cfg["use_topics"]:
            doc_ids = self.records[self.id_col].tolist()
            if cfg["topic_files"]:
                self.topics = load_topic_tables(cfg["topic_files"], id_col=self.id_col)
            else:
                self.topics = get_topic_model(
                    self.tokens,
                    cache=TopicCache(cfg["topic_cache_dir"]),
                    force=cfg["force_topics"],
                    n_topics=cfg["n_topics"],
                    passes=cfg["topic_passes"],
                    random_state=cfg["random_state"],
                    n_terms=cfg["n_topic_terms"],
                    id_col=self.id_col,
                    doc_ids=doc_ids,
                )
            frames.append(topic_features(self.topics, id_col=self.id_col, doc_ids=doc_ids))
            self.tables["topic_names"] = self.topics.topic_names

        if cfg["covariates_categorical"] or cfg["covariates_numeric"]:
            frames.append(
                covariate_features(
                    self.records,
                    cfg["covariates_categorical"],
                    cfg["covariates_numeric"],
                    id_col=self.id_col,
                )
            )

        features = merge_features(*frames)
        self.X, self.y = attach_labels(
            features, self.records, cfg["label_col"], id_col=self.id_col
        )
        self.results["feature_shape"] = list(self.X.shape)
        print(f"[info] feature matrix: {self.X.shape[0]} docs x {self.X.shape[1]} features")
        return self.X, self.y

    def _classifier_params(self) -> Dict[str, Any]:
        params = dict(self.cfg["classifier_params"])
        if resolve_classifier_name(self.cfg["classifier"]) == "decision_tree":
            params.setdefault("random_state", self.cfg["random_state"])
        return params

    def train_and_evaluate(self):
        """Split, fit the classifier and compute test-set metrics."""
        _banner("STEP 5: Training and Evaluation")
        cfg = self.cfg
        X_train, X_test, y_train, y_test = train_test_split_frame(
            self.X,
            self.y,
            test_size=cfg["test_size"],
            random_state=cfg["random_state"],
            stratify=cfg["stratify"],
        )
        print(f"Data split: {len(X_train)} train, {len(X_test)} test")

        factory = get_classifier_factory(cfg["classifier"])
        self.model = factory(self._classifier_params())
        self.model.fit(X_train, y_train)
        y_pred = self.model.predict(X_test)

        cm = confusion_matrix(y_test.to_numpy(), y_pred, self.labels)
        test_metrics = metrics_from_confusion(cm, self.labels, cfg["positive_label"])
        train_acc = accuracy_score(y_train.to_numpy(), self.model.predict(X_train))

        self.results.update(
            {
                "classifier": cfg["classifier"],
                "train_size": int(len(X_train)),
                "test_size": int(len(X_test)),
                "confusion_matrix": cm.tolist(),
                "confusion_labels": self.labels,
                "test_metrics": test_metrics,
                "train_accuracy": train_acc,
                "classification_report": classification_report(
                    y_test.to_numpy(), y_pred, labels=self.labels
                ),
            }
        )
        self.tables["feature_importances"] = self.model.feature_importances(15)
        if hasattr(self.model, "describe"):
            self.results["tree_rules"] = self.model.describe()

        print("\nConfusion matrix (rows actual, columns predicted):")
        print(pd.DataFrame(cm, index=self.labels, columns=self.labels))
        print(f"\nTest Set Results (positive = {cfg['positive_label']}):")
        for k in ("accuracy", "precision", "recall", "f1", "sensitivity", "specificity"):
            print(f"  {k:<12} {test_metrics[k]:.4f}")
        print(f"  train accuracy {train_acc:.4f}")
        return test_metrics

    def cross_validate(self):
        """k-fold accuracy estimate on the full feature matrix."""
        k = int(self.cfg["cv_folds"])
        _banner(f"STEP 6: {k}-Fold Cross-Validation")
        factory = get_classifier_factory(self.cfg["classifier"])
        params = self._classifier_params()
        scores = []
        folds = stratified_kfold_indices(self.y.tolist(), k, self.cfg["random_state"])
        for fi, (tr_idx, va_idx) in enumerate(folds, 1):
            est = factory(params)
            est.fit(self.X.iloc[tr_idx], self.y.iloc[tr_idx])
            acc = accuracy_score(self.y.iloc[va_idx].to_numpy(), est.predict(self.X.iloc[va_idx]))
            scores.append(acc)
            print(f"  Fold {fi}/{k}: accuracy={acc:.4f}")
        self.results["cv_accuracy"] = scores
        self.results["cv_accuracy_mean"] = float(np.mean(scores))
        self.results["cv_accuracy_std"] = float(np.std(scores))
        print(f"Mean CV accuracy: {np.mean(scores):.4f} ± {np.std(scores):.4f}")
        return scores

    def create_visualizations(self):
        _banner("STEP 7: Creating Visualizations")
        self.results_dir.mkdir(parents=True, exist_ok=True)
        cfg = self.cfg
        figs = {
            "top_words_by_class": plot_top_words_by_class(
                self.tables["top_words_by_class"], self.results_dir
            ),
            "log_odds": plot_log_odds(
                self.log_odds, cfg["class_a"], cfg["class_b"], self.results_dir
            ),
            "confusion_matrix": plot_confusion_matrix(
                np.array(self.results["confusion_matrix"]),
                self.labels,
                self.results_dir,
                title=f"{cfg['name']} {cfg['classifier']}",
            ),
        }
        if self.topics is not None:
            figs["topic_terms"] = plot_topic_terms(
                self.topics.topic_terms, self.topics.topic_names, self.results_dir
            )
        self.figures = {k: v for k, v in figs.items() if v is not None}
        print(f"[plots] saved {len(self.figures)} charts into {self.results_dir}")

    def save_results(self):
        """Results JSON, metric tables and the Markdown report."""
        _banner("STEP 8: Saving Results")
        self.results_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        results_path = self.results_dir / f"case_study_results_{stamp}.json"
        payload = _json_safe({"config": self.cfg, "results": self.results})
        with open(results_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False, allow_nan=False, default=str)
        print(f"Results saved to: {results_path}")

        export_summary_table(self.results["test_metrics"], self.results_dir)
        self.log_odds.to_csv(self.results_dir / "log_odds.csv", index=False)

        report_path = self.results_dir / "report.md"
        report_path.write_text(self.render_report(), encoding="utf-8")
        print(f"Report written to: {report_path}")
        return report_path

    def render_report(self) -> str:
        cfg = self.cfg
        m = self.results["test_metrics"]
        lines = [
            f"# Case study: {cfg['name']}",
            "",
            f"Source: `{cfg['data_path']}`, {self.results['n_records']} records, "
            f"label `{cfg['label_col']}`.",
            "",
            "## Class balance",
            "",
            self.tables["describe_class_balance"].to_markdown(index=False, floatfmt=".3f"),
            "",
        ]
        for col in cfg["describe_by"]:
            lines += [f"## Label share by {col}", "",
                      self.tables[f"describe_{col}"].head(15).to_markdown(floatfmt=".3f"), ""]

        lines += [
            "## Most frequent words per class",
            "",
            self.tables["top_words_by_class"].to_markdown(index=False),
            "",
            f"## Most polarizing words (log2 {cfg['class_a']} / {cfg['class_b']})",
            "",
            self.vocabulary.head(25).to_markdown(index=False, floatfmt=".3f"),
            "",
        ]
        if self.results["n_nonfinite_ratio"]:
            lines += [
                f"{self.results['n_nonfinite_ratio']} words occur in only one class; "
                "their log ratio is infinite and was kept as such.",
                "",
            ]
        if self.topics is not None:
            lines += ["## Topics", "", self.topics.topic_names.to_markdown(index=False), ""]

        cm = pd.DataFrame(
            self.results["confusion_matrix"], index=self.labels, columns=self.labels
        )
        lines += [
            f"## Classifier: {cfg['classifier']}",
            "",
            f"Train/test: {self.results['train_size']} / {self.results['test_size']} "
            f"(seed {cfg['random_state']}).",
            "",
            "Confusion matrix (rows actual, columns predicted):",
            "",
            cm.to_markdown(),
            "",
        ]
        for k in ("accuracy", "precision", "recall", "f1", "sensitivity", "specificity", "kappa"):
            lines.append(f"- {k}: {m[k]:.4f}")
        lines.append("")
        if "cv_accuracy_mean" in self.results:
            lines += [
                f"Cross-validated accuracy: {self.results['cv_accuracy_mean']:.4f} "
                f"± {self.results['cv_accuracy_std']:.4f}",
                "",
            ]
        lines += [
            "## Most important features",
            "",
            self.tables["feature_importances"].to_markdown(index=False, floatfmt=".4f"),
            "",
        ]
        if "tree_rules" in self.results:
            lines += ["## Tree rules", "", "```", self.results["tree_rules"], "```", ""]
        for name, path in self.figures.items():
            lines += [f"![{name}]({Path(path).name})", ""]
        return "\n".join(lines)

    def run_complete_pipeline(self):
        """Run every step in order and return the results dict."""
        self.load_data()
        self.describe_words()
        self.select_vocabulary()
        self.build_features()
        self.train_and_evaluate()
        if int(self.cfg["cv_folds"]) >= 2:
            self.cross_validate()
        if self.cfg["make_plots"]:
            self.create_visualizations()
        self.save_results()
        return self.results


def main(argv=None):
    """Command-line entry point (also used by run_case_study.py)."""
    import argparse

    ap = argparse.ArgumentParser(description="Run the IMDB or Kiva text case study")
    ap.add_argument("case_study", choices=["imdb", "kiva"])
    ap.add_argument("--data-path", type=Path, default=None, help="Delimited input file")
    ap.add_argument("--sep", default=None, help="Delimiter (default: detect '|' or ',')")
    ap.add_argument("--results-dir", type=Path, default=None)
    ap.add_argument("--classifier", choices=["decision_tree", "naive_bayes"], default=None)
    ap.add_argument("--min-total-count", type=int, default=None)
    ap.add_argument("--n-words", type=int, default=None, help="Size of the polarizing vocabulary")
    ap.add_argument("--finite-only", action="store_true", help="Drop words seen in one class only")
    ap.add_argument("--test-size", type=float, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--cv-folds", type=int, default=None)
    ap.add_argument("--n-topics", type=int, default=None)
    ap.add_argument("--no-topics", action="store_true")
    ap.add_argument("--topic-cache-dir", type=Path, default=None)
    ap.add_argument("--refit-topics", action="store_true", help="Ignore the topic cache")
    ap.add_argument("--topic-files", type=Path, default=None,
                    help="Directory with topic_terms/doc_topics/topic_names CSVs to use as given")
    ap.add_argument("--no-plots", action="store_true")

    args = ap.parse_args(argv)

    overrides = {
        "data_path": str(args.data_path) if args.data_path else None,
        "sep": args.sep,
        "results_dir": str(args.results_dir) if args.results_dir else None,
        "classifier": args.classifier,
        "min_total_count": args.min_total_count,
        "n_polarizing_words": args.n_words,
        "test_size": args.test_size,
        "random_state": args.seed,
        "cv_folds": args.cv_folds,
        "n_topics": args.n_topics,
        "topic_cache_dir": str(args.topic_cache_dir) if args.topic_cache_dir else None,
        "topic_files": str(args.topic_files) if args.topic_files else None,
    }
    if args.finite_only:
        overrides["finite_only"] = True
    if args.no_topics:
        overrides["use_topics"] = False
    if args.refit_topics:
        overrides["force_topics"] = True
    if args.no_plots:
        overrides["make_plots"] = False

    cfg = get_case_study_config(args.case_study, **overrides)
    if not Path(cfg["data_path"]).exists():
        raise FileNotFoundError(
            f"Cannot find {cfg['data_path']}. Pass --data-path explicitly."
        )

    pipeline = CaseStudyPipeline(cfg)
    pipeline.run_complete_pipeline()


if __name__ == "__main__":
    main()
