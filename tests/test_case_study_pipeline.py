import json
import math

import numpy as np
import pandas as pd
import pytest

from casestudies.config import get_case_study_config
from casestudies.experiments.case_study_pipeline import CaseStudyPipeline, _json_safe, main


def _imdb_csv(path):
    pos = "A wonderful story with brilliant acting and a great plot"
    neg = "A dull story with terrible acting and a boring plot"
    rows = [
        {"review": pos if i % 2 else neg, "sentiment": "positive" if i % 2 else "negative"}
        for i in range(40)
    ]
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_kiva_pipeline_end_to_end(kiva_csv, tmp_path, capsys):
    cfg = get_case_study_config(
        "kiva",
        data_path=str(kiva_csv),
        results_dir=str(tmp_path / "results"),
        topic_cache_dir=str(tmp_path / "cache"),
        min_total_count=5,
        n_topics=2,
        topic_passes=1,
        test_size=0.25,
    )
    pipeline = CaseStudyPipeline(cfg)
    results = pipeline.run_complete_pipeline()

    assert results["n_records"] == 60
    assert results["train_size"] + results["test_size"] == 60
    assert sum(map(sum, results["confusion_matrix"])) == results["test_size"]
    assert results["feature_shape"][0] == 60
    assert "topic_1" in pipeline.X.columns and "loan_amount" in pipeline.X.columns
    assert "crop" in pipeline.vocabulary["word"].tolist()
    assert "tree_rules" in results

    out_dir = tmp_path / "results" / "kiva"
    assert (out_dir / "report.md").exists()
    assert (out_dir / "confusion_matrix.png").exists()
    assert (out_dir / "metrics_summary.csv").exists()
    assert (tmp_path / "cache" / "doc_topics.csv").exists()
    saved = json.loads(next(out_dir.glob("case_study_results_*.json")).read_text())
    assert saved["results"]["test_metrics"]["total"] == results["test_size"]

    # second run reads the cached topics
    capsys.readouterr()
    CaseStudyPipeline(cfg).run_complete_pipeline()
    assert "[cache] topic tables loaded" in capsys.readouterr().out


def test_imdb_pipeline_with_cross_validation(tmp_path):
    data = _imdb_csv(tmp_path / "imdb.csv")
    cfg = get_case_study_config(
        "imdb",
        data_path=str(data),
        results_dir=str(tmp_path / "results"),
        min_total_count=5,
        cv_folds=3,
        make_plots=False,
    )
    results = CaseStudyPipeline(cfg).run_complete_pipeline()
    assert results["classifier"] == "naive_bayes"
    assert results["test_metrics"]["accuracy"] == 1.0
    assert len(results["cv_accuracy"]) == 3
    report = (tmp_path / "results" / "imdb" / "report.md").read_text()
    assert "Most polarizing words" in report


def test_cli_main(tmp_path):
    data = _imdb_csv(tmp_path / "imdb.csv")
    main(
        [
            "imdb",
            "--data-path", str(data),
            "--results-dir", str(tmp_path / "out"),
            "--min-total-count", "5",
            "--no-plots",
        ]
    )
    assert (tmp_path / "out" / "imdb" / "report.md").exists()


def _strict_json(path):
    def reject(name):
        raise ValueError(f"non-standard JSON constant {name}")

    return json.loads(path.read_text(), parse_constant=reject)


def test_kiva_pipeline_with_supplied_topic_tables(kiva_csv, tmp_path, capsys):
    topic_dir = tmp_path / "supplied"
    topic_dir.mkdir()
    pd.DataFrame(
        {"topic": [1, 2], "term": ["drought", "shop"], "weight": [0.4, 0.4]}
    ).to_csv(topic_dir / "topic_terms.csv", index=False)
    # doc 60 deliberately absent
    pd.DataFrame(
        [(d, t, p) for d in range(1, 60) for t, p in ((1, 0.9), (2, 0.1))],
        columns=["doc_id", "topic", "proportion"],
    ).to_csv(topic_dir / "doc_topics.csv", index=False)
    pd.DataFrame({"topic": [1, 2], "name": ["farming", "retail"]}).to_csv(
        topic_dir / "topic_names.csv", index=False
    )
    before = {p.name: p.read_text() for p in topic_dir.iterdir()}

    cfg = get_case_study_config(
        "kiva",
        data_path=str(kiva_csv),
        results_dir=str(tmp_path / "results"),
        topic_files=str(topic_dir),
        min_total_count=5,
        make_plots=False,
    )
    pipeline = CaseStudyPipeline(cfg)
    pipeline.run_complete_pipeline()

    out = capsys.readouterr().out
    assert "[cache] using supplied topic tables" in out
    assert "fitting LDA" not in out
    assert pipeline.X.loc[1, "topic_1"] == pytest.approx(0.9)
    assert pipeline.X.loc[60, ["topic_1", "topic_2"]].tolist() == [0.5, 0.5]
    assert {p.name: p.read_text() for p in topic_dir.iterdir()} == before


def test_kiva_record_without_tokens_keeps_a_topic_distribution(kiva_csv, tmp_path):
    df = pd.read_csv(kiva_csv, sep="|")
    df.loc[5, "en"] = "The and of <br /> it"
    df.to_csv(kiva_csv, sep="|", index=False)

    cfg = get_case_study_config(
        "kiva",
        data_path=str(kiva_csv),
        results_dir=str(tmp_path / "results"),
        topic_cache_dir=str(tmp_path / "cache"),
        min_total_count=5,
        n_topics=2,
        topic_passes=1,
        make_plots=False,
    )
    pipeline = CaseStudyPipeline(cfg)
    pipeline.load_data()
    pipeline.describe_words()
    pipeline.select_vocabulary()
    pipeline.build_features()

    assert 6 not in set(pipeline.tokens["doc_id"])
    topics = pipeline.X.loc[6, ["topic_1", "topic_2"]]
    assert topics.sum() == pytest.approx(1.0, abs=1e-3)


def test_results_json_is_strict_when_a_metric_is_nan(tmp_path):
    data = _imdb_csv(tmp_path / "imdb.csv")
    cfg = get_case_study_config(
        "imdb",
        data_path=str(data),
        results_dir=str(tmp_path / "results"),
        min_total_count=5,
        make_plots=False,
    )
    pipeline = CaseStudyPipeline(cfg)
    pipeline.run_complete_pipeline()
    for path in (tmp_path / "results" / "imdb").glob("case_study_results_*.json"):
        path.unlink()

    pipeline.results["test_metrics"]["precision"] = float("nan")
    pipeline.results["test_metrics"]["f1"] = np.float64(np.inf)
    pipeline.save_results()

    saved = _strict_json(next((tmp_path / "results" / "imdb").glob("case_study_results_*.json")))
    assert saved["results"]["test_metrics"]["precision"] is None
    assert saved["results"]["test_metrics"]["f1"] is None
    assert saved["results"]["test_metrics"]["accuracy"] == 1.0


def test_json_safe_converts_numpy_and_non_finite():
    safe = _json_safe(
        {"a": float("nan"), "b": [np.float64(-np.inf), 2.5], "c": np.int64(3), 4: np.array([1, 2])}
    )
    assert safe == {"a": None, "b": [None, 2.5], "c": 3, "4": [1, 2]}
    assert isinstance(safe["c"], int)
    assert not math.isnan(safe["b"][1])
