# config.py
"""
Case-study presets.

Each preset is a plain dict of every parameter a pipeline stage reads, so a run
is fully described by the dict handed to ``CaseStudyPipeline``.
"""

import copy
from typing import Any, Dict

COMMON_DEFAULTS: Dict[str, Any] = {
    "sep": None,  # None -> detect from header line
    "id_col": "doc_id",
    "strip_markup": False,
    "extra_stop_words": [],
    "min_total_count": 50,
    "n_polarizing_words": 100,
    "finite_only": False,
    "n_top_words": 20,
    "covariates_categorical": [],
    "covariates_numeric": [],
    "describe_by": [],
    "use_topics": False,
    "n_topics": 10,
    "topic_passes": 10,
    "n_topic_terms": 10,
    "topic_cache_dir": "cache/topics",
    "force_topics": False,
    # directory with topic tables from an earlier run; skips fitting and the cache
    "topic_files": None,
    "classifier": "decision_tree",
    "classifier_params": {},
    "test_size": 0.2,
    "stratify": True,
    "cv_folds": 0,
    "random_state": 42,
    "results_dir": "results",
    "make_plots": True,
}

CASE_STUDIES: Dict[str, Dict[str, Any]] = {
    "imdb": {
        "data_path": "data/imdb.csv",
        "text_col": "review",
        "label_col": "sentiment",
        "class_a": "positive",
        "class_b": "negative",
        "positive_label": "positive",
        "extra_stop_words": ["br", "movie", "film", "one"],
        "min_total_count": 50,
        "n_polarizing_words": 100,
        "classifier": "naive_bayes",
    },
    "kiva": {
        "data_path": "data/kiva.csv",
        "text_col": "en",
        "label_col": "status",
        "class_a": "defaulted",
        "class_b": "paid",
        "positive_label": "defaulted",
        "strip_markup": True,
        "extra_stop_words": ["br", "loan", "kiva"],
        "min_total_count": 20,
        "n_polarizing_words": 50,
        "covariates_categorical": ["sector", "country", "gender", "nonpayment"],
        "covariates_numeric": ["loan_amount"],
        "describe_by": ["sector", "country", "gender", "nonpayment"],
        "use_topics": True,
        "n_topics": 10,
        "classifier": "decision_tree",
    },
}


def get_case_study_config(name: str, **overrides: Any) -> Dict[str, Any]:
    """
    Resolve a preset into a complete, independent config dict.

    Args:
        name: Preset name ("imdb" or "kiva")
        **overrides: Values replacing preset keys; unknown keys are rejected

    Returns:
        Dictionary holding every pipeline parameter
    """
    key = name.lower()
    if key not in CASE_STUDIES:
        raise ValueError(f"Unknown case study: {name}")

    cfg = copy.deepcopy(COMMON_DEFAULTS)
    cfg.update(copy.deepcopy(CASE_STUDIES[key]))
    cfg["name"] = key

    unknown = sorted(set(overrides) - set(cfg))
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")
    for k, v in overrides.items():
        if v is not None:
            cfg[k] = v

    if not 0.0 < float(cfg["test_size"]) < 1.0:
        raise ValueError("test_size must be between 0 and 1")
    return cfg
