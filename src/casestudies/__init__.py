"""
This package contains the two text case studies (IMDB review sentiment and
Kiva microloan default) run as one linear analysis pipeline each.

Key modules:
- prepare_dataset: Delimited-file loading, synthetic ids, markup stripping
- text / word_stats: Tokenisation, word counts, log-odds word polarity
- features: Document-term matrix and covariates joined on doc_id
- metrics: Confusion-matrix metrics
- models: Decision tree / naive Bayes wrappers and cached LDA topics
- case_study_pipeline: End-to-end orchestration and report
"""

__version__ = "0.1.0"
