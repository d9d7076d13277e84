# Experimental components for the text case studies

from .case_study_pipeline import CaseStudyPipeline, main
from .visualization import (
    plot_top_words_by_class,
    plot_log_odds,
    plot_topic_terms,
    plot_confusion_matrix,
    export_summary_table,
)

__all__ = [
    "CaseStudyPipeline",
    "main",
    "plot_top_words_by_class",
    "plot_log_odds",
    "plot_topic_terms",
    "plot_confusion_matrix",
    "export_summary_table",
]
