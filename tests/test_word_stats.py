import math

import numpy as np
import pandas as pd

from casestudies.core.word_stats import (
    log_odds_table,
    polarizing_words,
    top_words_by_class,
    word_counts_by_class,
)


def test_word_counts_by_class(great_boring):
    tokens, records = great_boring
    counts = word_counts_by_class(tokens, records, "sentiment")
    lookup = {
        (w, c): n for w, c, n in zip(counts["word"], counts["class"], counts["count"])
    }
    assert lookup[("great", "positive")] == 10
    assert lookup[("great", "negative")] == 2
    assert lookup[("boring", "positive")] == 1
    assert lookup[("boring", "negative")] == 9


def test_log_ratio_matches_example(great_boring):
    tokens, records = great_boring
    counts = word_counts_by_class(tokens, records, "sentiment")
    table = log_odds_table(counts, "positive", "negative").set_index("word")

    assert math.isclose(table.loc["great", "log_ratio"], math.log2(10 / 2))
    assert math.isclose(table.loc["boring", "log_ratio"], math.log2(1 / 9))
    assert round(table.loc["great", "log_ratio"], 2) == 2.32
    assert round(table.loc["boring", "log_ratio"], 2) == -3.17
    assert table.loc["great", "total"] == 12
    assert table.loc["boring", "total"] == 10


def test_polarizing_filter_keeps_both_words(great_boring):
    tokens, records = great_boring
    counts = word_counts_by_class(tokens, records, "sentiment")
    table = log_odds_table(counts, "positive", "negative")
    vocab = polarizing_words(table, min_total=5, n_words=10)
    assert vocab["word"].tolist() == ["boring", "great"]


def test_min_total_threshold_drops_rare_words(great_boring):
    tokens, records = great_boring
    counts = word_counts_by_class(tokens, records, "sentiment")
    table = log_odds_table(counts, "positive", "negative")
    vocab = polarizing_words(table, min_total=11, n_words=10)
    assert vocab["word"].tolist() == ["great"]


def test_swapping_classes_negates_ratio(great_boring):
    tokens, records = great_boring
    counts = word_counts_by_class(tokens, records, "sentiment")
    ab = log_odds_table(counts, "positive", "negative").set_index("word")
    ba = log_odds_table(counts, "negative", "positive").set_index("word")
    assert np.allclose(ab["log_ratio"], -ba.loc[ab.index, "log_ratio"])


def test_one_sided_word_is_not_finite(capsys):
    counts = pd.DataFrame(
        {
            "word": ["superb", "good", "good"],
            "class": ["positive", "positive", "negative"],
            "count": [7, 3, 3],
        }
    )
    table = log_odds_table(counts, "positive", "negative").set_index("word")
    assert not np.isfinite(table.loc["superb", "log_ratio"])
    assert table.loc["superb", "log_ratio"] != 0
    assert table.loc["superb", "count_negative"] == 0
    assert table.loc["good", "log_ratio"] == 0.0
    assert "[warn] 1 words" in capsys.readouterr().out

    ranked = polarizing_words(table.reset_index(), min_total=1, n_words=5)
    assert ranked["word"].iloc[0] == "superb"
    finite = polarizing_words(table.reset_index(), min_total=1, n_words=5, finite_only=True)
    assert finite["word"].tolist() == ["good"]


def test_top_words_by_class():
    counts = pd.DataFrame(
        {
            "word": ["a", "b", "c", "a", "d"],
            "class": ["x", "x", "x", "y", "y"],
            "count": [5, 9, 1, 2, 4],
        }
    )
    top = top_words_by_class(counts, n=2)
    assert top[top["class"] == "x"]["word"].tolist() == ["b", "a"]
    assert top[top["class"] == "y"]["word"].tolist() == ["d", "a"]
