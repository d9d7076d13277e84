import pandas as pd
import pytest

from casestudies.core.features import (
    attach_labels,
    covariate_features,
    document_term_matrix,
    merge_features,
)


@pytest.fixture
def tokens():
    return pd.DataFrame(
        {"doc_id": [1, 1, 1, 2, 3], "word": ["great", "great", "plot", "boring", "plot"]}
    )


def test_document_term_matrix_counts(tokens):
    dtm = document_term_matrix(tokens, ["great", "boring"], [1, 2, 3, 4])
    assert dtm.index.tolist() == [1, 2, 3, 4]
    assert dtm.index.name == "doc_id"
    assert dtm.loc[1].tolist() == [2, 0]
    assert dtm.loc[2].tolist() == [0, 1]
    # documents without vocabulary words still get a row
    assert dtm.loc[3].tolist() == [0, 0]
    assert dtm.loc[4].tolist() == [0, 0]


def test_empty_vocabulary_raises(tokens):
    with pytest.raises(ValueError):
        document_term_matrix(tokens, [], [1, 2, 3])


def test_attach_labels_joins_on_doc_id_not_position(tokens):
    dtm = document_term_matrix(tokens, ["great", "boring"], [1, 2, 3])
    records = pd.DataFrame({"doc_id": [3, 1, 2], "sentiment": ["neg", "pos", "neg"]})
    X, y = attach_labels(dtm, records, "sentiment")
    assert X.index.equals(y.index)
    assert y.loc[1] == "pos"
    assert y.loc[3] == "neg"
    assert X.loc[1, "great"] == 2


def test_attach_labels_when_a_word_equals_label_name(tokens):
    dtm = document_term_matrix(tokens, ["great", "status"], [1, 2, 3])
    records = pd.DataFrame({"doc_id": [1, 2, 3], "status": ["a", "b", "a"]})
    X, y = attach_labels(dtm, records, "status")
    assert list(X.columns) == ["great", "status"]
    assert y.name == "status"
    assert y.tolist() == ["a", "b", "a"]


def test_covariates_and_merge():
    records = pd.DataFrame(
        {
            "doc_id": [1, 2, 3],
            "sector": ["Retail", "Food", "Retail"],
            "loan_amount": [100, 250, 400],
        }
    )
    cov = covariate_features(records, ["sector"], ["loan_amount"])
    assert sorted(cov.columns) == ["loan_amount", "sector_Food", "sector_Retail"]
    assert cov.loc[2, "sector_Food"] == 1

    topics = pd.DataFrame({"topic_1": [0.7, 0.2]}, index=pd.Index([1, 2], name="doc_id"))
    merged = merge_features(cov, topics)
    assert merged.shape == (3, 4)
    assert merged.loc[3, "topic_1"] == 0

    with pytest.raises(ValueError):
        merge_features(cov, cov)
