import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


@pytest.fixture
def great_boring():
    """Four reviews: great = 10 pos / 2 neg, boring = 1 pos / 9 neg."""
    tokens = pd.DataFrame(
        [(1, "great")] * 6 + [(1, "boring")]
        + [(2, "great")] * 4
        + [(3, "great")] * 2 + [(3, "boring")] * 5
        + [(4, "boring")] * 4,
        columns=["doc_id", "word"],
    )
    records = pd.DataFrame(
        {
            "doc_id": [1, 2, 3, 4],
            "sentiment": ["positive", "positive", "negative", "negative"],
        }
    )
    return tokens, records


def _kiva_rows(n=60):
    rows = []
    for i in range(n):
        defaulted = i % 3 == 0
        if defaulted:
            text = "The <b>drought</b> destroyed the harvest and the farmer could not repay<br />rain failed crop"
            sector, gender, nonpay = "Agriculture", "M" if i % 2 else "F", "partner"
        else:
            text = "She will expand her shop and grow profit selling goods<br />customers market crop"
            sector, gender, nonpay = "Retail", "F", "lender"
        country = ["Kenya", "Peru", "Philippines"][i % 3 if not defaulted else 0]
        rows.append(
            {
                "status": "defaulted" if defaulted else "paid",
                "sector": sector,
                "en": text,
                "country": country,
                "gender": gender,
                "loan_amount": 100 + 25 * i,
                "nonpayment": nonpay,
            }
        )
    return pd.DataFrame(rows)


@pytest.fixture
def kiva_csv(tmp_path):
    path = tmp_path / "kiva.csv"
    _kiva_rows().to_csv(path, sep="|", index=False)
    return path
