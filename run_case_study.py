#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Runner for the IMDB / Kiva text case studies.

- Run from project root (or use the installed `casestudies-run` command).
- Imports the package from src/ when it is not installed.

Examples:
    python run_case_study.py imdb --data-path data/imdb.csv
    python run_case_study.py kiva --data-path data/kiva.csv --cv-folds 5
"""

import sys
from pathlib import Path

ROOT = Path(__file__).parent.resolve()
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from casestudies.experiments.case_study_pipeline import main  # noqa: E402


if __name__ == "__main__":
    main()
