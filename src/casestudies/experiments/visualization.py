# visualization.py
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path


def plot_top_words_by_class(top: pd.DataFrame, save_dir: Path, name: str = "top_words_by_class.png"):
    classes = list(top["class"].unique())
    if not classes:
        return None
    fig, axes = plt.subplots(1, len(classes), figsize=(6 * len(classes), 6))
    if len(classes) == 1:
        axes = [axes]
    for ax, cls in zip(axes, classes):
        sub = top[top["class"] == cls].sort_values("count")
        ax.barh(sub["word"], sub["count"])
        ax.set_title(f"Most frequent words: {cls}")
        ax.set_xlabel("Count")
    plt.tight_layout()
    out = save_dir / name
    plt.savefig(out, dpi=200)
    plt.close()
    return out


def plot_log_odds(table: pd.DataFrame, class_a: str, class_b: str, save_dir: Path, n: int = 30):
    """Horizontal bars of the strongest finite log2 ratios, coloured by direction."""
    finite = table[np.isfinite(table["log_ratio"])].copy()
    if finite.empty:
        print("[warn] no finite log ratios to plot")
        return None
    finite["abs_ratio"] = finite["log_ratio"].abs()
    sub = finite.nlargest(n, "abs_ratio").sort_values("log_ratio")
    colors = ["tab:blue" if r > 0 else "tab:red" for r in sub["log_ratio"]]

    plt.figure(figsize=(8, max(4, 0.25 * len(sub))))
    plt.barh(sub["word"], sub["log_ratio"], color=colors)
    plt.axvline(0, color="black", linewidth=0.8)
    plt.xlabel(f"log2({class_a} / {class_b})")
    plt.title("Most polarizing words")
    plt.tight_layout()
    out = save_dir / "log_odds_words.png"
    plt.savefig(out, dpi=200)
    plt.close()
    return out


def plot_topic_terms(topic_terms: pd.DataFrame, topic_names: pd.DataFrame, save_dir: Path, n_terms: int = 8):
    topics = sorted(topic_terms["topic"].unique())
    if not topics:
        return None
    names = dict(zip(topic_names["topic"], topic_names["name"]))
    n_cols = min(5, len(topics))
    n_rows = int(np.ceil(len(topics) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(4 * n_cols, 3 * n_rows), squeeze=False)
    for ax in axes.flat[len(topics):]:
        ax.axis("off")
    for ax, t in zip(axes.flat, topics):
        sub = topic_terms[topic_terms["topic"] == t].nlargest(n_terms, "weight").sort_values("weight")
        ax.barh(sub["term"], sub["weight"])
        ax.set_title(f"{t}: {names.get(t, '')}", fontsize=9)
    plt.tight_layout()
    out = save_dir / "topic_terms.png"
    plt.savefig(out, dpi=200)
    plt.close()
    return out


def plot_confusion_matrix(cm: np.ndarray, labels, save_dir: Path, title: str = "Confusion Matrix"):
    """Heatmap of a confusion matrix, rows actual and columns predicted."""
    plt.figure(figsize=(5, 4))
    ax = sns.heatmap(
        np.asarray(cm).astype(int),
        annot=True,
        fmt="d",
        cmap="Blues",
        cbar=True,
        square=True,
        xticklabels=[str(l) for l in labels],
        yticklabels=[str(l) for l in labels],
    )
    ax.set_title(title)
    ax.set_xlabel("Predicted")
    ax.set_ylabel("Actual")
    plt.tight_layout()
    out = save_dir / "confusion_matrix.png"
    plt.savefig(out, dpi=200, bbox_inches="tight")
    plt.close()
    return out


def export_summary_table(metrics: dict, save_dir: Path, name: str = "metrics_summary"):
    rows = [
        {"Metric": k, "Value": v}
        for k, v in metrics.items()
        if isinstance(v, (int, float, np.integer, np.floating))
    ]
    df = pd.DataFrame(rows)
    df.to_csv(save_dir / f"{name}.csv", index=False)
    (save_dir / f"{name}.md").write_text(
        df.to_markdown(index=False, floatfmt=".4f"), encoding="utf-8"
    )
    return df
