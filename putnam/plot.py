import argparse
import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.ticker import LogLocator, ScalarFormatter

NUMERIC_COLUMNS = ["avg_time", "min_time", "max_time", "avg_mem", "min_mem", "max_mem", "decisions"]


def _log_axis(ax, numticks=12):
    ax.set_yscale('log')
    ax.yaxis.set_major_locator(LogLocator(base=10, numticks=numticks))
    ax.yaxis.set_minor_locator(LogLocator(base=10, subs=np.arange(2, 10) * 0.1, numticks=numticks))
    ax.yaxis.set_major_formatter(ScalarFormatter())
    ax.yaxis.grid(True, which='both', linestyle='--', alpha=0.3)


def _bar_with_range(data, avg, low, high, color, ylabel, title, path):
    """Bar chart of `avg` with min/max error bars, saved to `path`."""
    fig, ax = plt.subplots(figsize=(12, 7))

    yerr = [data[avg] - data[low], data[high] - data[avg]]
    ax.bar(data.index, data[avg], color=color, label=ylabel)
    ax.errorbar(
        data.index,
        data[avg],
        yerr=yerr,
        fmt='none',
        ecolor='black',
        capsize=5,
        linewidth=1,
        label="Min/Max Range"
    )

    ax.set_ylabel(ylabel)
    ax.set_title(title)
    _log_axis(ax)

    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')
    fig.tight_layout()
    ax.legend(loc='upper left')
    fig.savefig(path)
    plt.close(fig)


def plot_results(csv_path, out_dir="results"):
    """
    Render the benchmark CSV as log-scale bar charts.

    Returns the list of written image paths.
    """
    df = pd.read_csv(csv_path)
    for column in NUMERIC_COLUMNS:
        df[column] = pd.to_numeric(df[column], errors='coerce')
    # configurations that never finished an instance of a folder have no timings
    df = df.dropna(subset=["avg_time"])

    os.makedirs(out_dir, exist_ok=True)
    written = []

    if df.empty:
        return written

    time_data = df.groupby("solver").agg(
        {"avg_time": "mean", "min_time": "min", "max_time": "max"}).sort_values("avg_time")
    path = os.path.join(out_dir, "avg_time_log.png")
    _bar_with_range(time_data, "avg_time", "min_time", "max_time", "skyblue",
                    "Average Time (s)", "Average Execution Time per Solver", path)
    written.append(path)

    mem_data = df.groupby("solver").agg(
        {"avg_mem": "mean", "min_mem": "min", "max_mem": "max"}).sort_values("avg_mem")
    path = os.path.join(out_dir, "avg_memory_log.png")
    _bar_with_range(mem_data, "avg_mem", "min_mem", "max_mem", "salmon",
                    "Average Memory (KB)", "Average Memory Usage per Solver", path)
    written.append(path)

    decisions = df.groupby("solver")["decisions"].agg(["mean", "min", "max"]).sort_values("mean")
    path = os.path.join(out_dir, "avg_decisions_log.png")
    _bar_with_range(decisions, "mean", "min", "max", "lightgreen",
                    "Average Decisions", "Average Number of Decisions per Solver", path)
    written.append(path)

    for folder in df["folder"].unique():
        sub_df = df[df["folder"] == folder].set_index("solver").sort_values("avg_time")
        path = os.path.join(out_dir, f"avg_time_{folder}_log.png")
        _bar_with_range(sub_df, "avg_time", "min_time", "max_time", "mediumseagreen",
                        "Average Time (s)", f"Avg Time - Folder: {folder}", path)
        written.append(path)

    solver_order = df.groupby("solver")["avg_time"].mean().sort_values().index
    pivot_df = df.pivot(index='solver', columns='folder', values='avg_time').reindex(solver_order)

    ax = pivot_df.plot(kind='bar', figsize=(14, 8), logy=True)
    ax.set_ylabel('Average Time (s) - Log Scale')
    ax.set_title('Solver Performance Comparison by Benchmark Folder')
    _log_axis(ax, numticks=15)

    fig = ax.get_figure()
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')
    fig.tight_layout()
    path = os.path.join(out_dir, "solver_comparison_log.png")
    fig.savefig(path)
    plt.close(fig)
    written.append(path)

    return written


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Plot benchmark results")
    parser.add_argument("csv_path", help="CSV written by putnam.benchmark")
    parser.add_argument("--out-dir", default="results")
    args = parser.parse_args()
    for path in plot_results(args.csv_path, args.out_dir):
        print(f"Wrote {path}")
