import matplotlib.pyplot as plt
import numpy as np


def plot_sweep(frame, metric, output=None, title=None):
    """
    Plot one curve per heuristic of a metric against the time scaling.

    Args:
        frame: Output of ``scaling_sweep``
        metric: Column to plot
        output: Optional file to save the figure to
        title: Title for the plot

    Returns:
        The matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 7))

    heuristics = list(dict.fromkeys(frame["Heuristic"]))
    color_map = plt.cm.rainbow(np.linspace(0, 1, max(len(heuristics), 1)))

    for color, heuristic in zip(color_map, heuristics):
        group = frame[frame["Heuristic"] == heuristic]
        ax.plot(group["scaling"], group[metric], marker="o", markersize=3,
                color=color, label=heuristic)

    ax.set_xlabel("Time limit scaling")
    ax.set_ylabel(metric)
    ax.set_title(title or f"{metric} vs. time limit")
    ax.grid(alpha=0.3)
    if heuristics:
        ax.legend(fontsize="small", ncol=2)

    plt.tight_layout()
    if output is not None:
        fig.savefig(output, dpi=300, bbox_inches="tight")
    return fig
