from __future__ import annotations

from typing import Optional

from predpreyplant.ecology.stats import StatsHistory
from predpreyplant.ecology.world import Species


def plot_history(history: StatsHistory, out_path: Optional[str] = None, top_n: int = 4) -> None:
    """Population totals plus the most common genotypes of each species over time."""
    try:
        import matplotlib.pyplot as plt
    except Exception as exc:
        raise RuntimeError("matplotlib is required for plotting") from exc

    t = history.series("t")
    fig, axes = plt.subplots(3, 1, figsize=(10, 9), sharex=True)

    ax = axes[0]
    ax.plot(t, history.series("plants"), label="plants", color="#47d16a")
    ax.plot(t, history.series("herbivores"), label="herbivores", color="#40a2ff")
    ax.plot(t, history.series("carnivores"), label="carnivores", color="#ff5a5a")
    ax.set_ylabel("population")
    ax.legend()

    for ax, species in zip(axes[1:], (Species.HERBIVORE, Species.CARNIVORE)):
        genotypes = history.top_genotypes(species, top_n)
        for genotype in genotypes:
            ax.plot(t, history.genotype_series(species, genotype), label=genotype)
        ax.set_ylabel(f"{species.value}s by genotype")
        if genotypes:
            ax.legend()

    axes[-1].set_xlabel("time (s)")

    fig.tight_layout()
    if out_path:
        fig.savefig(out_path)
        plt.close(fig)
    else:
        plt.show()
