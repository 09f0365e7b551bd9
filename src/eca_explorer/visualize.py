"""
Figures for spacetime traces and entropy profiles (matplotlib, Agg backend).
"""

import warnings
from typing import Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from .entropy import EntropySignature
from .errors import require

warnings.filterwarnings('ignore', category=UserWarning, module='matplotlib')


def plot_spacetime(trace: np.ndarray, save_path: Optional[str] = None,
                   rule: Optional[int] = None, signature: Optional[EntropySignature] = None):
    """
    Spacetime diagram, optionally stacked over the entropy profile.

    Args:
        trace: (G, W) binary array, time downward
        save_path: write a PNG here when given
        rule: rule number for the title
        signature: entropy signature of the same trace, drawn underneath

    Returns:
        The matplotlib Figure (already closed)
    """
    xs = np.asarray(trace)
    require(xs.ndim == 2 and xs.size >= 1, "Trace must be a non-empty (G, W) array")

    if signature is None:
        fig, ax1 = plt.subplots(figsize=(12, 6))
    else:
        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8))
        _draw_entropy(ax2, signature)

    ax1.imshow(xs, cmap='binary', interpolation='nearest', aspect='auto')
    ax1.set_xlabel('Space')
    ax1.set_ylabel('Time')
    title = 'Spacetime Evolution'
    if rule is not None:
        title += f' | Rule {rule}'
    ax1.set_title(title)

    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return fig


def _draw_entropy(ax, signature: EntropySignature):
    gens = np.arange(len(signature.entropies))
    ax.plot(gens, signature.entropies, color='steelblue', linewidth=1.5)
    ax.axvspan(0, signature.skip, color='lightgray', alpha=0.5, label='transient')
    ax.axhline(signature.mean, color='crimson', linestyle='--',
               label=f'mean {signature.mean:.3f}')
    ax.set_ylim(0, signature.block_size * 1.05)
    ax.set_xlabel('Generation')
    ax.set_ylabel(f'H({signature.block_size}-blocks) [bits]')
    label = f' ({signature.label})' if signature.label else ''
    ax.set_title(f'Block Entropy{label}')
    ax.legend(loc='lower right', fontsize=8)


def plot_entropy_profile(signature: EntropySignature, save_path: Optional[str] = None):
    """Per-generation block entropy with the skipped transient shaded."""
    fig, ax = plt.subplots(figsize=(10, 4))
    _draw_entropy(ax, signature)
    if signature.rule is not None:
        ax.set_title(f'Block Entropy | Rule {signature.rule}'
                     + (f' ({signature.label})' if signature.label else ''))
    plt.tight_layout()
    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return fig
