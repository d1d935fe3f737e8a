"""
Field Visualization

Plotting functions for channel velocity profiles and 2D field slices.
"""

import matplotlib.pyplot as plt
import numpy as np


def plot_velocity_magnitude(u, title="Velocity Magnitude", ax=None):
    """
    Plot velocity magnitude of a 2D field.

    Parameters
    ----------
    u : ndarray
        Velocity field, shape (D, ny, nx)
    title : str
        Axes title
    ax : matplotlib Axes, optional
        Target axes; a new figure is created if None

    Returns
    -------
    fig : matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    else:
        fig = ax.figure

    speed = np.sqrt(np.sum(np.asarray(u) ** 2, axis=0))
    im = ax.imshow(speed, origin='lower', cmap='viridis', aspect='auto')
    fig.colorbar(im, ax=ax, label='$|u|$')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(title)

    return fig


def plot_density(rho, title="Density", ax=None):
    """Plot a 2D density field with a diverging colormap centred on its mean."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    else:
        fig = ax.figure

    rho = np.asarray(rho)
    span = np.max(np.abs(rho - np.mean(rho)))
    im = ax.imshow(rho, origin='lower', cmap='RdBu_r', aspect='auto',
                   vmin=np.mean(rho) - span, vmax=np.mean(rho) + span)
    fig.colorbar(im, ax=ax, label=r'$\rho$')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(title)

    return fig


def plot_channel_profile(y, ux_numerical, ux_analytical=None, save_path=None):
    """
    Plot the streamwise velocity across the channel.

    Parameters
    ----------
    y : ndarray
        Row indices
    ux_numerical : ndarray
        LBM velocity per row
    ux_analytical : ndarray, optional
        Analytical velocity per row
    save_path : str, optional
        Path to save figure

    Returns
    -------
    fig : matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=(6, 5))

    if ux_analytical is not None:
        ax.plot(ux_analytical, y, 'b-', linewidth=2, label='Analytical')
    ax.plot(ux_numerical, y, 'ro', markersize=4, label='LBM')
    ax.set_xlabel('Velocity $u_x$')
    ax.set_ylabel('Channel height $y$')
    ax.set_title('Channel Flow: Velocity Profile')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        print(f"Saved figure to {save_path}")

    return fig
