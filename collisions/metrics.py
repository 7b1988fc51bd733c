import numpy as np


def compute_energy(states, masses=None):
    """(T, N, 4) states → (T,) total kinetic energy."""
    if masses is None:
        masses = np.ones(states.shape[1])
    vel = states[:, :, 2:]
    return (0.5 * masses[None, :, None] * vel ** 2).sum(axis=(1, 2))


def compute_momentum(states, masses=None):
    """(T, N, 4) states → (T, 2) total momentum vector."""
    if masses is None:
        masses = np.ones(states.shape[1])
    vel = states[:, :, 2:]
    return (masses[None, :, None] * vel).sum(axis=1)


def relative_drift(series):
    """Largest deviation from the first value, relative to it."""
    series = np.asarray(series, dtype=np.float64)
    if series.size == 0:
        return 0.0
    ref = np.abs(series[0])
    dev = np.abs(series - series[0]).max()
    return float(dev / ref) if ref > 0 else float(dev)
