from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.figure import Figure


def save_figure(figure: Figure, path: Path, *, width: int, height: int, dpi: int = 100) -> Path:
    """Write ``figure`` as a ``width`` x ``height`` pixel PNG and close it.

    The parent directory is not created here; a missing directory surfaces as
    an ``OSError`` from the write.
    """
    try:
        figure.set_size_inches(width / dpi, height / dpi)
        figure.tight_layout()
        figure.savefig(path, dpi=dpi, format="png")
    finally:
        plt.close(figure)
    return path
