"""
Матрицы Q двойственной задачи поверх оракула ядра.

Солвер минимизирует 1/2 α^T Q α + p^T α, где Q зависит от задачи:
    SvcQ:       Q_ij = y_i y_j K(x_i, x_j)
    OneClassQ:  Q_ij = K(x_i, x_j)
    SvrQ:       2n переменных, Q_kl = s_k s_l K(x_{k mod n}, x_{l mod n}),
                s_k = +1 для k < n и -1 для k >= n

Все строки возвращаются как новые массивы, кэш ядра не портится.
"""

import numpy as np

from .kernel import Kernel


class SvcQ:
    """Q для C-SVC и Nu-SVC: ядро со знаками меток."""

    def __init__(self, kernel: Kernel, y: np.ndarray):
        self.kernel = kernel
        self.y = np.asarray(y, dtype=np.float64)

    @property
    def size(self) -> int:
        return self.kernel.size

    def row(self, i: int) -> np.ndarray:
        return self.y[i] * self.y * self.kernel.row(i)

    def diagonal(self) -> np.ndarray:
        # y_i^2 = 1
        return np.array(self.kernel.diagonal())


class OneClassQ:
    """Q для one-class SVM: само ядро."""

    def __init__(self, kernel: Kernel):
        self.kernel = kernel

    @property
    def size(self) -> int:
        return self.kernel.size

    def row(self, i: int) -> np.ndarray:
        return np.array(self.kernel.row(i))

    def diagonal(self) -> np.ndarray:
        return np.array(self.kernel.diagonal())


class SvrQ:
    """
    Q для регрессии: каждая запись порождает пару переменных (α_i, α_i*).

    Индексы 0..n-1 соответствуют α_i, индексы n..2n-1 соответствуют α_i*.
    """

    def __init__(self, kernel: Kernel):
        self.kernel = kernel
        n = kernel.size
        self.signs = np.concatenate([np.ones(n), -np.ones(n)])

    @property
    def size(self) -> int:
        return 2 * self.kernel.size

    def row(self, k: int) -> np.ndarray:
        n = self.kernel.size
        if not 0 <= k < 2 * n:
            raise IndexError(f"Variable index {k} out of range [0, {2 * n})")
        k_row = self.kernel.row(k % n)
        return self.signs[k] * self.signs * np.concatenate([k_row, k_row])

    def diagonal(self) -> np.ndarray:
        return np.tile(self.kernel.diagonal(), 2)
