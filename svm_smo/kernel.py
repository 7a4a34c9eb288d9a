"""
Ядро (kernel) и оракул значений ядра для SMO солвера.

Солвер никогда не работает с признаками напрямую: он видит только индексы
примеров и спрашивает у оракула K(i, j) или целую строку K[i, :].
Строки кэшируются (LRU), т.к. SMO многократно обращается к одним и тем же
опорным векторам.

Поддерживаемые преобразования:
    linear:      K(a, b) = a^T b
    gaussian:    K(a, b) = exp(-||a - b||^2 / eps)
    polynomial:  K(a, b) = (a^T b + c)^d
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from scipy.spatial.distance import cdist


@dataclass(frozen=True)
class KernelMethod:
    """
    Описание функции ядра: имя и её параметры.

    params участвует в сравнении, но не в хэше: dict не хэшируется,
    а равные объекты всё равно имеют равные имена.
    """
    name: str
    params: dict = field(default_factory=dict, hash=False)

    @classmethod
    def linear(cls) -> "KernelMethod":
        return cls("linear")

    @classmethod
    def gaussian(cls, eps: float) -> "KernelMethod":
        if not eps > 0:
            raise ValueError(f"eps гауссова ядра должно быть > 0, получено {eps}")
        return cls("gaussian", {"eps": float(eps)})

    @classmethod
    def polynomial(cls, c: float, degree: int) -> "KernelMethod":
        if degree < 1:
            raise ValueError(f"Степень полинома должна быть >= 1, получено {degree}")
        return cls("polynomial", {"c": float(c), "degree": int(degree)})

    @property
    def is_linear(self) -> bool:
        return self.name == "linear"

    def __call__(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """
        Матрица ядра между наборами записей a (m, d) и b (k, d).

        Returns:
            K: (m, k)
        """
        if self.name == "linear":
            return a @ b.T
        if self.name == "gaussian":
            return np.exp(-cdist(a, b, "sqeuclidean") / self.params["eps"])
        if self.name == "polynomial":
            return (a @ b.T + self.params["c"]) ** self.params["degree"]
        raise ValueError(f"Unknown kernel: {self.name}")

    def to_dict(self) -> dict:
        return {"name": self.name, **self.params}

    @classmethod
    def from_dict(cls, data: dict) -> "KernelMethod":
        data = dict(data)
        name = data.pop("name")
        if name == "linear":
            return cls.linear()
        if name == "gaussian":
            return cls.gaussian(data["eps"])
        if name == "polynomial":
            return cls.polynomial(data["c"], data["degree"])
        raise ValueError(f"Unknown kernel: {name}")


class Kernel:
    """
    Оракул ядра над фиксированным набором записей.

    Отвечает на запросы value(i, j) и row(i). Записи копируются при создании,
    поэтому кэш строк не может устареть. Экземпляр принадлежит одному
    обучению: для параллельного обучения нескольких моделей создавайте
    отдельные оракулы.
    """

    def __init__(
        self,
        records: np.ndarray,
        method: Optional[KernelMethod] = None,
        cache_size: int = 200
    ):
        """
        Args:
            records: Матрица записей (n_samples, n_features)
            method: Функция ядра (по умолчанию линейная)
            cache_size: Сколько строк ядра держать в LRU-кэше (0 - без кэша)
        """
        records = np.array(records, dtype=np.float64)
        if records.ndim != 2:
            raise ValueError(f"Ожидалась матрица записей 2D, получено ndim={records.ndim}")
        if cache_size < 0:
            raise ValueError(f"cache_size должно быть >= 0, получено {cache_size}")

        records.flags.writeable = False
        self.records = records
        self.method = method if method is not None else KernelMethod.linear()
        self.cache_size = cache_size

        self._matrix: Optional[np.ndarray] = None
        self._cache: "OrderedDict[int, np.ndarray]" = OrderedDict()
        self._diagonal: Optional[np.ndarray] = None

    @classmethod
    def precomputed(cls, matrix: np.ndarray) -> "Kernel":
        """
        Оракул поверх уже посчитанной матрицы ядра (n, n).

        У такого ядра нет записей, поэтому обученная на нём модель умеет
        только decision_function_precomputed.
        """
        matrix = np.array(matrix, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Матрица ядра должна быть квадратной, получено {matrix.shape}")
        if not np.allclose(matrix, matrix.T):
            raise ValueError("Матрица ядра должна быть симметричной")

        kernel = cls.__new__(cls)
        matrix.flags.writeable = False
        kernel.records = None
        kernel.method = None
        kernel.cache_size = 0
        kernel._matrix = matrix
        kernel._cache = OrderedDict()
        kernel._diagonal = None
        return kernel

    @property
    def size(self) -> int:
        if self._matrix is not None:
            return self._matrix.shape[0]
        return self.records.shape[0]

    def __len__(self) -> int:
        return self.size

    @property
    def is_linear(self) -> bool:
        return self.method is not None and self.method.is_linear

    def _check_index(self, i: int) -> int:
        if not 0 <= i < self.size:
            raise IndexError(f"Kernel index {i} out of range [0, {self.size})")
        return int(i)

    def value(self, i: int, j: int) -> float:
        """K(x_i, x_j)"""
        i = self._check_index(i)
        j = self._check_index(j)
        if self._matrix is not None:
            return float(self._matrix[i, j])
        if i in self._cache:
            return float(self._cache[i][j])
        return float(self.method(self.records[i:i + 1], self.records[j:j + 1])[0, 0])

    def row(self, i: int) -> np.ndarray:
        """
        Строка матрицы ядра K[i, :] (n_samples,), только для чтения.

        Недавно использованные строки берутся из LRU-кэша.
        """
        i = self._check_index(i)
        if self._matrix is not None:
            return self._matrix[i]

        cached = self._cache.get(i)
        if cached is not None:
            self._cache.move_to_end(i)
            return cached

        k_row = self.method(self.records[i:i + 1], self.records)[0]
        k_row.flags.writeable = False

        if self.cache_size > 0:
            self._cache[i] = k_row
            if len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)
        return k_row

    def diagonal(self) -> np.ndarray:
        """Диагональ K[i, i] для всех i (используется очень часто, считается один раз)."""
        if self._diagonal is None:
            if self._matrix is not None:
                diag = np.array(np.diag(self._matrix))
            else:
                diag = np.array([
                    self.method(x[None, :], x[None, :])[0, 0] for x in self.records
                ])
            diag.flags.writeable = False
            self._diagonal = diag
        return self._diagonal

    def evaluate(self, X: np.ndarray) -> np.ndarray:
        """Значения ядра между новыми точками X (m, d) и всеми записями оракула."""
        if self.records is None:
            raise ValueError("Precomputed kernel cannot be evaluated on new records")
        X = np.atleast_2d(np.asarray(X, dtype=np.float64))
        return self.method(X, self.records)
