"""
Обученная SVM модель: решение SMO + всё, что нужно для предсказаний.

Модель хранит собственную копию записей с ненулевым коэффициентом, а не
ссылку на оракул обучения, поэтому остаётся рабочей после удаления
обучающих данных. Для линейного ядра взвешенная сумма по опорным векторам
один раз сворачивается в вектор весов w, и предсказание стоит O(n_features).

Решающая функция:
    f(x) = Σ_i α_i K(x, x_i) - rho

    где α_i уже содержит знак метки для классификации (α_i y_i в
    обозначениях двойственной задачи).
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .kernel import Kernel, KernelMethod
from .solver_smo import SV_THRESHOLD, ExitReason

logger = logging.getLogger(__name__)


class Task(Enum):
    """Какая решающая функция применяется к модели."""
    CLASSIFICATION = "classification"
    REGRESSION = "regression"
    ONE_CLASS = "one_class"


class Svm:
    """
    Результат обучения SVM.

    Attributes:
        alpha: Коэффициенты по всем обучающим примерам (n_samples,)
        rho: Смещение решающей функции
        r: Второе смещение nu-солвера (для Nu-SVR ширина трубки = -r)
        obj: Значение целевой функции солвера
        iterations: Количество итераций SMO
        exit_reason: Причина остановки SMO
        task: Тип задачи
        linear_decision: w = Σ α_i x_i для линейного ядра, иначе None
    """

    def __init__(
        self,
        alpha: np.ndarray,
        rho: float,
        task: Task,
        exit_reason: ExitReason,
        iterations: int,
        obj: float,
        r: Optional[float] = None,
        kernel_method: Optional[KernelMethod] = None,
        sv_records: Optional[np.ndarray] = None,
        sv_indices: Optional[np.ndarray] = None,
        linear_decision: Optional[np.ndarray] = None
    ):
        self.alpha = np.array(alpha, dtype=np.float64)
        self.alpha.flags.writeable = False
        self.rho = float(rho)
        self.r = None if r is None else float(r)
        self.task = task
        self.exit_reason = exit_reason
        self.iterations = int(iterations)
        self.obj = float(obj)
        self.kernel_method = kernel_method
        self.sv_indices = (
            np.flatnonzero(self.alpha) if sv_indices is None else np.asarray(sv_indices, dtype=np.int64)
        )
        self.sv_records = sv_records
        self.linear_decision = linear_decision

    @classmethod
    def from_solution(
        cls,
        alpha: np.ndarray,
        rho: float,
        kernel: Kernel,
        task: Task,
        exit_reason: ExitReason,
        iterations: int,
        obj: float,
        r: Optional[float] = None
    ) -> "Svm":
        """Собирает модель из коэффициентов и оракула, на котором она обучалась."""
        alpha = np.asarray(alpha, dtype=np.float64)
        sv_indices = np.flatnonzero(alpha)

        sv_records = None
        linear_decision = None
        if kernel.records is not None:
            sv_records = np.array(kernel.records[sv_indices])
            if kernel.is_linear:
                # w = Σ α_i x_i
                linear_decision = sv_records.T @ alpha[sv_indices]

        return cls(
            alpha=alpha,
            rho=rho,
            task=task,
            exit_reason=exit_reason,
            iterations=iterations,
            obj=obj,
            r=r,
            kernel_method=kernel.method,
            sv_records=sv_records,
            sv_indices=sv_indices,
            linear_decision=linear_decision
        )

    # -------------------------------------------------------------------------
    # Сводка
    # -------------------------------------------------------------------------

    def nsupport(self) -> int:
        """Количество опорных векторов (|α| > 1e-5)."""
        return int(np.sum(np.abs(self.alpha) > SV_THRESHOLD))

    def support_indices(self) -> np.ndarray:
        """Индексы обучающих примеров, являющихся опорными векторами."""
        return np.flatnonzero(np.abs(self.alpha) > SV_THRESHOLD)

    @property
    def converged(self) -> bool:
        return self.exit_reason is ExitReason.REACHED_THRESHOLD

    @property
    def epsilon(self) -> Optional[float]:
        """Найденная ширина трубки Nu-SVR."""
        if self.task is Task.REGRESSION and self.r is not None:
            return -self.r
        return None

    def __str__(self) -> str:
        if self.exit_reason is ExitReason.REACHED_THRESHOLD:
            return (f"Exited after {self.iterations} iterations with obj = {self.obj} "
                    f"and {self.nsupport()} support vectors")
        return (f"Reached maximal iterations {self.iterations} with obj = {self.obj} "
                f"and {self.nsupport()} support vectors")

    def __repr__(self) -> str:
        return (f"Svm(task={self.task.value}, rho={self.rho:.6f}, "
                f"nsupport={self.nsupport()}, exit_reason={self.exit_reason.value})")

    # -------------------------------------------------------------------------
    # Предсказания
    # -------------------------------------------------------------------------

    def weighted_sum(self, X: np.ndarray) -> np.ndarray:
        """Σ_i α_i K(x, x_i) для каждой строки X (m,)."""
        X = np.atleast_2d(np.asarray(X, dtype=np.float64))

        if self.linear_decision is not None:
            return X @ self.linear_decision
        if self.sv_records is None:
            raise ValueError(
                "Model was trained on a precomputed kernel, use decision_function_precomputed"
            )
        if self.sv_indices.size == 0:
            return np.zeros(X.shape[0])

        K = self.kernel_method(X, self.sv_records)
        return K @ self.alpha[self.sv_indices]

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        """
        Значение решающей функции.

        Классификация и one-class: знаковое расстояние до разделяющей
        поверхности. Регрессия: предсказанное значение.
        """
        return self.weighted_sum(X) - self.rho

    def decision_function_precomputed(self, K: np.ndarray) -> np.ndarray:
        """
        Решающая функция по заранее посчитанным значениям ядра.

        Args:
            K: Значения ядра между новыми точками и ВСЕМИ обучающими примерами
               (m, n_samples)
        """
        K = np.atleast_2d(np.asarray(K, dtype=np.float64))
        if K.shape[1] != self.alpha.shape[0]:
            raise ValueError(
                f"Expected kernel values of shape (m, {self.alpha.shape[0]}), got {K.shape}"
            )
        return K @ self.alpha - self.rho

    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Классификация: метки {-1, +1}. One-class: +1 для inlier, -1 для выброса.
        Регрессия: значения решающей функции.
        """
        decision = self.decision_function(X)
        if self.task is Task.REGRESSION:
            return decision
        return np.where(decision >= 0, 1.0, -1.0)

    # -------------------------------------------------------------------------
    # Сохранение
    # -------------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """
        Сохраняет модель в .npz: коэффициенты, смещения, опорные записи и
        параметры ядра. Внутреннее состояние солвера не сохраняется.
        """
        if self.kernel_method is None or self.sv_records is None:
            raise ValueError("Model trained on a precomputed kernel cannot be saved")

        meta = {
            "task": self.task.value,
            "exit_reason": self.exit_reason.value,
            "iterations": self.iterations,
            "obj": self.obj,
            "rho": self.rho,
            "r": self.r,
            "kernel": self.kernel_method.to_dict(),
        }
        np.savez(
            path,
            alpha=self.alpha,
            sv_indices=self.sv_indices,
            sv_records=self.sv_records,
            meta=np.array(json.dumps(meta))
        )
        logger.debug("Model saved to %s", path)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Svm":
        with np.load(path, allow_pickle=False) as data:
            meta = json.loads(str(data["meta"]))
            alpha = data["alpha"]
            sv_indices = data["sv_indices"]
            sv_records = data["sv_records"]

        kernel_method = KernelMethod.from_dict(meta["kernel"])
        linear_decision = None
        if kernel_method.is_linear:
            linear_decision = sv_records.T @ alpha[sv_indices]

        return cls(
            alpha=alpha,
            rho=meta["rho"],
            task=Task(meta["task"]),
            exit_reason=ExitReason(meta["exit_reason"]),
            iterations=meta["iterations"],
            obj=meta["obj"],
            r=meta["r"],
            kernel_method=kernel_method,
            sv_records=sv_records,
            sv_indices=sv_indices,
            linear_decision=linear_decision
        )
