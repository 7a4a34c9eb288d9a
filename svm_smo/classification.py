"""
Классификация: C-SVC (с весами классов), Nu-SVC и one-class SVM.

Каждая функция переводит задачу в каноническую форму SMO:

C-SVC:
    min_α 1/2 α^T Q α - e^T α,   Q_ij = y_i y_j K_ij
    s.t. y^T α = 0,  0 ≤ α_i ≤ C_pos (y_i = +1) или C_neg (y_i = -1)

Nu-SVC:
    min_α 1/2 α^T Q α
    s.t. y^T α = 0,  e^T α = ν n,  0 ≤ α_i ≤ 1
    Начальное α: по ν n / 2 на каждый класс.
    Ответ масштабируется на найденное r: α /= r, rho /= r, obj /= r^2.

One-class:
    min_α 1/2 α^T K α
    s.t. e^T α = 1,  0 ≤ α_i ≤ 1 / (ν n)
"""

import logging

import numpy as np

from .errors import SvmParamsError
from .kernel import Kernel
from .model import Svm, Task
from .qmatrix import OneClassQ, SvcQ
from .solver_smo import SMOSolver, SolverParams

logger = logging.getLogger(__name__)


def _signed_targets(kernel: Kernel, targets) -> np.ndarray:
    """Метки {0, 1}, {-1, +1} или bool -> {-1.0, +1.0}."""
    targets = np.asarray(targets)
    if targets.ndim != 1:
        raise SvmParamsError(f"Метки должны быть одномерными, получено ndim={targets.ndim}")
    if targets.shape[0] != kernel.size:
        raise SvmParamsError(
            f"Число меток ({targets.shape[0]}) не совпадает с размером ядра ({kernel.size})"
        )
    if kernel.size == 0:
        raise SvmParamsError("Пустой набор данных")
    return np.where(targets > 0, 1.0, -1.0)


def fit_c(
    params: SolverParams,
    kernel: Kernel,
    targets,
    c_pos: float,
    c_neg: float
) -> Svm:
    """
    C-SVC с отдельными штрафами для положительного и отрицательного классов.

    Args:
        params: Параметры солвера
        kernel: Оракул ядра по обучающим записям
        targets: Метки классов (n_samples,)
        c_pos: Штраф C для y = +1
        c_neg: Штраф C для y = -1
    """
    if not (c_pos > 0 and c_neg > 0):
        raise SvmParamsError(f"C должно быть > 0, получено C_pos={c_pos}, C_neg={c_neg}")

    y = _signed_targets(kernel, targets)
    n = kernel.size

    bounds = np.where(y > 0, c_pos, c_neg)
    solver = SMOSolver(
        SvcQ(kernel, y),
        linear_term=-np.ones(n),
        targets=y,
        alpha=np.zeros(n),
        bounds=bounds,
        params=params
    )
    result = solver.solve()

    model = Svm.from_solution(
        alpha=result.alpha * y,
        rho=result.rho,
        kernel=kernel,
        task=Task.CLASSIFICATION,
        exit_reason=result.exit_reason,
        iterations=result.n_iterations,
        obj=result.objective_value
    )
    logger.debug("C-SVC fitted: %s", model)
    return model


def fit_nu(params: SolverParams, kernel: Kernel, targets, nu: float) -> Svm:
    """
    Nu-SVC: ν ∈ (0, 1] ограничивает снизу долю опорных векторов и сверху
    долю ошибок на обучении.
    """
    if not 0 < nu <= 1:
        raise SvmParamsError(f"nu должно быть в (0, 1], получено {nu}")

    y = _signed_targets(kernel, targets)
    n = kernel.size

    n_pos = int(np.sum(y > 0))
    n_neg = n - n_pos
    if nu * n / 2 > min(n_pos, n_neg):
        raise SvmParamsError(
            f"nu={nu} недопустимо для {n_pos} положительных и {n_neg} отрицательных примеров"
        )

    alpha = np.zeros(n)
    sum_pos = nu * n / 2
    sum_neg = nu * n / 2
    for i in range(n):
        if y[i] > 0:
            alpha[i] = min(1.0, sum_pos)
            sum_pos -= alpha[i]
        else:
            alpha[i] = min(1.0, sum_neg)
            sum_neg -= alpha[i]

    solver = SMOSolver(
        SvcQ(kernel, y),
        linear_term=np.zeros(n),
        targets=y,
        alpha=alpha,
        bounds=np.ones(n),
        params=params,
        nu_constraint=True
    )
    result = solver.solve()

    r = result.r
    if params.verbose:
        logger.info("Nu-SVC solved with r = %.6f", r)
    if not r > 0:
        # Вырожденный зазор: ответ нельзя отмасштабировать
        raise SvmParamsError(
            f"Nu-SVC: вырожденный зазор (r = {r}), классы неразличимы для данного ядра"
        )

    model = Svm.from_solution(
        alpha=result.alpha * y / r,
        rho=result.rho / r,
        kernel=kernel,
        task=Task.CLASSIFICATION,
        exit_reason=result.exit_reason,
        iterations=result.n_iterations,
        obj=result.objective_value / (r * r),
        r=r
    )
    logger.debug("Nu-SVC fitted: %s", model)
    return model


def fit_one_class(params: SolverParams, kernel: Kernel, nu: float) -> Svm:
    """
    One-class SVM: отделяет основную массу данных от выбросов.

    ν ∈ (0, 1] - верхняя граница доли выбросов и нижняя граница доли
    опорных векторов.
    """
    if not 0 < nu <= 1:
        raise SvmParamsError(f"nu должно быть в (0, 1], получено {nu}")
    n = kernel.size
    if n == 0:
        raise SvmParamsError("Пустой набор данных")

    bound = 1.0 / (nu * n)

    # Первые floor(ν n) переменных на верхней границе, остаток - в следующую
    n_full = int(nu * n)
    alpha = np.zeros(n)
    alpha[:n_full] = bound
    if n_full < n:
        alpha[n_full] = min(bound, max(0.0, (nu * n - n_full) * bound))

    solver = SMOSolver(
        OneClassQ(kernel),
        linear_term=np.zeros(n),
        targets=np.ones(n),
        alpha=alpha,
        bounds=np.full(n, bound),
        params=params
    )
    result = solver.solve()

    model = Svm.from_solution(
        alpha=result.alpha,
        rho=result.rho,
        kernel=kernel,
        task=Task.ONE_CLASS,
        exit_reason=result.exit_reason,
        iterations=result.n_iterations,
        obj=result.objective_value
    )
    logger.debug("One-class SVM fitted: %s", model)
    return model
