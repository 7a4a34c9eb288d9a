"""
Регрессия опорных векторов: epsilon-SVR и Nu-SVR.

Каждой записи соответствует пара переменных (α_i, α_i*), всего 2n:

epsilon-SVR:
    min 1/2 (α - α*)^T K (α - α*) + ε Σ (α_i + α_i*) - Σ t_i (α_i - α_i*)
    s.t. Σ (α_i - α_i*) = 0,  0 ≤ α_i, α_i* ≤ C

Nu-SVR:
    min 1/2 (α - α*)^T K (α - α*) - Σ t_i (α_i - α_i*)
    s.t. Σ (α_i - α_i*) = 0,  Σ (α_i + α_i*) = C ν n,  0 ≤ α_i, α_i* ≤ C
    Ширина трубки ε не задаётся, а находится солвером: ε = -r.

Итоговый коэффициент записи: α_i - α_i*.
"""

import logging

import numpy as np

from .errors import SvmParamsError
from .kernel import Kernel
from .model import Svm, Task
from .qmatrix import SvrQ
from .solver_smo import SMOSolver, SolverParams

logger = logging.getLogger(__name__)


def _regression_targets(kernel: Kernel, targets) -> np.ndarray:
    targets = np.asarray(targets, dtype=np.float64)
    if targets.ndim != 1:
        raise SvmParamsError(f"Targets должны быть одномерными, получено ndim={targets.ndim}")
    if targets.shape[0] != kernel.size:
        raise SvmParamsError(
            f"Число targets ({targets.shape[0]}) не совпадает с размером ядра ({kernel.size})"
        )
    if kernel.size == 0:
        raise SvmParamsError("Пустой набор данных")
    if not np.all(np.isfinite(targets)):
        raise SvmParamsError("Targets содержат NaN или inf")
    return targets


def fit_epsilon(
    params: SolverParams,
    kernel: Kernel,
    targets,
    c: float,
    eps: float
) -> Svm:
    """
    epsilon-SVR: отклонения меньше eps не штрафуются.

    Args:
        params: Параметры солвера
        kernel: Оракул ядра
        targets: Целевые значения (n_samples,)
        c: Штраф C за выход из трубки
        eps: Полуширина нечувствительной трубки
    """
    if not c > 0:
        raise SvmParamsError(f"C должно быть > 0, получено {c}")
    if not eps >= 0:
        raise SvmParamsError(f"eps должно быть >= 0, получено {eps}")

    t = _regression_targets(kernel, targets)
    n = kernel.size

    solver = SMOSolver(
        SvrQ(kernel),
        linear_term=np.concatenate([eps - t, eps + t]),
        targets=np.concatenate([np.ones(n), -np.ones(n)]),
        alpha=np.zeros(2 * n),
        bounds=np.full(2 * n, c),
        params=params
    )
    result = solver.solve()

    model = Svm.from_solution(
        alpha=result.alpha[:n] - result.alpha[n:],
        rho=result.rho,
        kernel=kernel,
        task=Task.REGRESSION,
        exit_reason=result.exit_reason,
        iterations=result.n_iterations,
        obj=result.objective_value
    )
    logger.debug("epsilon-SVR fitted: %s", model)
    return model


def fit_nu(
    params: SolverParams,
    kernel: Kernel,
    targets,
    nu: float,
    c: float
) -> Svm:
    """
    Nu-SVR: ν ∈ (0, 1] задаёт долю опорных векторов, ширина трубки
    находится как часть решения.
    """
    if not 0 < nu <= 1:
        raise SvmParamsError(f"nu должно быть в (0, 1], получено {nu}")
    if not c > 0:
        raise SvmParamsError(f"C должно быть > 0, получено {c}")

    t = _regression_targets(kernel, targets)
    n = kernel.size

    alpha = np.zeros(2 * n)
    remaining = c * nu * n / 2
    for i in range(n):
        alpha[i] = alpha[i + n] = min(remaining, c)
        remaining -= alpha[i]

    solver = SMOSolver(
        SvrQ(kernel),
        linear_term=np.concatenate([-t, t]),
        targets=np.concatenate([np.ones(n), -np.ones(n)]),
        alpha=alpha,
        bounds=np.full(2 * n, c),
        params=params,
        nu_constraint=True
    )
    result = solver.solve()

    model = Svm.from_solution(
        alpha=result.alpha[:n] - result.alpha[n:],
        rho=result.rho,
        kernel=kernel,
        task=Task.REGRESSION,
        exit_reason=result.exit_reason,
        iterations=result.n_iterations,
        obj=result.objective_value,
        r=result.r
    )
    if params.verbose:
        logger.info("Nu-SVR solved tube width epsilon = %.6f", model.epsilon)
    logger.debug("Nu-SVR fitted: %s", model)
    return model
