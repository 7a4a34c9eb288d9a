"""
Sequential Minimal Optimization (SMO) солвер для двойственной задачи SVM.

Все задачи (C-SVC, Nu-SVC, one-class, epsilon-SVR, Nu-SVR) приводятся к
одной канонической форме:

    min_α 1/2 α^T Q α + p^T α

    s.t. Σ_i y_i α_i = Δ         (ограничение равенства)
         0 ≤ α_i ≤ C_i           (box constraints)

    где Q_ij = y_i y_j K(x_i, x_j) (или её вариант для задачи, см. qmatrix.py)
        y_i ∈ {-1, +1}

Градиент G = Q α + p поддерживается точно после каждого шага: это главный
инвариант солвера.

Алгоритм основан на работах:
- Platt, J. (1998). "Sequential Minimal Optimization: A Fast Algorithm for Training SVMs"
- Fan, R.-E., Chen, P.-H., & Lin, C.-J. (2005). "Working Set Selection Using Second Order Information"
- Chang, C.-C., & Lin, C.-J. (2011). "LIBSVM: A Library for Support Vector Machines"
  (Nu-вариант выбора пары, shrinking и восстановление градиента)

Оптимизации:
- Numba JIT для циклов выбора пары, обновления пары, shrinking и вычисления rho
- Строки Q запрашиваются у оракула ядра по мере надобности (LRU-кэш в Kernel)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

import numpy as np
from numba import njit

from .errors import SvmParamsError

logger = logging.getLogger(__name__)


# Порог |α|, начиная с которого пример считается опорным вектором
SV_THRESHOLD = 1e-5


class ExitReason(Enum):
    """Причина остановки SMO."""
    REACHED_THRESHOLD = "reached_threshold"    # нарушение KKT < eps
    REACHED_ITERATIONS = "reached_iterations"  # исчерпан лимит итераций


@dataclass
class SolverParams:
    """Параметры SMO солвера."""
    eps: float = 1e-7                 # Порог остановки по нарушению KKT
    shrinking: bool = False           # Сжимать активное множество
    max_iter: int = 100_000           # Лимит итераций
    shrinking_interval: int = 1000    # Как часто пытаться сжать активное множество
    unshrink_factor: float = 10.0     # Полная реконструкция при нарушении < unshrink_factor * eps
    tau: float = 1e-12                # Нижняя граница кривизны
    verbose: bool = False

    def validate(self) -> None:
        if not self.eps > 0:
            raise SvmParamsError(f"eps должно быть > 0, получено {self.eps}")
        if self.max_iter < 1:
            raise SvmParamsError(f"max_iter должно быть >= 1, получено {self.max_iter}")
        if self.shrinking_interval < 1:
            raise SvmParamsError(
                f"shrinking_interval должно быть >= 1, получено {self.shrinking_interval}"
            )
        if not self.unshrink_factor > 0:
            raise SvmParamsError(
                f"unshrink_factor должно быть > 0, получено {self.unshrink_factor}"
            )
        if not self.tau > 0:
            raise SvmParamsError(f"tau должно быть > 0, получено {self.tau}")


@dataclass
class SMOResult:
    """Результат работы SMO солвера."""
    alpha: np.ndarray          # Решение α (в канонической форме)
    gradient: np.ndarray       # Градиент Q α + p в точке решения
    rho: float                 # Смещение
    r: Optional[float]         # Второе смещение (только nu-вариант)
    objective_value: float     # 1/2 α^T Q α + p^T α
    n_iterations: int          # Количество итераций
    exit_reason: ExitReason

    @property
    def converged(self) -> bool:
        return self.exit_reason is ExitReason.REACHED_THRESHOLD

    @property
    def n_support_vectors(self) -> int:
        return int(np.sum(np.abs(self.alpha) > SV_THRESHOLD))


# =============================================================================
# Numba-оптимизированные функции SMO
# =============================================================================

@njit(cache=True)
def select_max_violator(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray
) -> Tuple[int, float]:
    """
    Первая переменная пары: i = argmax_{t ∈ I_up} -y_t G_t.

    I_up: α_t < C_t для y_t > 0, или α_t > 0 для y_t < 0.

    Returns:
        (i, -y_i G_i), i = -1 если I_up пусто
    """
    gmax = -np.inf
    gmax_idx = -1

    for k in range(active.shape[0]):
        t = active[k]
        if y[t] > 0:
            if alpha[t] < C[t]:
                if -gradient[t] >= gmax:
                    gmax = -gradient[t]
                    gmax_idx = t
        else:
            if alpha[t] > 0.0:
                if gradient[t] >= gmax:
                    gmax = gradient[t]
                    gmax_idx = t

    return gmax_idx, gmax


@njit(cache=True)
def select_min_partner(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray,
    QD: np.ndarray,
    Q_i: np.ndarray,
    i: int,
    gmax: float,
    tau: float
) -> Tuple[int, float]:
    """
    Вторая переменная пары (WSS3, второй порядок).

    Среди j ∈ I_low с -y_j G_j < gmax минимизирует оценку изменения цели
        -(gmax + y_j G_j)^2 / max(Q_ii + Q_jj - 2 y_i y_j Q_ij, tau)

    Returns:
        (j, max_{j ∈ I_low} y_j G_j), j = -1 если подходящей пары нет
    """
    gmax2 = -np.inf
    gmin_idx = -1
    obj_diff_min = np.inf

    for k in range(active.shape[0]):
        j = active[k]
        if y[j] > 0:
            if alpha[j] > 0.0:
                grad_diff = gmax + gradient[j]
                if gradient[j] >= gmax2:
                    gmax2 = gradient[j]
                if grad_diff > 0.0:
                    quad_coef = QD[i] + QD[j] - 2.0 * y[i] * Q_i[j]
                    if quad_coef <= tau:
                        quad_coef = tau
                    obj_diff = -(grad_diff * grad_diff) / quad_coef
                    if obj_diff <= obj_diff_min:
                        gmin_idx = j
                        obj_diff_min = obj_diff
        else:
            if alpha[j] < C[j]:
                grad_diff = gmax - gradient[j]
                if -gradient[j] >= gmax2:
                    gmax2 = -gradient[j]
                if grad_diff > 0.0:
                    quad_coef = QD[i] + QD[j] + 2.0 * y[i] * Q_i[j]
                    if quad_coef <= tau:
                        quad_coef = tau
                    obj_diff = -(grad_diff * grad_diff) / quad_coef
                    if obj_diff <= obj_diff_min:
                        gmin_idx = j
                        obj_diff_min = obj_diff

    return gmin_idx, gmax2


@njit(cache=True)
def select_max_violators_nu(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray
) -> Tuple[int, float, int, float]:
    """
    Кандидаты на первую переменную отдельно для y = +1 и y = -1.

    Returns:
        (ip, gmaxp, in, gmaxn)
    """
    gmaxp = -np.inf
    gmaxp_idx = -1
    gmaxn = -np.inf
    gmaxn_idx = -1

    for k in range(active.shape[0]):
        t = active[k]
        if y[t] > 0:
            if alpha[t] < C[t]:
                if -gradient[t] >= gmaxp:
                    gmaxp = -gradient[t]
                    gmaxp_idx = t
        else:
            if alpha[t] > 0.0:
                if gradient[t] >= gmaxn:
                    gmaxn = gradient[t]
                    gmaxn_idx = t

    return gmaxp_idx, gmaxp, gmaxn_idx, gmaxn


@njit(cache=True)
def select_min_partner_nu(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray,
    QD: np.ndarray,
    Q_ip: np.ndarray,
    Q_in: np.ndarray,
    ip: int,
    gmaxp: float,
    i_n: int,
    gmaxn: float,
    tau: float
) -> Tuple[int, float, float]:
    """
    Вторая переменная пары для nu-задач: партнёр ищется в той же группе меток,
    т.к. дополнительное ограничение требует сохранять Σ α отдельно по группам.

    Returns:
        (j, gmaxp2, gmaxn2)
    """
    gmaxp2 = -np.inf
    gmaxn2 = -np.inf
    gmin_idx = -1
    obj_diff_min = np.inf

    for k in range(active.shape[0]):
        j = active[k]
        if y[j] > 0:
            if alpha[j] > 0.0:
                grad_diff = gmaxp + gradient[j]
                if gradient[j] >= gmaxp2:
                    gmaxp2 = gradient[j]
                if grad_diff > 0.0:
                    quad_coef = QD[ip] + QD[j] - 2.0 * Q_ip[j]
                    if quad_coef <= tau:
                        quad_coef = tau
                    obj_diff = -(grad_diff * grad_diff) / quad_coef
                    if obj_diff <= obj_diff_min:
                        gmin_idx = j
                        obj_diff_min = obj_diff
        else:
            if alpha[j] < C[j]:
                grad_diff = gmaxn - gradient[j]
                if -gradient[j] >= gmaxn2:
                    gmaxn2 = -gradient[j]
                if grad_diff > 0.0:
                    quad_coef = QD[i_n] + QD[j] - 2.0 * Q_in[j]
                    if quad_coef <= tau:
                        quad_coef = tau
                    obj_diff = -(grad_diff * grad_diff) / quad_coef
                    if obj_diff <= obj_diff_min:
                        gmin_idx = j
                        obj_diff_min = obj_diff

    return gmin_idx, gmaxp2, gmaxn2


@njit(cache=True)
def update_pair(
    alpha_i: float,
    alpha_j: float,
    y_i: float,
    y_j: float,
    C_i: float,
    C_j: float,
    QD_i: float,
    QD_j: float,
    Q_ij: float,
    G_i: float,
    G_j: float,
    tau: float
) -> Tuple[float, float]:
    """
    Аналитический шаг по паре (α_i, α_j) с отсечением по box constraints.

    y_i ≠ y_j: сохраняется α_i - α_j
    y_i = y_j: сохраняется α_i + α_j
    Так ограничение равенства выполняется алгебраически, без перенормировки.

    Returns:
        (new_alpha_i, new_alpha_j)
    """
    if y_i != y_j:
        # Q_ij = -K_ij, поэтому η = K_ii + K_jj - 2 K_ij
        quad_coef = QD_i + QD_j + 2.0 * Q_ij
        if quad_coef <= tau:
            quad_coef = tau
        delta = (-G_i - G_j) / quad_coef
        diff = alpha_i - alpha_j
        alpha_i += delta
        alpha_j += delta

        if diff > 0.0:
            if alpha_j < 0.0:
                alpha_j = 0.0
                alpha_i = diff
        else:
            if alpha_i < 0.0:
                alpha_i = 0.0
                alpha_j = -diff
        if diff > C_i - C_j:
            if alpha_i > C_i:
                alpha_i = C_i
                alpha_j = C_i - diff
        else:
            if alpha_j > C_j:
                alpha_j = C_j
                alpha_i = C_j + diff
    else:
        quad_coef = QD_i + QD_j - 2.0 * Q_ij
        if quad_coef <= tau:
            quad_coef = tau
        delta = (G_i - G_j) / quad_coef
        total = alpha_i + alpha_j
        alpha_i -= delta
        alpha_j += delta

        if total > C_i:
            if alpha_i > C_i:
                alpha_i = C_i
                alpha_j = total - C_i
        else:
            if alpha_j < 0.0:
                alpha_j = 0.0
                alpha_i = total
        if total > C_j:
            if alpha_j > C_j:
                alpha_j = C_j
                alpha_i = total - C_j
        else:
            if alpha_i < 0.0:
                alpha_i = 0.0
                alpha_j = total

    return alpha_i, alpha_j


@njit(cache=True)
def shrinking_gaps(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray
) -> Tuple[float, float, float, float]:
    """
    Максимальные "допустимые" градиенты по группам активного множества.

    Returns:
        g1 = max -G (y=+1, α<C), g2 = max G (y=+1, α>0),
        g3 = max -G (y=-1, α<C), g4 = max G (y=-1, α>0)
    """
    g1 = -np.inf
    g2 = -np.inf
    g3 = -np.inf
    g4 = -np.inf

    for k in range(active.shape[0]):
        t = active[k]
        if y[t] > 0:
            if alpha[t] < C[t]:
                g1 = max(g1, -gradient[t])
            if alpha[t] > 0.0:
                g2 = max(g2, gradient[t])
        else:
            if alpha[t] < C[t]:
                g3 = max(g3, -gradient[t])
            if alpha[t] > 0.0:
                g4 = max(g4, gradient[t])

    return g1, g2, g3, g4


@njit(cache=True)
def shrink_mask(
    active: np.ndarray,
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray,
    up_pos: float,
    up_neg: float,
    low_pos: float,
    low_neg: float
) -> np.ndarray:
    """
    Маска активных переменных, которые остаются после сжатия.

    Переменная на границе выбрасывается, если её градиент хуже текущего
    лучшего нарушения: в ближайшие итерации она не будет выбрана.
    """
    keep = np.ones(active.shape[0], dtype=np.bool_)

    for k in range(active.shape[0]):
        t = active[k]
        shrunk = False
        if alpha[t] >= C[t]:
            if y[t] > 0:
                shrunk = -gradient[t] > up_pos
            else:
                shrunk = -gradient[t] > up_neg
        elif alpha[t] <= 0.0:
            if y[t] > 0:
                shrunk = gradient[t] > low_pos
            else:
                shrunk = gradient[t] > low_neg
        keep[k] = not shrunk

    return keep


@njit(cache=True)
def bound_midpoint(lb: float, ub: float) -> float:
    """Середина интервала [lb, ub] с учётом незаданных границ."""
    if np.isfinite(lb) and np.isfinite(ub):
        return (lb + ub) / 2.0
    if np.isfinite(lb):
        return lb
    if np.isfinite(ub):
        return ub
    return 0.0


@njit(cache=True)
def calculate_rho(
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray
) -> float:
    """
    Смещение rho из KKT условий.

    Свободные SV (0 < α_i < C_i): rho = y_i G_i, берётся среднее.
    Если свободных нет, используется середина интервала, заданного
    граничными переменными.
    """
    ub = np.inf
    lb = -np.inf
    n_free = 0
    sum_free = 0.0

    for i in range(alpha.shape[0]):
        yG = y[i] * gradient[i]
        if alpha[i] >= C[i]:
            if y[i] < 0:
                ub = min(ub, yG)
            else:
                lb = max(lb, yG)
        elif alpha[i] <= 0.0:
            if y[i] > 0:
                ub = min(ub, yG)
            else:
                lb = max(lb, yG)
        else:
            n_free += 1
            sum_free += yG

    if n_free > 0:
        return sum_free / n_free
    return bound_midpoint(lb, ub)


@njit(cache=True)
def calculate_rho_nu(
    alpha: np.ndarray,
    gradient: np.ndarray,
    y: np.ndarray,
    C: np.ndarray
) -> Tuple[float, float]:
    """
    Смещения для nu-задач: r1 по группе y=+1 и r2 по группе y=-1.

    Returns:
        (rho, r) = ((r1 - r2) / 2, (r1 + r2) / 2)
    """
    ub1 = np.inf
    ub2 = np.inf
    lb1 = -np.inf
    lb2 = -np.inf
    n_free1 = 0
    n_free2 = 0
    sum_free1 = 0.0
    sum_free2 = 0.0

    for i in range(alpha.shape[0]):
        if y[i] > 0:
            if alpha[i] >= C[i]:
                lb1 = max(lb1, gradient[i])
            elif alpha[i] <= 0.0:
                ub1 = min(ub1, gradient[i])
            else:
                n_free1 += 1
                sum_free1 += gradient[i]
        else:
            if alpha[i] >= C[i]:
                lb2 = max(lb2, gradient[i])
            elif alpha[i] <= 0.0:
                ub2 = min(ub2, gradient[i])
            else:
                n_free2 += 1
                sum_free2 += gradient[i]

    if n_free1 > 0:
        r1 = sum_free1 / n_free1
    else:
        r1 = bound_midpoint(lb1, ub1)
    if n_free2 > 0:
        r2 = sum_free2 / n_free2
    else:
        r2 = bound_midpoint(lb2, ub2)

    return (r1 - r2) / 2.0, (r1 + r2) / 2.0


# =============================================================================
# Основной класс солвера
# =============================================================================

class SMOSolver:
    """
    SMO для канонической двойственной задачи.

    Одна итерация: выбор пары (i, j) -> аналитический шаг по паре ->
    обновление градиента по всем n переменным -> (иногда) сжатие
    активного множества.

    С nu_constraint=True используется вариант для Nu-SVC / Nu-SVR с
    дополнительным ограничением: пары выбираются внутри одной группы меток,
    а в конце вычисляется пара смещений (rho, r).
    """

    def __init__(
        self,
        q,
        linear_term: np.ndarray,
        targets: np.ndarray,
        alpha: np.ndarray,
        bounds: np.ndarray,
        params: Optional[SolverParams] = None,
        nu_constraint: bool = False
    ):
        """
        Args:
            q: Матрица Q задачи (SvcQ, OneClassQ, SvrQ): size, row(i), diagonal()
            linear_term: Линейный член p (n,)
            targets: Знаки y (n,), значения {-1, +1}
            alpha: Допустимое начальное α (n,)
            bounds: Верхние границы C_i (n,)
            params: Параметры солвера
            nu_constraint: Использовать nu-вариант
        """
        self.params = params if params is not None else SolverParams()
        self.params.validate()

        n = q.size
        self.q = q
        self.p = np.ascontiguousarray(linear_term, dtype=np.float64)
        self.y = np.ascontiguousarray(np.where(np.asarray(targets) > 0, 1.0, -1.0))
        self.alpha = np.array(alpha, dtype=np.float64)
        self.C = np.ascontiguousarray(bounds, dtype=np.float64)
        self.nu_constraint = nu_constraint

        for name, arr in (("linear_term", self.p), ("targets", self.y),
                          ("alpha", self.alpha), ("bounds", self.C)):
            if arr.shape != (n,):
                raise SvmParamsError(f"{name}: ожидалась форма ({n},), получено {arr.shape}")
        if np.any(self.C <= 0):
            raise SvmParamsError("Все верхние границы C_i должны быть > 0")
        if np.any(self.alpha < 0) or np.any(self.alpha > self.C):
            raise SvmParamsError("Начальное α вне box constraints")

        self.QD = np.ascontiguousarray(q.diagonal(), dtype=np.float64)
        self.active = np.arange(n, dtype=np.int64)
        self.unshrink = False
        self._zero_row = np.zeros(n, dtype=np.float64)

        self.gradient = self._full_gradient()

    @property
    def size(self) -> int:
        return self.q.size

    def _full_gradient(self) -> np.ndarray:
        """G = p + Σ_{α_j > 0} α_j Q[:, j], вычисленный с нуля."""
        gradient = self.p.copy()
        for idx in np.flatnonzero(self.alpha > 0.0):
            gradient += self.alpha[idx] * self.q.row(idx)
        return gradient

    def _reconstruct_gradient(self) -> None:
        """Снимает сжатие: полный пересчёт градиента и возврат всех переменных."""
        self.gradient = self._full_gradient()
        self.active = np.arange(self.size, dtype=np.int64)

    def _row_or_zero(self, i: int) -> np.ndarray:
        return self.q.row(i) if i >= 0 else self._zero_row

    def select_working_set(self) -> Tuple[int, int, float]:
        """
        Выбор максимально нарушающей KKT пары.

        Returns:
            (i, j, violation); j = -1 означает, что допустимой пары нет
            (решение оптимально)
        """
        tau = self.params.tau

        if self.nu_constraint:
            ip, gmaxp, i_n, gmaxn = select_max_violators_nu(
                self.active, self.alpha, self.gradient, self.y, self.C
            )
            j, gmaxp2, gmaxn2 = select_min_partner_nu(
                self.active, self.alpha, self.gradient, self.y, self.C, self.QD,
                self._row_or_zero(ip), self._row_or_zero(i_n),
                ip, gmaxp, i_n, gmaxn, tau
            )
            violation = max(gmaxp + gmaxp2, gmaxn + gmaxn2)
            if j < 0:
                return -1, -1, float(violation)
            i = ip if self.y[j] > 0 else i_n
            return int(i), int(j), float(violation)

        i, gmax = select_max_violator(self.active, self.alpha, self.gradient, self.y, self.C)
        j, gmax2 = select_min_partner(
            self.active, self.alpha, self.gradient, self.y, self.C, self.QD,
            self._row_or_zero(i), i, gmax, tau
        )
        return int(i), int(j), float(gmax + gmax2)

    def _optimize_pair(self, i: int, j: int) -> None:
        Q_i = self.q.row(i)
        Q_j = self.q.row(j)

        old_alpha_i = self.alpha[i]
        old_alpha_j = self.alpha[j]

        new_alpha_i, new_alpha_j = update_pair(
            old_alpha_i, old_alpha_j, self.y[i], self.y[j], self.C[i], self.C[j],
            self.QD[i], self.QD[j], Q_i[j], self.gradient[i], self.gradient[j],
            self.params.tau
        )
        self.alpha[i] = new_alpha_i
        self.alpha[j] = new_alpha_j

        # Обновляем градиент для всех переменных, включая сжатые
        self.gradient += Q_i * (new_alpha_i - old_alpha_i) + Q_j * (new_alpha_j - old_alpha_j)

    def _do_shrinking(self) -> None:
        g1, g2, g3, g4 = shrinking_gaps(self.active, self.alpha, self.gradient, self.y, self.C)

        if self.nu_constraint:
            violation = max(g1 + g2, g3 + g4)
            limits = (g1, g4, g2, g3)
        else:
            gmax1 = max(g1, g4)
            gmax2 = max(g2, g3)
            violation = gmax1 + gmax2
            limits = (gmax1, gmax2, gmax2, gmax1)

        if not self.unshrink and violation <= self.params.eps * self.params.unshrink_factor:
            self.unshrink = True
            self._reconstruct_gradient()
            logger.debug("Violation %.3e below unshrink threshold, active set rebuilt", violation)

        keep = shrink_mask(self.active, self.alpha, self.gradient, self.y, self.C, *limits)
        self.active = self.active[keep]

    def _objective(self) -> float:
        return float(0.5 * np.dot(self.alpha, self.gradient + self.p))

    def solve(
        self,
        callback: Optional[Callable[[int, np.ndarray, np.ndarray], None]] = None
    ) -> SMOResult:
        """
        Запускает SMO до достижения порога или лимита итераций.

        Args:
            callback: Вызывается после каждого шага как callback(iteration, alpha, gradient).
                Массивы принадлежат солверу и не должны изменяться.

        Returns:
            SMOResult с решением
        """
        params = self.params
        n = self.size

        if params.verbose:
            logger.info(
                "SMO solver started: %d variables, shrinking=%s, nu_constraint=%s",
                n, params.shrinking, self.nu_constraint
            )

        counter = min(n, params.shrinking_interval) + 1
        n_iter = 0
        converged = False

        while n_iter < params.max_iter:
            counter -= 1
            if counter == 0:
                counter = min(n, params.shrinking_interval)
                if params.shrinking:
                    self._do_shrinking()

            i, j, violation = self.select_working_set()

            if j < 0 or violation <= params.eps:
                if self.active.shape[0] == n:
                    converged = True
                    break
                # Сжатое множество выглядит оптимальным: проверяем на полном
                self._reconstruct_gradient()
                i, j, violation = self.select_working_set()
                if j < 0 or violation <= params.eps:
                    converged = True
                    break
                counter = 1

            n_iter += 1
            self._optimize_pair(i, j)

            if callback is not None:
                callback(n_iter, self.alpha, self.gradient)

        if not converged and self.active.shape[0] < n:
            self._reconstruct_gradient()

        if self.nu_constraint:
            rho, r = calculate_rho_nu(self.alpha, self.gradient, self.y, self.C)
            r = float(r)
        else:
            rho = calculate_rho(self.alpha, self.gradient, self.y, self.C)
            r = None

        result = SMOResult(
            alpha=self.alpha.copy(),
            gradient=self.gradient.copy(),
            rho=float(rho),
            r=r,
            objective_value=self._objective(),
            n_iterations=n_iter,
            exit_reason=ExitReason.REACHED_THRESHOLD if converged else ExitReason.REACHED_ITERATIONS
        )

        if params.verbose:
            logger.info(
                "SMO finished: %d iterations, %d support vectors, converged=%s",
                result.n_iterations, result.n_support_vectors, result.converged
            )
            logger.info("  Objective value: %.6f", result.objective_value)

        return result
