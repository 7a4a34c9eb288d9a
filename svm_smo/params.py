"""
Гиперпараметры SVM и точки входа fit для каждой задачи.

Пример:
    model = (SvcParams()
             .eps(1e-5)
             .shrinking(True)
             .nu_weight(0.1)
             .fit(kernel, y))
    print(model)
"""

from dataclasses import replace
from typing import Optional, Tuple

from . import classification, regression
from .errors import SvmParamsError
from .kernel import Kernel
from .model import Svm
from .solver_smo import SolverParams


class SvmParams:
    """
    Общие параметры обучения.

    По умолчанию: eps = 1e-7, без shrinking.
    """

    def __init__(self):
        self.solver_params = SolverParams()

    def eps(self, new_eps: float) -> "SvmParams":
        """
        Порог остановки: солвер останавливается, когда нарушение KKT
        максимально нарушающей пары становится меньше этого значения.
        """
        self.solver_params = replace(self.solver_params, eps=new_eps)
        return self

    def shrinking(self, shrinking: bool) -> "SvmParams":
        """Сжатие активного множества: быстрее, но может немного ухудшить решение."""
        self.solver_params = replace(self.solver_params, shrinking=bool(shrinking))
        return self

    def max_iter(self, max_iter: int) -> "SvmParams":
        self.solver_params = replace(self.solver_params, max_iter=int(max_iter))
        return self

    def verbose(self, verbose: bool = True) -> "SvmParams":
        self.solver_params = replace(self.solver_params, verbose=bool(verbose))
        return self

    def solver(self) -> SolverParams:
        """Проверенная копия параметров солвера."""
        params = replace(self.solver_params)
        params.validate()
        return params


class SvcParams(SvmParams):
    """
    Параметры классификации.

    Либо пара C (C_pos, C_neg), либо ν. По умолчанию C = (1, 1).
    """

    def __init__(self):
        super().__init__()
        self.c: Optional[Tuple[float, float]] = (1.0, 1.0)
        self.nu: Optional[float] = None

    def pos_neg_weights(self, c_pos: float, c_neg: float) -> "SvcParams":
        """C для положительного и отрицательного класса."""
        if not (c_pos > 0 and c_neg > 0):
            raise SvmParamsError(f"C должно быть > 0, получено C_pos={c_pos}, C_neg={c_neg}")
        self.c = (float(c_pos), float(c_neg))
        self.nu = None
        return self

    def nu_weight(self, nu: float) -> "SvcParams":
        """ν ∈ (0, 1] задаёт баланс между числом опорных векторов и точностью."""
        if not 0 < nu <= 1:
            raise SvmParamsError(f"nu должно быть в (0, 1], получено {nu}")
        self.nu = float(nu)
        self.c = None
        return self

    def fit(self, kernel: Kernel, targets) -> Svm:
        """C-SVC или Nu-SVC, в зависимости от заданного параметра."""
        solver_params = self.solver()
        if self.nu is not None:
            return classification.fit_nu(solver_params, kernel, targets, self.nu)
        c_pos, c_neg = self.c
        return classification.fit_c(solver_params, kernel, targets, c_pos, c_neg)

    def fit_one_class(self, kernel: Kernel) -> Svm:
        """One-class SVM. Использует ν (0.5, если задан только C)."""
        nu = self.nu if self.nu is not None else 0.5
        return classification.fit_one_class(self.solver(), kernel, nu)


class SvrParams(SvmParams):
    """
    Параметры регрессии.

    Либо (C, eps) для epsilon-SVR, либо (ν, C) для Nu-SVR.
    По умолчанию C = 1, eps = 0.1.
    """

    def __init__(self):
        super().__init__()
        self.c: float = 1.0
        self.epsilon: Optional[float] = 0.1
        self.nu: Optional[float] = None

    def c_eps(self, c: float, eps: float) -> "SvrParams":
        """epsilon-SVR со штрафом C и полушириной трубки eps."""
        if not c > 0:
            raise SvmParamsError(f"C должно быть > 0, получено {c}")
        if not eps >= 0:
            raise SvmParamsError(f"eps должно быть >= 0, получено {eps}")
        self.c = float(c)
        self.epsilon = float(eps)
        self.nu = None
        return self

    def nu_c(self, nu: float, c: float = 1.0) -> "SvrParams":
        """Nu-SVR: ширина трубки находится солвером."""
        if not 0 < nu <= 1:
            raise SvmParamsError(f"nu должно быть в (0, 1], получено {nu}")
        if not c > 0:
            raise SvmParamsError(f"C должно быть > 0, получено {c}")
        self.nu = float(nu)
        self.c = float(c)
        self.epsilon = None
        return self

    def fit(self, kernel: Kernel, targets) -> Svm:
        solver_params = self.solver()
        if self.nu is not None:
            return regression.fit_nu(solver_params, kernel, targets, self.nu, self.c)
        return regression.fit_epsilon(solver_params, kernel, targets, self.c, self.epsilon)
