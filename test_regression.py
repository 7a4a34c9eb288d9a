"""
Тесты регрессии: epsilon-SVR и Nu-SVR.
"""

import numpy as np
from sklearn.svm import SVR, NuSVR

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from svm_smo import Kernel, KernelMethod, SvrParams, Task, SvmParamsError


def create_line_data(n_samples=20):
    """y = 2x на [-1, 1] без шума."""
    X = np.linspace(-1, 1, n_samples).reshape(-1, 1)
    return X, 2.0 * X[:, 0]


def create_sine_data(n_samples=60, noise=0.1, seed=0):
    rng = np.random.RandomState(seed)
    X = np.sort(rng.uniform(-3, 3, n_samples)).reshape(-1, 1)
    t = np.sin(X[:, 0]) + noise * rng.randn(n_samples)
    return X, t


def test_epsilon_svr_line():
    """Линейное ядро на y = 2x: наклон ≈ 2, смещение ≈ 0."""
    print("\n" + "="*60)
    print("Test: epsilon-SVR on a Line")
    print("="*60)

    X, t = create_line_data()
    model = SvrParams().c_eps(10.0, 0.01).fit(Kernel(X), t)

    print(f"  {model}")
    print(f"  w = {model.linear_decision}, rho = {model.rho:.6f}")

    assert model.task is Task.REGRESSION
    assert model.converged
    assert abs(model.linear_decision[0] - 2.0) < 0.02, f"Slope {model.linear_decision[0]} != 2"
    assert abs(model.rho) < 0.02
    residual = np.abs(model.predict(X) - t).max()
    print(f"  Max residual: {residual:.4f}")
    assert residual <= 0.01 + 1e-3, "All points must lie inside the tube"
    assert abs(model.alpha.sum()) < 1e-8, "Σ (α_i - α_i*) must stay zero"
    assert model.epsilon is None

    print("\n[PASS] epsilon-SVR line test passed!")


def test_epsilon_svr_vs_sklearn():
    """Гауссово ядро на зашумлённом синусе: совпадение с sklearn.svm.SVR."""
    print("\n" + "="*60)
    print("Test: epsilon-SVR vs sklearn")
    print("="*60)

    X, t = create_sine_data()
    X_test = np.linspace(-3, 3, 25).reshape(-1, 1)
    gamma = 0.5

    model = SvrParams().c_eps(3.0, 0.1).fit(Kernel(X, KernelMethod.gaussian(1.0 / gamma)), t)
    reference = SVR(C=3.0, epsilon=0.1, kernel="rbf", gamma=gamma, tol=1e-7).fit(X, t)

    error = np.abs(model.predict(X_test) - reference.predict(X_test)).max()
    print(f"  SV: ours = {model.nsupport()}, sklearn = {len(reference.support_)}")
    print(f"  Max prediction difference: {error:.3e}")
    assert error < 1e-3

    fit_error = np.abs(model.predict(X_test) - np.sin(X_test[:, 0])).max()
    print(f"  Max error vs sin(x): {fit_error:.3f}")
    assert fit_error < 0.3

    print("\n[PASS] epsilon-SVR vs sklearn test passed!")


def test_nu_svr():
    """Nu-SVR находит ширину трубки сам: ε ≥ 0, вне трубки не больше ν."""
    print("\n" + "="*60)
    print("Test: Nu-SVR")
    print("="*60)

    X, t = create_sine_data(n_samples=50, seed=2)
    nu = 0.4
    model = SvrParams().nu_c(nu, 2.0).fit(Kernel(X, KernelMethod.gaussian(2.0)), t)

    epsilon = model.epsilon
    outside = np.mean(np.abs(model.predict(X) - t) > epsilon + 1e-6)
    sv_fraction = model.nsupport() / len(t)

    print(f"  {model}")
    print(f"  epsilon = {epsilon:.4f}, outside tube = {outside:.3f}, SV fraction = {sv_fraction:.3f}")

    assert model.converged
    assert epsilon is not None and epsilon >= -1e-8
    assert outside <= nu + 1e-9
    assert sv_fraction >= nu - 0.02

    print("\n[PASS] Nu-SVR test passed!")


def test_nu_svr_vs_sklearn():
    """
    Коэффициенты и значение цели совпадают с libsvm.

    Смещение сравнивать нельзя: если в одной из групп нет свободных
    переменных, KKT выполняются на целом интервале rho.
    """
    print("\n" + "="*60)
    print("Test: Nu-SVR vs sklearn")
    print("="*60)

    X, t = create_sine_data(n_samples=40, seed=3)
    X_test = np.linspace(-3, 3, 20).reshape(-1, 1)
    gamma = 1.0

    model = SvrParams().nu_c(0.5, 1.0).fit(Kernel(X, KernelMethod.gaussian(1.0 / gamma)), t)
    reference = NuSVR(nu=0.5, C=1.0, kernel="rbf", gamma=gamma, tol=1e-7).fit(X, t)

    theirs = np.zeros(len(t))
    theirs[reference.support_] = reference.dual_coef_[0]
    coef_error = np.abs(model.alpha - theirs).max()

    # Цель Nu-SVR зависит только от β = α - α*: 1/2 β^T K β - t^T β
    K = KernelMethod.gaussian(1.0 / gamma)(X, X)
    obj_theirs = 0.5 * theirs @ K @ theirs - t @ theirs

    weighted_error = np.abs(
        model.weighted_sum(X_test) - (reference.predict(X_test) - reference.intercept_[0])
    ).max()

    print(f"  Max coefficient difference: {coef_error:.3e}")
    print(f"  Objective: ours = {model.obj:.10f}, sklearn = {obj_theirs:.10f}")
    print(f"  Max difference of Σ β_i K(x, x_i): {weighted_error:.3e}")
    print(f"  rho: ours = {model.rho:.6f}, sklearn = {-reference.intercept_[0]:.6f}")

    assert model.converged
    assert coef_error < 1e-5, f"Dual coefficients differ by {coef_error}"
    assert abs(model.obj - obj_theirs) < 1e-6 * max(1.0, abs(obj_theirs))
    assert weighted_error < 1e-4

    print("\n[PASS] Nu-SVR vs sklearn test passed!")


def test_regression_validation():
    print("\n" + "="*60)
    print("Test: Regression Validation")
    print("="*60)

    X, t = create_line_data(n_samples=5)
    kernel = Kernel(X)

    cases = [
        ("negative tube", lambda: SvrParams().c_eps(1.0, -0.1)),
        ("zero C", lambda: SvrParams().c_eps(0.0, 0.1)),
        ("nu out of range", lambda: SvrParams().nu_c(1.2)),
        ("NaN targets", lambda: SvrParams().fit(kernel, np.array([0.0, np.nan, 1.0, 2.0, 3.0]))),
        ("wrong length", lambda: SvrParams().fit(kernel, t[:3])),
    ]
    for name, call in cases:
        try:
            call()
            assert False, f"{name} should be rejected"
        except SvmParamsError as e:
            print(f"  {name}: {e}")

    print("\n[PASS] Regression validation test passed!")
