"""
Тесты классификации: C-SVC, Nu-SVC, one-class SVM.

Помимо свойств решения (опорные векторы на границе, ν-свойство),
решающая функция сравнивается с sklearn.svm (libsvm).
"""

import numpy as np
from sklearn.svm import SVC, NuSVC, OneClassSVM

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from svm_smo import Kernel, KernelMethod, SvcParams, Task, SvmParamsError


# =============================================================================
# Вспомогательные функции
# =============================================================================

def create_margin_data():
    """
    Две линейно разделимые группы с единственной ближайшей парой
    (2, 0) и (-2, 0): оптимальная гиперплоскость x_0 = 0, w = (0.5, 0).
    """
    X_pos = np.array([
        [2.0, 0.0],
        [3.0, 1.0],
        [3.0, -1.0],
        [4.0, 0.5],
        [3.5, -0.5],
        [5.0, 1.0],
        [4.5, -1.0],
    ])
    X = np.vstack([X_pos, -X_pos])
    y = np.array([1.0] * len(X_pos) + [-1.0] * len(X_pos))
    return X, y


def create_overlapping_data(n_samples=80, seed=42, shift=1.0):
    rng = np.random.RandomState(seed)
    n_half = n_samples // 2
    X = np.vstack([
        rng.randn(n_half, 2) + shift,
        rng.randn(n_samples - n_half, 2) - shift
    ])
    y = np.array([1.0] * n_half + [-1.0] * (n_samples - n_half))
    idx = rng.permutation(n_samples)
    return X[idx], y[idx]


# =============================================================================
# C-SVC
# =============================================================================

def test_separable_margin():
    """Опорные векторы - ровно точки на границе, разделение идеальное."""
    print("\n" + "="*60)
    print("Test: Separable Data, Margin Support Vectors")
    print("="*60)

    X, y = create_margin_data()
    model = SvcParams().pos_neg_weights(1.0, 1.0).fit(Kernel(X), y)

    print(f"  {model}")
    print(f"  Alpha: {np.round(model.alpha, 6)}")
    print(f"  Rho: {model.rho:.6f}")
    print(f"  w: {model.linear_decision}")

    margin = [0, 7]
    assert model.converged
    assert list(model.support_indices()) == margin, \
        f"Support vectors should be {margin}, got {list(model.support_indices())}"
    for idx in margin:
        assert 0 < abs(model.alpha[idx]) < 1.0, f"Margin alpha must be free: {model.alpha[idx]}"
    assert np.allclose(np.abs(model.alpha[margin]), 0.125, atol=1e-6)
    assert np.allclose(model.linear_decision, [0.5, 0.0], atol=1e-6)
    assert abs(model.rho) < 1e-6
    assert np.array_equal(model.predict(X), y), "Training data should be separated perfectly"
    assert model.task is Task.CLASSIFICATION

    print("\n[PASS] Separable margin test passed!")


def test_label_encodings():
    """Метки {0, 1} и {-1, +1} дают одну и ту же модель."""
    print("\n" + "="*60)
    print("Test: Label Encodings")
    print("="*60)

    X, y = create_overlapping_data(n_samples=30, seed=3)
    kernel = Kernel(X, KernelMethod.gaussian(2.0))
    signed = SvcParams().fit(kernel, y)
    binary = SvcParams().fit(kernel, (y > 0).astype(int))

    assert np.array_equal(signed.alpha, binary.alpha)
    assert signed.rho == binary.rho

    print("\n[PASS] Label encodings test passed!")


def test_weighted_c():
    """Больший C для положительного класса сдвигает границу в его пользу."""
    print("\n" + "="*60)
    print("Test: Weighted C")
    print("="*60)

    X, y = create_overlapping_data(n_samples=100, seed=8, shift=0.5)
    kernel = Kernel(X, KernelMethod.gaussian(2.0))

    balanced = SvcParams().pos_neg_weights(1.0, 1.0).fit(kernel, y)
    weighted = SvcParams().pos_neg_weights(10.0, 0.1).fit(kernel, y)

    pos = y > 0
    recall_balanced = np.mean(balanced.predict(X)[pos] > 0)
    recall_weighted = np.mean(weighted.predict(X)[pos] > 0)
    print(f"  Positive recall: balanced = {recall_balanced:.3f}, weighted = {recall_weighted:.3f}")

    assert recall_weighted >= recall_balanced
    assert np.all(np.abs(weighted.alpha[pos]) <= 10.0 + 1e-12)
    assert np.all(np.abs(weighted.alpha[~pos]) <= 0.1 + 1e-12)
    assert abs(weighted.alpha.sum()) < 1e-8, "Σ y_i α_i must stay zero"

    print("\n[PASS] Weighted C test passed!")


def test_c_svc_vs_sklearn():
    """Решающая функция совпадает с libsvm (sklearn.svm.SVC)."""
    print("\n" + "="*60)
    print("Test: C-SVC vs sklearn")
    print("="*60)

    X, y = create_overlapping_data(n_samples=80, seed=1)
    X_test, _ = create_overlapping_data(n_samples=40, seed=2)
    gamma = 0.5

    model = SvcParams().pos_neg_weights(2.0, 2.0).fit(Kernel(X, KernelMethod.gaussian(1.0 / gamma)), y)
    reference = SVC(C=2.0, kernel="rbf", gamma=gamma, tol=1e-7).fit(X, y)

    ours = model.decision_function(X_test)
    theirs = reference.decision_function(X_test)
    error = np.abs(ours - theirs).max()

    print(f"  SV: ours = {model.nsupport()}, sklearn = {len(reference.support_)}")
    print(f"  Max decision difference: {error:.3e}")

    assert error < 1e-3, f"Decision functions differ by {error}"

    print("\n[PASS] C-SVC vs sklearn test passed!")


# =============================================================================
# Nu-SVC
# =============================================================================

def test_nu_svc():
    """ν - нижняя граница доли SV, ответ совпадает с sklearn.svm.NuSVC."""
    print("\n" + "="*60)
    print("Test: Nu-SVC")
    print("="*60)

    X, y = create_overlapping_data(n_samples=80, seed=5)
    X_test, _ = create_overlapping_data(n_samples=40, seed=6)
    nu = 0.3
    gamma = 0.5

    model = SvcParams().nu_weight(nu).fit(Kernel(X, KernelMethod.gaussian(1.0 / gamma)), y)
    reference = NuSVC(nu=nu, kernel="rbf", gamma=gamma, tol=1e-7).fit(X, y)

    sv_fraction = model.nsupport() / len(y)
    error = np.abs(model.decision_function(X_test) - reference.decision_function(X_test)).max()

    print(f"  {model}")
    print(f"  r = {model.r:.6f}, SV fraction = {sv_fraction:.3f}")
    print(f"  Max decision difference vs sklearn: {error:.3e}")

    assert model.converged
    assert model.r is not None and model.r > 0
    assert sv_fraction >= nu - 1e-9, f"SV fraction {sv_fraction} below nu"
    assert error < 1e-3

    print("\n[PASS] Nu-SVC test passed!")


def test_nu_svc_infeasible():
    print("\n" + "="*60)
    print("Test: Nu-SVC Infeasible nu")
    print("="*60)

    X = np.vstack([np.random.RandomState(0).randn(10, 2), np.ones((2, 2))])
    y = np.array([-1.0] * 10 + [1.0] * 2)

    try:
        SvcParams().nu_weight(0.9).fit(Kernel(X), y)
        assert False, "nu * n / 2 > min(n_pos, n_neg) should be rejected"
    except SvmParamsError as e:
        print(f"  Correctly rejected: {e}")

    for bad in [0.0, 1.5]:
        try:
            SvcParams().nu_weight(bad)
            assert False, f"nu={bad} should be rejected"
        except SvmParamsError as e:
            print(f"  Correctly rejected: {e}")

    print("\n[PASS] Nu-SVC infeasible test passed!")


def test_nu_svc_degenerate_margin():
    """Допустимое ν, но все точки совпадают: r = 0, ошибка конфигурации вместо деления на ноль."""
    print("\n" + "="*60)
    print("Test: Nu-SVC Degenerate Margin")
    print("="*60)

    X = np.zeros((4, 2))
    y = np.array([1.0, 1.0, -1.0, -1.0])

    try:
        SvcParams().nu_weight(1.0).fit(Kernel(X), y)
        assert False, "Zero margin should be rejected"
    except SvmParamsError as e:
        print(f"  Correctly rejected: {e}")
        assert "r =" in str(e)

    print("\n[PASS] Nu-SVC degenerate margin test passed!")


# =============================================================================
# One-class
# =============================================================================

def test_one_class():
    """ν = 0.1: доля SV не меньше ν, доля выбросов на обучении не больше ν."""
    print("\n" + "="*60)
    print("Test: One-Class SVM")
    print("="*60)

    rng = np.random.RandomState(0)
    X = rng.randn(100, 2)
    nu = 0.1

    model = SvcParams().nu_weight(nu).fit_one_class(Kernel(X, KernelMethod.gaussian(1.0)))

    sv_fraction = model.nsupport() / len(X)
    outlier_fraction = np.mean(model.predict(X) < 0)
    print(f"  {model}")
    print(f"  SV fraction = {sv_fraction:.3f}, outlier fraction = {outlier_fraction:.3f}")

    assert model.task is Task.ONE_CLASS
    assert model.converged
    assert abs(model.alpha.sum() - 1.0) < 1e-8, "Σ α must equal 1"
    assert np.all(model.alpha <= 1.0 / (nu * len(X)) + 1e-12)
    assert sv_fraction >= nu - 0.01
    assert sv_fraction < 0.5
    assert outlier_fraction <= nu + 0.05

    # Далёкая точка - выброс, центр - нет
    assert model.predict(np.array([[6.0, 6.0]]))[0] == -1.0
    assert model.predict(np.array([[0.0, 0.0]]))[0] == 1.0

    print("\n[PASS] One-class SVM test passed!")


def test_one_class_vs_sklearn():
    """
    Та же задача, что у libsvm, но с нормировкой Σ α = 1 вместо Σ α = ν n:
    решающие функции отличаются множителем ν n.
    """
    print("\n" + "="*60)
    print("Test: One-Class vs sklearn")
    print("="*60)

    rng = np.random.RandomState(4)
    X = rng.randn(60, 2)
    X_test = 2 * rng.randn(30, 2)
    nu = 0.2
    gamma = 0.5

    model = SvcParams().nu_weight(nu).fit_one_class(Kernel(X, KernelMethod.gaussian(1.0 / gamma)))
    reference = OneClassSVM(nu=nu, kernel="rbf", gamma=gamma, tol=1e-7).fit(X)

    scaled = model.decision_function(X_test) * nu * len(X)
    error = np.abs(scaled - reference.decision_function(X_test)).max()
    print(f"  Max scaled decision difference: {error:.3e}")
    assert error < 1e-3

    print("\n[PASS] One-class vs sklearn test passed!")


def test_fit_validation():
    print("\n" + "="*60)
    print("Test: Fit Validation")
    print("="*60)

    X, y = create_overlapping_data(n_samples=10, seed=0)
    kernel = Kernel(X)

    cases = [
        ("wrong length", lambda: SvcParams().fit(kernel, y[:5])),
        ("2D labels", lambda: SvcParams().fit(kernel, y.reshape(-1, 1))),
        ("negative C", lambda: SvcParams().pos_neg_weights(-1.0, 1.0)),
        ("zero eps", lambda: SvcParams().eps(0.0).fit(kernel, y)),
    ]
    for name, call in cases:
        try:
            call()
            assert False, f"{name} should be rejected"
        except SvmParamsError as e:
            print(f"  {name}: {e}")

    print("\n[PASS] Fit validation test passed!")
