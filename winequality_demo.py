"""
Демонстрация: бинарная классификация вин гауссовым ядром.

Класс 0 набора sklearn wine против остальных. Печатает сводку модели,
таблицу ошибок и точность на отложенной выборке.

Запуск:
    python winequality_demo.py
"""

import logging
import os
import sys

import numpy as np
from sklearn.datasets import load_wine
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from svm_smo import Kernel, KernelMethod, SvcParams

# --- КОНФИГУРАЦИЯ ---
CONFIG = {
    "positive_class": 0,
    "test_size": 0.3,
    "random_state": 42,
    # eps гауссова ядра: K(a, b) = exp(-||a - b||^2 / eps)
    "kernel_eps": 30.0,
    "C_pos": 10.0,
    "C_neg": 10.0,
    "eps": 1e-7,
    "shrinking": True,
    "verbose": True,
}


def confusion_table(y_true: np.ndarray, y_pred: np.ndarray) -> str:
    """Таблица ошибок 2x2 для меток {-1, +1}."""
    tp = int(np.sum((y_true > 0) & (y_pred > 0)))
    fn = int(np.sum((y_true > 0) & (y_pred < 0)))
    fp = int(np.sum((y_true < 0) & (y_pred > 0)))
    tn = int(np.sum((y_true < 0) & (y_pred < 0)))

    lines = [
        f"{'':<16}{'pred +1':>10}{'pred -1':>10}",
        f"{'true +1':<16}{tp:>10}{fn:>10}",
        f"{'true -1':<16}{fp:>10}{tn:>10}",
    ]
    return "\n".join(lines)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    data = load_wine()
    y = np.where(data.target == CONFIG["positive_class"], 1.0, -1.0)

    X_train, X_test, y_train, y_test = train_test_split(
        data.data, y,
        test_size=CONFIG["test_size"],
        random_state=CONFIG["random_state"],
        stratify=y
    )

    scaler = StandardScaler()
    X_train = scaler.fit_transform(X_train)
    X_test = scaler.transform(X_test)

    print(f"Wine dataset: {len(y_train)} train / {len(y_test)} test samples, "
          f"{X_train.shape[1]} features")
    print(f"  Positive class: {data.target_names[CONFIG['positive_class']]} "
          f"({int(np.sum(y_train > 0))} train samples)")

    kernel = Kernel(X_train, KernelMethod.gaussian(CONFIG["kernel_eps"]))
    model = (SvcParams()
             .eps(CONFIG["eps"])
             .shrinking(CONFIG["shrinking"])
             .verbose(CONFIG["verbose"])
             .pos_neg_weights(CONFIG["C_pos"], CONFIG["C_neg"])
             .fit(kernel, y_train))

    print(f"\n{model}")

    pred = model.predict(X_test)
    print("\nConfusion table (test):")
    print(confusion_table(y_test, pred))
    print(f"\nAccuracy: {np.mean(pred == y_test):.4f}")


if __name__ == "__main__":
    main()
