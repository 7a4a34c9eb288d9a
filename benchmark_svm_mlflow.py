import os
import sys
import time
import logging
import warnings

import numpy as np
import mlflow
from tqdm.auto import tqdm
from sklearn.datasets import load_breast_cancer, load_diabetes, make_blobs, make_classification
from sklearn.metrics import accuracy_score, f1_score, mean_squared_error, r2_score
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC, NuSVC, OneClassSVM, SVR, NuSVR

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from svm_smo import Kernel, KernelMethod, SvcParams, SvrParams

warnings.filterwarnings("ignore", category=UserWarning)

# --- КОНФИГУРАЦИЯ ---
CONFIG = {
    "random_state": 42,
    "test_size": 0.3,
    "artifacts_dir": "./benchmark_artifacts",

    # Общие параметры солвера
    "eps": 1e-5,
    "shrinking": True,
    "max_iter": 100_000,

    # gamma в обозначениях sklearn; у нас eps гауссова ядра = 1 / gamma
    "gamma": 0.1,

    # Классификация
    "C_pos": 1.0,
    "C_neg": 1.0,
    "nu_svc": 0.3,
    "nu_one_class": 0.1,

    # Регрессия
    "C_svr": 10.0,
    "epsilon_svr": 0.1,
    "nu_svr": 0.5,

    # MLFLOW Settings
    "mlflow_tracking_uri": "file:./mlruns",
    "experiment_name": "SMO_SVM_vs_libsvm",
}

os.environ["MLFLOW_TRACKING_URI"] = CONFIG["mlflow_tracking_uri"]
os.makedirs(CONFIG["artifacts_dir"], exist_ok=True)

logger = logging.getLogger(__name__)


# =============================================================================
# Данные
# =============================================================================

def _split_scaled(X, y):
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=CONFIG["test_size"], random_state=CONFIG["random_state"]
    )
    scaler = StandardScaler()
    return scaler.fit_transform(X_train), scaler.transform(X_test), y_train, y_test


def load_classification_datasets():
    """Бинарные наборы: метки {-1, +1}."""
    X_syn, y_syn = make_classification(
        n_samples=600, n_features=10, n_informative=5,
        flip_y=0.05, random_state=CONFIG["random_state"]
    )
    cancer = load_breast_cancer()
    return {
        "synthetic": _split_scaled(X_syn, np.where(y_syn > 0, 1.0, -1.0)),
        "breast_cancer": _split_scaled(cancer.data, np.where(cancer.target > 0, 1.0, -1.0)),
    }


def load_regression_datasets():
    diabetes = load_diabetes()
    rng = np.random.RandomState(CONFIG["random_state"])
    X_sin = rng.uniform(-3, 3, size=(400, 1))
    t_sin = np.sin(X_sin[:, 0]) + 0.1 * rng.randn(400)
    # Целевые значения diabetes масштабируются: C и eps заданы для единичного масштаба
    t_diab = (diabetes.target - diabetes.target.mean()) / diabetes.target.std()
    return {
        "noisy_sine": _split_scaled(X_sin, t_sin),
        "diabetes": _split_scaled(diabetes.data, t_diab),
    }


def load_one_class_datasets():
    X, _ = make_blobs(n_samples=500, centers=2, n_features=4, random_state=CONFIG["random_state"])
    X_train, X_test = train_test_split(X, test_size=CONFIG["test_size"], random_state=CONFIG["random_state"])
    scaler = StandardScaler()
    return {"blobs": (scaler.fit_transform(X_train), scaler.transform(X_test))}


# =============================================================================
# Запуски
# =============================================================================

def _configured(params):
    return (params
            .eps(CONFIG["eps"])
            .shrinking(CONFIG["shrinking"])
            .max_iter(CONFIG["max_iter"]))


def _timed(fn):
    start = time.perf_counter()
    result = fn()
    return result, time.perf_counter() - start


def _log_model(model, run_name):
    path = os.path.join(CONFIG["artifacts_dir"], f"{run_name}.npz")
    model.save(path)
    mlflow.log_artifact(path)


def run_classification(task, dataset_name, data):
    X_train, X_test, y_train, y_test = data
    kernel = Kernel(X_train, KernelMethod.gaussian(1.0 / CONFIG["gamma"]))

    if task == "c_svc":
        params = _configured(SvcParams()).pos_neg_weights(CONFIG["C_pos"], CONFIG["C_neg"])
        reference = SVC(C=CONFIG["C_pos"], kernel="rbf", gamma=CONFIG["gamma"], tol=CONFIG["eps"])
    else:
        params = _configured(SvcParams()).nu_weight(CONFIG["nu_svc"])
        reference = NuSVC(nu=CONFIG["nu_svc"], kernel="rbf", gamma=CONFIG["gamma"], tol=CONFIG["eps"])

    model, fit_time = _timed(lambda: params.fit(kernel, y_train))
    _, ref_time = _timed(lambda: reference.fit(X_train, y_train))

    pred = model.predict(X_test)
    ref_pred = reference.predict(X_test)
    decision_gap = np.abs(model.decision_function(X_test) - reference.decision_function(X_test)).max()

    return model, {
        "accuracy": accuracy_score(y_test, pred),
        "f1": f1_score(y_test, pred),
        "sklearn_accuracy": accuracy_score(y_test, ref_pred),
        "agreement": float(np.mean(pred == ref_pred)),
        "max_decision_gap": float(decision_gap),
        "n_support": model.nsupport(),
        "sklearn_n_support": int(len(reference.support_)),
        "iterations": model.iterations,
        "fit_time_s": fit_time,
        "sklearn_fit_time_s": ref_time,
    }


def run_regression(task, dataset_name, data):
    X_train, X_test, t_train, t_test = data
    kernel = Kernel(X_train, KernelMethod.gaussian(1.0 / CONFIG["gamma"]))

    if task == "epsilon_svr":
        params = _configured(SvrParams()).c_eps(CONFIG["C_svr"], CONFIG["epsilon_svr"])
        reference = SVR(C=CONFIG["C_svr"], epsilon=CONFIG["epsilon_svr"], kernel="rbf",
                        gamma=CONFIG["gamma"], tol=CONFIG["eps"])
    else:
        params = _configured(SvrParams()).nu_c(CONFIG["nu_svr"], CONFIG["C_svr"])
        reference = NuSVR(nu=CONFIG["nu_svr"], C=CONFIG["C_svr"], kernel="rbf",
                          gamma=CONFIG["gamma"], tol=CONFIG["eps"])

    model, fit_time = _timed(lambda: params.fit(kernel, t_train))
    _, ref_time = _timed(lambda: reference.fit(X_train, t_train))

    pred = model.predict(X_test)
    ref_pred = reference.predict(X_test)

    metrics = {
        "mse": mean_squared_error(t_test, pred),
        "r2": r2_score(t_test, pred),
        "sklearn_mse": mean_squared_error(t_test, ref_pred),
        "max_prediction_gap": float(np.abs(pred - ref_pred).max()),
        "n_support": model.nsupport(),
        "sklearn_n_support": int(len(reference.support_)),
        "iterations": model.iterations,
        "fit_time_s": fit_time,
        "sklearn_fit_time_s": ref_time,
    }
    if model.epsilon is not None:
        metrics["solved_epsilon"] = model.epsilon
    return model, metrics


def run_one_class(task, dataset_name, data):
    X_train, X_test = data
    nu = CONFIG["nu_one_class"]
    kernel = Kernel(X_train, KernelMethod.gaussian(1.0 / CONFIG["gamma"]))
    params = _configured(SvcParams()).nu_weight(nu)
    reference = OneClassSVM(nu=nu, kernel="rbf", gamma=CONFIG["gamma"], tol=CONFIG["eps"])

    model, fit_time = _timed(lambda: params.fit_one_class(kernel))
    _, ref_time = _timed(lambda: reference.fit(X_train))

    pred = model.predict(X_test)
    ref_pred = reference.predict(X_test)

    return model, {
        "train_outlier_fraction": float(np.mean(model.predict(X_train) < 0)),
        "test_outlier_fraction": float(np.mean(pred < 0)),
        "sv_fraction": model.nsupport() / len(X_train),
        "agreement": float(np.mean(pred == ref_pred)),
        "n_support": model.nsupport(),
        "iterations": model.iterations,
        "fit_time_s": fit_time,
        "sklearn_fit_time_s": ref_time,
    }


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    mlflow.set_experiment(CONFIG["experiment_name"])

    jobs = []
    for name, data in load_classification_datasets().items():
        jobs.append(("c_svc", name, data, run_classification))
        jobs.append(("nu_svc", name, data, run_classification))
    for name, data in load_regression_datasets().items():
        jobs.append(("epsilon_svr", name, data, run_regression))
        jobs.append(("nu_svr", name, data, run_regression))
    for name, data in load_one_class_datasets().items():
        jobs.append(("one_class", name, data, run_one_class))

    all_results = {}

    for task, dataset_name, data, runner in tqdm(jobs, desc="SVM benchmark"):
        run_name = f"{task}_on_{dataset_name}"
        try:
            with mlflow.start_run(run_name=run_name):
                mlflow.log_param("task", task)
                mlflow.log_param("dataset", dataset_name)
                mlflow.log_param("kernel", "gaussian")
                mlflow.log_param("gamma", CONFIG["gamma"])
                mlflow.log_param("eps", CONFIG["eps"])
                mlflow.log_param("shrinking", CONFIG["shrinking"])
                mlflow.log_param("max_iter", CONFIG["max_iter"])

                model, metrics = runner(task, dataset_name, data)

                mlflow.log_param("exit_reason", model.exit_reason.value)
                mlflow.log_metrics(metrics)
                _log_model(model, run_name)

                all_results[run_name] = metrics
                print(f"{run_name}: {model}")
        except Exception as e:
            logger.exception("Run %s failed: %s", run_name, e)
            continue

    print("\n" + "="*80)
    print("SUMMARY - All Results")
    print("="*80)
    print(f"{'Run':<32} {'Quality':<12} {'sklearn':<12} {'SV':<8} {'Iter':<8} {'Time, s':<10}")
    print("-"*82)
    for name, m in all_results.items():
        if "accuracy" in m:
            quality, reference = m["accuracy"], m["sklearn_accuracy"]
        elif "mse" in m:
            quality, reference = m["mse"], m["sklearn_mse"]
        else:
            quality, reference = m["test_outlier_fraction"], m["agreement"]
        print(f"{name:<32} {quality:<12.4f} {reference:<12.4f} {m['n_support']:<8} "
              f"{m['iterations']:<8} {m['fit_time_s']:<10.3f}")


if __name__ == "__main__":
    main()
