from .kernel import Kernel, KernelMethod

from .qmatrix import SvcQ, OneClassQ, SvrQ

from .solver_smo import (
    SV_THRESHOLD,
    ExitReason,
    SolverParams,
    SMOResult,
    SMOSolver,
)

from .model import Svm, Task

from .params import SvmParams, SvcParams, SvrParams

from .errors import SvmParamsError

__all__ = [
    # Kernel
    "Kernel",
    "KernelMethod",
    # Q matrices
    "SvcQ",
    "OneClassQ",
    "SvrQ",
    # Solver
    "SV_THRESHOLD",
    "ExitReason",
    "SolverParams",
    "SMOResult",
    "SMOSolver",
    # Model
    "Svm",
    "Task",
    # Params
    "SvmParams",
    "SvcParams",
    "SvrParams",
    "SvmParamsError",
]
