# src/predictive_guiding/__init__.py
"""Predictive guiding package – re-export high-level API."""
from .common import GuideAxis, GuideReport, MeasurementPoint, SettingResult  # noqa: F401
from .config import (                                                        # noqa: F401
    KernelConfig, MountConfig, PredictorConfig, SimulationConfig,
)
from .history import GuideHistory                                            # noqa: F401
from .kernels import (                                                       # noqa: F401
    CovarianceFunction, KernelTerms, ParameterCountError,
    PeriodicSquareExponential, PeriodicSquareExponential2,
    create_kernel, kernel_from_config,
)
from .predictor import LinearRegressionGuide                                 # noqa: F401
from .processor import GuidingProcessor                                      # noqa: F401
from .profile import ProfileStore                                            # noqa: F401
