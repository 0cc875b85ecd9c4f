"""Quadratic and cubic Bézier curves on PyTorch tensors. / 基于 PyTorch 张量的二次与三次贝塞尔曲线。

This package provides evaluation, derivatives, subdivision, length estimation, geometric transforms and nearest-point
search for Bézier curves in 2D and 3D. / 本包为二维与三维贝塞尔曲线提供求值、求导、细分、长度估计、几何变换与最近点搜索。
Scalar precision follows the tensor ``dtype`` and memory placement follows the tensor ``device``, so the same code
serves ``float32`` and ``float64`` curves on any device. / 标量精度取决于张量 ``dtype``，内存位置取决于张量 ``device``，
因此同一份代码可服务于任意设备上的 ``float32`` 与 ``float64`` 曲线。
"""

from .bezier import CubicBezier, QuadraticBezier
from .linalg import DegenerateDirectionError, LineSegment
from .projection import InvalidToleranceError, PointProjector, ProjectionConfig

__all__ = [
    "CubicBezier",
    "QuadraticBezier",
    "LineSegment",
    "DegenerateDirectionError",
    "InvalidToleranceError",
    "PointProjector",
    "ProjectionConfig",
]
