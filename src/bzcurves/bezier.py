"""Quadratic and cubic Bézier curves in 2D and 3D. / 二维与三维中的二次及三次贝塞尔曲线。

Curves are small dataclasses holding their control points as PyTorch tensors of shape ``(2,)`` or ``(3,)``.
/ 曲线是以形状为 ``(2,)`` 或 ``(3,)`` 的 PyTorch 张量保存控制点的轻量级 dataclass。
The tensor ``dtype`` selects the scalar precision and the ``device`` selects the memory layout, so one implementation
covers every combination of degree, dimension and precision. / 张量 ``dtype`` 决定标量精度，``device`` 决定内存布局，
因此同一实现即可覆盖次数、维度与精度的所有组合。
Only the Bernstein formulas differ between :class:`QuadraticBezier` and :class:`CubicBezier`; the algorithms built on
top of evaluation (length, sampling, flips, transforms, nearest point) live once in :class:`_BezierCurve`. /
:class:`QuadraticBezier` 与 :class:`CubicBezier` 之间仅伯恩斯坦公式不同；建立在求值之上的算法（长度、采样、翻转、
变换、最近点）只在 :class:`_BezierCurve` 中实现一次。

Reference: https://pomax.github.io/bezierinfo
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Callable, ClassVar, Iterator, Optional, Sequence, Tuple, TypeVar, Union

import torch

from .linalg import LineSegment, PointLike, as_point, magnitude, matrix_from_rows, normalized
from .projection import PointProjector, ProjectionConfig

Tensor = torch.Tensor
Param = Union[float, Tensor]

CurveT = TypeVar("CurveT", bound="_BezierCurve")


class _BezierCurve:
    """Behaviour shared by every Bézier degree. / 各次数贝塞尔曲线共享的行为。

    Subclasses are dataclasses whose fields are the control points in curve order; they provide the Bernstein
    blending (``evaluate``, ``evaluate_derivative``, ``split``) and the ``basis_matrix`` for their degree.
    / 子类为 dataclass，其字段按曲线顺序保存控制点；子类提供对应次数的伯恩斯坦混合（``evaluate``、
    ``evaluate_derivative``、``split``）以及 ``basis_matrix``。
    """

    degree: ClassVar[int]

    def __post_init__(self) -> None:
        names = [f.name for f in fields(self)]
        raw = [getattr(self, name) for name in names]
        reference = next((p for p in raw if isinstance(p, Tensor)), None)
        dtype = reference.dtype if reference is not None else None
        device = reference.device if reference is not None else None

        points = []
        for name, value in zip(names, raw):
            if isinstance(value, Tensor) and (value.dtype != dtype or value.device != device):
                raise ValueError(
                    f"{type(self).__name__}.{name} must share dtype and device with the other control points. "
                    f"Received {value.dtype} on {value.device}, expected {dtype} on {device}"
                )
            points.append(as_point(value, dtype=dtype, device=device))

        shape = points[0].shape
        if shape not in ((2,), (3,)):
            raise ValueError(f"{type(self).__name__} control points must have shape (2,) or (3,). Received {tuple(shape)}")
        for name, point in zip(names, points):
            if point.shape != shape:
                raise ValueError(
                    f"{type(self).__name__}.{name} has shape {tuple(point.shape)}, expected {tuple(shape)}"
                )
        if not points[0].is_floating_point():
            raise ValueError(f"{type(self).__name__} control points must be floating point. Received {points[0].dtype}")

        for name, point in zip(names, points):
            setattr(self, name, point)

    # Degree-specific blending, implemented by subclasses.

    def evaluate(self, t: Param) -> Tensor:
        raise NotImplementedError

    def evaluate_derivative(self, t: Param) -> Tensor:
        raise NotImplementedError

    def split(self: CurveT, t: Param) -> Tuple[CurveT, CurveT]:
        raise NotImplementedError

    @classmethod
    def basis_matrix(cls, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None) -> Tensor:
        raise NotImplementedError

    # Properties

    @property
    def dim(self) -> int:
        return self.into_tuple()[0].shape[0]

    @property
    def dtype(self) -> torch.dtype:
        return self.into_tuple()[0].dtype

    @property
    def device(self) -> torch.device:
        return self.into_tuple()[0].device

    @property
    def control_points(self) -> Tensor:
        """Control points stacked as a ``(degree + 1, dim)`` tensor. / 堆叠为 ``(degree + 1, dim)`` 张量的控制点。"""

        return self.to_tensor()

    # Conversions

    def into_tuple(self) -> Tuple[Tensor, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def __iter__(self) -> Iterator[Tensor]:
        return iter(self.into_tuple())

    def to_tensor(self) -> Tensor:
        return torch.stack(self.into_tuple())

    @classmethod
    def from_points(cls: type[CurveT], points: Sequence[PointLike]) -> CurveT:
        """Build a curve from an ordered sequence of control points. / 由有序控制点序列构建曲线。"""

        points = list(points)
        if len(points) != cls.degree + 1:
            raise ValueError(f"{cls.__name__} needs exactly {cls.degree + 1} points. Received {len(points)}")
        return cls(*points)

    @classmethod
    def from_tensor(cls: type[CurveT], control_points: Tensor) -> CurveT:
        if control_points.dim() != 2 or control_points.shape[0] != cls.degree + 1:
            raise ValueError(
                f"{cls.__name__}.from_tensor expects shape ({cls.degree + 1}, dim). "
                f"Received {tuple(control_points.shape)}"
            )
        return cls(*control_points.unbind(0))

    # Equality is structural: same degree, same dtype and identical coordinates.

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            a.dtype == b.dtype and a.device == b.device and torch.equal(a, b)
            for a, b in zip(self.into_tuple(), other.into_tuple())  # type: ignore[attr-defined]
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, str(self.dtype), tuple(tuple(p.tolist()) for p in self)))

    # Helpers

    def _param(self, t: Param) -> Tensor:
        # (..., 1) so parameters broadcast against (dim,) points
        return torch.as_tensor(t, dtype=self.dtype, device=self.device).unsqueeze(-1)

    def _scalar_param(self, t: Param) -> Tensor:
        param = self._param(t)
        if param.shape != (1,):
            raise ValueError(f"{type(self).__name__}.split expects a scalar parameter. Received shape {tuple(param.shape)[:-1]}")
        return param

    def _map_points(self: CurveT, fn: Callable[[Tensor], Tensor]) -> CurveT:
        return type(self)(*(fn(p) for p in self))

    def _replace_with(self: CurveT, other: CurveT) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    # Queries built on evaluation

    def normalized_tangent(self, t: Param) -> Tensor:
        """Evaluate the unit tangent at ``t``. / 计算参数 ``t`` 处的单位切向量。

        Raises :class:`~bzcurves.linalg.DegenerateDirectionError` where the derivative vanishes, e.g. at ``t = 0``
        when ``start`` and the first control point coincide. / 当导数为零时（例如 ``start`` 与第一个控制点重合时的
        ``t = 0``）抛出 :class:`~bzcurves.linalg.DegenerateDirectionError`。
        """

        return normalized(self.evaluate_derivative(t))

    def speed(self, t: Param) -> Tensor:
        """Return the magnitude of the derivative at ``t``. / 返回参数 ``t`` 处导数的模长。"""

        return magnitude(self.evaluate_derivative(t))

    def length_by_discretization(self, step_count: int) -> Tensor:
        """Approximate the arc length with a polyline of ``step_count + 1`` segments. / 用 ``step_count + 1`` 段折线近似弧长。

        The polyline is inscribed in the curve, so the estimate approaches the true length from below for convex arcs.
        / 折线内接于曲线，因此对凸弧而言估计值从下方逼近真实长度。
        ``step_count = 0`` yields the chord between ``start`` and ``end``. / ``step_count = 0`` 时结果为首尾弦长。
        """

        if step_count < 0:
            raise ValueError(f"step_count must be non-negative. Received {step_count}")
        t_values = torch.arange(step_count + 2, device=self.device, dtype=self.dtype) / (step_count + 1)
        positions = self.evaluate(t_values)
        return magnitude(positions[1:] - positions[:-1]).sum()

    def sample(self, num_samples: int, *, include_endpoints: bool = True) -> Tuple[Tensor, Tensor]:
        """Tessellate the curve into a polyline. / 将曲线细分为折线。

        Returns the polyline vertices ``(num_samples, dim)`` and the length of the edge ending at each vertex
        ``(num_samples,)``; the first vertex has no incoming edge and reuses the length of the first one.
        / 返回折线顶点 ``(num_samples, dim)`` 以及终止于各顶点的边长 ``(num_samples,)``；首个顶点没有入边，沿用第一条边的长度。
        With ``include_endpoints=False`` the vertices sit at the midpoints of ``num_samples`` equal parameter cells,
        which suits midpoint-rule integration along the curve. / 当 ``include_endpoints=False`` 时，顶点位于
        ``num_samples`` 个等长参数区间的中点，适合沿曲线做中点法积分。
        """

        if num_samples < 2:
            raise ValueError("num_samples must be at least 2 to form a polyline")

        if include_endpoints:
            t_values = torch.linspace(0.0, 1.0, num_samples, device=self.device, dtype=self.dtype)
        else:
            # Cell midpoints. / 参数区间中点。
            step = 1.0 / num_samples
            t_values = torch.linspace(
                step / 2.0, 1.0 - step / 2.0, num_samples, device=self.device, dtype=self.dtype
            )

        positions = self.evaluate(t_values)
        lengths = magnitude(positions[1:] - positions[:-1])
        lengths = torch.cat([lengths[:1], lengths])
        return positions, lengths

    def project_point(self, point: PointLike, steps: int = 16, epsilon: float = 1e-6) -> Tuple[float, Tensor]:
        """Find an approximate nearest point on the curve. / 查找曲线上近似最近的点。

        Runs a coarse search over ``steps + 1`` uniform samples and then refines around the best one until the probe
        interval drops below ``epsilon``; see :class:`~bzcurves.projection.PointProjector`.
        / 先在 ``steps + 1`` 个均匀采样点上粗搜索，再在最佳点附近细化，直到探测区间小于 ``epsilon``；
        详见 :class:`~bzcurves.projection.PointProjector`。
        """

        return PointProjector(ProjectionConfig(steps=steps, epsilon=epsilon)).project(self, point)

    # Geometric transforms

    def _flipped(self: CurveT, axis: int) -> CurveT:
        if axis >= self.dim:
            raise ValueError(f"Cannot flip axis {axis} of a {self.dim}D curve")

        def flip(p: Tensor) -> Tensor:
            q = p.clone()
            q[axis] = -q[axis]
            return q

        return self._map_points(flip)

    def flipped_x(self: CurveT) -> CurveT:
        """Return this curve with the ``x`` coordinate of every point negated. / 返回所有点 ``x`` 坐标取反后的曲线。"""

        return self._flipped(0)

    def flipped_y(self: CurveT) -> CurveT:
        return self._flipped(1)

    def flipped_z(self: CurveT) -> CurveT:
        return self._flipped(2)

    def flip_x(self) -> None:
        """Flip the ``x`` coordinates of this curve in place. / 原地翻转此曲线的 ``x`` 坐标。

        The fields are rebound to new tensors, so tensors shared with other curves are left untouched.
        / 字段被重新绑定到新张量，与其他曲线共享的张量不受影响。
        """

        self._replace_with(self.flipped_x())

    def flip_y(self) -> None:
        self._replace_with(self.flipped_y())

    def flip_z(self) -> None:
        self._replace_with(self.flipped_z())

    def _as_matrix(self, m: Tensor, size: int) -> Tensor:
        m = torch.as_tensor(m, dtype=self.dtype, device=self.device)
        if m.shape != (size, size):
            raise ValueError(f"Expected a ({size}, {size}) matrix. Received {tuple(m.shape)}")
        return m

    def transformed_by_mat3(self: CurveT, m: Tensor) -> CurveT:
        """Apply the linear ``(3, 3)`` matrix ``m`` to every control point. / 对每个控制点应用 ``(3, 3)`` 线性矩阵 ``m``。

        2D points are lifted to ``(x, y, 0)`` and cut back to ``(x, y)`` afterwards. / 二维点先扩展为 ``(x, y, 0)``，
        变换后再截回 ``(x, y)``。
        """

        m = self._as_matrix(m, 3)
        points = self.to_tensor()
        if self.dim == 2:
            points = torch.cat([points, torch.zeros_like(points[:, :1])], dim=-1)
        return self.from_tensor((points @ m.T)[:, : self.dim])

    def transformed_by_mat4(self: CurveT, m: Tensor) -> CurveT:
        """Apply the affine ``(4, 4)`` matrix ``m`` to every control point. / 对每个控制点应用 ``(4, 4)`` 仿射矩阵 ``m``。

        Points are lifted to homogeneous ``(x, y, z, 1)`` (``z = 0`` for 2D curves); the ``w`` row is ignored.
        / 点被扩展为齐次坐标 ``(x, y, z, 1)``（二维曲线取 ``z = 0``）；``w`` 行被忽略。
        """

        m = self._as_matrix(m, 4)
        points = self.to_tensor()
        pad = [torch.zeros_like(points[:, :1])] * (3 - self.dim) + [torch.ones_like(points[:, :1])]
        homogeneous = torch.cat([points, *pad], dim=-1)
        return self.from_tensor((homogeneous @ m.T)[:, : self.dim])

    def transform(self: CurveT, m: Tensor) -> CurveT:
        """Apply a ``(3, 3)`` linear or ``(4, 4)`` affine matrix. / 应用 ``(3, 3)`` 线性或 ``(4, 4)`` 仿射矩阵。"""

        shape = tuple(torch.as_tensor(m).shape)
        if shape == (3, 3):
            return self.transformed_by_mat3(m)
        if shape == (4, 4):
            return self.transformed_by_mat4(m)
        raise ValueError(f"transform expects a (3, 3) or (4, 4) matrix. Received {shape}")

    def power_coefficients(self) -> Tensor:
        """Return the monomial coefficients ``M @ P`` of the curve. / 返回曲线的幂基系数 ``M @ P``。

        Row ``k`` multiplies ``t**k``. / 第 ``k`` 行对应 ``t**k`` 的系数。
        """

        return self.basis_matrix(dtype=self.dtype, device=self.device) @ self.to_tensor()


@dataclass(eq=False)
class QuadraticBezier(_BezierCurve):
    """A curve with one control point. / 带一个控制点的曲线。"""

    start: Tensor
    ctrl: Tensor
    end: Tensor

    degree: ClassVar[int] = 2

    def evaluate(self, t: Param) -> Tensor:
        """Evaluate positions along the curve for parameter ``t``. / 计算参数 ``t`` 对应的曲线上位置。

        ``t`` may be a number or a tensor of shape ``(...,)``; the result has shape ``(..., dim)``. Any real ``t`` is
        accepted, values outside ``[0, 1]`` extrapolate the curve. / ``t`` 可以是数值或形状为 ``(...,)`` 的张量，
        结果形状为 ``(..., dim)``。接受任意实数 ``t``，``[0, 1]`` 之外的值对曲线进行外推。
        """

        t = self._param(t)
        u = 1.0 - t
        return self.start * u * u + self.ctrl * 2.0 * u * t + self.end * t * t

    def evaluate_derivative(self, t: Param) -> Tensor:
        """Compute the first derivative (tangent) with respect to ``t``. / 计算关于 ``t`` 的一阶导数（切向量）。"""

        t = self._param(t)
        u = 1.0 - t
        return (self.ctrl - self.start) * u * 2.0 + (self.end - self.ctrl) * t * 2.0

    def split(self, t: Param) -> Tuple[QuadraticBezier, QuadraticBezier]:
        """Split the curve at ``t`` into the parts covering ``[0, t]`` and ``[t, 1]``. / 在 ``t`` 处将曲线分为覆盖 ``[0, t]`` 与 ``[t, 1]`` 的两段。"""

        t = self._scalar_param(t)
        s = t - 1.0
        mid = self.end * t * t - self.ctrl * 2.0 * t * s + self.start * s * s
        first = QuadraticBezier(start=self.start, ctrl=self.ctrl * t - self.start * s, end=mid)
        second = QuadraticBezier(start=mid, ctrl=self.end * t - self.ctrl * s, end=self.end)
        return first, second

    @classmethod
    def from_line_segment(cls, line: LineSegment) -> QuadraticBezier:
        """Create a straight curve tracing ``line`` at constant speed. / 创建以匀速描绘 ``line`` 的直线曲线。"""

        return cls(start=line.a, ctrl=(line.a + line.b) * 0.5, end=line.b)

    @classmethod
    def basis_matrix(cls, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None) -> Tensor:
        """Return ``M`` such that ``[1, t, t**2] @ M @ P`` evaluates the curve. / 返回使 ``[1, t, t**2] @ M @ P`` 等于曲线值的矩阵 ``M``。"""

        return matrix_from_rows(
            (1.0, 0.0, 0.0),
            (-2.0, 2.0, 0.0),
            (1.0, -2.0, 1.0),
            dtype=dtype,
            device=device,
        )


@dataclass(eq=False)
class CubicBezier(_BezierCurve):
    """A curve with two control points. / 带两个控制点的曲线。

    Fields follow the order ``(start, ctrl0, ctrl1, end)``; :attr:`control_points` stacks them into a ``(4, dim)``
    tensor. / 字段顺序为 ``(start, ctrl0, ctrl1, end)``；:attr:`control_points` 将其堆叠为 ``(4, dim)`` 张量。
    """

    start: Tensor
    ctrl0: Tensor
    ctrl1: Tensor
    end: Tensor

    degree: ClassVar[int] = 3

    def evaluate(self, t: Param) -> Tensor:
        """Evaluate positions along the curve for parameter ``t``. / 计算参数 ``t`` 对应的曲线上位置。"""

        t = self._param(t)
        u = 1.0 - t
        return (
            self.start * u * u * u
            + self.ctrl0 * 3.0 * u * u * t
            + self.ctrl1 * 3.0 * u * t * t
            + self.end * t * t * t
        )

    def evaluate_derivative(self, t: Param) -> Tensor:
        t = self._param(t)
        u = 1.0 - t
        return (
            (self.ctrl0 - self.start) * u * u * 3.0
            + (self.ctrl1 - self.ctrl0) * 2.0 * u * t * 3.0
            + (self.end - self.ctrl1) * t * t * 3.0
        )

    def split(self, t: Param) -> Tuple[CubicBezier, CubicBezier]:
        """Split the curve at ``t`` into the parts covering ``[0, t]`` and ``[t, 1]``. / 在 ``t`` 处将曲线分为覆盖 ``[0, t]`` 与 ``[t, 1]`` 的两段。

        The shared point is computed once and used by both halves. / 共享点只计算一次，供两段共同使用。
        """

        t = self._scalar_param(t)
        s = t - 1.0
        mid = (
            self.end * t * t * t
            - self.ctrl1 * 3.0 * t * t * s
            + self.ctrl0 * 3.0 * t * s * s
            - self.start * s * s * s
        )
        first = CubicBezier(
            start=self.start,
            ctrl0=self.ctrl0 * t - self.start * s,
            ctrl1=self.ctrl1 * t * t - self.ctrl0 * 2.0 * t * s + self.start * s * s,
            end=mid,
        )
        second = CubicBezier(
            start=mid,
            ctrl0=self.end * t * t - self.ctrl1 * 2.0 * t * s + self.ctrl0 * s * s,
            ctrl1=self.end * t - self.ctrl1 * s,
            end=self.end,
        )
        return first, second

    @classmethod
    def from_line_segment(cls, line: LineSegment) -> CubicBezier:
        """Create a straight curve tracing ``line`` at constant speed. / 创建以匀速描绘 ``line`` 的直线曲线。"""

        delta = line.b - line.a
        return cls(start=line.a, ctrl0=line.a + delta / 3.0, ctrl1=line.a + delta * (2.0 / 3.0), end=line.b)

    @classmethod
    def basis_matrix(cls, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None) -> Tensor:
        """Return ``M`` such that ``[1, t, t**2, t**3] @ M @ P`` evaluates the curve. / 返回使 ``[1, t, t**2, t**3] @ M @ P`` 等于曲线值的矩阵 ``M``。"""

        return matrix_from_rows(
            (1.0, 0.0, 0.0, 0.0),
            (-3.0, 3.0, 0.0, 0.0),
            (3.0, -6.0, 3.0, 0.0),
            (-1.0, 3.0, -3.0, 1.0),
            dtype=dtype,
            device=device,
        )

    @classmethod
    def unit_quarter_circle(
        cls, dim: int = 2, *, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None
    ) -> CubicBezier:
        """Cubic approximation of the unit quarter circle from ``(1, 0)`` to ``(0, 1)``. / 从 ``(1, 0)`` 到 ``(0, 1)`` 的单位四分之一圆的三次近似。

        Four of these, mirrored, make a good-looking circle; see :meth:`unit_circle`. / 四段镜像后即可组成外观良好的圆，
        参见 :meth:`unit_circle`。
        """

        if dim not in (2, 3):
            raise ValueError(f"dim must be 2 or 3. Received {dim}")
        k = 4.0 * (math.sqrt(2.0) - 1.0) / 3.0
        coords = [(1.0, 0.0), (1.0, k), (k, 1.0), (0.0, 1.0)]
        points = torch.tensor(coords, dtype=dtype or torch.get_default_dtype(), device=device)
        if dim == 3:
            points = torch.cat([points, torch.zeros_like(points[:, :1])], dim=-1)
        return cls.from_tensor(points)

    @classmethod
    def unit_circle(
        cls, dim: int = 2, *, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None
    ) -> Tuple[CubicBezier, CubicBezier, CubicBezier, CubicBezier]:
        """The four quarters ``(north-east, north-west, south-west, south-east)`` of the unit circle. / 单位圆的四个象限 ``（东北、西北、西南、东南）``。"""

        a = cls.unit_quarter_circle(dim, dtype=dtype, device=device)
        b = a.flipped_x()
        c = b.flipped_y()
        d = a.flipped_y()
        return a, b, c, d


__all__ = ["CubicBezier", "QuadraticBezier"]
