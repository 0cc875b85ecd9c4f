"""Nearest-point search on Bézier curves. / 贝塞尔曲线上的最近点搜索。

The search mirrors a common tessellation trick: sample the curve coarsely in parameter space, keep the sample closest to
the query point, then refine around it with shrinking probes. / 该搜索沿用常见的细分技巧：先在参数空间粗略采样曲线，
保留距查询点最近的样本，再以逐步缩小的探测步长在其附近细化。
It is a local, greedy method; on curves that pass near the query point several times the coarse grid must be dense
enough to land in the right basin. / 这是一种局部贪心方法；若曲线多次经过查询点附近，粗采样网格必须足够密集才能落入
正确的极小值区域。
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

import torch

from .linalg import PointLike, as_point, distance_squared

if TYPE_CHECKING:
    from .bezier import _BezierCurve

Tensor = torch.Tensor

logger = logging.getLogger(__name__)


class InvalidToleranceError(ValueError):
    """Raised when the refinement tolerance is not a finite positive number. / 细化容差不是有限正数时抛出。"""


def _check_tolerance(epsilon: float) -> None:
    if not (math.isfinite(epsilon) and epsilon > 0):
        raise InvalidToleranceError(f"epsilon must be a finite positive tolerance. Received {epsilon}")


@dataclass
class ProjectionConfig:
    """Tuning knobs of :class:`PointProjector`. / :class:`PointProjector` 的调节参数。"""

    steps: int = 16  # Coarse intervals over [0, 1] / 在 [0, 1] 上的粗采样区间数
    epsilon: float = 1e-6  # Refinement stops once the probe step drops below this / 探测步长低于此值时停止细化

    def validate(self) -> None:
        if self.steps < 1:
            raise ValueError(f"steps must be at least 1 to build the coarse grid. Received {self.steps}")
        _check_tolerance(self.epsilon)


def binary_search_point(
    curve: _BezierCurve,
    point: Tensor,
    coarse: Iterable[Tuple[float, Tensor]],
    half_interval: float,
    epsilon: float,
) -> Tuple[float, Tensor]:
    """Refine the nearest point on ``curve`` starting from coarse candidates. / 从粗采样候选开始细化 ``curve`` 上的最近点。

    Parameters
    ----------
    coarse:
        ``(t, curve.evaluate(t))`` pairs. The curve's end (``t = 1``) is always the initial candidate and a pair only
        replaces the current best when strictly closer. / ``(t, curve.evaluate(t))`` 对。曲线终点（``t = 1``）始终是
        初始候选，只有严格更近的样本才会替换当前最佳值。
    half_interval:
        Initial probe step ``h``. / 初始探测步长 ``h``。
    epsilon:
        Refinement stops once ``h < epsilon``. / 当 ``h < epsilon`` 时停止细化。

    Probes at ``t - h`` and ``t + h`` are accepted when either is strictly closer, and the search walks again with the
    same ``h``; otherwise ``h`` is halved. ``t`` is never clamped, so the result may lie on the extrapolated curve.
    / 若 ``t - h`` 或 ``t + h`` 中任一探测点严格更近则接受，并以相同 ``h`` 继续前进；否则将 ``h`` 减半。
    ``t`` 不会被截断，因此结果可能位于外推的曲线上。
    """

    _check_tolerance(epsilon)

    t = 1.0
    best = curve.end
    d = distance_squared(best, point).item()
    for t_, pt_ in coarse:
        d_ = distance_squared(pt_, point).item()
        if d_ < d:
            d, best, t = d_, pt_, t_
    logger.debug("Coarse candidate t=%g at squared distance %g", t, d)

    h = half_interval
    walks = 0
    halvings = 0
    while h >= epsilon:
        p1, p2 = curve.evaluate(t - h), curve.evaluate(t + h)
        d1, d2 = distance_squared(point, p1).item(), distance_squared(point, p2).item()
        if d1 < d or d2 < d:
            if d1 < d2:
                d, best, t = d1, p1, t - h
            else:
                d, best, t = d2, p2, t + h
            walks += 1
            continue
        h /= 2.0
        halvings += 1

    logger.debug("Refined to t=%g at squared distance %g after %d walks and %d halvings", t, d, walks, halvings)
    return t, best


class PointProjector:
    """Project points onto Bézier curves with a coarse-then-refine search. / 以先粗后细的搜索将点投影到贝塞尔曲线上。"""

    def __init__(self, config: Optional[ProjectionConfig] = None):
        self.config = config or ProjectionConfig()
        self.config.validate()

    def project(self, curve: _BezierCurve, point: PointLike) -> Tuple[float, Tensor]:
        """Return ``(t, position)`` of the approximate nearest point to ``point``. / 返回距 ``point`` 近似最近点的 ``(t, position)``。"""

        cfg = self.config
        point = as_point(point, dtype=curve.dtype, device=curve.device)
        if point.shape != curve.end.shape:
            raise ValueError(
                f"Query point shape {tuple(point.shape)} does not match curve points {tuple(curve.end.shape)}"
            )

        # t = i / steps for i = 0..steps, evaluated in one batch. / 一次性批量计算 t = i / steps。
        t_values = torch.arange(cfg.steps + 1, device=curve.device, dtype=curve.dtype) / cfg.steps
        positions = curve.evaluate(t_values)
        coarse = zip(t_values.tolist(), positions.unbind(0))
        return binary_search_point(curve, point, coarse, 1.0 / (2.0 * cfg.steps), cfg.epsilon)


__all__ = ["InvalidToleranceError", "PointProjector", "ProjectionConfig", "binary_search_point"]
