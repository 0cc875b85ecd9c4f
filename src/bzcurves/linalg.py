"""Small vector and matrix helpers used by the curve types. / 曲线类型所依赖的小型向量与矩阵工具。

Points and vectors are plain 1-D PyTorch tensors of shape ``(2,)`` or ``(3,)``; the scalar precision is the tensor
``dtype`` and the memory layout is the tensor ``device``. / 点与向量均为形状 ``(2,)`` 或 ``(3,)`` 的一维 PyTorch 张量；
标量精度由张量 ``dtype`` 决定，内存布局由张量 ``device`` 决定。
Keeping these helpers as free functions lets the curve code stay agnostic of both axes. /
将这些工具保持为自由函数，使曲线代码与上述两个维度均无关。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import torch

Tensor = torch.Tensor
PointLike = Union[Tensor, Sequence[float]]


class DegenerateDirectionError(ValueError, ArithmeticError):
    """Raised when a direction is requested from a zero-length vector. / 对零长度向量求方向时抛出。"""


def as_point(
    value: PointLike, *, dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None
) -> Tensor:
    """Convert ``value`` into a floating point tensor. / 将 ``value`` 转换为浮点张量。

    Tensors keep their dtype and device unless overridden; Python sequences use the torch default dtype.
    / 张量默认保留原有 dtype 与设备；Python 序列使用 torch 默认 dtype。
    """

    if isinstance(value, Tensor):
        return value.to(dtype=dtype or value.dtype, device=device or value.device)
    return torch.as_tensor(value, dtype=dtype or torch.get_default_dtype(), device=device)


def dot(a: Tensor, b: Tensor) -> Tensor:
    return (a * b).sum(dim=-1)


def magnitude_squared(v: Tensor) -> Tensor:
    return dot(v, v)


def magnitude(v: Tensor) -> Tensor:
    return torch.linalg.vector_norm(v, dim=-1)


def distance_squared(a: Tensor, b: Tensor) -> Tensor:
    return magnitude_squared(a - b)


def normalized(v: Tensor) -> Tensor:
    """Return ``v`` scaled to unit length. / 返回缩放为单位长度的 ``v``。

    Raises
    ------
    DegenerateDirectionError
        If ``v`` (or any vector of a batch) has zero or overflowing magnitude, in which case no direction can be
        recovered. / 若 ``v``（或批次中任一向量）模长为零或溢出，则无法得到方向。
    """

    length = magnitude(v)
    if bool(torch.any(length == 0)):
        raise DegenerateDirectionError("Cannot normalise a zero-length vector: direction is undefined")
    if bool(torch.any(torch.isinf(length))):
        raise DegenerateDirectionError("Vector magnitude overflows the dtype: direction is undefined")
    return v / length.unsqueeze(-1)


def matrix_from_rows(
    *rows: Sequence[float], dtype: Optional[torch.dtype] = None, device: Optional[torch.device] = None
) -> Tensor:
    """Build a square row-major matrix from its row vectors. / 由行向量构造行主序方阵。"""

    matrix = torch.tensor([list(row) for row in rows], dtype=dtype or torch.get_default_dtype(), device=device)
    if matrix.dim() != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Matrix rows must form a square matrix. Received shape {tuple(matrix.shape)}")
    return matrix


@dataclass
class LineSegment:
    """Straight segment between two endpoints ``a`` and ``b``. / 端点为 ``a`` 与 ``b`` 的直线段。"""

    a: Tensor
    b: Tensor

    def __post_init__(self) -> None:
        self.a = as_point(self.a)
        self.b = as_point(self.b, dtype=self.a.dtype, device=self.a.device)
        if self.a.shape != self.b.shape:
            raise ValueError(
                "LineSegment endpoints must have matching shapes. "
                f"Received {tuple(self.a.shape)} and {tuple(self.b.shape)}"
            )


__all__ = [
    "DegenerateDirectionError",
    "LineSegment",
    "as_point",
    "distance_squared",
    "dot",
    "magnitude",
    "magnitude_squared",
    "matrix_from_rows",
    "normalized",
]
