import pytest
import torch

from bzcurves.linalg import (
    DegenerateDirectionError,
    LineSegment,
    as_point,
    distance_squared,
    magnitude,
    matrix_from_rows,
    normalized,
)


def test_vector_helpers() -> None:
    a = torch.tensor([3.0, 4.0])
    b = torch.tensor([0.0, 0.0])
    assert magnitude(a).item() == 5.0
    assert distance_squared(a, b).item() == 25.0
    assert torch.allclose(normalized(a), torch.tensor([0.6, 0.8]))


def test_normalized_rejects_zero_vector() -> None:
    with pytest.raises(DegenerateDirectionError):
        normalized(torch.zeros(3))
    with pytest.raises(ArithmeticError):
        normalized(torch.tensor([[1.0, 0.0], [0.0, 0.0]]))
    with pytest.raises(DegenerateDirectionError):
        normalized(torch.tensor([3.0e38, 3.0e38]))


def test_as_point_keeps_tensor_dtype() -> None:
    point = torch.tensor([1.0, 2.0], dtype=torch.float64)
    assert as_point(point) is point
    assert as_point([1.0, 2.0]).dtype == torch.get_default_dtype()
    assert as_point([1.0, 2.0], dtype=torch.float64).dtype == torch.float64


def test_matrix_from_rows_requires_square_matrix() -> None:
    m = matrix_from_rows((1.0, 2.0), (3.0, 4.0), dtype=torch.float64)
    assert m.shape == (2, 2)
    assert m[1, 0].item() == 3.0
    with pytest.raises(ValueError):
        matrix_from_rows((1.0, 2.0, 3.0), (4.0, 5.0, 6.0))


def test_line_segment_converts_endpoints() -> None:
    segment = LineSegment(torch.tensor([0.0, 1.0], dtype=torch.float64), [2.0, 3.0])
    assert segment.b.dtype == torch.float64
    with pytest.raises(ValueError):
        LineSegment([0.0, 0.0], [1.0, 1.0, 1.0])
