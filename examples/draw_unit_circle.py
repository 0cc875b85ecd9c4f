"""Draw the four-curve unit circle and a projected point. / 绘制由四条曲线组成的单位圆以及一个投影点。

Run the script with ``python examples/draw_unit_circle.py``; it saves a PNG next to this file. /
使用 ``python examples/draw_unit_circle.py`` 运行脚本，会在本文件旁保存 PNG。
The example shows how the sampling primitive of :class:`bzcurves.CubicBezier` feeds a rasteriser and how
:meth:`~bzcurves.CubicBezier.project_point` finds the closest point on a curve. /
该示例展示 :class:`bzcurves.CubicBezier` 的采样原语如何为光栅化提供输入，以及 :meth:`~bzcurves.CubicBezier.project_point`
如何在曲线上找到最近点。
"""
from __future__ import annotations

from pathlib import Path

import torch
from PIL import Image, ImageDraw

from bzcurves import CubicBezier

OUTPUT_PATH = Path(__file__).with_suffix(".png")
SIZE = 512


def to_pixels(points: torch.Tensor) -> list:
    # Map [-1.2, 1.2] onto the canvas with y pointing up. / 将 [-1.2, 1.2] 映射到画布，y 轴朝上。
    scale = SIZE / 2.4
    xs = (points[:, 0] + 1.2) * scale
    ys = SIZE - (points[:, 1] + 1.2) * scale
    return list(zip(xs.tolist(), ys.tolist()))


def main() -> None:
    image = Image.new("RGB", (SIZE, SIZE), "white")
    draw = ImageDraw.Draw(image)

    for quarter in CubicBezier.unit_circle(dtype=torch.float64):
        positions, _ = quarter.sample(64)
        draw.line(to_pixels(positions), fill=(230, 25, 50), width=3)

    query = torch.tensor([0.9, 0.6], dtype=torch.float64)
    t, nearest = CubicBezier.unit_quarter_circle(dtype=torch.float64).project_point(query, steps=8)
    draw.line(to_pixels(torch.stack([query, nearest])), fill=(40, 40, 40), width=1)
    for x, y in to_pixels(torch.stack([query, nearest])):
        draw.ellipse((x - 4, y - 4, x + 4, y + 4), fill=(40, 40, 40))

    image.save(OUTPUT_PATH)
    print(f"Saved unit circle example to {OUTPUT_PATH} (nearest point at t={t:.4f})")


if __name__ == "__main__":
    main()
