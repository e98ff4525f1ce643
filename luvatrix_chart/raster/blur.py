from __future__ import annotations

import numpy as np
import torch
import torch.nn.functional as F


def box_blur(src: np.ndarray, radius: int) -> np.ndarray:
    """Uniform ``(2r+1)^2`` mean filter over an RGBA raster.

    Pixels outside the raster count as transparent, so edges fade out. The
    mean runs on premultiplied color to avoid dark fringes around opaque
    areas.
    """
    if radius < 0:
        raise ValueError("blur radius must be >= 0")
    if radius == 0 or src.size == 0:
        return src.copy()

    rgba = torch.from_numpy(np.ascontiguousarray(src, dtype=np.float32))
    alpha = rgba[:, :, 3:4]
    premul = torch.cat([rgba[:, :, :3] * (alpha / 255.0), alpha], dim=2)
    batch = premul.permute(2, 0, 1).unsqueeze(0)
    blurred = F.avg_pool2d(
        batch,
        kernel_size=2 * radius + 1,
        stride=1,
        padding=radius,
        count_include_pad=True,
    )
    out = blurred.squeeze(0).permute(1, 2, 0)
    out_alpha = out[:, :, 3:4]
    visible = out_alpha > 1e-6
    safe_alpha = torch.where(visible, out_alpha / 255.0, torch.ones_like(out_alpha))
    rgb = torch.where(visible, out[:, :, :3] / safe_alpha, torch.zeros_like(out[:, :, :3]))
    result = torch.cat([rgb, out_alpha], dim=2)
    return result.round().clamp(0, 255).to(torch.uint8).numpy()
