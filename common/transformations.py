"""
common/transformations.py
--------------------------
Scene-item transform helpers shared by the image and webcam stages.

OBS canvas coordinates:
- origin (0, 0) is the top-left corner
- positionX/positionY place the item's alignment point
- bounds* fields describe the box the source is scaled into
"""

from typing import Any, Dict, Tuple


BOUNDS_SCALE_INNER = "OBS_BOUNDS_SCALE_INNER"
ALIGN_CENTER = 0


# -------------------------------------------------------
# Canvas fitting
# -------------------------------------------------------

def compute_fit_transform(canvas_w: float, canvas_h: float) -> Dict[str, Any]:
    """
    Center an item on the canvas and scale it (keeping aspect ratio)
    to fit inside the full canvas.
    """
    return {
        "positionX": canvas_w / 2,
        "positionY": canvas_h / 2,
        "alignment": ALIGN_CENTER,
        "boundsType": BOUNDS_SCALE_INNER,
        "boundsAlignment": ALIGN_CENTER,
        "boundsWidth": canvas_w,
        "boundsHeight": canvas_h,
    }


def canvas_size(video_settings: Dict[str, Any]) -> Tuple[float, float]:
    """Base (canvas) resolution from a GetVideoSettings response."""
    return video_settings["baseWidth"], video_settings["baseHeight"]
