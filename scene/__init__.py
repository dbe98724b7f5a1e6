"""
Scene inventory and image-layer module for obsx.

This package handles:
  • Reading the current OBS state (scene members, global names, file paths)
  • Listing image files to place as layers
  • Reconciling a directory of images against a scene without duplicates

Usage:
    from scene import list_images_in_dir, reconcile_images

    images = list_images_in_dir("/path/to/images")
    result = reconcile_images(client, images, scene_name="Main")
"""

from .inventory import Inventory, describe_state
from .utils import DesiredImage, IMAGE_EXTS, list_images_in_dir, pick_image_input_kind
from .image_layers import ImageLayerReconciler, ImageWorkingSet, ReconcileResult, reconcile_images

__all__ = [
    "Inventory",
    "describe_state",
    "DesiredImage",
    "IMAGE_EXTS",
    "list_images_in_dir",
    "pick_image_input_kind",
    "ImageLayerReconciler",
    "ImageWorkingSet",
    "ReconcileResult",
    "reconcile_images",
]
