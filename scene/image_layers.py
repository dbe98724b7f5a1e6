"""
image_layers.py
---------------
Idempotent image-layer reconciliation for the obsx pipeline.

Steps:
1. Snapshot the target scene (member names, their backing files) and the
   global source namespace.
2. Walk the desired images in file-name order and, for each one:
   - skip it if the scene already shows it (same name, or same file);
   - attach an existing input when it is backed by the same file;
   - skip with a warning when the name belongs to an unrelated object;
   - otherwise create a new image input and fit it to the canvas.
3. Record every placement in the in-memory working set so later images in
   the same pass see it. OBS is never re-queried mid-pass.

Running the pass twice against unchanged state creates nothing the second time.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from common.errors import NameConflict, RemoteCallFailed
from common.io_utils import log
from common.transformations import compute_fit_transform

from .inventory import Inventory
from .utils import DesiredImage, pick_image_input_kind


# ----------------------------
# Working set
# ----------------------------
@dataclass
class ImageWorkingSet:
    """Snapshot of the scene taken once per pass and mutated locally."""
    member_names: Set[str]
    global_names: Set[str]
    files_by_member: Dict[str, str] = field(default_factory=dict)

    @property
    def member_files(self) -> Set[str]:
        return set(self.files_by_member.values())

    def record_placement(self, name: str, file_path: str) -> None:
        self.member_names.add(name)
        self.global_names.add(name)
        self.files_by_member[name] = file_path


@dataclass
class ReconcileResult:
    scene: str
    created: int = 0
    skipped: int = 0
    created_names: List[str] = field(default_factory=list)
    conflicts: List[NameConflict] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ----------------------------
# Reconciler
# ----------------------------
class ImageLayerReconciler:
    def __init__(self, client):
        self.client = client
        self.inventory = Inventory(client)

    def snapshot(self, scene_name: str) -> ImageWorkingSet:
        members = self.inventory.list_container_members(scene_name)
        return ImageWorkingSet(
            member_names=set(members),
            global_names=self.inventory.list_all_object_names(),
            files_by_member=self.inventory.file_backed_paths_of(sorted(members)),
        )

    def reconcile(self, images: List[DesiredImage], scene_name: Optional[str] = None) -> ReconcileResult:
        scene_name = scene_name or self.inventory.current_scene()
        canvas_w, canvas_h = self.inventory.canvas_size()
        input_kind = pick_image_input_kind(self.inventory.input_kinds())
        working = self.snapshot(scene_name)
        transform = compute_fit_transform(canvas_w, canvas_h)

        result = ReconcileResult(scene=scene_name)
        for img in images:
            try:
                placed = self._place(img, scene_name, input_kind, transform, working)
            except NameConflict as conflict:
                log(f"⚠️ Skipping {img.file_name}: {conflict.reason}", "WARNING")
                result.conflicts.append(conflict)
                result.skipped += 1
                continue
            except RemoteCallFailed as e:
                log(f"❌ {e.request_type} failed for {img.file_name}: {e.message}", "ERROR")
                result.error = f"{e.request_type}: {e.message}"
                break

            if placed:
                result.created += 1
                result.created_names.append(img.file_name)
            else:
                result.skipped += 1
        return result

    def _place(self, img: DesiredImage, scene_name: str, input_kind: str,
               transform: dict, working: ImageWorkingSet) -> bool:
        """Return True when a new visible placement was made, False when skipped."""
        name = img.file_name

        if name in working.member_names:
            log(f"Skipping {name}: already in scene {scene_name}", "INFO")
            return False

        if img.file_path in working.member_files:
            log(f"Skipping {name}: file already shown in scene {scene_name}", "INFO")
            return False

        if name in working.global_names:
            existing = self.inventory.file_backed_path(name)
            if existing is None or existing != img.file_path:
                raise NameConflict(
                    name, f"OBS input name already exists with a different file ({name})"
                )
            item = self.client.call("CreateSceneItem", {
                "sceneName": scene_name,
                "sourceName": name,
                "sceneItemEnabled": True,
            })
            self._fit(scene_name, item["sceneItemId"], transform)
            working.record_placement(name, img.file_path)
            log(f"🔗 Attached existing input {name} to {scene_name}", "OK")
            return True

        created = self.client.call("CreateInput", {
            "sceneName": scene_name,
            "inputName": name,
            "inputKind": input_kind,
            "inputSettings": {"file": img.file_path},
            "sceneItemEnabled": True,
        })
        self._fit(scene_name, created["sceneItemId"], transform)
        working.record_placement(name, img.file_path)
        log(f"✅ Created image input {name}", "OK")
        return True

    def _fit(self, scene_name: str, scene_item_id: int, transform: dict) -> None:
        self.client.call("SetSceneItemTransform", {
            "sceneName": scene_name,
            "sceneItemId": scene_item_id,
            "sceneItemTransform": transform,
        })


def reconcile_images(client, images: List[DesiredImage], scene_name: Optional[str] = None) -> ReconcileResult:
    """Convenience wrapper used by the CLI."""
    return ImageLayerReconciler(client).reconcile(images, scene_name)
