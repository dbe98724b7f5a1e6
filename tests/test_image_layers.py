"""
Tests for image listing and the image-layer reconciler.

Tests:
- Directory listing (extension filter, ordering, subdirectories)
- Image input kind selection
- Reconciliation (create, skip, attach, name conflicts, idempotence)
- Fatal remote failures
"""

import os
import pytest

from common.errors import NoImageKindFound
from scene import (
    IMAGE_EXTS,
    DesiredImage,
    ImageLayerReconciler,
    Inventory,
    list_images_in_dir,
    pick_image_input_kind,
    reconcile_images,
)


class TestListImages:
    """Tests for list_images_in_dir."""

    def test_sorted_and_filtered(self, image_dir):
        """Non-images are dropped and names come back alphabetically."""
        images = list_images_in_dir(str(image_dir))
        assert [i.file_name for i in images] == ["a.jpg", "b.png", "d.gif"]

    def test_paths_are_absolute(self, image_dir):
        """File paths are normalised absolute paths."""
        images = list_images_in_dir(str(image_dir))
        assert images[0].file_path == os.path.realpath(os.path.join(str(image_dir), "a.jpg"))

    def test_empty_when_no_images(self, tmp_path):
        """A directory with no images yields nothing."""
        (tmp_path / "readme.txt").write_text("hi")
        assert list_images_in_dir(str(tmp_path)) == []

    def test_ignores_subdirectories(self, tmp_path):
        """A directory named like an image is not an image."""
        (tmp_path / "subdir.png").mkdir()
        (tmp_path / "real.png").write_bytes(b"")
        images = list_images_in_dir(str(tmp_path))
        assert [i.file_name for i in images] == ["real.png"]

    def test_extension_case_insensitive(self, tmp_path):
        """Upper-case extensions still count."""
        (tmp_path / "SHOT.PNG").write_bytes(b"")
        assert [i.file_name for i in list_images_in_dir(str(tmp_path))] == ["SHOT.PNG"]

    def test_image_exts(self):
        """Common image extensions are allowed, others are not."""
        for ext in [".png", ".jpg", ".jpeg", ".gif", ".webp"]:
            assert ext in IMAGE_EXTS
        for ext in [".txt", ".mp4", ".js"]:
            assert ext not in IMAGE_EXTS


class TestPickImageKind:
    """Tests for image input kind selection."""

    def test_prefers_image_source(self):
        assert pick_image_input_kind(["foo_image", "image_source"]) == "image_source"

    def test_falls_back_to_any_image_kind(self):
        assert pick_image_input_kind(["color_source", "Custom_Image_v2"]) == "Custom_Image_v2"

    def test_raises_when_missing(self):
        with pytest.raises(NoImageKindFound):
            pick_image_input_kind(["color_source"])


class TestInventory:
    """Tests for the structured inventory queries."""

    def test_file_paths_skip_non_inputs(self, fake_obs):
        """Nested scenes have no settings and are silently left out."""
        fake_obs.add_scene("Nested")
        fake_obs.add_input("logo", settings={"file": "/img/logo.png"}, scenes=["Main"])
        fake_obs.add_input("text", kind="text_ft2_source_v2", settings={"text": "hi"}, scenes=["Main"])
        paths = Inventory(fake_obs).file_backed_paths_of(["logo", "text", "Nested"])
        assert paths == {"logo": "/img/logo.png"}

    def test_global_names_include_scenes(self, fake_obs):
        fake_obs.add_scene("BRB")
        fake_obs.add_input("Mic", kind="coreaudio_input_capture")
        assert Inventory(fake_obs).list_all_object_names() == {"Main", "BRB", "Mic"}


def _images(directory):
    return list_images_in_dir(str(directory))


class TestReconcile:
    """Tests for ImageLayerReconciler."""

    def test_creates_every_image(self, fake_obs, image_dir):
        """An empty scene gets one input per image, fitted to the canvas."""
        result = reconcile_images(fake_obs, _images(image_dir))

        assert (result.created, result.skipped) == (3, 0)
        assert result.scene == "Main"
        assert fake_obs.members("Main") == ["a.jpg", "b.png", "d.gif"]
        created = fake_obs.calls_of("CreateInput")
        assert [c["inputKind"] for c in created] == ["image_source"] * 3
        assert created[0]["inputSettings"] == {"file": _images(image_dir)[0].file_path}
        assert len(fake_obs.transforms) == 3
        first = next(iter(fake_obs.transforms.values()))
        assert first["positionX"] == 960
        assert first["boundsType"] == "OBS_BOUNDS_SCALE_INNER"

    def test_second_run_is_idempotent(self, fake_obs, image_dir):
        """Running again against unchanged state creates nothing."""
        images = _images(image_dir)
        reconcile_images(fake_obs, images)
        mutations_before = len(fake_obs.calls_of("CreateInput"))

        result = reconcile_images(fake_obs, images)

        assert (result.created, result.skipped) == (0, len(images))
        assert len(fake_obs.calls_of("CreateInput")) == mutations_before
        assert fake_obs.calls_of("CreateSceneItem") == []

    def test_skips_same_file_under_other_name(self, fake_obs, image_dir):
        """A scene member already showing the file is not duplicated."""
        path = _images(image_dir)[0].file_path
        fake_obs.add_input("Logo", settings={"file": path}, scenes=["Main"])

        result = reconcile_images(fake_obs, _images(image_dir))

        assert (result.created, result.skipped) == (2, 1)
        assert "a.jpg" not in fake_obs.inputs

    def test_name_conflict_skips_without_touching_object(self, fake_obs, image_dir):
        """A global name backed by a different file is left alone."""
        fake_obs.add_scene("Other")
        fake_obs.add_input("b.png", settings={"file": "/elsewhere/b.png"}, scenes=["Other"])

        result = reconcile_images(fake_obs, _images(image_dir))

        assert (result.created, result.skipped) == (2, 1)
        assert [c.name for c in result.conflicts] == ["b.png"]
        assert fake_obs.inputs["b.png"]["settings"] == {"file": "/elsewhere/b.png"}
        assert fake_obs.calls_of("SetInputSettings") == []
        assert "b.png" not in fake_obs.members("Main")

    def test_name_conflict_when_path_unknown(self, fake_obs, image_dir):
        """A name held by something without a file setting is a conflict too."""
        fake_obs.add_scene("a.jpg")

        result = reconcile_images(fake_obs, _images(image_dir))

        assert [c.name for c in result.conflicts] == ["a.jpg"]
        assert result.created == 2

    def test_attaches_shared_input_with_same_file(self, fake_obs, image_dir):
        """An input in another scene backed by the same file is reused."""
        images = _images(image_dir)
        fake_obs.add_scene("Other")
        fake_obs.add_input("d.gif", settings={"file": images[2].file_path}, scenes=["Other"])

        result = reconcile_images(fake_obs, images)

        assert (result.created, result.skipped) == (3, 0)
        assert [c["sourceName"] for c in fake_obs.calls_of("CreateSceneItem")] == ["d.gif"]
        assert "d.gif" not in [c["inputName"] for c in fake_obs.calls_of("CreateInput")]
        assert "d.gif" in fake_obs.members("Main")

    def test_targets_explicit_scene(self, fake_obs, image_dir):
        fake_obs.add_scene("BRB")
        result = reconcile_images(fake_obs, _images(image_dir), scene_name="BRB")
        assert result.scene == "BRB"
        assert fake_obs.members("BRB") == ["a.jpg", "b.png", "d.gif"]
        assert fake_obs.members("Main") == []

    def test_duplicate_desired_names_see_earlier_effects(self, fake_obs):
        """Later images in the pass observe placements made earlier in it."""
        images = [
            DesiredImage(file_name="x.png", file_path="/a/x.png"),
            DesiredImage(file_name="y.png", file_path="/a/x.png"),
        ]
        result = reconcile_images(fake_obs, images)
        assert (result.created, result.skipped) == (1, 1)

    def test_no_requery_mid_pass(self, fake_obs, image_dir):
        """Scene membership and the input list are read once per pass."""
        reconcile_images(fake_obs, _images(image_dir))
        assert len(fake_obs.calls_of("GetSceneItemList")) == 1
        assert len(fake_obs.calls_of("GetInputList")) == 1

    def test_remote_failure_stops_with_counts(self, fake_obs, image_dir):
        """A failed create ends the pass; counts cover completed images only."""
        fake_obs.fail_next("SetSceneItemTransform", "boom", times=1)
        fake_obs.calls.clear()

        result = ImageLayerReconciler(fake_obs).reconcile(_images(image_dir))

        assert not result.ok
        assert "boom" in result.error
        assert (result.created, result.skipped) == (0, 0)
        assert len(fake_obs.calls_of("CreateInput")) == 1
