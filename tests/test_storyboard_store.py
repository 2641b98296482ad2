"""
Tests for the storyboard state store.

Tests for services/storyboard/storyboard_store.py
"""

import pytest

from models.storyboard_models import InvalidSceneTransition
from services.storyboard.storyboard_store import StoryboardStore


class TestPopulate:
    """Scene creation after segmentation."""

    def test_one_pending_scene_per_description_in_order(self):
        store = StoryboardStore()
        store.begin_run()
        scenes = store.populate(["first", "second", "third"])

        assert [s.description for s in store.scenes] == ["first", "second", "third"]
        assert all(s.status == "pending" for s in scenes)
        assert all(s.image is None for s in scenes)
        assert store.is_segmenting is False

    def test_ids_are_unique_and_carry_index(self):
        store = StoryboardStore()
        scenes = store.populate(["a", "b"])

        ids = [s.id for s in scenes]
        assert len(set(ids)) == 2
        assert ids[0].startswith("scene-") and ids[0].endswith("-0")
        assert ids[1].endswith("-1")

    def test_begin_run_clears_previous_state(self):
        store = StoryboardStore()
        store.fail_run("boom")
        store.begin_run()

        assert store.error is None
        assert store.scenes == []
        assert store.is_segmenting is True


class TestTransitions:
    """Per-scene state machine."""

    def test_happy_path(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]

        assert store.mark_generating(scene.id) is True
        assert store.mark_done(scene.id, "data:image/png;base64,AAAA") is True
        assert store.get(scene.id).status == "done"
        assert store.get(scene.id).image == "data:image/png;base64,AAAA"

    def test_error_keeps_image_absent(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]
        store.mark_generating(scene.id)
        store.mark_error(scene.id)

        assert store.get(scene.id).status == "error"
        assert store.get(scene.id).image is None

    def test_cannot_skip_generating(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]

        with pytest.raises(InvalidSceneTransition):
            store.mark_done(scene.id, "data:image/png;base64,AAAA")

    def test_cannot_regress_from_done(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]
        store.mark_generating(scene.id)
        store.mark_done(scene.id, "data:image/png;base64,AAAA")

        with pytest.raises(InvalidSceneTransition):
            store.mark_generating(scene.id)

    def test_done_requires_image(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]
        store.mark_generating(scene.id)

        with pytest.raises(ValueError):
            store.mark_done(scene.id, "")

    def test_stale_scene_updates_are_dropped(self):
        store = StoryboardStore()
        old = store.populate(["old"])[0]
        store.begin_run()
        new = store.populate(["new"])[0]

        assert store.mark_generating(old.id) is False
        assert store.get(new.id).status == "pending"

    def test_runs_in_the_same_millisecond_get_distinct_ids(self, monkeypatch):
        monkeypatch.setattr("services.storyboard.storyboard_store.time.time", lambda: 1000.0)
        store = StoryboardStore()
        old = store.populate(["old"])[0]
        new = store.populate(["new"])[0]

        assert old.id != new.id
        assert store.mark_generating(old.id) is False
        assert store.get(new.id).status == "pending"


class TestListeners:
    def test_every_mutation_notifies(self):
        store = StoryboardStore()
        seen = []
        store.subscribe(lambda: seen.append(store.snapshot()))

        store.begin_run()
        scene = store.populate(["a"])[0]
        store.mark_generating(scene.id)
        store.mark_error(scene.id)

        assert [s["is_segmenting"] for s in seen] == [True, False, False, False]
        assert [s["scenes"][0]["status"] for s in seen[1:]] == ["pending", "generating", "error"]

    def test_unsubscribe(self):
        store = StoryboardStore()
        seen = []
        unsubscribe = store.subscribe(lambda: seen.append(1))
        unsubscribe()
        store.begin_run()

        assert seen == []


class TestSnapshot:

    def test_inline_images_by_default(self):
        store = StoryboardStore()
        scene = store.populate(["a"])[0]
        store.mark_generating(scene.id)
        store.mark_done(scene.id, "data:image/png;base64,AAAA")

        assert store.snapshot()["scenes"][0]["image"] == "data:image/png;base64,AAAA"

    def test_image_base_replaces_inline_data(self):
        store = StoryboardStore()
        done, pending = store.populate(["a", "b"])
        store.mark_generating(done.id)
        store.mark_done(done.id, "data:image/png;base64,AAAA")

        scenes = store.snapshot("/workspaces/w1/scenes")["scenes"]

        assert scenes[0]["image"] == f"/workspaces/w1/scenes/{done.id}/image"
        assert scenes[1]["image"] is None
