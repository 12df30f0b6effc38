"""Unit tests for the scene synchronizer."""

import random

import pytest

from feedscape.exceptions import SceneMutationError
from feedscape.graph import CategoryLayout, CategoryPalette, PlacementConfig, SpatialPlacement
from feedscape.scene import (
    EffectConfig,
    Highlighter,
    InMemoryScene,
    SceneObject,
    SceneSynchronizer,
)
from feedscape.storage import EntityStore

CATEGORIES = ["Technology", "Business", "Science", "Health"]
COLORS = {"Technology": 0x4E79A7, "Business": 0xF28E2C, "Science": 0xE15759, "Health": 0x76B7B2}


class FlakyScene(InMemoryScene):
    """Scene that refuses to add the listed entity ids."""

    def __init__(self, reject: set[str]) -> None:
        super().__init__()
        self.reject = reject

    def add_object(self, obj: SceneObject) -> None:
        if obj.entity_id in self.reject:
            raise SceneMutationError(f"Rejected {obj.entity_id}")
        super().add_object(obj)


def make_synchronizer(scene, clock, store=None, stable=False) -> SceneSynchronizer:
    placement = SpatialPlacement(
        CategoryLayout(CATEGORIES),
        PlacementConfig(seed=11, stable_positions=stable),
    )
    highlighter = Highlighter(scene, store or EntityStore())
    return SceneSynchronizer(
        scene,
        placement,
        CategoryPalette(COLORS),
        highlighter=highlighter,
        effect_config=EffectConfig(lifetime=2.0, particle_count=10, spread=10.0),
        clock=clock,
    )


@pytest.fixture
def synchronizer(scene, fake_clock) -> SceneSynchronizer:
    return make_synchronizer(scene, fake_clock)


class TestReconcile:
    """Tests for SceneSynchronizer.reconcile."""

    def test_creates_objects_with_category_color(self, synchronizer, scene, entity_factory) -> None:
        a = entity_factory("a", category="Science", engagement=100)
        result = synchronizer.reconcile([], [a])

        assert result.created == ["a"]
        obj = scene.get_object("a")
        assert obj.color == COLORS["Science"]
        assert obj.radius == pytest.approx(4.0)

    def test_consecutive_cycles(self, synchronizer, scene, entity_factory) -> None:
        """{A, B} then {B, C}: A destroyed, B repositioned, C created with a spawn."""
        a, b, c = entity_factory("a"), entity_factory("b"), entity_factory("c")
        synchronizer.reconcile([], [a, b])
        result = synchronizer.reconcile([a, b], [b, c])

        assert result.destroyed == ["a"]
        assert result.repositioned == ["b"]
        assert result.created == ["c"]
        assert result.spawned == ["c"]
        assert synchronizer.live_ids == {"b", "c"}

    def test_live_set_matches_next_visible(self, synchronizer, entity_factory) -> None:
        """Object ids equal the visible ids after every pass, whatever previous claims."""
        rng = random.Random(5)
        pool = [entity_factory(str(i), category=CATEGORIES[i % 4]) for i in range(12)]

        for _ in range(25):
            previous = rng.sample(pool, rng.randint(0, len(pool)))
            next_visible = rng.sample(pool, rng.randint(0, len(pool)))
            synchronizer.reconcile(previous, next_visible)
            assert synchronizer.live_ids == {e.id for e in next_visible}

    def test_spawn_only_for_entering(self, synchronizer, scene, entity_factory) -> None:
        a = entity_factory("a")
        assert synchronizer.reconcile([], [a]).spawned == ["a"]
        assert synchronizer.reconcile([a], [a]).spawned == []
        assert len(scene.effects()) == 1

    def test_effects_expire(self, synchronizer, scene, fake_clock, entity_factory) -> None:
        a = entity_factory("a")
        synchronizer.reconcile([], [a])
        assert scene.effects()[0].particles.shape == (10, 3)

        fake_clock.advance(2.0)
        synchronizer.reconcile([a], [a])
        assert scene.effects() == []

    def test_stable_positions(self, scene, fake_clock, entity_factory) -> None:
        synchronizer = make_synchronizer(scene, fake_clock, stable=True)
        a = entity_factory("a")
        synchronizer.reconcile([], [a])
        before = scene.get_object("a").position

        synchronizer.reconcile([a], [a])
        assert scene.get_object("a").position == before

    def test_radius_follows_engagement(self, synchronizer, scene, entity_factory) -> None:
        synchronizer.reconcile([], [entity_factory("a", engagement=0)])
        synchronizer.reconcile([], [entity_factory("a", engagement=100)])
        assert scene.get_object("a").radius == pytest.approx(4.0)

    def test_category_change_restyles(self, synchronizer, scene, entity_factory) -> None:
        tech = entity_factory("a")
        business = entity_factory("a", category="Business")
        synchronizer.reconcile([], [tech])
        result = synchronizer.reconcile([tech], [business])

        assert result.repositioned == ["a"]
        assert scene.get_object("a").color == COLORS["Business"]

    def test_scene_error_skips_one_object(self, fake_clock, entity_factory) -> None:
        scene = FlakyScene(reject={"bad"})
        synchronizer = make_synchronizer(scene, fake_clock)
        result = synchronizer.reconcile(
            [], [entity_factory("a"), entity_factory("bad"), entity_factory("c")]
        )

        assert synchronizer.live_ids == {"a", "c"}
        assert len(result.errors) == 1
        assert "bad" not in result.spawned

    def test_empty_next_clears_scene(self, synchronizer, scene, entity_factory) -> None:
        entities = [entity_factory("a"), entity_factory("b")]
        synchronizer.reconcile([], entities)
        result = synchronizer.reconcile(entities, [])

        assert sorted(result.destroyed) == ["a", "b"]
        assert scene.objects() == []
        assert scene.lines() == []


class TestEdges:
    """Tests for relation line rebuilding."""

    def test_lines_join_object_positions(self, synchronizer, scene, entity_factory) -> None:
        result = synchronizer.reconcile([], [entity_factory("a"), entity_factory("b")])

        assert result.edges == 1
        line = scene.lines()[0]
        assert line.start == scene.get_object("a").position
        assert line.end == scene.get_object("b").position
        assert line.opacity == 0.3

    def test_lines_rebuilt_each_pass(self, synchronizer, scene, entity_factory, now) -> None:
        a, b = entity_factory("a"), entity_factory("b")
        synchronizer.reconcile([], [a, b])
        synchronizer.reconcile([a, b], [a])
        assert scene.lines() == []


class TestHoverReapply:
    def test_hover_cleared_when_entity_leaves(self, scene, fake_clock, entity_factory) -> None:
        store = EntityStore()
        a, b = entity_factory("a"), entity_factory("b")
        store.ingest([a, b])
        synchronizer = make_synchronizer(scene, fake_clock, store=store)
        synchronizer.reconcile([], [a, b])

        hover = synchronizer.highlighter.hover
        hover.entity_id = "a"
        hover.cursor = "pointer"
        store.ingest([b])
        synchronizer.reconcile([a, b], [b])

        assert hover.entity_id is None
        assert hover.cursor == "default"
        assert scene.get_object("b").emissive == 0

    def test_highlight_survives_reconcile(self, scene, fake_clock, entity_factory) -> None:
        store = EntityStore()
        a, b = entity_factory("a"), entity_factory("b")
        store.ingest([a, b])
        synchronizer = make_synchronizer(scene, fake_clock, store=store)
        synchronizer.reconcile([], [a, b])

        synchronizer.highlighter.hover.entity_id = "a"
        synchronizer.reconcile([a, b], [a, b])
        assert scene.get_object("b").emissive == 0x00FF00

    def test_clear(self, synchronizer, scene, entity_factory) -> None:
        synchronizer.reconcile([], [entity_factory("a")])
        synchronizer.highlighter.hover.entity_id = "a"
        synchronizer.clear()

        assert scene.objects() == []
        assert scene.effects() == []
        assert synchronizer.highlighter.hover.entity_id is None
