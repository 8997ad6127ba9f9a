"""Unit tests for the world container and closest-hit query.

Tests cover:
- Host-side World mutation (push, clear, capacity)
- Freezing during a render
- Snapshot upload into Taichi fields
- Serialization (to_dict, from_dict)
- hit_world returning the nearest hit, first-inserted on ties
"""

import math

import numpy as np
import pytest
import taichi as ti


@pytest.fixture
def world():
    """Create an empty World for each test."""
    from src.spheretracer.scene.world import World

    return World()


class TestWorldMutation:
    """Tests for pushing and clearing spheres."""

    def test_push_returns_index(self, world):
        """Test push appends in order and returns the new index."""
        from src.spheretracer.materials.material import Diffuse
        from src.spheretracer.scene.world import SphereInfo

        first = world.push(SphereInfo((0.0, 0.0, -1.0), 0.5, Diffuse((0.5, 0.5, 0.5))))
        second = world.add_sphere((1.0, 0.0, -1.0), 0.5, Diffuse((0.1, 0.2, 0.3)))

        assert (first, second) == (0, 1)
        assert len(world) == 2
        assert [s.center for s in world] == [(0.0, 0.0, -1.0), (1.0, 0.0, -1.0)]

    def test_clear(self, world):
        """Test clear removes every sphere."""
        from src.spheretracer.materials.material import Diffuse

        world.add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.5, 0.5, 0.5)))
        world.clear()
        assert len(world) == 0

    def test_capacity_exceeded(self, world):
        """Test pushing beyond MAX_SPHERES raises RuntimeError."""
        from src.spheretracer.materials.material import Diffuse
        from src.spheretracer.scene.world import MAX_SPHERES

        material = Diffuse((0.5, 0.5, 0.5))
        for i in range(MAX_SPHERES):
            world.add_sphere((float(i), 0.0, 0.0), 0.1, material)

        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            world.add_sphere((0.0, 0.0, 0.0), 0.1, material)


class TestWorldFreezing:
    """Tests for the render-time lock."""

    def test_push_while_frozen_raises(self, world):
        """Test mutation is rejected while frozen and allowed afterwards."""
        from src.spheretracer.materials.material import Diffuse

        material = Diffuse((0.5, 0.5, 0.5))
        with world.frozen():
            assert world.is_frozen
            with pytest.raises(RuntimeError):
                world.add_sphere((0.0, 0.0, -1.0), 0.5, material)
            with pytest.raises(RuntimeError):
                world.clear()

        assert not world.is_frozen
        world.add_sphere((0.0, 0.0, -1.0), 0.5, material)
        assert len(world) == 1

    def test_nested_freeze_raises(self, world):
        """Test a world cannot be frozen twice."""
        with world.frozen():
            with pytest.raises(RuntimeError, match="already frozen"):
                with world.frozen():
                    pass

    def test_freeze_released_on_error(self, world):
        """Test the lock is released when the render body raises."""
        with pytest.raises(ValueError):
            with world.frozen():
                raise ValueError("boom")
        assert not world.is_frozen


class TestWorldUpload:
    """Tests for the kernel-side snapshot."""

    def test_upload_sets_count(self, world):
        """Test upload publishes the sphere count."""
        from src.spheretracer.materials.material import Dielectric, Diffuse, Metallic
        from src.spheretracer.scene.world import get_sphere_count

        world.add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.5, 0.5, 0.5)))
        world.add_sphere((1.0, 0.0, -1.0), 0.5, Metallic((0.8, 0.6, 0.2), fuzz=0.3))
        world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(1.5))

        assert world.upload() == 3
        assert get_sphere_count() == 3

    def test_upload_writes_material_fields(self, world):
        """Test each sphere's material lands in the snapshot fields."""
        from src.spheretracer.materials.material import Dielectric, Metallic, MaterialType
        from src.spheretracer.scene.world import (
            sphere_albedos,
            sphere_centers,
            sphere_fuzz,
            sphere_material_kinds,
            sphere_radii,
            sphere_refractive_indices,
        )

        world.add_sphere((1.0, 2.0, 3.0), 0.75, Metallic((0.8, 0.6, 0.2), fuzz=0.3))
        world.add_sphere((-1.0, 0.0, -1.0), 0.4, Dielectric(1.0 / 1.5))
        world.upload()

        assert sphere_centers.to_numpy()[0] == pytest.approx([1.0, 2.0, 3.0])
        assert sphere_radii[0] == pytest.approx(0.75)
        assert sphere_material_kinds[0] == int(MaterialType.METALLIC)
        assert sphere_albedos.to_numpy()[0] == pytest.approx([0.8, 0.6, 0.2], abs=1e-6)
        assert sphere_fuzz[0] == pytest.approx(0.3, abs=1e-6)

        assert sphere_material_kinds[1] == int(MaterialType.DIELECTRIC)
        assert sphere_refractive_indices[1] == pytest.approx(1.0 / 1.5, abs=1e-6)

    def test_upload_empty_world(self, world):
        """Test an empty world uploads zero spheres."""
        from src.spheretracer.scene.world import get_sphere_count

        assert world.upload() == 0
        assert get_sphere_count() == 0


class TestWorldSerialization:
    """Tests for dictionary round trips."""

    def test_to_dict_from_dict(self, world):
        """Test a world survives a dictionary round trip."""
        from src.spheretracer.materials.material import Dielectric, Diffuse, Metallic
        from src.spheretracer.scene.world import World

        world.add_sphere((0.0, -100.5, -1.0), 100.0, Diffuse((0.8, 0.8, 0.0)))
        world.add_sphere((1.0, 0.0, -1.0), 0.5, Metallic((0.8, 0.6, 0.2), fuzz=0.1))
        world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(1.5))

        data = world.to_dict()
        assert [s["material"]["type"] for s in data["spheres"]] == [
            "diffuse",
            "metallic",
            "dielectric",
        ]

        restored = World.from_dict(data)
        assert restored.spheres == world.spheres

    def test_from_dict_unknown_material(self):
        """Test an unknown material type raises ValueError."""
        from src.spheretracer.scene.world import World

        data = {"spheres": [{"center": [0, 0, 0], "radius": 1.0, "material": {"type": "glow"}}]}
        with pytest.raises(ValueError, match="Unknown material type"):
            World.from_dict(data)


def _closest_hits(origins, directions):
    """Run hit_world for a batch of rays and the brute-force minimum per ray."""
    from src.spheretracer.core.interval import Interval
    from src.spheretracer.core.ray import Ray
    from src.spheretracer.geometry.sphere import hit_sphere
    from src.spheretracer.scene.world import get_sphere, hit_world, num_spheres

    n = origins.shape[0]
    ray_origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    ray_directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    world_hit = ti.field(dtype=ti.i32, shape=n)
    world_t = ti.field(dtype=ti.f32, shape=n)
    best_t = ti.field(dtype=ti.f32, shape=n)
    best_hit = ti.field(dtype=ti.i32, shape=n)

    ray_origins.from_numpy(origins.astype(np.float32))
    ray_directions.from_numpy(directions.astype(np.float32))

    @ti.kernel
    def test_kernel():
        for r in range(n):
            ray = Ray(origin=ray_origins[r], direction=ray_directions[r])
            window = Interval(lo=0.001, hi=math.inf)

            rec = hit_world(ray, window)
            world_hit[r] = rec.hit
            world_t[r] = rec.t

            # Independent minimum over every sphere with the full window
            found = 0
            t_min = math.inf
            for i in range(num_spheres[None]):
                single = hit_sphere(ray, get_sphere(i), window)
                if single.hit == 1 and single.t < t_min:
                    t_min = single.t
                    found = 1
            best_hit[r] = found
            best_t[r] = t_min

    test_kernel()
    return world_hit.to_numpy(), world_t.to_numpy(), best_hit.to_numpy(), best_t.to_numpy()


class TestHitWorld:
    """Tests for the closest-hit query."""

    def test_nearest_of_two_spheres(self, world):
        """Test the nearer of two spheres along the ray wins regardless of order."""
        from src.spheretracer.materials.material import Diffuse

        material = Diffuse((0.5, 0.5, 0.5))
        world.add_sphere((0.0, 0.0, -5.0), 0.5, material)
        world.add_sphere((0.0, 0.0, -2.0), 0.5, material)
        world.upload()

        hit, t, _, _ = _closest_hits(
            np.array([[0.0, 0.0, 0.0]]), np.array([[0.0, 0.0, -1.0]])
        )
        assert hit[0] == 1
        assert abs(t[0] - 1.5) < 1e-5

    def test_empty_world_misses(self, world):
        """Test every ray misses an empty world."""
        world.upload()
        hit, _, _, _ = _closest_hits(
            np.array([[0.0, 0.0, 0.0]]), np.array([[0.0, 0.0, -1.0]])
        )
        assert hit[0] == 0

    def test_ties_go_to_first_inserted(self, world):
        """Test coincident spheres report the material pushed first."""
        from src.spheretracer.core.interval import Interval
        from src.spheretracer.core.ray import Ray, vec3
        from src.spheretracer.materials.material import Diffuse, Metallic, MaterialType
        from src.spheretracer.scene.world import hit_world

        world.add_sphere((0.0, 0.0, -1.0), 0.5, Metallic((0.9, 0.9, 0.9)))
        world.add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.1, 0.1, 0.1)))
        world.upload()

        kind = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
            kind[None] = hit_world(ray, Interval(lo=0.001, hi=math.inf)).material.kind

        test_kernel()
        assert kind[None] == int(MaterialType.METALLIC)

    def test_matches_brute_force_minimum(self, world):
        """Test hit_world agrees with the minimum over every sphere."""
        from src.spheretracer.materials.material import Diffuse

        rng = np.random.default_rng(7)
        material = Diffuse((0.5, 0.5, 0.5))
        for _ in range(40):
            center = rng.uniform(-4.0, 4.0, size=3)
            world.add_sphere(tuple(float(c) for c in center), float(rng.uniform(0.2, 1.0)), material)
        world.upload()

        origins = rng.uniform(-6.0, 6.0, size=(256, 3))
        directions = rng.normal(size=(256, 3))

        world_hit, world_t, best_hit, best_t = _closest_hits(origins, directions)

        np.testing.assert_array_equal(world_hit, best_hit)
        hits = best_hit == 1
        assert hits.any()
        np.testing.assert_allclose(world_t[hits], best_t[hits], rtol=1e-5, atol=1e-5)
