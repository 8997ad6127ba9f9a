"""Unit tests for metallic scattering.

Tests cover:
- Perfect mirror reflection (fuzz=0)
- Fuzzy reflection bounded by the fuzz radius
- Absorption when the fuzzed reflection points into the surface
- Attenuation equals albedo
"""

import math

import taichi as ti


class TestPerfectReflection:
    """Tests for mirror reflection (fuzz=0)."""

    def test_normal_incidence(self):
        """Test a head-on ray reflects straight back as a unit vector."""
        from src.spheretracer.core.ray import vec3
        from src.spheretracer.materials.metallic import scatter_metallic

        result_dir = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_att = ti.Vector.field(3, dtype=ti.f32, shape=())
        result_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            direction, attenuation, did_scatter = scatter_metallic(
                vec3(0.8, 0.6, 0.2), 0.0, vec3(0.0, -3.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            result_dir[None] = direction
            result_att[None] = attenuation
            result_scatter[None] = did_scatter

        test_kernel()
        d = result_dir.to_numpy()
        assert abs(d[0]) < 1e-5
        assert abs(d[1] - 1.0) < 1e-5
        assert abs(d[2]) < 1e-5
        a = result_att.to_numpy()
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6
        assert result_scatter[None] == 1

    def test_45_degrees(self):
        """Test reflection at 45 degrees mirrors the vertical component."""
        from src.spheretracer.core.ray import vec3
        from src.spheretracer.materials.metallic import scatter_metallic

        result_dir = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            direction, attenuation, did_scatter = scatter_metallic(
                vec3(1.0, 1.0, 1.0), 0.0, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            result_dir[None] = direction

        test_kernel()
        d = result_dir.to_numpy()
        expected = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - expected) < 1e-5
        assert abs(d[1] - expected) < 1e-5
        assert abs(d[2]) < 1e-5


class TestFuzzyReflection:
    """Tests for fuzz > 0."""

    def test_perturbation_bounded_by_fuzz(self):
        """Test the scattered direction stays within fuzz of the mirror direction."""
        from src.spheretracer.core.ray import length, vec3
        from src.spheretracer.materials.metallic import scatter_metallic

        max_dev = ti.field(dtype=ti.f32, shape=())
        max_dev[None] = 0.0
        fuzz = 0.3

        @ti.kernel
        def test_kernel():
            mirror = vec3(0.0, 1.0, 0.0)
            for _ in range(1000):
                direction, attenuation, did_scatter = scatter_metallic(
                    vec3(1.0, 1.0, 1.0), fuzz, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                ti.atomic_max(max_dev[None], length(direction - mirror))

        test_kernel()
        assert max_dev[None] <= fuzz + 1e-4
        assert max_dev[None] > 0.0

    def test_grazing_fuzz_can_absorb(self):
        """Test fuzzy reflections at grazing angles are sometimes absorbed."""
        from src.spheretracer.core.ray import normalize, vec3
        from src.spheretracer.materials.metallic import scatter_metallic

        absorbed = ti.field(dtype=ti.i32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -0.05, 0.0))
            for _ in range(2000):
                direction, attenuation, did_scatter = scatter_metallic(
                    vec3(1.0, 1.0, 1.0), 1.0, incident, vec3(0.0, 1.0, 0.0)
                )
                if did_scatter == 1:
                    scattered[None] += 1
                else:
                    absorbed[None] += 1

        absorbed[None] = 0
        scattered[None] = 0
        test_kernel()
        assert absorbed[None] > 0
        assert scattered[None] > 0

    def test_absorbed_iff_below_surface(self):
        """Test did_scatter matches the sign of dot(direction, normal)."""
        from src.spheretracer.core.ray import dot, normalize, vec3
        from src.spheretracer.materials.metallic import scatter_metallic

        mismatches = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = normalize(vec3(1.0, -0.2, 0.3))
            for _ in range(2000):
                direction, attenuation, did_scatter = scatter_metallic(
                    vec3(1.0, 1.0, 1.0), 0.9, incident, normal
                )
                above = 0
                if dot(direction, normal) > 0.0:
                    above = 1
                if above != did_scatter:
                    mismatches[None] += 1

        mismatches[None] = 0
        test_kernel()
        assert mismatches[None] == 0
