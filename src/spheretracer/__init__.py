"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package renders scenes made of spheres with three material models and
a thin-lens camera:
- Diffuse, metallic (with fuzz) and dielectric (glass) materials
- Depth of field through a randomized defocus disk
- Antialiasing by jittered multi-sample pixels
- Parallel row-band rendering with progress reporting

Subpackages:
    core: Ray and vector utilities, intervals, color encoding, integrator
    geometry: Sphere primitive and intersection
    materials: Material models and scattering
    scene: World container and demo scenes
    camera: Camera model with ray generation
    preview: PNG export
"""

__version__ = "0.1.0"
