"""Taichi-based Monte Carlo renderer for spheres lit by a sphere light.

This package renders scenes of spheres with a physically based microfacet
material under a single spherical light, with support for:
- GGX / Smith / Schlick microfacet BRDF with Lambertian diffuse
- Light, BRDF and uniform hemisphere sampling with explicit PDFs
- Photometric and radiometric light emission
- Tiled parallel rendering with per-worker random streams
- Reinhard, ACES and Khronos PBR Neutral tone mapping
- Progressive rendering with accumulation

Subpackages:
    core: Rays, random streams, sampling, tone mapping, settings, integrator
    geometry: Sphere primitive and intersection records
    materials: Microfacet material model
    lights: Sphere light emission and sampling
    scene: Scene description, kernel-side storage and presets
    camera: Pinhole camera with ray generation
    preview: PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
