"""Scene-level closest-hit queries over kernel-side scene storage.

SceneData uploads a Scene into Taichi fields (Structure of Arrays layout, one
field per sphere attribute) and answers nearest-hit queries inside kernels.
The query is a linear scan: the light's sphere is tested first, then every
scene sphere in order. Among all hits the one with the smallest distance
|point - ray.origin| wins; on equal distance the earlier candidate is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.scene.intersection import SceneData
    >>> data = SceneData(scene)
    >>> # Inside a kernel of a data-oriented class holding `data`:
    >>> # record = self.scene_data.closest_hit(ray)
"""

import taichi as ti
import taichi.math as tm

from raytrace.core.ray import Ray
from raytrace.geometry.sphere import Intersection, IntersectionKind, Sphere, hit_sphere, make_miss
from raytrace.lights.sphere_light import SphereLight, light_as_sphere
from raytrace.materials.microfacet import Material
from raytrace.scene.manager import Scene

# Type alias for 3D vectors
vec3 = tm.vec3

# Distance assigned to "nothing hit yet"
FAR_DISTANCE = 1e30


@ti.data_oriented
class SceneData:
    """Kernel-side copy of a Scene.

    Attributes:
        capacity: Number of sphere slots allocated (at least one).
        sphere_count: Field holding the number of active spheres.
    """

    def __init__(self, scene: Scene) -> None:
        """Allocate fields sized for the scene and upload it.

        Args:
            scene: The scene to upload. It must have a light.

        Raises:
            ValueError: If the scene has no light.
        """
        self.capacity = max(scene.get_sphere_count(), 1)

        # Sphere storage: Structure of Arrays layout
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=self.capacity)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=self.capacity)
        self.sphere_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=self.capacity)
        self.sphere_metallic = ti.field(dtype=ti.f32, shape=self.capacity)
        self.sphere_roughness = ti.field(dtype=ti.f32, shape=self.capacity)
        self.sphere_count = ti.field(dtype=ti.i32, shape=())

        # The single sphere light
        self.light_center = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.light_radius = ti.field(dtype=ti.f32, shape=())
        self.light_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.light_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.ambient = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.load(scene)

    def load(self, scene: Scene) -> None:
        """Upload a scene into the fields.

        Args:
            scene: The scene to upload.

        Raises:
            ValueError: If the scene has no light or more spheres than the
                allocated capacity.
        """
        if scene.light is None:
            raise ValueError("Scene has no light. Call Scene.set_light() first.")
        count = scene.get_sphere_count()
        if count > self.capacity:
            raise ValueError(
                f"Scene has {count} spheres but only {self.capacity} slots are allocated"
            )

        for i, sphere in enumerate(scene.spheres):
            self.sphere_centers[i] = sphere.center
            self.sphere_radii[i] = sphere.radius
            self.sphere_diffuse[i] = sphere.material.diffuse
            self.sphere_metallic[i] = sphere.material.metallic
            self.sphere_roughness[i] = sphere.material.roughness
        self.sphere_count[None] = count

        light = scene.light
        self.light_center[None] = light.center
        self.light_radius[None] = light.radius
        self.light_color[None] = light.color
        self.light_radiance[None] = light.emitted_radiance

        self.ambient[None] = scene.ambient

    @ti.func
    def sphere(self, index: ti.i32) -> Sphere:
        """Assemble the sphere stored at an index."""
        return Sphere(
            center=self.sphere_centers[index],
            radius=self.sphere_radii[index],
            material=Material(
                diffuse=self.sphere_diffuse[index],
                metallic=self.sphere_metallic[index],
                roughness=self.sphere_roughness[index],
            ),
        )

    @ti.func
    def light(self) -> SphereLight:
        """Assemble the scene's light."""
        return SphereLight(
            center=self.light_center[None],
            radius=self.light_radius[None],
            color=self.light_color[None],
            radiance=self.light_radiance[None],
        )

    @ti.func
    def closest_hit(self, ray: Ray) -> Intersection:
        """Find the nearest intersection of a ray with the light and spheres.

        Args:
            ray: The ray to trace.

        Returns:
            HIT_LIGHT with the light's radiance, HIT_SURFACE with the sphere's
            material, or MISS.
        """
        result = make_miss(ray)
        closest_distance = FAR_DISTANCE

        light = self.light()
        light_record = hit_sphere(ray, light_as_sphere(light))
        if light_record.kind != int(IntersectionKind.MISS):
            closest_distance = tm.length(light_record.point - ray.origin)
            result = light_record
            result.kind = int(IntersectionKind.HIT_LIGHT)
            result.radiance = light.radiance

        for i in range(self.sphere_count[None]):
            record = hit_sphere(ray, self.sphere(i))
            if record.kind != int(IntersectionKind.MISS):
                distance = tm.length(record.point - ray.origin)
                if distance < closest_distance:
                    closest_distance = distance
                    result = record

        return result
