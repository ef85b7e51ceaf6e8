"""Monte Carlo direct-lighting integrator and the render context that owns it.

RenderContext bundles everything one render needs: the scene uploaded into
Taichi fields, the camera basis, the radiance accumulator, the display buffer
and the render settings. Nothing lives at module level, so several contexts
can exist side by side and nothing survives between renders.

For every pixel a primary ray is traced through the pixel center:

    miss          the scene's ambient color
    light         the light's emitted radiance
    surface       N-sample estimate of reflected light:

        L = 1/N * sum_k  BRDF(l_k, v) * Li(l_k) * NoL_k / max(pdf(l_k), eps)

where l_k is drawn by the configured SamplingStrategy and Li is the light's
radiance when a ray from the (offset) hit point along l_k reaches the light
first, zero otherwise. Invalid samples (below the horizon, zero PDF) count as
zero and are not redrawn.

The image is cut into square tiles. The render kernel's outermost loop runs
over tiles, so Taichi hands each tile to one worker; the worker owns a random
stream seeded from (seed, tile index, pass index) and writes only the pixels
of its tile.

Successive render() calls accumulate a running average, and resolving maps
the average through exposure and the tone mapper into an RGBA byte buffer
(row 0 is the top of the image).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytrace.scene.presets import create_three_spheres_scene
    >>> scene, camera = create_three_spheres_scene()
    >>> context = RenderContext(scene, camera, RenderSettings(samples_per_pixel=64))
    >>> context.render()
    >>> rgba = context.rgba_buffer()
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytrace.camera.pinhole import Camera, CameraFrame, build_camera_frame, get_ray
from raytrace.core.ray import make_ray
from raytrace.core.rng import seed_stream
from raytrace.core.sampling import PDF_EPSILON, sample_ggx, sample_uniform_hemisphere
from raytrace.core.settings import RenderSettings, SamplingStrategy
from raytrace.core.tonemap import exposure_from_ev100, tone_map, tone_map_id
from raytrace.geometry.sphere import Intersection, IntersectionKind
from raytrace.lights.sphere_light import sample_sphere_light
from raytrace.materials.microfacet import shade
from raytrace.scene.intersection import SceneData
from raytrace.scene.manager import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.data_oriented
class RenderContext:
    """Scene, camera, settings and framebuffers of one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        settings: The render settings; may be replaced between passes.
        scene_data: Kernel-side scene storage.
    """

    def __init__(
        self, scene: Scene, camera: Camera, settings: RenderSettings | None = None
    ) -> None:
        """Upload the scene and camera and allocate the framebuffers.

        Args:
            scene: The scene to render. It must have a light.
            camera: The camera; its resolution sets the image size.
            settings: Render settings. Defaults to RenderSettings().

        Raises:
            ValueError: If the scene has no light or the camera is degenerate.
        """
        self.width = camera.width
        self.height = camera.height
        self.settings = settings if settings is not None else RenderSettings()
        self.scene_data = SceneData(scene)

        frame = build_camera_frame(camera)
        self.camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.camera_half_extent = ti.Vector.field(2, dtype=ti.f32, shape=())
        self.camera_origin[None] = frame["origin"]
        self.camera_right[None] = frame["right"]
        self.camera_up[None] = frame["up"]
        self.camera_forward[None] = frame["forward"]
        self.camera_half_extent[None] = (frame["half_width"], frame["half_height"])

        # Indexed [row, column]; row 0 is the top of the image
        self.radiance = ti.Vector.field(3, dtype=ti.f32, shape=(self.height, self.width))
        self.display = ti.Vector.field(3, dtype=ti.f32, shape=(self.height, self.width))

        self._pass_count = 0
        self._sample_count = 0

        logger.debug("Created render context %dx%d for %r", self.width, self.height, scene)

    # =========================================================================
    # Kernel-side helpers
    # =========================================================================

    @ti.func
    def camera_frame(self) -> CameraFrame:
        """Assemble the camera basis from its fields."""
        extent = self.camera_half_extent[None]
        return CameraFrame(
            origin=self.camera_origin[None],
            right=self.camera_right[None],
            up=self.camera_up[None],
            forward=self.camera_forward[None],
            half_width=extent[0],
            half_height=extent[1],
        )

    @ti.func
    def draw_direction(
        self, hit: Intersection, view_dir: vec3, strategy: ti.i32, rng_state: ti.u32
    ):
        """Draw one incident direction with the selected strategy.

        Args:
            hit: A HIT_SURFACE intersection.
            view_dir: Unit direction from the hit point toward the viewer.
            strategy: A SamplingStrategy value.
            rng_state: Current random stream state.

        Returns:
            A tuple (direction, pdf, valid, rng_state).
        """
        direction = vec3(0.0, 0.0, 1.0)
        pdf = 0.0
        valid = 0
        rng = rng_state

        if strategy == int(SamplingStrategy.LIGHT):
            light_dir, light_pdf, _radiance, light_rng = sample_sphere_light(
                self.scene_data.light(), hit.point, rng_state
            )
            direction = light_dir
            pdf = light_pdf
            rng = light_rng
            if tm.dot(hit.normal, light_dir) > 0.0 and light_pdf > 0.0:
                valid = 1
        elif strategy == int(SamplingStrategy.BRDF):
            ggx_dir, ggx_pdf, ggx_valid, ggx_rng = sample_ggx(
                view_dir, hit.normal, hit.material.roughness, rng_state
            )
            direction = ggx_dir
            pdf = ggx_pdf
            valid = ggx_valid
            rng = ggx_rng
        else:
            hemi_dir, hemi_pdf, hemi_valid, hemi_rng = sample_uniform_hemisphere(
                hit.normal, rng_state
            )
            direction = hemi_dir
            pdf = hemi_pdf
            valid = hemi_valid
            rng = hemi_rng

        return direction, pdf, valid, rng

    @ti.func
    def integrate(self, hit: Intersection, samples: ti.i32, strategy: ti.i32, rng_state: ti.u32):
        """Estimate the light reflected toward the viewer at a surface hit.

        Args:
            hit: A HIT_SURFACE intersection.
            samples: Number of light samples N.
            strategy: A SamplingStrategy value.
            rng_state: Current random stream state.

        Returns:
            A tuple (radiance, rng_state).
        """
        view_dir = -hit.ray.direction
        total = vec3(0.0, 0.0, 0.0)
        rng = rng_state

        for _sample in range(samples):
            direction, pdf, valid, next_rng = self.draw_direction(hit, view_dir, strategy, rng)
            rng = next_rng
            if valid == 1:
                shadow = self.scene_data.closest_hit(make_ray(hit.point, direction))
                incident = vec3(0.0, 0.0, 0.0)
                if shadow.kind == int(IntersectionKind.HIT_LIGHT):
                    incident = shadow.radiance
                contribution = shade(direction, view_dir, hit.normal, hit.material, incident)
                total += contribution / ti.max(pdf, PDF_EPSILON)

        return total / ti.cast(samples, ti.f32), rng

    @ti.func
    def estimate_radiance(
        self, pixel_x: ti.i32, pixel_y: ti.i32, samples: ti.i32, strategy: ti.i32, rng_state: ti.u32
    ):
        """Radiance estimate for one pixel.

        Returns:
            A tuple (radiance, rng_state).
        """
        ray = get_ray(self.camera_frame(), pixel_x, pixel_y, self.width, self.height)
        hit = self.scene_data.closest_hit(ray)

        color = self.scene_data.ambient[None]
        rng = rng_state
        if hit.kind == int(IntersectionKind.HIT_LIGHT):
            color = hit.radiance
        elif hit.kind == int(IntersectionKind.HIT_SURFACE):
            surface_color, surface_rng = self.integrate(hit, samples, strategy, rng_state)
            color = surface_color
            rng = surface_rng
        return color, rng

    # =========================================================================
    # Kernels
    # =========================================================================

    @ti.kernel
    def _render_pass(
        self,
        seed: ti.i32,
        pass_index: ti.i32,
        samples: ti.i32,
        strategy: ti.i32,
        tile_size: ti.i32,
        blend: ti.f32,
    ):
        """Render one pass and fold it into the running average.

        Args:
            seed: Run seed.
            pass_index: Index of this pass, mixed into every stream seed.
            samples: Samples per pixel.
            strategy: A SamplingStrategy value.
            tile_size: Tile edge length in pixels.
            blend: 1 / (number of passes including this one).
        """
        tiles_x = (self.width + tile_size - 1) // tile_size
        tiles_y = (self.height + tile_size - 1) // tile_size

        # Outermost loop: one tile per worker
        for tile in range(tiles_x * tiles_y):
            tile_x = tile % tiles_x
            tile_y = tile // tiles_x
            rng = seed_stream(seed, tile, pass_index)

            for dy, dx in ti.ndrange(tile_size, tile_size):
                pixel_x = tile_x * tile_size + dx
                pixel_y = tile_y * tile_size + dy
                if pixel_x < self.width and pixel_y < self.height:
                    color, next_rng = self.estimate_radiance(
                        pixel_x, pixel_y, samples, strategy, rng
                    )
                    rng = next_rng

                    # Check for NaN/Inf and replace with zero
                    for c in ti.static(range(3)):
                        if tm.isnan(color[c]) or tm.isinf(color[c]):
                            color[c] = 0.0

                    # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
                    average = self.radiance[pixel_y, pixel_x]
                    self.radiance[pixel_y, pixel_x] = average + (color - average) * blend

    @ti.kernel
    def _resolve(self, exposure: ti.f32, method: ti.i32):
        """Map accumulated radiance through exposure and tone mapping."""
        for row, col in self.radiance:
            color = tm.max(self.radiance[row, col], vec3(0.0, 0.0, 0.0)) * exposure
            self.display[row, col] = tone_map(color, method)

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def pass_count(self) -> int:
        """Number of passes accumulated since the last reset."""
        return self._pass_count

    @property
    def sample_count(self) -> int:
        """Number of light samples per pixel accumulated since the last reset."""
        return self._sample_count

    def render(self, passes: int = 1) -> None:
        """Render passes and accumulate them into the radiance buffer.

        Each pass draws settings.samples_per_pixel samples per pixel with a
        fresh pass index, so repeated calls keep refining the image.

        Args:
            passes: Number of passes to render.
        """
        settings = self.settings
        start = time.perf_counter()
        for _ in range(passes):
            self._pass_count += 1
            self._render_pass(
                settings.seed,
                self._pass_count - 1,
                settings.samples_per_pixel,
                int(settings.strategy),
                settings.tile_size,
                1.0 / self._pass_count,
            )
            self._sample_count += settings.samples_per_pixel
        ti.sync()
        logger.info(
            "Rendered %d pass(es) at %dx%d, %d spp total, in %.2fs",
            passes,
            self.width,
            self.height,
            self._sample_count,
            time.perf_counter() - start,
        )

    def reset(self) -> None:
        """Clear the accumulated radiance."""
        self.radiance.fill(0.0)
        self.display.fill(0.0)
        self._pass_count = 0
        self._sample_count = 0

    def radiance_array(self) -> npt.NDArray[np.float32]:
        """Accumulated linear radiance as an array of shape (height, width, 3)."""
        return self.radiance.to_numpy()

    def rgba_array(self) -> npt.NDArray[np.uint8]:
        """Tone-mapped image as an array of shape (height, width, 4).

        Each channel is round(clamp(value, 0, 1) * 255); alpha is 255. np.rint
        rounds half to even, the same as Python's round().
        """
        settings = self.settings
        self._resolve(exposure_from_ev100(settings.ev100), tone_map_id(settings.tone_map))
        display = self.display.to_numpy()

        rgba = np.empty((self.height, self.width, 4), dtype=np.uint8)
        rgba[..., :3] = np.rint(np.clip(display, 0.0, 1.0) * 255.0).astype(np.uint8)
        rgba[..., 3] = 255
        return rgba

    def rgba_buffer(self) -> bytes:
        """Tone-mapped image as a flat row-major RGBA byte buffer."""
        return self.rgba_array().tobytes()

    def __repr__(self) -> str:
        return (
            f"RenderContext(width={self.width}, height={self.height}, "
            f"samples={self._sample_count})"
        )
