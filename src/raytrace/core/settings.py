"""Render configuration.

RenderSettings gathers every knob of a render that is not part of the scene
or the camera: sample count, sampling strategy, tone mapping, exposure, the
random seed and the tile size used to split the image between workers.
"""

from dataclasses import dataclass
from enum import IntEnum

from raytrace.core.tonemap import TONE_MAP_IDS, ToneMapMethod

# Seeds are passed to kernels as signed 32-bit integers
MAX_SEED = 2**31 - 1


class SamplingStrategy(IntEnum):
    """How the integrator draws incident light directions.

    LIGHT samples points on the sphere light, BRDF importance-samples the GGX
    lobe and HEMISPHERE draws uniformly over the hemisphere. All three divide
    each sample by its PDF, so they converge to the same image.
    """

    LIGHT = 0
    BRDF = 1
    HEMISPHERE = 2


@dataclass
class RenderSettings:
    """Per-render configuration.

    Attributes:
        samples_per_pixel: Light samples per pixel in each render pass.
        strategy: Direction sampling strategy.
        tone_map: Tone mapping operator applied when resolving the image.
        ev100: Camera exposure value; 0 leaves radiance unscaled.
        seed: Base seed of the per-worker random streams.
        tile_size: Edge length in pixels of the square tiles handed to workers.

    Raises:
        ValueError: If a value is out of range.
    """

    samples_per_pixel: int = 16
    strategy: SamplingStrategy = SamplingStrategy.LIGHT
    tone_map: ToneMapMethod = "reinhard"
    ev100: float = 0.0
    seed: int = 0
    tile_size: int = 16

    def __post_init__(self) -> None:
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be positive.")
        if self.tile_size <= 0:
            raise ValueError(f"tile_size = {self.tile_size} must be positive.")
        if self.tone_map not in TONE_MAP_IDS:
            raise ValueError(
                f"Unknown tone mapping method: {self.tone_map}. "
                f"Expected one of {sorted(TONE_MAP_IDS)}."
            )
        if not 0 <= self.seed <= MAX_SEED:
            raise ValueError(f"seed = {self.seed} must be in [0, {MAX_SEED}].")
        self.strategy = SamplingStrategy(self.strategy)
