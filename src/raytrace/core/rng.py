"""Explicit pseudo-random streams for render workers.

Every sampling routine in the core takes a 32-bit generator state and returns
the advanced state alongside its result, so no random state is shared between
the tiles that run in parallel. A stream is a xorshift32 sequence whose
starting state is derived by integer hashing from the run seed, the worker
(tile) index and the pass index.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     rng = seed_stream(42, 0, 0)
    ...     u, rng = next_float(rng)
    ...     return u
"""

import taichi as ti

# 24 significant bits are all an f32 in [0, 1) can hold
_FLOAT_SCALE = 1.0 / 16777216.0


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Thomas Wang's 32-bit integer hash.

    Every step is invertible, so distinct inputs give distinct outputs.

    Args:
        value: The integer to scramble.

    Returns:
        The hashed value.
    """
    x = value
    x = (x ^ ti.u32(61)) ^ (x >> ti.u32(16))
    x = x * ti.u32(9)
    x = x ^ (x >> ti.u32(4))
    x = x * ti.u32(0x27D4EB2D)
    x = x ^ (x >> ti.u32(15))
    return x


@ti.func
def seed_stream(seed: ti.i32, stream: ti.i32, pass_index: ti.i32) -> ti.u32:
    """Derive the starting state of an independent random stream.

    Args:
        seed: The run seed chosen by the caller.
        stream: The worker index (one stream per tile).
        pass_index: The accumulation pass, so repeated passes decorrelate.

    Returns:
        A non-zero xorshift32 state.
    """
    mixed = hash_u32(ti.cast(pass_index, ti.u32))
    mixed = hash_u32(ti.cast(stream, ti.u32) ^ mixed)
    state = hash_u32(ti.cast(seed, ti.u32) ^ mixed)
    # zero is the one fixed point of xorshift
    if state == ti.u32(0):
        state = ti.u32(0x6D2B79F5)
    return state


@ti.func
def next_u32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = state
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    return x


@ti.func
def next_float(state: ti.u32):
    """Draw a uniform float in [0, 1) from a stream.

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = next_u32(state)
    value = ti.cast(new_state >> ti.u32(8), ti.f32) * _FLOAT_SCALE
    return value, new_state
