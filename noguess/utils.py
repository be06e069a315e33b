"""Grid geometry helpers shared by every layer of the engine."""

from typing import Dict, List, Set, Tuple

# Module-level cache: (width, height) -> neighbour indices per flat cell index
_NEIGHBORHOODS_CACHE: Dict[Tuple[int, int], Tuple[Tuple[int, ...], ...]] = {}


def cell_index(x: int, y: int, height: int) -> int:
    """Pack (x, y) into a flat column-major index."""
    return x * height + y


def cell_coords(index: int, height: int) -> Tuple[int, int]:
    """Unpack a flat column-major index into (x, y)."""
    return divmod(index, height)


def get_neighborhoods(width: int, height: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache the 8-connected neighbours of every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        A tuple indexed by flat cell index ``x * height + y``; each entry is a
        tuple of neighbouring flat indices, enumerated with ``dx`` in -1..1 as
        the outer loop and ``dy`` in -1..1 as the inner loop.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: List[Tuple[int, ...]] = []
    for x in range(width):
        for y in range(height):
            nbrs: List[int] = []
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        nbrs.append(nx * height + ny)
            neighborhoods.append(tuple(nbrs))

    result = tuple(neighborhoods)
    _NEIGHBORHOODS_CACHE[key] = result
    return result


def neighbors(x: int, y: int, width: int, height: int) -> Tuple[Tuple[int, int], ...]:
    """Return the in-bounds (nx, ny) neighbours of (x, y) in a stable order."""
    return tuple(
        cell_coords(n, height)
        for n in get_neighborhoods(width, height)[x * height + y]
    )


def safe_zone(width: int, height: int, x: int, y: int, radius: int) -> Set[int]:
    """Flat indices of the Chebyshev square of ``radius`` around (x, y), clipped."""
    zone: Set[int] = set()
    for zx in range(max(0, x - radius), min(width, x + radius + 1)):
        for zy in range(max(0, y - radius), min(height, y + radius + 1)):
            zone.add(zx * height + zy)
    return zone
