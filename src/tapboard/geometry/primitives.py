"""
Geometry primitives shared by the tessellation strategies.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

Point = Tuple[float, float]

EPS = 1e-9


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle ``[x0, x1] x [y0, y1]``."""

    x0: float
    y0: float
    x1: float
    y1: float

    def __post_init__(self):
        if self.x1 <= self.x0 or self.y1 <= self.y0:
            raise ValueError(f"Degenerate bounds: {self}")

    @classmethod
    def from_size(cls, width: float, height: float) -> "Bounds":
        return cls(0.0, 0.0, float(width), float(height))

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def area(self) -> float:
        return self.width * self.height

    def corners(self) -> List[Point]:
        """Corners in counter-clockwise order (y up)."""
        return [(self.x0, self.y0), (self.x1, self.y0), (self.x1, self.y1), (self.x0, self.y1)]

    def midpoints(self) -> List[Point]:
        cx = (self.x0 + self.x1) / 2
        cy = (self.y0 + self.y1) / 2
        return [(cx, self.y0), (self.x1, cy), (cx, self.y1), (self.x0, cy)]

    def contains(self, point: Point, eps: float = EPS) -> bool:
        x, y = point
        return self.x0 - eps <= x <= self.x1 + eps and self.y0 - eps <= y <= self.y1 + eps


@dataclass(frozen=True)
class Site:
    """
    Tessellation anchor.

    Equality and hashing use ``(key, x, y)``; ``selectable`` marks whether the
    site takes part in hit testing. Synthetic boundary sites all share the empty
    key and differ only by position.
    """

    key: str
    x: float
    y: float
    selectable: bool = field(default=True, compare=False)

    @property
    def point(self) -> Point:
        return (self.x, self.y)

    def sort_key(self) -> Tuple[str, float, float]:
        return (self.key, self.x, self.y)

    def distance_sq(self, point: Point) -> float:
        dx = point[0] - self.x
        dy = point[1] - self.y
        return dx * dx + dy * dy


@dataclass
class VoronoiEdge:
    """
    Piece of the bisector between ``left`` and ``right``.

    ``end`` is None while the edge is an unbounded ray.
    """

    start: Point
    left: Site
    right: Site
    end: Optional[Point] = None

    @property
    def direction(self) -> Point:
        """Direction the edge grows in as the sweep line moves down."""
        return (self.right.y - self.left.y, self.left.x - self.right.x)

    @property
    def is_finished(self) -> bool:
        return self.end is not None


@dataclass(frozen=True)
class Cell:
    """Closed convex polygon owned by one site, vertices counter-clockwise (y up)."""

    site: Site
    vertices: Tuple[Point, ...]

    @property
    def area(self) -> float:
        return abs(polygon_area(self.vertices))

    @property
    def centroid(self) -> Point:
        return polygon_centroid(self.vertices)

    def contains(self, point: Point, eps: float = EPS) -> bool:
        """Point-in-convex-polygon test, for rendering only."""
        if len(self.vertices) < 3:
            return False
        n = len(self.vertices)
        for i in range(n):
            if orient(self.vertices[i], self.vertices[(i + 1) % n], point) < -eps:
                return False
        return True


def orient(a: Point, b: Point, c: Point) -> float:
    """Positive if ``c`` is left of the directed segment ``a -> b``."""
    return (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])


def circumcenter(a: Point, b: Point, c: Point, eps: float = EPS) -> Optional[Point]:
    """Circumcenter of ``a, b, c``, or None if the triple is (nearly) collinear."""
    ax, ay = a
    bx, by = b
    cx, cy = c

    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < eps:
        return None

    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy

    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / d
    return (ux, uy)


def _slab(origin: Point, direction: Point, bounds: Bounds) -> Optional[Tuple[float, float]]:
    tmin = -math.inf
    tmax = math.inf
    for o, d, lo, hi in (
        (origin[0], direction[0], bounds.x0, bounds.x1),
        (origin[1], direction[1], bounds.y0, bounds.y1),
    ):
        if abs(d) < EPS:
            if o < lo or o > hi:
                return None
            continue
        t1 = (lo - o) / d
        t2 = (hi - o) / d
        if t1 > t2:
            t1, t2 = t2, t1
        tmin = max(tmin, t1)
        tmax = min(tmax, t2)
    if tmax < tmin:
        return None
    return tmin, tmax


def ray_exit(origin: Point, direction: Point, bounds: Bounds) -> Optional[Point]:
    """
    Far intersection of a ray with the rectangle.

    Returns the first positive-parameter point where the ray leaves ``bounds``,
    or None if the ray never reaches it.
    """
    span = _slab(origin, direction, bounds)
    if span is None:
        return None
    _, tmax = span
    if tmax < 0:
        return None
    return (origin[0] + direction[0] * tmax, origin[1] + direction[1] * tmax)


def clip_segment(p: Point, q: Point, bounds: Bounds) -> Optional[Tuple[Point, Point]]:
    """Liang-Barsky clip of segment ``p-q`` against ``bounds``."""
    direction = (q[0] - p[0], q[1] - p[1])
    if abs(direction[0]) < EPS and abs(direction[1]) < EPS:
        return (p, q) if bounds.contains(p) else None

    span = _slab(p, direction, bounds)
    if span is None:
        return None
    t0 = max(0.0, span[0])
    t1 = min(1.0, span[1])
    if t1 < t0:
        return None
    return (
        (p[0] + direction[0] * t0, p[1] + direction[1] * t0),
        (p[0] + direction[0] * t1, p[1] + direction[1] * t1),
    )


def clip_polygon(vertices: Sequence[Point], a: float, b: float, c: float) -> List[Point]:
    """
    Clip a convex polygon to the half-plane ``a*x + b*y <= c``.

    Sutherland-Hodgman against a single edge; the result stays convex.
    """
    out: List[Point] = []
    n = len(vertices)
    for i in range(n):
        cur = vertices[i]
        nxt = vertices[(i + 1) % n]
        fc = a * cur[0] + b * cur[1] - c
        fn = a * nxt[0] + b * nxt[1] - c
        if fc <= 0:
            out.append(cur)
        if (fc < 0 < fn) or (fn < 0 < fc):
            t = fc / (fc - fn)
            out.append((cur[0] + (nxt[0] - cur[0]) * t, cur[1] + (nxt[1] - cur[1]) * t))
    return out


def bisector_halfplane(site: Site, other: Site) -> Tuple[float, float, float]:
    """Half-plane ``a*x + b*y <= c`` of points at least as close to ``site`` as to ``other``."""
    a = 2.0 * (other.x - site.x)
    b = 2.0 * (other.y - site.y)
    c = (other.x * other.x + other.y * other.y) - (site.x * site.x + site.y * site.y)
    return a, b, c


def polygon_area(vertices: Sequence[Point]) -> float:
    """Signed shoelace area; positive for counter-clockwise (y up)."""
    total = 0.0
    n = len(vertices)
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def polygon_centroid(vertices: Sequence[Point]) -> Point:
    area = polygon_area(vertices)
    if abs(area) < EPS:
        n = len(vertices)
        return (sum(v[0] for v in vertices) / n, sum(v[1] for v in vertices) / n)
    cx = cy = 0.0
    n = len(vertices)
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        cross = x1 * y2 - x2 * y1
        cx += (x1 + x2) * cross
        cy += (y1 + y2) * cross
    return (cx / (6.0 * area), cy / (6.0 * area))


def convex_hull_order(points: Iterable[Point], eps: float = 1e-6) -> List[Point]:
    """Deduplicate points and order them counter-clockwise around their mean."""
    unique: List[Point] = []
    for p in points:
        if not any(abs(p[0] - q[0]) <= eps and abs(p[1] - q[1]) <= eps for q in unique):
            unique.append(p)
    if len(unique) < 3:
        return unique
    mx = sum(p[0] for p in unique) / len(unique)
    my = sum(p[1] for p in unique) / len(unique)
    return sorted(unique, key=lambda p: math.atan2(p[1] - my, p[0] - mx))
