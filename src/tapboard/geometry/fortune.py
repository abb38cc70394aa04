"""
Fortune's sweep-line Voronoi construction.

The sweep line moves from the largest y downward. The beach line is a doubly
linked list of parabolic arcs ordered left to right; a new bisector edge is
started whenever two arcs become adjacent, and a circle event closes two edges
at a Voronoi vertex when an arc shrinks to nothing.

Edges that are still open when the queue drains are rays; they are cut at the
first point where they leave the keyboard rectangle, and every edge is then
clipped to the rectangle. Cells are assembled from the clipped edges plus the
rectangle corners each site owns.
"""

import heapq
import itertools
import math
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .dense import nearest_site
from .primitives import (
    EPS,
    Bounds,
    Cell,
    Point,
    Site,
    VoronoiEdge,
    circumcenter,
    clip_segment,
    convex_hull_order,
    orient,
    ray_exit,
)
from ..diagnostics import DiagnosticCallback, DiagnosticKind, report

_CIRCLE = 0
_SITE = 1

# Sites whose y values differ by less than this fraction of the layout span
# are swept as one level
LEVEL_TOLERANCE = 1e-7


class _Arc:
    __slots__ = ("site", "prev", "next", "event", "left_edge", "right_edge")

    def __init__(self, site: Site):
        self.site = site
        self.prev: Optional["_Arc"] = None
        self.next: Optional["_Arc"] = None
        self.event: Optional["_CircleEvent"] = None
        self.left_edge: Optional[VoronoiEdge] = None
        self.right_edge: Optional[VoronoiEdge] = None


class _CircleEvent:
    __slots__ = ("y", "center", "arc", "valid")

    def __init__(self, y: float, center: Point, arc: _Arc):
        self.y = y
        self.center = center
        self.arc = arc
        self.valid = True


class FortuneSweep:
    """Single-use Voronoi builder for a fixed rectangle."""

    def __init__(
        self,
        bounds: Bounds,
        eps: float = EPS,
        on_diagnostic: Optional[DiagnosticCallback] = None,
    ):
        self.bounds = bounds
        self.eps = eps
        self.on_diagnostic = on_diagnostic

        self._head: Optional[_Arc] = None
        self._queue: List[Tuple[float, int, int, object]] = []
        self._counter = itertools.count()
        self._edges: List[VoronoiEdge] = []
        self._twins: Dict[int, VoronoiEdge] = {}
        self._skipped_triples = 0
        self._top = bounds.y1
        self._originals: Dict[Site, Site] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute(self, sites: Sequence[Site]) -> List[VoronoiEdge]:
        """
        Run the sweep.

        Args:
            sites: Distinct sites; coincident points must be removed beforehand

        Returns:
            Finished edges clipped to the rectangle
        """
        if len(sites) < 2:
            return []

        xs = [s.x for s in sites] + [self.bounds.x0, self.bounds.x1]
        ys = [s.y for s in sites] + [self.bounds.y0, self.bounds.y1]
        span = (max(xs) - min(xs)) + (max(ys) - min(ys)) + 1.0
        # Start point for bisectors of sites that share the highest y
        self._top = max(ys) + span

        for site in sorted(self._snap_levels(sites, LEVEL_TOLERANCE * span), key=lambda s: (-s.y, s.x)):
            heapq.heappush(self._queue, (-site.y, _SITE, next(self._counter), site))

        while self._queue:
            neg_y, kind, _, payload = heapq.heappop(self._queue)
            if kind == _SITE:
                self._add_site(payload)
            elif payload.valid:
                self._remove_arc(payload)

        if self._skipped_triples:
            report(
                self.on_diagnostic,
                DiagnosticKind.DEGENERATE_GEOMETRY,
                f"Skipped {self._skipped_triples} collinear site triples",
                skipped=self._skipped_triples,
            )

        edges = self._finish_edges()
        logger.debug(f"Sweep produced {len(edges)} edges for {len(sites)} sites")
        return edges

    def cells(self, sites: Sequence[Site], edges: Sequence[VoronoiEdge]) -> List[Cell]:
        """
        Assemble convex cells from clipped edges.

        A cell's vertices are the endpoints of its edges plus every rectangle
        corner for which the site is the nearest one.
        """
        if not sites:
            return []

        points: Dict[Site, List[Point]] = {site: [] for site in sites}
        for edge in edges:
            for site in (edge.left, edge.right):
                if site in points:
                    points[site].extend((edge.start, edge.end))

        for corner in self.bounds.corners():
            owner = nearest_site(sites, corner)
            best = owner.distance_sq(corner)
            tolerance = self.eps * (1.0 + best)
            for site in sites:
                if site.distance_sq(corner) <= best + tolerance:
                    points[site].append(corner)

        cells = []
        for site in sites:
            vertices = convex_hull_order(points[site])
            if len(vertices) >= 3:
                cells.append(Cell(site=site, vertices=tuple(vertices)))
        return cells

    def _snap_levels(self, sites: Sequence[Site], tolerance: float) -> List[Site]:
        """
        Move nearly level sites onto one exact level.

        Breakpoints between arcs whose sites sit a hair above the sweep line are
        badly conditioned, so each run of y values within ``tolerance`` of its
        highest member is swept at that height. Finished edges refer back to the
        original sites.
        """
        snapped = []
        level: Optional[float] = None
        for site in sorted(sites, key=lambda s: -s.y):
            if level is None or level - site.y > tolerance:
                level = site.y
            if site.y != level:
                moved = Site(site.key, site.x, level, selectable=site.selectable)
                self._originals[moved] = site
                site = moved
            snapped.append(site)
        return snapped

    # ------------------------------------------------------------------
    # Beach line
    # ------------------------------------------------------------------

    def _breakpoint(self, left: Site, right: Site, ly: float) -> float:
        """x of the breakpoint with ``left``'s arc on its left at sweep height ``ly``."""
        if abs(left.y - right.y) < self.eps:
            return (left.x + right.x) / 2.0
        if abs(left.y - ly) < self.eps:
            return left.x
        if abs(right.y - ly) < self.eps:
            return right.x

        dl = 2.0 * (left.y - ly)
        dr = 2.0 * (right.y - ly)
        a = 1.0 / dl - 1.0 / dr
        b = -2.0 * (left.x / dl - right.x / dr)
        c = (left.x ** 2 + left.y ** 2 - ly ** 2) / dl - (right.x ** 2 + right.y ** 2 - ly ** 2) / dr

        root = math.sqrt(max(0.0, b * b - 4.0 * a * c))
        # Cancellation-free form of the quadratic roots
        q = -0.5 * (b + math.copysign(root, b))
        x1 = q / a
        x2 = c / q if q != 0 else x1
        # The site nearer the sweep line has the narrower parabola
        if left.y < right.y:
            return max(x1, x2)
        return min(x1, x2)

    @staticmethod
    def _parabola_y(site: Site, x: float, ly: float) -> float:
        return ((x - site.x) ** 2 + site.y ** 2 - ly ** 2) / (2.0 * (site.y - ly))

    def _locate(self, x: float, ly: float) -> _Arc:
        arc = self._head
        while arc.next is not None:
            if x <= self._breakpoint(arc.site, arc.next.site, ly):
                return arc
            arc = arc.next
        return arc

    def _new_edge(self, start: Point, left: Site, right: Site) -> VoronoiEdge:
        edge = VoronoiEdge(start=start, left=left, right=right)
        self._edges.append(edge)
        return edge

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _add_site(self, site: Site) -> None:
        if self._head is None:
            self._head = _Arc(site)
            return

        ly = site.y
        arc = self._locate(site.x, ly)

        if abs(arc.site.y - ly) < self.eps:
            self._add_level_site(arc, site)
            return

        if arc.event is not None:
            arc.event.valid = False
            arc.event = None

        start = (site.x, self._parabola_y(arc.site, site.x, ly))

        middle = _Arc(site)
        right = _Arc(arc.site)

        right.next = arc.next
        if arc.next is not None:
            arc.next.prev = right
        right.right_edge = arc.right_edge

        arc.next = middle
        middle.prev = arc
        middle.next = right
        right.prev = middle

        # Two halves of the same bisector, growing in opposite directions
        left_half = self._new_edge(start, arc.site, site)
        right_half = self._new_edge(start, site, arc.site)
        self._twins[id(right_half)] = left_half

        arc.right_edge = left_half
        middle.left_edge = left_half
        middle.right_edge = right_half
        right.left_edge = right_half

        self._check_circle(arc, ly)
        self._check_circle(right, ly)

    def _add_level_site(self, arc: _Arc, site: Site) -> None:
        """Insert a site level with ``arc``'s site; only happens for the topmost sites."""
        new = _Arc(site)
        start = ((arc.site.x + site.x) / 2.0, self._top)

        if site.x >= arc.site.x:
            new.prev = arc
            new.next = arc.next
            if arc.next is not None:
                arc.next.prev = new
            new.right_edge = arc.right_edge
            arc.next = new
            edge = self._new_edge(start, arc.site, site)
            arc.right_edge = edge
            new.left_edge = edge
        else:
            new.next = arc
            new.prev = arc.prev
            if arc.prev is not None:
                arc.prev.next = new
            else:
                self._head = new
            new.left_edge = arc.left_edge
            arc.prev = new
            edge = self._new_edge(start, site, arc.site)
            arc.left_edge = edge
            new.right_edge = edge

        self._check_circle(new, site.y)

    def _check_circle(self, arc: _Arc, ly: float) -> None:
        left, right = arc.prev, arc.next
        if left is None or right is None or left.site == right.site:
            return

        a, b, c = left.site.point, arc.site.point, right.site.point
        center = circumcenter(a, b, c, self.eps)
        if center is None:
            self._skipped_triples += 1
            return
        # Breakpoints only converge when the triple turns clockwise
        if orient(a, b, c) > 0:
            return

        radius = math.hypot(center[0] - b[0], center[1] - b[1])
        event_y = center[1] - radius
        if event_y > ly + self.eps:
            return

        event = _CircleEvent(event_y, center, arc)
        arc.event = event
        heapq.heappush(self._queue, (-event_y, _CIRCLE, next(self._counter), event))

    def _remove_arc(self, event: _CircleEvent) -> None:
        arc = event.arc
        left, right = arc.prev, arc.next
        vertex = event.center

        arc.left_edge.end = vertex
        arc.right_edge.end = vertex

        edge = self._new_edge(vertex, left.site, right.site)
        left.right_edge = edge
        right.left_edge = edge

        left.next = right
        right.prev = left

        for neighbour in (left, right):
            if neighbour.event is not None:
                neighbour.event.valid = False
                neighbour.event = None

        self._check_circle(left, event.y)
        self._check_circle(right, event.y)

    # ------------------------------------------------------------------
    # Finishing
    # ------------------------------------------------------------------

    def _far_end(self, edge: VoronoiEdge) -> Point:
        if edge.end is not None:
            return edge.end
        exit_point = ray_exit(edge.start, edge.direction, self.bounds)
        return exit_point if exit_point is not None else edge.start

    def _finish_edges(self) -> List[VoronoiEdge]:
        joined = set(id(edge) for edge in self._twins.values())
        segments: List[Tuple[Point, Point, Site, Site]] = []

        for edge in self._edges:
            if id(edge) in joined:
                continue
            twin = self._twins.get(id(edge))
            if twin is not None:
                segments.append((self._far_end(twin), self._far_end(edge), edge.left, edge.right))
            else:
                segments.append((edge.start, self._far_end(edge), edge.left, edge.right))

        finished = []
        for start, end, left, right in segments:
            clipped = clip_segment(start, end, self.bounds)
            if clipped is None:
                continue
            p, q = clipped
            if math.hypot(q[0] - p[0], q[1] - p[1]) < 1e-7:
                continue
            finished.append(VoronoiEdge(
                start=p,
                end=q,
                left=self._originals.get(left, left),
                right=self._originals.get(right, right),
            ))
        return finished
