"""Vector geometry helpers on 3-element tuples."""

from __future__ import annotations

import math
from collections.abc import Sequence

Vector = tuple[float, float, float]
Matrix = tuple[Vector, Vector, Vector]


def _vec(p: Sequence[float]) -> Vector:
    x, y, z = p
    return (float(x), float(y), float(z))


def _add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _mul(a: Vector, k: float) -> Vector:
    return (a[0] * k, a[1] * k, a[2] * k)


def _dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _norm(a: Vector) -> float:
    return math.sqrt(_dot(a, a))


def _direction(start: Vector, end: Vector) -> Vector:
    d = _sub(end, start)
    n = _norm(d)
    if n == 0:
        raise ValueError("line is degenerate: both points coincide")
    return (d[0] / n, d[1] / n, d[2] / n)


def sphere_line_intersection(
    point0: Sequence[float],
    point1: Sequence[float],
    center: Sequence[float],
    radius: float,
) -> list[Vector]:
    """Points where the infinite line through point0 and point1 meets the sphere."""
    p0, p1, c = _vec(point0), _vec(point1), _vec(center)
    u = _direction(p0, p1)
    offset = _sub(p0, c)
    along = _dot(u, offset)
    nabla = along * along - (_dot(offset, offset) - radius * radius)
    if nabla < 0:
        return []
    if nabla == 0:
        return [_add(p0, _mul(u, -along))]
    root = math.sqrt(nabla)
    return [_add(p0, _mul(u, -along - root)), _add(p0, _mul(u, -along + root))]


def sphere_segment_intersection(
    point0: Sequence[float],
    point1: Sequence[float],
    center: Sequence[float],
    radius: float,
) -> list[Vector]:
    """Points where the segment from point0 to point1 meets the sphere."""
    p0, p1 = _vec(point0), _vec(point1)
    length = _norm(_sub(p1, p0))
    return [
        point
        for point in sphere_line_intersection(p0, p1, center, radius)
        if _norm(_sub(p0, point)) <= length and _norm(_sub(p1, point)) <= length
    ]


def point_line_projection(
    point: Sequence[float], line0: Sequence[float], line1: Sequence[float]
) -> Vector:
    """Orthogonal projection of a point onto the line through line0 and line1."""
    p, l0 = _vec(point), _vec(line0)
    u = _direction(l0, _vec(line1))
    return _add(l0, _mul(u, _dot(_sub(p, l0), u)))


def point_segment_projection(
    point: Sequence[float], seg0: Sequence[float], seg1: Sequence[float]
) -> Vector:
    """Projection of a point onto a segment, clamped to its end points."""
    s0, s1 = _vec(seg0), _vec(seg1)
    projection = point_line_projection(point, s0, s1)
    length = _norm(_sub(s0, s1))
    if _norm(_sub(projection, s0)) > length:
        return s1
    if _norm(_sub(projection, s1)) > length:
        return s0
    return projection


def bezier_point(points: Sequence[Sequence[float]], s: float) -> Vector:
    """Point at parameter ``s`` of the Bezier curve with the given control points."""
    tmp = [_vec(p) for p in points]
    if not tmp:
        return (0.0, 0.0, 0.0)
    while len(tmp) > 1:
        tmp = [_add(_mul(a, 1.0 - s), _mul(b, s)) for a, b in zip(tmp, tmp[1:])]
    return tmp[0]


def quaternion_to_matrix(quaternion: Sequence[float]) -> Matrix:
    """Rotation matrix (rows) of a unit quaternion given as (x, y, z, w)."""
    x, y, z, w = (float(c) for c in quaternion)
    tx, ty, tz = 2 * x, 2 * y, 2 * z
    twx, twy, twz = tx * w, ty * w, tz * w
    txx, txy, txz = tx * x, ty * x, tz * x
    tyy, tyz, tzz = ty * y, tz * y, tz * z
    return (
        (1 - (tyy + tzz), txy - twz, txz + twy),
        (txy + twz, 1 - (txx + tzz), tyz - twx),
        (txz - twy, tyz + twx, 1 - (txx + tyy)),
    )