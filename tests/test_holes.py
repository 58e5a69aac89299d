import numpy as np
import pytest

from meshfill.boundary import boundary_edges, trace_loops
from meshfill.holes import HoleError, close_hole, reference_normal
from meshfill.topology import build_topology, face_normal


# Three faces around a triangular gap (0, 1, 2) in the z=0 plane
GAP_VERTICES = np.array([
    [0, 0, 0], [1, 0, 0], [0, 1, 0],
    [0.5, -1, 0], [1, 1, 0], [-1, 0.5, 0],
], dtype=float)
GAP_FACES = np.array([[1, 0, 3], [2, 1, 4], [0, 2, 5]])
GAP_LOOP = [(0, 1), (1, 2), (2, 0)]


def loops_of(mesh):
    return trace_loops(boundary_edges(mesh.faces)).loops


def close(mesh, loop):
    topology = build_topology(mesh.faces, mesh.normal_indices)
    return close_hole(loop, mesh.vertices, mesh.faces, topology)


def triangle_normals(vertices, faces):
    v0, v1, v2 = (vertices[faces[:, i]] for i in range(3))
    return np.cross(v1 - v0, v2 - v1)


def test_triangle_gap_is_closed():
    topology = build_topology(GAP_FACES)
    result = close_hole(GAP_LOOP, GAP_VERTICES, GAP_FACES, topology)
    assert result.ok
    assert result.error is None
    np.testing.assert_array_equal(result.faces, [[2, 0, 1]])


def test_flipped_neighbour_is_ambiguous():
    faces = GAP_FACES.copy()
    faces[2] = [0, 5, 2]
    topology = build_topology(faces)
    result = close_hole(GAP_LOOP, GAP_VERTICES, faces, topology)
    assert not result.ok
    assert result.error is HoleError.ORIENTATION_AMBIGUOUS
    assert result.faces.shape == (0, 3)
    assert "ununified normal" in result.message


def test_reference_normal():
    topology = build_topology(GAP_FACES)
    normal, failure = reference_normal(GAP_LOOP, GAP_VERTICES, GAP_FACES, topology)
    assert failure is None
    np.testing.assert_allclose(normal, [0, 0, 1])


def test_grid_hole_restores_removed_face(grid_with_hole):
    loop = [loop for loop in loops_of(grid_with_hole) if len(loop) == 3][0]
    result = close(grid_with_hole, loop)
    assert result.ok
    assert len(result.faces) == 1
    face = result.faces[0].tolist()
    assert set(face) == {e[0] for e in loop} == {5, 9, 10}
    # Same winding as the removed (5, 10, 9), up to rotation
    assert face in ([5, 10, 9], [10, 9, 5], [9, 5, 10])


def test_pentagon_hole(pentagon_ring):
    loop = loops_of(pentagon_ring)[0]
    assert len(loop) == 5
    result = close(pentagon_ring, loop)
    assert result.ok
    assert result.faces.shape == (3, 3)
    assert set(result.faces.ravel()) == set(range(5))

    normals = triangle_normals(pentagon_ring.vertices, result.faces)
    areas = 0.5 * np.linalg.norm(normals, axis=1)
    assert (areas > 0).all()
    # Non-overlapping fill covers exactly the pentagon
    assert areas.sum() == pytest.approx(2.5 * np.sin(2 * np.pi / 5))


@pytest.mark.parametrize("n", [3, 4, 6, 8, 12])
def test_polygon_yields_n_minus_2_faces(ring, n):
    mesh = ring(n)
    loop = loops_of(mesh)[0]
    assert len(loop) == n
    result = close(mesh, loop)
    assert result.ok
    assert len(result.faces) == n - 2


@pytest.mark.parametrize("n", [3, 5, 7])
def test_filled_faces_agree_with_reference(ring, n):
    mesh = ring(n)
    loop = loops_of(mesh)[0]
    topology = build_topology(mesh.faces)
    reference = face_normal(mesh.vertices, mesh.faces, topology.face(loop[0]))
    result = close_hole(loop, mesh.vertices, mesh.faces, topology)
    assert result.ok
    normals = triangle_normals(mesh.vertices, result.faces)
    assert (normals @ reference >= 0).all()


def test_outer_border_has_no_valid_ear(pentagon_ring):
    outer = loops_of(pentagon_ring)[1]
    assert {e[0] for e in outer} == set(range(5, 10))
    result = close(pentagon_ring, outer)
    assert result.error is HoleError.NO_VALID_EAR
    assert len(result.faces) == 0


def test_collinear_border_still_fails_without_partial_faces(grid_with_hole):
    outer = [loop for loop in loops_of(grid_with_hole) if len(loop) == 12][0]
    result = close(grid_with_hole, outer)
    assert result.error is HoleError.NO_VALID_EAR
    assert len(result.faces) == 0


def test_sharp_corner_hole_is_ambiguous(octahedron):
    faces = octahedron.faces[1:]
    loop = trace_loops(boundary_edges(faces)).loops[0]
    topology = build_topology(faces)
    result = close_hole(loop, octahedron.vertices, faces, topology)
    assert result.error is HoleError.ORIENTATION_AMBIGUOUS


def test_disconnected_loop():
    topology = build_topology(GAP_FACES)
    result = close_hole([(0, 1), (2, 0), (1, 2)], GAP_VERTICES, GAP_FACES, topology)
    assert result.error is HoleError.DISCONNECTED_BOUNDARY
    assert len(result.faces) == 0


def test_too_short_loop():
    topology = build_topology(GAP_FACES)
    result = close_hole([(0, 1), (1, 0)], GAP_VERTICES, GAP_FACES, topology)
    assert result.error is HoleError.DISCONNECTED_BOUNDARY


def test_edge_without_face():
    topology = build_topology(GAP_FACES[:2])
    result = close_hole(GAP_LOOP, GAP_VERTICES, GAP_FACES[:2], topology)
    assert result.error is HoleError.DISCONNECTED_BOUNDARY
    assert "no adjacent face" in result.message


def test_loop_argument_is_not_modified():
    loop = list(GAP_LOOP)
    topology = build_topology(GAP_FACES)
    close_hole(loop, GAP_VERTICES, GAP_FACES, topology)
    assert loop == GAP_LOOP


def test_degenerate_reference_face_is_ambiguous():
    vertices = GAP_VERTICES.copy()
    # Face (1, 0, 3) collapses onto the x axis
    vertices[3] = [2, 0, 0]
    topology = build_topology(GAP_FACES)
    result = close_hole(GAP_LOOP, vertices, GAP_FACES, topology)
    assert result.error is HoleError.ORIENTATION_AMBIGUOUS
    assert "degenerate" in result.message
    assert len(result.faces) == 0
