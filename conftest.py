import numpy as np
import pytest

import meshfill.utils_3d as utils_3d


def make_grid(n=4):
    """ Flat (n x n)-vertex grid in the z=0 plane, two CCW triangles per cell """
    vertices = [[i, j, 0.0] for j in range(n) for i in range(n)]
    faces = []
    for j in range(n - 1):
        for i in range(n - 1):
            a, b = i + n * j, i + 1 + n * j
            c, d = i + 1 + n * (j + 1), i + n * (j + 1)
            faces.append([a, b, c])
            faces.append([a, c, d])
    return np.array(vertices, dtype=float), np.array(faces, dtype=int)


@pytest.fixture
def grid():
    vertices, faces = make_grid(4)
    return utils_3d.make_mesh(vertices, faces)


@pytest.fixture
def grid_with_hole():
    # The center cell is (5, 6, 10) + (5, 10, 9); drop the second one
    vertices, faces = make_grid(4)
    keep = [not np.array_equal(f, [5, 10, 9]) for f in faces]
    return utils_3d.make_mesh(vertices, faces[keep])


def make_ring(n):
    """
    Flat annulus around a regular n-gon hole. The inner n-gon (radius 1)
    uses vertices 0..n-1, the outer one (radius 2) vertices n..2n-1.
    """
    angles = np.arange(n) * 2 * np.pi / n
    inner = np.stack([np.cos(angles), np.sin(angles), np.zeros(n)], axis=1)
    vertices = np.vstack([inner, 2 * inner])
    faces = []
    for k in range(n):
        p, p_next = k, (k + 1) % n
        q, q_next = n + k, n + (k + 1) % n
        faces.append([p, q, q_next])
        faces.append([p, q_next, p_next])
    faces = np.array(faces, dtype=int)
    normals = np.tile([0.0, 0.0, 1.0], (2 * n, 1))
    return utils_3d.make_mesh(vertices, faces, normals=normals, normal_indices=faces.copy())


@pytest.fixture
def ring():
    return make_ring


@pytest.fixture
def pentagon_ring():
    return make_ring(5)


@pytest.fixture
def octahedron():
    vertices = np.array([
        [1, 0, 0], [-1, 0, 0],
        [0, 1, 0], [0, -1, 0],
        [0, 0, 1], [0, 0, -1],
    ], dtype=float)
    faces = np.array([
        [0, 2, 4], [2, 1, 4], [1, 3, 4], [3, 0, 4],
        [2, 0, 5], [1, 2, 5], [3, 1, 5], [0, 3, 5],
    ])
    normals = vertices.copy()
    return utils_3d.make_mesh(vertices, faces, normals=normals, normal_indices=faces.copy())
