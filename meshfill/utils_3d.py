import os
from collections import namedtuple

import trimesh
import numpy as np


Mesh = namedtuple("Mesh", ["vertices", "normals", "faces", "normal_indices"])
Mesh.__doc__ = """ Triangle mesh with per-corner normal indices (-1 where a corner has no normal) """

FaceGroup = namedtuple("FaceGroup", ["label", "faces", "normal_indices"])

UNINDEXED_FORMATS = (".stl",)


class MeshLoadError(Exception):
    """ Raised when an input mesh cannot be read or parsed """


def make_mesh(vertices, faces, normals=None, normal_indices=None):
    """ Build a Mesh, coercing arrays and filling in absent normal indices """
    vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if normals is None:
        normals = np.zeros((0, 3), dtype=np.float64)
    normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    if normal_indices is None:
        normal_indices = np.full(faces.shape, -1, dtype=np.int64)
    normal_indices = np.asarray(normal_indices, dtype=np.int64).reshape(-1, 3)
    assert normal_indices.shape == faces.shape, "normal indices must parallel faces"
    return Mesh(vertices, normals, faces, normal_indices)


# === conversion methods ===

def mesh2trimesh(mesh):
    """ Convert a Mesh to a trimesh mesh, keeping vertex order """
    return trimesh.Trimesh(
        vertices=mesh.vertices,
        faces=mesh.faces,
        process=False,
    )


def trimesh2mesh(mesh):
    """ Convert a trimesh mesh to a Mesh, binding one normal per vertex """
    faces = np.asarray(mesh.faces, dtype=np.int64)
    if len(faces) == 0:
        return make_mesh(mesh.vertices, faces)
    return make_mesh(
        mesh.vertices,
        faces,
        normals=mesh.vertex_normals,
        normal_indices=faces.copy(),
    )


def force_trimesh(mesh):
    """ Take a trimesh mesh or scene and force it to be a single trimesh mesh """
    if isinstance(mesh, trimesh.Scene):
        if len(mesh.geometry) == 0:
            return trimesh.Trimesh()
        return trimesh.util.concatenate(
            tuple(trimesh.Trimesh(vertices=g.vertices, faces=g.faces, process=False)
                for g in mesh.geometry.values()))
    if not isinstance(mesh, trimesh.Trimesh):
        raise MeshLoadError("Not a triangle mesh: {}".format(type(mesh).__name__))
    return mesh


# === loading methods ===

def _resolve_index(token, count, kind):
    """ Resolve a 1-based or negative (relative) obj index to a 0-based one """
    index = int(token)
    if index > 0:
        return index - 1
    if index < 0 and count + index >= 0:
        return count + index
    raise ValueError("invalid {} index {}".format(kind, token))


def _parse_corner(token, num_vertices, num_normals):
    parts = token.split("/")
    vertex = _resolve_index(parts[0], num_vertices, "vertex")
    normal = -1
    if len(parts) >= 3 and parts[2]:
        normal = _resolve_index(parts[2], num_normals, "normal")
    return vertex, normal


def load_obj(path):
    """ Load a .obj file, triangulating polygons as fans """
    vertices, normals, faces, normal_indices = [], [], [], []
    try:
        f = open(path, "r", encoding="utf-8")
    except OSError as e:
        raise MeshLoadError("Could not open {}: {}".format(path, e)) from e

    # Decoding happens while iterating the file, outside the per-line handler
    try:
        with f:
            for lineno, line in enumerate(f, start=1):
                tokens = line.split()
                if not tokens or tokens[0].startswith("#"):
                    continue
                try:
                    if tokens[0] == "v":
                        if len(tokens) < 4:
                            raise ValueError("vertex needs 3 coordinates")
                        vertices.append([float(x) for x in tokens[1:4]])
                    elif tokens[0] == "vn":
                        if len(tokens) < 4:
                            raise ValueError("normal needs 3 components")
                        normals.append([float(x) for x in tokens[1:4]])
                    elif tokens[0] == "f":
                        corners = [
                            _parse_corner(t, len(vertices), len(normals))
                            for t in tokens[1:]
                        ]
                        if len(corners) < 3:
                            raise ValueError("face needs at least 3 corners")
                        for i in range(1, len(corners) - 1):
                            tri = (corners[0], corners[i], corners[i + 1])
                            faces.append([c[0] for c in tri])
                            normal_indices.append([c[1] for c in tri])
                except ValueError as e:
                    raise MeshLoadError("{}:{}: {}".format(path, lineno, e)) from e
    except UnicodeDecodeError as e:
        raise MeshLoadError("{}: not a text .obj file: {}".format(path, e)) from e

    mesh = make_mesh(vertices, faces, normals=normals, normal_indices=normal_indices)
    if len(mesh.faces) and mesh.faces.max() >= len(mesh.vertices):
        raise MeshLoadError(
            "{}: face references vertex {} but only {} vertices exist".format(
                path, mesh.faces.max() + 1, len(mesh.vertices)))
    if len(mesh.faces) and mesh.normal_indices.max() >= len(mesh.normals):
        raise MeshLoadError(
            "{}: face references normal {} but only {} normals exist".format(
                path, mesh.normal_indices.max() + 1, len(mesh.normals)))
    return mesh


def load_mesh(path):
    """ Load a triangle mesh; .obj keeps per-corner normals, other formats go through trimesh """
    ext = os.path.splitext(path)[-1].lower()
    if ext == ".obj":
        return load_obj(path)
    try:
        mesh = force_trimesh(trimesh.load(path, force="mesh", process=False))
    except (OSError, ValueError, KeyError) as e:
        raise MeshLoadError("Could not load {}: {}".format(path, e)) from e
    # STL stores every triangle with its own corners, so shared vertices must be rebuilt
    if ext in UNINDEXED_FORMATS:
        mesh.merge_vertices(merge_tex=True, merge_norm=True)
    return trimesh2mesh(mesh)


# === saving methods ===

def _format_face(face, normal_index):
    if (normal_index >= 0).all():
        return "f {}//{} {}//{} {}//{}\n".format(
            *[i + 1 for pair in zip(face, normal_index) for i in pair])
    return "f {} {} {}\n".format(*[i + 1 for i in face])


def save_obj(path, vertices, normals, groups):
    """ Save vertices, normals and labeled face groups to a .obj file """
    assert os.path.splitext(path)[-1].lower() == ".obj", "file must be a .obj"
    with open(path, "w", encoding="utf-8") as f:
        f.write("# meshfill\n")
        for vert in np.asarray(vertices, dtype=np.float64).tolist():
            f.write("v {} {} {}\n".format(*vert))
        for normal in np.asarray(normals, dtype=np.float64).tolist():
            f.write("vn {} {} {}\n".format(*normal))
        for group in groups:
            faces = np.asarray(group.faces, dtype=np.int64).reshape(-1, 3)
            if group.normal_indices is None:
                normal_indices = np.full(faces.shape, -1, dtype=np.int64)
            else:
                normal_indices = np.asarray(group.normal_indices, dtype=np.int64).reshape(-1, 3)
            f.write("# {}: {} triangles\n".format(group.label, len(faces)))
            for face, normal_index in zip(faces.tolist(), normal_indices):
                f.write(_format_face(face, normal_index))


def save_mesh(path, mesh, groups=None):
    """ Save a Mesh; .obj keeps groups and normals, other formats go through trimesh """
    if os.path.splitext(path)[-1].lower() == ".obj":
        if groups is None:
            groups = [FaceGroup("faces", mesh.faces, mesh.normal_indices)]
        save_obj(path, mesh.vertices, mesh.normals, groups)
    else:
        mesh2trimesh(mesh).export(path)
