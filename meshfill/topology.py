from types import MappingProxyType
from collections import namedtuple

import trimesh
import numpy as np


class Topology(namedtuple("Topology", ["normal_of", "face_of"])):
    """
    Read-only lookups derived from a face list.

    normal_of maps a vertex to the normal index it uses (last face wins).
    face_of maps a directed edge, and its reverse, to the face owning it.
    """

    __slots__ = ()

    def normal(self, vertex):
        """ Normal index bound to a vertex, or None if it has none """
        return self.normal_of.get(vertex)

    def face(self, edge):
        """ Index of the face adjacent to a directed edge, or None """
        return self.face_of.get(tuple(edge))


def build_topology(faces, normal_indices=None):
    """ Derive the vertex->normal and directed edge->face bindings """
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if normal_indices is not None:
        normal_indices = np.asarray(normal_indices, dtype=np.int64).reshape(-1, 3)

    normal_of = {}
    face_of = {}
    for fi, (v0, v1, v2) in enumerate(faces.tolist()):
        for a, b in ((v0, v1), (v1, v2), (v2, v0)):
            # A face's own orientation always beats a neighbour's reverse entry
            face_of[(a, b)] = fi
            face_of.setdefault((b, a), fi)
        if normal_indices is not None:
            for vertex, normal in zip((v0, v1, v2), normal_indices[fi].tolist()):
                if normal >= 0:
                    normal_of[vertex] = normal

    return Topology(MappingProxyType(normal_of), MappingProxyType(face_of))


def face_normal(vertices, faces, face_index):
    """ Unit normal of a face from its winding, zero for degenerate faces """
    v0, v1, v2 = np.asarray(vertices)[np.asarray(faces).reshape(-1, 3)[face_index]]
    return trimesh.util.unitize(np.cross(v1 - v0, v2 - v0))
