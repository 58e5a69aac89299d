import enum
from collections import namedtuple

import numpy as np

from meshfill.logger import LOG
from meshfill.boundary import is_closed_loop
from meshfill.topology import face_normal


class HoleError(enum.Enum):
    DISCONNECTED_BOUNDARY = "Border edges are not connected"
    ORIENTATION_AMBIGUOUS = "Border with ununified normal is not handled"
    NO_VALID_EAR = "No valid ear left to clip"


class HoleResult(namedtuple("HoleResult", ["faces", "error", "message"])):
    """ Outcome of closing one hole: the new faces, or the reason it failed """

    __slots__ = ()

    @property
    def ok(self):
        return self.error is None


def _no_faces():
    return np.zeros((0, 3), dtype=np.int64)


def _failed(error, detail):
    message = "{}: {}".format(error.value, detail)
    LOG.debug(message)
    return HoleResult(_no_faces(), error, message)


def reference_normal(loop, vertices, faces, topology):
    """
    Get the normal of the face bordering the first edge of a loop, checking
    that no other bordering face points against it.

    Returns (normal, None) on success, or (None, failed HoleResult).
    """
    normals = []
    for edge in loop:
        fi = topology.face(edge)
        if fi is None:
            return None, _failed(
                HoleError.DISCONNECTED_BOUNDARY,
                "edge {} has no adjacent face".format(edge),
            )
        normals.append(face_normal(vertices, faces, fi))

    ref_normal = normals[0]
    if not np.any(ref_normal):
        return None, _failed(
            HoleError.ORIENTATION_AMBIGUOUS,
            "face at edge {} is degenerate and has no normal".format(loop[0]),
        )
    for edge, normal in zip(loop[1:], normals[1:]):
        if np.dot(ref_normal, normal) < 0:
            return None, _failed(
                HoleError.ORIENTATION_AMBIGUOUS,
                "face at edge {} opposes the reference normal".format(edge),
            )
    return ref_normal, None


def close_hole(loop, vertices, faces, topology):
    """
    Triangulate one border loop by ear clipping.

    Every clipped triangle must face the same side as the reference normal
    taken from the mesh next to the loop. A loop of n edges yields n - 2
    triangles, or a failed HoleResult and no triangles at all.
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    edges = [tuple(edge) for edge in loop]

    if len(edges) < 3 or not is_closed_loop(edges):
        return _failed(
            HoleError.DISCONNECTED_BOUNDARY,
            "{} edges do not form a closed loop".format(len(edges)),
        )

    ref_normal, failure = reference_normal(edges, vertices, faces, topology)
    if failure is not None:
        return failure
    LOG.debug("Sanity check for normal directions passed")

    added_faces = []
    while len(edges) >= 3:
        clipped = False
        now = 0
        while len(edges) >= 3 and now < len(edges):
            prv = edges[now - 1]
            vid0, vid1 = prv
            vid2 = edges[now][1]

            v0, v1, v2 = vertices[[vid0, vid1, vid2]]
            if np.dot(np.cross(v1 - v0, v2 - v1), ref_normal) < 0:
                now += 1
                continue

            added_faces.append((vid0, vid1, vid2))
            clipped = True
            if now == 0:
                # prv wrapped around to the end of the list
                edges[0] = (vid0, vid2)
                edges.pop()
                now = 1
            else:
                edges[now - 1:now + 1] = [(vid0, vid2)]

        if not clipped:
            return _failed(
                HoleError.NO_VALID_EAR,
                "{} edges left after {} faces".format(len(edges), len(added_faces)),
            )

    return HoleResult(np.array(added_faces, dtype=np.int64).reshape(-1, 3), None, None)
