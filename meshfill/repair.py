import os
import sys
import argparse
from collections import namedtuple

import numpy as np

from meshfill.logger import LOG
import meshfill.logger as logger
import meshfill.utils_3d as utils_3d
from meshfill.boundary import boundary_edges, trace_loops
from meshfill.holes import close_hole
from meshfill.topology import build_topology


Repair = namedtuple("Repair", ["mesh", "patches", "failures", "discarded"])


def assemble(mesh, patches, topology=None):
    """
    Append the patch faces to the mesh.

    New corners take the normal their vertex is bound to in the original
    mesh, or -1 if the vertex has none.
    """
    if topology is None:
        topology = build_topology(mesh.faces, mesh.normal_indices)

    faces = [mesh.faces]
    normal_indices = [mesh.normal_indices]
    for patch in patches:
        patch = np.asarray(patch, dtype=np.int64).reshape(-1, 3)
        faces.append(patch)
        normal_indices.append(np.array(
            [[topology.normal_of.get(v, -1) for v in face] for face in patch.tolist()],
            dtype=np.int64,
        ).reshape(-1, 3))

    return utils_3d.Mesh(
        mesh.vertices,
        mesh.normals,
        np.vstack(faces),
        np.vstack(normal_indices),
    )


def fill_holes(mesh):
    """ Find every border loop of a mesh and close the ones that can be closed """
    topology = build_topology(mesh.faces, mesh.normal_indices)

    border = boundary_edges(mesh.faces)
    LOG.info("{} edges on the border".format(len(border)))

    trace = trace_loops(border)
    LOG.info("Found {} borders".format(len(trace.loops)))

    patches, failures = [], []
    for i, loop in enumerate(trace.loops):
        result = close_hole(loop, mesh.vertices, mesh.faces, topology)
        if result.ok:
            LOG.info("Added {} faces".format(len(result.faces)))
            patches.append(result.faces)
        else:
            LOG.warning("Skipping border {} ({} edges): {}".format(i, len(loop), result.message))
            failures.append((i, result))

    return Repair(
        assemble(mesh, patches, topology=topology),
        patches,
        failures,
        trace.discarded,
    )


def face_groups(mesh, repair):
    """ Label the original faces and each patch as separate groups """
    num_original = len(mesh.faces)
    groups = [utils_3d.FaceGroup(
        "original",
        repair.mesh.faces[:num_original],
        repair.mesh.normal_indices[:num_original],
    )]
    start = num_original
    for i, patch in enumerate(repair.patches):
        end = start + len(patch)
        groups.append(utils_3d.FaceGroup(
            "hole {}".format(i),
            repair.mesh.faces[start:end],
            repair.mesh.normal_indices[start:end],
        ))
        start = end
    return groups


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, "{}: error: {}\n".format(self.prog, message))


def main(argv=None):
    parser = _ArgumentParser(
        description="Close the holes of a triangle mesh by ear clipping its border loops."
    )
    parser.add_argument(
        "input",
        help="Mesh to repair.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Path to save the repaired mesh at. Defaults to <input>_filled.obj.",
    )
    parser.add_argument(
        "--added",
        default=None,
        help="If set, also save only the added faces to this .obj file.",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="If passed, will display the input and the repaired mesh.",
    )
    logger.add_logger_args(parser)
    args = parser.parse_args(argv)
    logger.configure_logging(args)

    if args.output is None:
        args.output = os.path.splitext(args.input)[0] + "_filled.obj"

    LOG.debug("Loading mesh from: {}".format(args.input))
    try:
        mesh = utils_3d.load_mesh(args.input)
    except utils_3d.MeshLoadError as e:
        LOG.error(str(e))
        return 2

    repair = fill_holes(mesh)
    num_added = len(repair.mesh.faces) - len(mesh.faces)
    LOG.info("Closed {} of {} holes, {} faces added".format(
        len(repair.patches), len(repair.patches) + len(repair.failures), num_added))
    if len(repair.mesh.faces):
        LOG.info("Repaired mesh is {}watertight".format(
            "" if utils_3d.mesh2trimesh(repair.mesh).is_watertight else "not "))

    LOG.debug("Saving mesh to: {}".format(args.output))
    utils_3d.save_mesh(args.output, repair.mesh, groups=face_groups(mesh, repair))
    LOG.info("Model saved")

    if args.added is not None:
        groups = face_groups(mesh, repair)[1:]
        utils_3d.save_obj(args.added, repair.mesh.vertices, repair.mesh.normals, groups)
        LOG.info("Exported added faces to {}".format(args.added))

    if args.show:
        import meshfill.viewer as viewer

        viewer.show_repair(mesh, repair)

    return 0


if __name__ == "__main__":
    sys.exit(main())
