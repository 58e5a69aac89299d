import vedo
import numpy as np
from vedo import Plotter


def mesh2vedo(vertices, faces, **kwargs):
    """ Convert vertices and faces to a vedo mesh """
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if len(faces) == 0:
        return vedo.Mesh([vertices, None], **kwargs)
    return vedo.Mesh([vertices, faces], **kwargs)


def show_repair(mesh, repair):
    """
    Show the input mesh next to the repaired one, patches in red.
    Press "q" to close the window.
    """
    plt = Plotter(
        N=2,
        sharecam=True,
    )

    original = mesh2vedo(mesh.vertices, mesh.faces, c="gold")
    patches = [
        mesh2vedo(mesh.vertices, patch, c="r")
        for patch in repair.patches
    ]

    plt.show(original, "Input mesh", at=0, axes=1)
    plt.show(
        original.clone(),
        *patches,
        "Closed {} of {} holes".format(
            len(repair.patches), len(repair.patches) + len(repair.failures)
        ),
        at=1,
        axes=1,
        interactive=True,
    ).close()
