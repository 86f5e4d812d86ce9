from hull3d.cloud import generate_point_cloud
from hull3d.hull import ConvexHull3D

if __name__ == "__main__":
    pts = generate_point_cloud(10.0, 16384, 1234567890)
    hull = ConvexHull3D(pts)

    report = hull.validate()
    print("VALIDATION:", {k: (v if not isinstance(v, list) else len(v)) for k, v in report.items()})

    hull.write_off("hull.off")
    print("Wrote hull.off — можна глянути в MeshLab/ParaView.")
