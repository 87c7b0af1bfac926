"""Tests for matplotlib rendering of plane patches."""

from pathlib import Path

import numpy as np

from hope.core.capabilities import PlaneRenderer
from hope.core.cloud import PointCloud
from hope.steps.s01_plane_segmentation import PlaneSegmenter
from hope.utils.visualization import MatplotlibPlaneRenderer, plot_planes, plot_point_cloud


class TestVisualization:
    def test_renderer_writes_png(self, tmp_path: Path, flat_cloud):
        plane = PlaneSegmenter().find_all_planes(flat_cloud)[0]
        renderer = MatplotlibPlaneRenderer(tmp_path / "renders", dpi=50)
        assert isinstance(renderer, PlaneRenderer)
        out = renderer.render(plane)
        assert out == tmp_path / "renders" / "plane_000.png"
        assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_plot_planes(self, tmp_path: Path, two_table_cloud):
        results = PlaneSegmenter().find_all_planes(two_table_cloud)
        save_path = tmp_path / "planes.png"
        plot_planes(
            results,
            source_points=two_table_cloud.points,
            max_plane=results.max_plane,
            save_path=save_path,
        )
        assert save_path.exists()

    def test_plot_point_cloud_subsamples(self, tmp_path: Path):
        pts = np.random.default_rng(1).uniform(0, 1, (500, 3))
        cloud = PointCloud.from_points(pts, colors=np.full((500, 3), 200, dtype=np.uint8))
        save_path = tmp_path / "cloud.png"
        fig = plot_point_cloud(cloud, max_points=100, save_path=save_path)
        assert save_path.exists()
        assert fig.axes[0].get_title() == "Point cloud (100 pts)"

    def test_plot_point_cloud_without_colors(self, tmp_path: Path, flat_cloud):
        save_path = tmp_path / "flat.png"
        plot_point_cloud(PointCloud.from_points(flat_cloud.points), save_path=save_path)
        assert save_path.exists()
