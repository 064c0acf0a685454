"""
Tests for the geometry planner.
"""
import pytest

from image_compressor.engine.errors import NotLandscapeError, ValidationError
from image_compressor.engine.geometry import (
    fit_inside,
    needs_auto_landscape_cap,
    plan_geometry,
    plan_landscape,
    plan_ultra,
)
from image_compressor.engine.models import CompressionRequest, GeometryPlan, Metadata


def metadata(width, height, byte_length=1000):
    return Metadata(
        width=width,
        height=height,
        format='jpeg',
        channels=3,
        has_alpha=False,
        has_profile=False,
        byte_length=byte_length,
    )


class TestFitInside:
    """Tests for the shared fit-inside resize rule."""

    def test_already_fits(self):
        assert fit_inside(800, 600, 1920, 1080) == (800, 600)

    def test_width_bound(self):
        assert fit_inside(4000, 2000, 1920, 1920) == (1920, 960)

    def test_height_bound(self):
        assert fit_inside(1000, 3000, 1600, 1600) == (533, 1600)

    def test_box_narrower_than_aspect(self):
        assert fit_inside(4000, 2000, 5000, 100) == (200, 100)

    def test_never_below_one_pixel(self):
        assert fit_inside(10000, 10, 100, 100) == (100, 1)


class TestPlanGeometry:
    """Tests for the standard path geometry."""

    def test_width_only_keeps_aspect_ratio(self):
        plan = plan_geometry(metadata(1000, 500), CompressionRequest(width=400))
        assert plan.target_size == (400, 200)
        assert plan.resized

    def test_height_only_keeps_aspect_ratio(self):
        plan = plan_geometry(metadata(1000, 500), CompressionRequest(height=100))
        assert plan.target_size == (200, 100)

    def test_both_bounds_fit_inside(self):
        plan = plan_geometry(metadata(1000, 500), CompressionRequest(width=300, height=300))
        assert plan.target_size == (300, 150)

    def test_larger_width_never_enlarges(self):
        plan = plan_geometry(metadata(1000, 500), CompressionRequest(width=2000))
        assert plan.target_size == (1000, 500)
        assert not plan.resized

    def test_larger_box_never_enlarges(self):
        plan = plan_geometry(metadata(1000, 500), CompressionRequest(width=3000, height=3000))
        assert not plan.resized

    def test_auto_landscape_cap(self):
        plan = plan_geometry(metadata(4000, 2000), CompressionRequest())
        assert plan.target_size == (1920, 960)

    def test_no_auto_cap_for_portrait(self):
        plan = plan_geometry(metadata(2000, 4000), CompressionRequest())
        assert not plan.resized

    def test_no_auto_cap_below_threshold(self):
        plan = plan_geometry(metadata(1920, 1080), CompressionRequest())
        assert not plan.resized

    def test_explicit_width_disables_auto_cap(self):
        plan = plan_geometry(metadata(4000, 2000), CompressionRequest(width=3000))
        assert plan.target_size == (3000, 1500)

    def test_auto_cap_predicate(self):
        assert needs_auto_landscape_cap(metadata(2500, 1000), CompressionRequest())
        assert not needs_auto_landscape_cap(metadata(2500, 1000), CompressionRequest(height=500))
        assert not needs_auto_landscape_cap(metadata(2500, 2500), CompressionRequest())


class TestPlanLandscape:
    """Tests for the landscape-only entry point."""

    def test_rejects_portrait(self):
        with pytest.raises(NotLandscapeError):
            plan_landscape(metadata(1000, 2000))

    def test_rejects_square(self):
        with pytest.raises(ValidationError):
            plan_landscape(metadata(1000, 1000))

    def test_caps_width_exactly(self):
        plan = plan_landscape(metadata(3001, 1999), max_width=1920)
        assert plan.target_width == 1920
        assert abs(plan.target_height - 1999 * 1920 / 3001) <= 1

    def test_narrow_landscape_unchanged(self):
        plan = plan_landscape(metadata(1200, 800), max_width=1920)
        assert not plan.resized

    def test_custom_max_width(self):
        assert plan_landscape(metadata(2000, 1000), max_width=800).target_size == (800, 400)


class TestPlanUltra:
    """Tests for the ultra entry point."""

    def test_clamps_larger_landscape_side(self):
        assert plan_ultra(metadata(4000, 3000)).target_size == (1600, 1200)

    def test_clamps_larger_portrait_side(self):
        assert plan_ultra(metadata(1500, 3000), max_dimension=1000).target_size == (500, 1000)

    def test_small_image_unchanged(self):
        assert not plan_ultra(metadata(800, 600)).resized


class TestGeometryPlan:
    """Tests for the never-enlarge invariant."""

    def test_enlarging_plan_rejected(self):
        with pytest.raises(ValueError):
            GeometryPlan(100, 100, 200, 100)

    def test_dimensions_label(self):
        assert GeometryPlan(4000, 2000, 1920, 960).dimensions == '1920 × 960'
