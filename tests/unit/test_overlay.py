"""Unit tests for the signature overlay positioner."""

import pytest

from docsign.core.raster import to_data_url
from docsign.models.signature import OverlayPosition, PageDimensions, SignatureArtifact, SignatureMode
from docsign.services.overlay import OverlayPositioner, display_size


def _artifact(mode=SignatureMode.DRAW, width=280, height=120) -> SignatureArtifact:
    return SignatureArtifact(
        image_data=to_data_url(b"png"),
        source_mode=mode,
        width=width,
        height=height,
    )


@pytest.fixture
def bounds():
    return {"dims": PageDimensions(width=600, height=800)}


@pytest.fixture
def positioner(bounds):
    return OverlayPositioner(lambda: bounds["dims"])


class TestDisplaySize:
    """Test cases for display_size."""

    def test_drawn_signature_shown_120_wide(self):
        width, height = display_size(_artifact(), 600)
        assert width == 120
        assert height == pytest.approx(120 * 120 / 280)

    def test_tall_image_capped_at_80_high(self):
        width, height = display_size(_artifact(SignatureMode.UPLOAD, 100, 200), 600)
        assert height == 80
        assert width == pytest.approx(40)

    def test_text_uses_natural_size_within_page(self):
        width, height = display_size(_artifact(SignatureMode.TEXT, 300, 60), 600)
        assert (width, height) == (300, 60)

        width, height = display_size(_artifact(SignatureMode.TEXT, 300, 60), 200)
        assert width == pytest.approx(160)
        assert height == pytest.approx(32)


class TestOverlayPositioner:
    """Test cases for OverlayPositioner."""

    def test_fresh_artifact_starts_at_default(self, positioner):
        positioner.place(_artifact(), created=True)
        assert positioner.position == OverlayPosition(x=50, y=50)
        assert positioner.visible

    def test_replaced_artifact_keeps_position(self, positioner):
        positioner.place(_artifact(), created=True)
        positioner.drop(200, 300)
        positioner.place(_artifact(width=300), created=False)
        assert positioner.position == OverlayPosition(x=200, y=300)

    def test_intermediate_drag_does_not_commit(self, positioner):
        positioner.place(_artifact(), created=True)
        commits = positioner.commit_count

        positioner.drag(100, 100)
        positioner.drag(110, 90)

        assert positioner.position == OverlayPosition(x=50, y=50)
        assert positioner.commit_count == commits

        positioner.drop()
        assert positioner.position == OverlayPosition(x=110, y=90)
        assert positioner.commit_count == commits + 1

    def test_drop_is_bounded_to_page(self, positioner):
        positioner.place(_artifact(), created=True)

        positioner.drop(-40, 5000)
        assert positioner.position.x == 0
        assert positioner.position.y == pytest.approx(800 - 120 * 120 / 280)

        positioner.drop(900, 10)
        assert positioner.position.x == 600 - 120

    def test_unmeasured_page_does_not_clamp(self, positioner, bounds):
        bounds["dims"] = PageDimensions(width=0, height=0)
        positioner.place(_artifact(), created=True)
        positioner.drop(120, 80)
        assert positioner.position == OverlayPosition(x=120, y=80)

    def test_position_within_current_size(self, positioner):
        positioner.place(_artifact(), created=True)
        positioner.drop(500, 700)

        within = positioner.position_within(PageDimensions(width=300, height=400))

        assert 0 <= within.x <= 300 and 0 <= within.y <= 400
        assert within.x == 300 - 120

    def test_drag_ignored_without_artifact(self, positioner):
        positioner.drag(10, 10)
        assert positioner.drop(10, 10) is None
        assert positioner.position is None

    def test_clear(self, positioner):
        positioner.place(_artifact(), created=True)
        positioner.clear()
        assert positioner.position is None
        assert not positioner.visible
