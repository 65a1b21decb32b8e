import numpy as np
import pytest

from mandelbrot import PixelBuffer, RasterScheduler, RenderError


class FakeScheduler:
    """Stands in for RasterScheduler: every frame is filled with its call number."""

    def __init__(self):
        self.calls = []
        self.fail = False

    def render(self, viewport, params, width, height, cancel=None):
        self.calls.append((viewport, params, width, height))
        if self.fail:
            raise RenderError("simulated worker failure")
        value = len(self.calls)
        return PixelBuffer(width, height, np.full((height, width), value, dtype=np.uint32))


@pytest.fixture
def fake_scheduler():
    return FakeScheduler()


@pytest.fixture(scope="session")
def scheduler():
    with RasterScheduler(workers=3) as shared:
        yield shared
