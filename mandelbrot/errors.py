"""Exception hierarchy shared by the rendering pipeline and the controller."""


class MandelbrotError(Exception):
    """Base class for every error raised by the explorer core."""


class RenderError(MandelbrotError):
    """A render could not produce a buffer (worker failure or bad viewport)."""


class RenderCancelled(RenderError):
    """A render was aborted because a newer request superseded it."""


class InvalidSelection(MandelbrotError):
    """A zoom selection with zero area was committed."""


class SinkError(MandelbrotError):
    """An image sink failed to deliver or persist a buffer."""
