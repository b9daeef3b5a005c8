"""Typed failures for the extraction pipeline.

Every failure is terminal for the invocation. The `kind` string is stable
and safe to show in reports; `message` is meant for users.
"""


class PaletteError(Exception):
    """Base class for all extraction failures."""

    kind = 'palette_error'
    default_message = 'Failed to extract colours'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DecodeUnavailable(PaletteError):
    """The pixel buffer could not be obtained from the source image."""

    kind = 'decode_unavailable'
    default_message = 'Failed to load image'


class EmptyInput(PaletteError):
    """Sampling produced zero usable pixels."""

    kind = 'empty_input'
    default_message = 'No valid colours found in image'


class NoColorsRemain(PaletteError):
    """Nothing survived background and neutral filtering."""

    kind = 'no_colors_remain'
    default_message = 'No valid colours after filtering'
