"""Detect a uniform background from the image border.

Reads only the outermost rows and columns, ignoring pixels with alpha
below 200. Needs at least 20 such pixels. If 60% of them lie within
ΔE00 6 of their mean Lab colour, the border is uniform and its most
frequent exact colour is reported as the background.

This is the same check `extract` uses before clustering; run it alone to
see why a colour went missing from a palette.

Example:
    uv run palette-tool background ./tmp logo.png
"""

from palette_tool.core.background import border_pixels, detect_background
from palette_tool.core.colour import rgb_to_hex
from palette_tool.core.types import Background, ImageJob, Report, Technique

technique = Technique(
    name='background',
    help='Report the uniform border background colour, if any.',
)


@technique.run
def run(job: ImageJob, report: Report, args) -> None:
    config = args.config
    border = border_pixels(job.buffer, config.border_alpha_threshold)
    outcome = detect_background(job.buffer, config)
    data: dict = {'detected': isinstance(outcome, Background), 'border_pixels': len(border)}
    if isinstance(outcome, Background):
        data['rgb'] = list(outcome.rgb)
        data['hex'] = rgb_to_hex(outcome.rgb)
    report.add('background', data)
