"""Show what the sampler keeps.

Picks the grid stride from the pixel count (2, 3, 4 or 6), walks the grid
and counts the pixels that survive the alpha (< 160) and near-white /
near-black filters, then how many distinct colours remain after step-8
quantization. Background removal is not applied here.

Example:
    uv run palette-tool sample ./tmp photo.jpg --json
"""

from palette_tool.core.errors import PaletteError
from palette_tool.core.quantize import deduplicate
from palette_tool.core.sampler import choose_stride, sample_pixels
from palette_tool.core.types import ImageJob, Report, Technique

technique = Technique(
    name='sample',
    help='Report sampling stride, surviving pixel count and unique quantized colours.',
)


@technique.run
def run(job: ImageJob, report: Report, args) -> None:
    buf = job.buffer
    stride = choose_stride(buf.width, buf.height)
    visited = len(range(0, buf.height, stride)) * len(range(0, buf.width, stride))
    try:
        samples = sample_pixels(buf, args.config, stride=stride)
        unique = len(deduplicate(samples, args.config.quant_step))
    except PaletteError as e:
        report.add('sample', {'error': e.message, 'kind': e.kind, 'stride': stride, 'visited': visited})
        report.record_error('sample', e)
        return

    report.add(
        'sample',
        {
            'stride': stride,
            'visited': visited,
            'kept': len(samples),
            'unique': unique,
        },
    )
