"""Dominant palette extraction using adaptive k-means in Lab space.

Samples the (downscaled) image on a grid, drops transparent and extreme
neutral pixels, removes a uniform border background if one is detected,
quantizes to step-8 buckets, clusters in Lab (ΔE76) and merges clusters
closer than ΔE00 10. Clusters under 1.5% of the population are dropped.

Each palette colour is the most frequent exact pixel colour in its
cluster, so every reported colour really occurs in the image. Colours are
ordered by cluster size, largest first.

Use --seed (or PALETTE_SEED) for a reproducible palette; k-means++
seeding is random otherwise.

Example:
    uv run palette-tool extract ./tmp photo.jpg
    uv run palette-tool extract ./tmp photo.jpg --seed 7 --json
"""

from typing import Any

from palette_tool.core.pipeline import run_extraction
from palette_tool.core.types import Background, ExtractionStats, ImageJob, Report, Technique

technique = Technique(
    name='extract',
    help='Extract the dominant colours (k-means in Lab, ΔE00 merge). Real pixel colours only.',
)


def stats_to_dict(stats: ExtractionStats) -> dict[str, Any]:
    bg = stats.background
    return {
        'stride': stats.stride,
        'samples': stats.samples,
        'background': bg.rgb if isinstance(bg, Background) else None,
        'after_background': stats.after_background,
        'unique': stats.unique,
        'k': stats.k,
        'iterations': stats.iterations,
        'clusters': stats.clusters,
        'merged': stats.merged,
    }


@technique.run
def run(job: ImageJob, report: Report, args) -> None:
    result = run_extraction(job.buffer, args.config)
    if not result.ok:
        report.add('extract', {'error': result.error.message, 'kind': result.error.kind})
        report.record_error('extract', result.error)
        return

    report.add(
        'extract',
        {
            'palette': [entry.to_dict() for entry in result.palette],
            'stats': stats_to_dict(result.stats),
        },
    )
