"""Run every reporting technique, combine into a single report.

Runs: background, extract, sample.
Skips: swatch (writes files — run explicitly if needed).

Example:
    uv run palette-tool all ./tmp photo.jpg
    uv run palette-tool all ./tmp photo.jpg --json --seed 7
"""

from palette_tool.core.types import ImageJob, Report, Technique

technique = Technique(
    name='all',
    help='Run every reporting technique (except swatch). Combine into a single report.',
)

# Techniques never run automatically
SKIP = {'all', 'swatch'}


@technique.run
def run(job: ImageJob, report: Report, args) -> None:
    from palette_tool.registry import all_techniques

    for name, tech in sorted(all_techniques().items()):
        if name in SKIP:
            continue
        tech.execute(job, report, args)
