"""Pipeline orchestration layer.

Pipeline modules run feature extraction over batches of audio files and
return result dicts (success, totals, items, failures) for the CLI to format.

Import policy:
- CLI imports only from `pipeline.*` for orchestration.
- `pipeline.*` builds on `features.*`; `features.*` must not call `pipeline.*`.
"""
