from __future__ import annotations

from collections import Counter

from sphinx.environment import BuildEnvironment


def _find_duplicate_anchors(env: BuildEnvironment) -> list[str]:
    findings: list[str] = []
    for docname in sorted(env.idlspec_anchors):
        counts = Counter(env.idlspec_anchors[docname])
        for anchor, count in sorted(counts.items()):
            if count > 1:
                findings.append(f"{docname}: anchor '{anchor}' issued {count} times")
    return findings
