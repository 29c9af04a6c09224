"""
Library - filtering, grouping and counting of library artifacts (pure logic, no Qt)
"""

from skills_studio.models import ARTIFACT_TYPES, SCOPE_LABELS, Artifact

ALL = "all"


def filter_artifacts(artifacts: list[Artifact], type: str = ALL, scope: str = ALL,
                     query: str = "") -> list[Artifact]:
    """Keep artifacts matching the type and scope filters and the search text."""
    needle = query.strip().lower()
    result = []
    for a in artifacts:
        if type != ALL and a.type != type:
            continue
        if scope != ALL and a.scope != scope:
            continue
        if needle and needle not in f"{a.name} {a.description}".lower():
            continue
        result.append(a)
    return result


def group_by_scope(artifacts: list[Artifact]) -> list[tuple[str, list[Artifact]]]:
    """
    Group artifacts for display: bundled first, then global, then one group per
    project in the order projects first appear. Items are sorted by name and
    empty groups are left out.
    """
    groups: dict[str, list[Artifact]] = {}
    labels: dict[str, str] = {}
    for a in artifacts:
        if a.scope == "project":
            label = a.scope_label or SCOPE_LABELS["project"]
            key = f"project:{label}"
        else:
            key, label = a.scope, SCOPE_LABELS.get(a.scope, a.scope)
        groups.setdefault(key, []).append(a)
        labels[key] = label

    order = ["bundled", "global"] + [k for k in groups if k.startswith("project:")]
    return [
        (labels[key], sorted(groups[key], key=lambda a: a.name.lower()))
        for key in order if groups.get(key)
    ]


def count_by_type(artifacts: list[Artifact]) -> dict[str, int]:
    counts = {t: 0 for t in ARTIFACT_TYPES}
    for a in artifacts:
        counts[a.type] = counts.get(a.type, 0) + 1
    return counts
