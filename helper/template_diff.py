"""
Plan-style comparison of two synthesized CloudFormation templates.

Used by template-generator.py to show what a deployment would change, and by
the tests to check that re-synthesis is a no-op and that only the intended
resources move when an input changes. This is a read-only comparison; the
actual change set is computed by CloudFormation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class ChangeAction:
    """Kinds of resource change."""
    ADD = "ADD"
    REMOVE = "REMOVE"
    MODIFY = "MODIFY"


@dataclass
class ResourceChange:
    """One logical resource that differs between two templates."""

    logical_id: str
    resource_type: str
    action: str
    changed_properties: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.changed_properties:
            return (f"{self.action} {self.logical_id} ({self.resource_type}): "
                    f"{', '.join(self.changed_properties)}")
        return f"{self.action} {self.logical_id} ({self.resource_type})"


def _resources(template: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return (template or {}).get('Resources', {}) or {}


def _changed_keys(old: Dict[str, Any], new: Dict[str, Any]) -> List[str]:
    return sorted(key for key in set(old) | set(new) if old.get(key) != new.get(key))


def diff_templates(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> List[ResourceChange]:
    """
    Compare the Resources sections of two templates.

    A resource is MODIFY when its type, properties or resource-level attributes
    (DependsOn, DeletionPolicy, ...) differ. Changed top-level property names
    are listed; attribute changes are listed with their attribute name.

    Args:
        old: Previously synthesized template, or None
        new: Newly synthesized template

    Returns:
        Changes ordered by logical id
    """
    old_resources = _resources(old)
    new_resources = _resources(new)
    changes = []

    for logical_id in sorted(set(old_resources) | set(new_resources)):
        before = old_resources.get(logical_id)
        after = new_resources.get(logical_id)

        if before is None:
            changes.append(ResourceChange(logical_id, after.get('Type', 'Unknown'), ChangeAction.ADD))
            continue

        if after is None:
            changes.append(ResourceChange(logical_id, before.get('Type', 'Unknown'), ChangeAction.REMOVE))
            continue

        if before == after:
            continue

        changed = _changed_keys(before.get('Properties', {}) or {}, after.get('Properties', {}) or {})

        before_attributes = {k: v for k, v in before.items() if k != 'Properties'}
        after_attributes = {k: v for k, v in after.items() if k != 'Properties'}
        changed.extend(_changed_keys(before_attributes, after_attributes))

        changes.append(ResourceChange(
            logical_id,
            after.get('Type', before.get('Type', 'Unknown')),
            ChangeAction.MODIFY,
            changed
        ))

    return changes


def summarize_changes(changes: List[ResourceChange]) -> Dict[str, int]:
    """Count changes per action."""
    summary = {ChangeAction.ADD: 0, ChangeAction.REMOVE: 0, ChangeAction.MODIFY: 0}
    for change in changes:
        summary[change.action] += 1
    return summary


def has_changes(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> bool:
    return bool(diff_templates(old, new))
