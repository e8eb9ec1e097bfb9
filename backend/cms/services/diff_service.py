"""두 스냅샷 페이로드의 필드 단위 차이를 계산하는 순수 함수 모음입니다."""

from typing import Any, Dict, List, Mapping

ADDED = "added"
MODIFIED = "modified"
REMOVED = "removed"


def values_equal(left: Any, right: Any) -> bool:
    """Deep structural equality that does not coerce between types.

    ``True`` and ``1`` or ``1`` and ``1.0`` are different values here, the
    way they are different in the JSON a snapshot was stored as.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    if type(left) is not type(right):
        return False
    return left == right


def calculate_differences(payload1: Mapping[str, Any], payload2: Mapping[str, Any]) -> List[Dict[str, Any]]:
    differences = []

    for field, value in payload2.items():
        if field not in payload1:
            differences.append({"field": field, "old_value": None, "new_value": value, "type": ADDED})
        elif not values_equal(payload1[field], value):
            differences.append(
                {"field": field, "old_value": payload1[field], "new_value": value, "type": MODIFIED}
            )

    for field, value in payload1.items():
        if field not in payload2:
            differences.append({"field": field, "old_value": value, "new_value": None, "type": REMOVED})

    return differences


def summarize_differences(differences: List[Dict[str, Any]]) -> str:
    if not differences:
        return "No changes detected"
    verbs = {ADDED: "Added", MODIFIED: "Updated", REMOVED: "Removed"}
    return ", ".join(f"{verbs[d['type']]} {d['field']}" for d in differences)
