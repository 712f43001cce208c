# app/lambdas/posts_api/expressions.py
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple


@dataclass(frozen=True)
class UpdateExpression:
    expression: str
    names: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)


def build_set_expression(fields: Iterable[Tuple[str, Any]]) -> UpdateExpression:
    """Build a single SET expression from ordered (field, value) pairs.

    Pair *i* is bound through the placeholders ``#key{i}`` and ``:value{i}``
    so reserved words and arbitrary field names never appear in the
    expression itself. Values are returned unmarshalled. The caller
    supplies at least one pair; DynamoDB rejects an empty SET.
    """
    assignments = []
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    for index, (name, value) in enumerate(fields):
        name_ref = f"#key{index}"
        value_ref = f":value{index}"
        assignments.append(f"{name_ref} = {value_ref}")
        names[name_ref] = name
        values[value_ref] = value

    return UpdateExpression(
        expression="SET " + ", ".join(assignments),
        names=names,
        values=values,
    )
