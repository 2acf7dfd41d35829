"""Column behavior: validation rule, conditional formats and number format per data type."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional, Union

from tablebook.contracts.book import (
    ALL,
    CustomRule,
    DataSelector,
    EnumItem,
    EnumType,
    LookupType,
    NumericComparisonRule,
    NumericRangeRule,
    NumericType,
    TemporalComparisonRule,
    TemporalRangeRule,
    TemporalType,
    TextType,
    is_reference,
)
from tablebook.contracts.common import Issue, ObjectPath, Result, processing_issue
from tablebook.contracts.sheets import (
    SheetBehavior,
    SheetComparisonRule,
    SheetConditionalFormat,
    SheetEnumRule,
    SheetFormulaRule,
    SheetLookupRule,
    SheetMatchRule,
    SheetRangeRule,
    SheetRule,
)
from tablebook.engine.formats import to_pattern
from tablebook.engine.formula import CellPosition, compile_formula, first_cell, to_address
from tablebook.engine.registry import DefinitionsRegistry, ReferenceRegistry
from tablebook.engine.selector import Scope, resolve_selector
from tablebook.engine.theme import as_data_style, resolve_color, resolve_style

RuleCompiler = Callable[[object, Scope, ObjectPath, list], Optional[SheetRule]]

ORIGIN = CellPosition(0, 0)


def resolve_behavior(
    column_type,
    scope: Scope,
    definitions: DefinitionsRegistry,
    path: ObjectPath,
) -> Result[SheetBehavior]:
    """Resolve a column type (or ``@type`` reference) into a SheetBehavior."""
    if is_reference(column_type):
        found = definitions.types.resolve(column_type, path)
        if not found.ok:
            return Result.failure(found.issues)
        column_type = found.value

    issues: list[Issue] = []

    if isinstance(column_type, TextType):
        behavior = SheetBehavior(
            kind="text",
            validation=_optional_rule(column_type.rule, _text_rule, scope, [*path, "rule"], issues),
            conditional_formats=_conditional_formats(
                column_type.styles, _text_rule, scope, definitions, [*path, "styles"], issues
            ),
        )
    elif isinstance(column_type, EnumType):
        behavior = _enum(column_type, definitions, path, issues)
    elif isinstance(column_type, LookupType):
        behavior = SheetBehavior(
            kind="text",
            validation=_lookup_rule(column_type, scope, [*path, "column"], issues),
            conditional_formats=_conditional_formats(
                column_type.styles, _text_rule, scope, definitions, [*path, "styles"], issues
            ),
        )
    elif isinstance(column_type, NumericType):
        behavior = SheetBehavior(
            kind="number",
            format=_format(column_type.format, definitions.numerics, [*path, "format"], issues),
            validation=_optional_rule(column_type.rule, _numeric_rule, scope, [*path, "rule"], issues),
            conditional_formats=_conditional_formats(
                column_type.styles, _numeric_rule, scope, definitions, [*path, "styles"], issues
            ),
        )
    elif isinstance(column_type, TemporalType):
        behavior = SheetBehavior(
            kind="temporal",
            format=_format(column_type.format, definitions.temporals, [*path, "format"], issues),
            validation=_optional_rule(column_type.rule, _temporal_rule, scope, [*path, "rule"], issues),
            conditional_formats=_conditional_formats(
                column_type.styles, _temporal_rule, scope, definitions, [*path, "styles"], issues
            ),
        )
    else:
        raise TypeError(f"Unknown column type: {type(column_type).__name__}")

    return Result(behavior, issues)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _optional_rule(rule, compiler: RuleCompiler, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetRule]:
    if rule is None:
        return None
    return compiler(rule, scope, path, issues)


def _formula_rule(rule: CustomRule, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetFormulaRule]:
    compiled = compile_formula(rule.expression, scope, first_cell(scope), [*path, "expression"])
    if not compiled.ok:
        issues.extend(compiled.issues)
        return None
    return SheetFormulaRule(formula=compiled.value)


def _text_rule(rule, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetRule]:
    if isinstance(rule, CustomRule):
        return _formula_rule(rule, scope, path, issues)
    return SheetMatchRule(type=rule.type, value=rule.value)


def _number(value: Union[int, float], path: ObjectPath, issues: list) -> Union[int, float]:
    return value


def _temporal(value: str, path: ObjectPath, issues: list) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        issues.append(processing_issue("Invalid temporal value", path, value))
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _value_rule(rule, target: str, convert, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetRule]:
    if isinstance(rule, CustomRule):
        return _formula_rule(rule, scope, path, issues)

    if isinstance(rule, (NumericRangeRule, TemporalRangeRule)):
        low = convert(rule.low, [*path, "low"], issues)
        high = convert(rule.high, [*path, "high"], issues)
        if low is None or high is None:
            return None
        low, high = min(low, high), max(low, high)
        return SheetRangeRule(type=rule.type, target=target, low=low, high=high)

    if isinstance(rule, (NumericComparisonRule, TemporalComparisonRule)):
        value = convert(rule.value, [*path, "value"], issues)
        if value is None:
            return None
        return SheetComparisonRule(type=rule.type, target=target, value=value)

    raise TypeError(f"Unknown rule: {type(rule).__name__}")


def _numeric_rule(rule, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetRule]:
    return _value_rule(rule, "number", _number, scope, path, issues)


def _temporal_rule(rule, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetRule]:
    return _value_rule(rule, "temporal", _temporal, scope, path, issues)


def _lookup_rule(column_type: LookupType, scope: Scope, path: ObjectPath, issues: list) -> Optional[SheetLookupRule]:
    found = resolve_selector(DataSelector(column=column_type.column, rows=ALL), scope, path)
    if not found.ok:
        issues.extend(found.issues)
        return None
    # The range is fully absolute, so the evaluation position is irrelevant.
    return SheetLookupRule(range=found.value, reference=to_address(found.value, ORIGIN))


# ---------------------------------------------------------------------------
# Styles and formats
# ---------------------------------------------------------------------------


def _conditional_formats(
    styles,
    compiler: RuleCompiler,
    scope: Scope,
    definitions: DefinitionsRegistry,
    path: ObjectPath,
    issues: list,
) -> list[SheetConditionalFormat]:
    """Entries with any unresolved part are reported and left out."""
    formats = []
    for i, conditional in enumerate(styles):
        local: list[Issue] = []
        rule = compiler(conditional.rule, scope, [*path, i, "rule"], local)
        style = resolve_style(conditional.apply, definitions, [*path, i, "apply"]).unwrap(local)
        issues.extend(local)
        if not local and rule is not None:
            formats.append(SheetConditionalFormat(rule=rule, style=as_data_style(style)))
    return formats


def _enum(column_type: EnumType, definitions: DefinitionsRegistry, path: ObjectPath, issues: list) -> SheetBehavior:
    names = []
    formats = []

    for i, item in enumerate(column_type.items):
        if isinstance(item, str):
            item = EnumItem(name=item)
        names.append(item.name)

        if item.style is None and item.color is None:
            continue

        item_path = [*path, "items", i]
        local: list[Issue] = []
        style = resolve_style(item.style, definitions, [*item_path, "style"]).unwrap(local)
        if item.color is not None:
            fore = resolve_color(item.color, definitions, [*item_path, "color"]).unwrap(local)
            style = style.model_copy(update={"fore": fore})

        issues.extend(local)
        if not local:
            formats.append(SheetConditionalFormat(
                rule=SheetMatchRule(type="is", value=item.name),
                style=as_data_style(style),
            ))

    return SheetBehavior(
        kind="text",
        validation=SheetEnumRule(values=names),
        conditional_formats=formats,
    )


def _format(fmt, registry: ReferenceRegistry, path: ObjectPath, issues: list) -> Optional[str]:
    if fmt is None:
        return None
    if is_reference(fmt):
        found = registry.resolve(fmt, path)
        if not found.ok:
            issues.extend(found.issues)
            return None
        fmt = found.value
    return to_pattern(fmt)
