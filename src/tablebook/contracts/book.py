"""Input models: the declarative Book tree produced by validation.

The tree is immutable once validated. Every variant family (data types,
expressions, rules, formats) is a closed union keyed on a discriminator
field (``kind`` or ``type``).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

Reference = Annotated[str, StringConstraints(pattern=r"^@.+$")]
Color = Annotated[str, StringConstraints(pattern=r"^#[A-Fa-f0-9]{6}$")]
UnitSelector = Annotated[str, StringConstraints(pattern=r"^[$+\-]\d+$")]
TemporalString = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}-\d{2}")]
Digits = Annotated[int, Field(ge=0)]

SELF = "self"
ALL = "all"

ComparisonOperator = Literal["=", "<>", ">", "<", ">=", "<="]
Operator = Literal["=", "<>", ">", "<", ">=", "<=", "+", "-", "*", "/", "^", "&"]
RangeOperator = Literal["between", "outside"]
MatchOperator = Literal["is", "contains", "begins", "ends"]
BorderType = Literal["none", "thin", "medium", "thick", "dotted", "dashed", "double"]


def is_reference(value: Any) -> bool:
    """True for ``@name`` strings."""
    return isinstance(value, str) and value.startswith("@")


class TableModel(BaseModel):
    """Base for every input node."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


class ColumnSelector(TableModel):
    """Column by name; page and group default to the enclosing ones."""

    page: str | None = None
    group: str | None = None
    name: str


class RangeSelector(TableModel):
    """Two row endpoints in either order."""

    from_: UnitSelector = Field(alias="from")
    to: UnitSelector


RowSelector = Union[Literal["self", "all"], UnitSelector, RangeSelector]


class DataSelector(TableModel):
    column: Union[Literal["self"], ColumnSelector]
    rows: RowSelector


Selector = Union[Literal["self"], DataSelector]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class LiteralExpression(TableModel):
    type: Literal["literal"]
    of: Union[bool, int, float, str]


class CompoundExpression(TableModel):
    type: Literal["compound"]
    with_: Operator = Field(alias="with")
    items: list[Expression]


class NegatedExpression(TableModel):
    type: Literal["negated"]
    on: Expression


class FunctionExpression(TableModel):
    """Function names are passed through unchecked."""

    type: Literal["function"]
    name: str
    args: list[Expression] = Field(default_factory=list)


class SelectorExpression(TableModel):
    type: Literal["selector"]
    from_: Selector = Field(alias="from")


class RawExpression(TableModel):
    """Literal formula text with ``{tag}`` placeholders bound to selectors."""

    type: Literal["raw", "template"]
    text: str
    tags: dict[str, Selector] = Field(default_factory=dict)


Expression = Annotated[
    Union[
        LiteralExpression,
        CompoundExpression,
        NegatedExpression,
        FunctionExpression,
        SelectorExpression,
        RawExpression,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------


class Style(TableModel):
    fore: Union[Color, Reference, None] = None
    back: Union[Color, Reference, None] = None
    bold: bool | None = None
    italic: bool | None = None


class Border(TableModel):
    type: BorderType
    color: Union[Color, Reference]


class HeaderStyle(Style):
    """Style for group and column headers, with partition borders."""

    beneath: Border | None = None
    between: Border | None = None


class Theme(TableModel):
    """Visual theme; ``inherits`` are folded in order before own fields."""

    inherits: list[Union[Theme, Reference]] = Field(default_factory=list)
    tab: Union[Color, Reference, None] = None
    group: Union[HeaderStyle, Reference, None] = None
    header: Union[HeaderStyle, Reference, None] = None
    data: Union[Style, Reference, None] = None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class MatchRule(TableModel):
    type: MatchOperator
    value: str


class CustomRule(TableModel):
    """Valid when the expression evaluates truthy."""

    type: Literal["custom"]
    expression: Expression


class NumericComparisonRule(TableModel):
    type: ComparisonOperator
    value: Union[int, float]


class NumericRangeRule(TableModel):
    type: RangeOperator
    low: Union[int, float]
    high: Union[int, float]


class TemporalComparisonRule(TableModel):
    type: ComparisonOperator
    value: TemporalString


class TemporalRangeRule(TableModel):
    type: RangeOperator
    low: TemporalString
    high: TemporalString


TextRule = Annotated[Union[MatchRule, CustomRule], Field(discriminator="type")]
NumericRule = Annotated[
    Union[NumericComparisonRule, NumericRangeRule, CustomRule], Field(discriminator="type")
]
TemporalRule = Annotated[
    Union[TemporalComparisonRule, TemporalRangeRule, CustomRule], Field(discriminator="type")
]


class TextConditionalStyle(TableModel):
    rule: TextRule
    apply: Union[Style, Reference]


class NumericConditionalStyle(TableModel):
    rule: NumericRule
    apply: Union[Style, Reference]


class TemporalConditionalStyle(TableModel):
    rule: TemporalRule
    apply: Union[Style, Reference]


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------


class DigitPlaceholder(TableModel):
    """Counts of ``0`` (fixed), ``#`` (flex) and ``?`` (align) placeholders."""

    fixed: Digits | None = None
    flex: Digits | None = None
    align: Digits | None = None


class BaseNumericFormat(TableModel):
    integer: Union[Digits, DigitPlaceholder, None] = None
    decimal: Union[Digits, DigitPlaceholder, None] = None
    commas: bool = False


class NumberFormat(BaseNumericFormat):
    type: Literal["number"]


class PercentFormat(BaseNumericFormat):
    type: Literal["percent"]


class CurrencyFormat(BaseNumericFormat):
    type: Literal["currency"]
    symbol: str = "$"
    position: Literal["prefix", "suffix"] = "prefix"


NumericFormat = Annotated[
    Union[NumberFormat, PercentFormat, CurrencyFormat], Field(discriminator="type")
]

TemporalUnitType = Literal[
    "year", "month", "monthname", "weekday", "day", "hour", "meridiem", "minute", "second"
]


class TemporalUnit(TableModel):
    type: TemporalUnitType
    length: Literal["short", "long"]


TemporalFormat = list[Union[TemporalUnit, str]]


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class EnumItem(TableModel):
    """An enum value; ``color`` overrides the foreground of ``style``."""

    name: str
    description: str | None = None
    style: Union[Style, Reference, None] = None
    color: Union[Color, Reference, None] = None


class TextType(TableModel):
    kind: Literal["text"]
    rule: TextRule | None = None
    styles: list[TextConditionalStyle] = Field(default_factory=list)


class EnumType(TableModel):
    kind: Literal["enum"]
    items: list[Union[EnumItem, str]] = Field(min_length=1)


class LookupType(TableModel):
    """Values must come from another column."""

    kind: Literal["lookup"]
    column: ColumnSelector
    styles: list[TextConditionalStyle] = Field(default_factory=list)


class NumericType(TableModel):
    kind: Literal["numeric"]
    rule: NumericRule | None = None
    styles: list[NumericConditionalStyle] = Field(default_factory=list)
    format: Union[NumericFormat, Reference, None] = None


class TemporalType(TableModel):
    kind: Literal["temporal"]
    rule: TemporalRule | None = None
    styles: list[TemporalConditionalStyle] = Field(default_factory=list)
    format: Union[TemporalFormat, Reference, None] = None


ColumnType = Annotated[
    Union[TextType, EnumType, LookupType, NumericType, TemporalType],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


class Definitions(TableModel):
    """Named, reusable values; each entry may alias another with ``@name``."""

    colors: dict[str, Union[Color, Reference]] = Field(default_factory=dict)
    styles: dict[str, Union[HeaderStyle, Reference]] = Field(default_factory=dict)
    themes: dict[str, Union[Theme, Reference]] = Field(default_factory=dict)
    numerics: dict[str, Union[NumericFormat, Reference]] = Field(default_factory=dict)
    temporals: dict[str, Union[TemporalFormat, Reference]] = Field(default_factory=dict)
    types: dict[str, Union[ColumnType, Reference]] = Field(default_factory=dict)


class Unit(TableModel):
    name: str
    description: str | None = None
    theme: Union[Theme, Reference, None] = None
    definitions: Definitions | None = None


class Column(Unit):
    type: Union[ColumnType, Reference]
    source: str | None = None
    expression: Expression | None = None

    @field_validator("expression", mode="before")
    @classmethod
    def wrap_scalar_expression(cls, v: Any) -> Any:
        if isinstance(v, (str, int, float, bool)):
            return {"type": "literal", "of": v}
        return v


class Group(Unit):
    columns: list[Column] = Field(min_length=1)


class Page(Unit):
    rows: int = Field(ge=0)
    groups: list[Group] = Field(min_length=1)


class Book(Unit):
    pages: list[Page] = Field(default_factory=list)


for _model in (
    CompoundExpression,
    NegatedExpression,
    FunctionExpression,
    SelectorExpression,
    RawExpression,
    Theme,
    CustomRule,
    TextConditionalStyle,
    NumericConditionalStyle,
    TemporalConditionalStyle,
    TextType,
    LookupType,
    NumericType,
    TemporalType,
    Definitions,
    Unit,
    Column,
    Group,
    Page,
    Book,
):
    _model.model_rebuild()
