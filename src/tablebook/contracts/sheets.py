"""Output models: the resolved, backend-neutral book handed to a renderer.

Serialised with camelCase keys (``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tablebook.contracts.book import BorderType, ComparisonOperator, MatchOperator, RangeOperator


class SheetModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


class SheetBorder(SheetModel):
    type: BorderType
    color: str | None = None


class SheetStyle(SheetModel):
    fore: str | None = None
    back: str | None = None
    bold: bool | None = None
    italic: bool | None = None


class SheetHeaderStyle(SheetStyle):
    beneath: SheetBorder | None = None
    between: SheetBorder | None = None


class SheetTheme(SheetModel):
    """A fully resolved theme; every bucket is present, fields may be unset."""

    tab: str | None = None
    group: SheetHeaderStyle = Field(default_factory=SheetHeaderStyle)
    header: SheetHeaderStyle = Field(default_factory=SheetHeaderStyle)
    data: SheetStyle = Field(default_factory=SheetStyle)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


class SheetPosition(SheetModel):
    """Unit selectors (``$n`` absolute, ``+n``/``-n`` relative) for one cell."""

    col: str
    row: str


class SheetPartialPosition(SheetModel):
    """Range end; a missing component extends to the end of the sheet."""

    col: str | None = None
    row: str | None = None


class Address(SheetModel):
    """A resolved selector. ``page`` is set only for cross-page targets."""

    page: str | None = None
    from_: SheetPosition = Field(alias="from")
    to: SheetPartialPosition | None = None


# ---------------------------------------------------------------------------
# Rules and behavior
# ---------------------------------------------------------------------------

RuleTarget = Literal["number", "temporal"]


class SheetComparisonRule(SheetModel):
    type: ComparisonOperator
    target: RuleTarget
    value: Union[int, float, datetime]


class SheetRangeRule(SheetModel):
    type: RangeOperator
    target: RuleTarget
    low: Union[int, float, datetime]
    high: Union[int, float, datetime]


class SheetMatchRule(SheetModel):
    type: MatchOperator
    value: str


class SheetEnumRule(SheetModel):
    type: Literal["enum"] = "enum"
    values: list[str]


class SheetLookupRule(SheetModel):
    type: Literal["lookup"] = "lookup"
    range: Address
    reference: str


class SheetFormulaRule(SheetModel):
    """Custom rule rendered at the first data cell of its column."""

    type: Literal["formula"] = "formula"
    formula: str


SheetRule = Union[
    SheetComparisonRule,
    SheetRangeRule,
    SheetMatchRule,
    SheetEnumRule,
    SheetLookupRule,
    SheetFormulaRule,
]


class SheetConditionalFormat(SheetModel):
    rule: SheetRule
    style: SheetStyle


class SheetBehavior(SheetModel):
    kind: Literal["text", "number", "temporal"]
    format: str | None = None
    validation: SheetRule | None = None
    conditional_formats: list[SheetConditionalFormat] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Book
# ---------------------------------------------------------------------------


class SheetColumn(SheetModel):
    title: str
    title_style: SheetHeaderStyle | None = None
    data_style: SheetStyle | None = None
    behavior: SheetBehavior | None = None
    value_expression: str | None = None


class SheetGroup(SheetModel):
    title: str
    title_style: SheetHeaderStyle | None = None
    columns: list[SheetColumn] = Field(default_factory=list)


class SheetPage(SheetModel):
    title: str
    tab_color: str | None = None
    rows: int
    groups: list[SheetGroup] = Field(default_factory=list)


class SheetBook(SheetModel):
    title: str
    pages: list[SheetPage] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """camelCase dict with unset fields dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
