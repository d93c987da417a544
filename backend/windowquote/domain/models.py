# backend/windowquote/domain/models.py
from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .dimensions import parse_dimension

PricingMethod = Literal[
    "fixed",
    "per-linear-unit",
    "per-area-unit",
    "per-panel",
    "percentage",
    "grid",
]
GridType = Literal["width", "width_drop"]
GridOverflowPolicy = Literal["reject", "clamp"]
InventoryPricingMode = Literal["selling", "cost", "cost_with_markup"]
Family = Literal["fabric", "wallcovering", "blind"]
Orientation = Literal["vertical", "horizontal"]
WallcoveringPricing = Literal["per_roll", "per_area"]

PRICING_METHODS: tuple[str, ...] = (
    "fixed",
    "per-linear-unit",
    "per-area-unit",
    "per-panel",
    "percentage",
    "grid",
)

# Spellings accepted from older records -> canonical method
PRICING_METHOD_ALIASES: Dict[str, str] = {
    "per-unit": "fixed",
    "per-item": "fixed",
    "per-linear-meter": "per-linear-unit",
    "per-linear-metre": "per-linear-unit",
    "per-metre": "per-linear-unit",
    "per-meter": "per-linear-unit",
    "per-running-meter": "per-linear-unit",
    "per-sqm": "per-area-unit",
    "per-square-meter": "per-area-unit",
    "per-square-metre": "per-area-unit",
    "pricing-grid": "grid",
    "pricing_grid": "grid",
}


def normalize_pricing_method(value: Any) -> Any:
    if value is None:
        return "fixed"
    if isinstance(value, str):
        cleaned = value.strip().lower().replace("_", "-")
        if not cleaned:
            return "fixed"
        return PRICING_METHOD_ALIASES.get(cleaned, cleaned)
    return value


# ---------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------
class Settings(BaseModel):
    """
    Persisted engine settings.
    - OUTPUT_DIR: where grid exports land (validated in config)
    - GRID_OVERFLOW_POLICY: reject | clamp when a request exceeds every grid tier
    - INVENTORY_PRICING_MODE / DEFAULT_MARKUP_PERCENT: inventory-linked option prices
    - CURRENCY / DISPLAY_DECIMALS: display only, never used mid-calculation
    - PARTNER_PO_PREFIX: prepended to outbound purchase order numbers
    """
    OUTPUT_DIR: str = "outputs"
    GRID_OVERFLOW_POLICY: GridOverflowPolicy = "reject"
    INVENTORY_PRICING_MODE: InventoryPricingMode = "selling"
    DEFAULT_MARKUP_PERCENT: float = Field(0.0, ge=0.0)
    CURRENCY: str = "GBP"
    DISPLAY_DECIMALS: int = Field(2, ge=0, le=4)
    PARTNER_PO_PREFIX: str = ""

    @field_validator("GRID_OVERFLOW_POLICY", "INVENTORY_PRICING_MODE", mode="before")
    @classmethod
    def _normalize_choice(cls, value: Any, info) -> Any:
        defaults = {"GRID_OVERFLOW_POLICY": "reject", "INVENTORY_PRICING_MODE": "selling"}
        if value is None:
            return defaults[info.field_name]
        if isinstance(value, str):
            cleaned = value.strip().lower().replace("-", "_")
            return cleaned or defaults[info.field_name]
        return value

    @field_validator("CURRENCY", mode="before")
    @classmethod
    def _normalize_currency(cls, value: Any) -> Any:
        if value is None:
            return "GBP"
        if isinstance(value, str):
            cleaned = value.strip().upper()
            if not cleaned:
                return "GBP"
            if len(cleaned) != 3 or not cleaned.isalpha():
                raise ValueError("CURRENCY must be a 3-letter code.")
            return cleaned
        return value

    @model_validator(mode="after")
    def _trim_strings(self) -> "Settings":
        self.OUTPUT_DIR = self.OUTPUT_DIR.strip() or "outputs"
        self.PARTNER_PO_PREFIX = self.PARTNER_PO_PREFIX.strip()
        return self


# ---------------------------------------------------------------------
# Pricing grids
# ---------------------------------------------------------------------
class GridTier(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    threshold_width: float = Field(..., gt=0, alias="thresholdWidth")
    threshold_drop: Optional[float] = Field(None, gt=0, alias="thresholdDrop")
    price: float = Field(..., ge=0)


class PricingGrid(BaseModel):
    """Tier table; tiers are kept sorted ascending by (width, drop)."""
    model_config = ConfigDict(populate_by_name=True)

    grid_type: GridType = Field("width_drop", alias="gridType")
    tiers: List[GridTier] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_and_sort(self) -> "PricingGrid":
        if self.grid_type == "width_drop":
            missing = [t.threshold_width for t in self.tiers if t.threshold_drop is None]
            if missing:
                raise ValueError(
                    f"width_drop grids need a drop threshold on every tier (missing at width {missing[0]:g})."
                )
        self.tiers = sorted(self.tiers, key=lambda t: (t.threshold_width, t.threshold_drop or 0.0))
        return self

    @property
    def max_width(self) -> float:
        return max((t.threshold_width for t in self.tiers), default=0.0)

    @property
    def max_drop(self) -> Optional[float]:
        if self.grid_type == "width":
            return None
        return max((t.threshold_drop or 0.0 for t in self.tiers), default=0.0)


# ---------------------------------------------------------------------
# Templates / materials / measurements
# ---------------------------------------------------------------------
class TreatmentTemplate(BaseModel):
    """Read-only manufacturing constants owned by the business user (cm / %)."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    heading: Optional[str] = None
    fullness_ratio: float = Field(..., ge=1.0)
    header_allowance: float = Field(0.0, ge=0.0)
    bottom_hem: float = Field(0.0, ge=0.0)
    side_hems: float = Field(0.0, ge=0.0)
    seam_hems: float = Field(0.0, ge=0.0)
    return_left: float = Field(0.0, ge=0.0)
    return_right: float = Field(0.0, ge=0.0)
    waste_percent: float = Field(0.0, ge=0.0)
    panel_configuration: Literal["single", "pair"] = "pair"
    machine_price_per_metre: float = Field(0.0, ge=0.0)
    machine_price_per_panel: float = Field(0.0, ge=0.0)

    @property
    def panel_count(self) -> int:
        return 2 if self.panel_configuration == "pair" else 1

    @property
    def returns(self) -> float:
        return self.return_left + self.return_right


class Material(BaseModel):
    """Fabric, wallcovering or blind material as supplied by the catalogue.

    Roll dimensions are deliberately unconstrained here; the calculators
    raise ``ConfigurationError`` for unusable values.
    """
    name: str = ""
    roll_width: Optional[float] = None
    roll_length: Optional[float] = None
    price_per_linear_unit: Optional[float] = Field(None, ge=0.0)
    price_per_area_unit: Optional[float] = Field(None, ge=0.0)
    price_per_roll: Optional[float] = Field(None, ge=0.0)
    pricing_grid: Optional[PricingGrid] = None
    pattern_repeat: Optional[float] = Field(None, ge=0.0)
    wallcovering_pricing: WallcoveringPricing = "per_roll"


class Measurements(BaseModel):
    """Fabric/blind measurements in cm; invalid entries become ``None``."""
    model_config = ConfigDict(populate_by_name=True)

    width: Optional[float] = None
    drop: Optional[float] = None
    pooling: float = Field(0.0, alias="poolingAmount")

    @field_validator("width", "drop", mode="before")
    @classmethod
    def _parse_required(cls, value: Any) -> Optional[float]:
        return parse_dimension(value)

    @field_validator("pooling", mode="before")
    @classmethod
    def _parse_pooling(cls, value: Any) -> float:
        return parse_dimension(value, allow_zero=True) or 0.0


class WallMeasurements(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    wall_width: Optional[float] = Field(None, alias="wallWidth")
    wall_height: Optional[float] = Field(None, alias="wallHeight")

    @field_validator("wall_width", "wall_height", mode="before")
    @classmethod
    def _parse(cls, value: Any) -> Optional[float]:
        return parse_dimension(value)


# ---------------------------------------------------------------------
# Quantity results
# ---------------------------------------------------------------------
class Incomplete(BaseModel):
    """No result yet: a required dimension is blank, zero or invalid."""
    status: Literal["incomplete"] = "incomplete"
    missing: List[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        return False


class FabricQuantity(BaseModel):
    status: Literal["complete"] = "complete"
    orientation: Orientation = "vertical"
    fabric_width_required_cm: float
    widths_required: int = Field(..., ge=1)
    panel_count: int = Field(..., ge=1)
    total_drop_cm: float
    seams: int = Field(..., ge=0)
    hem_correction_cm: float
    linear_meters: float = Field(..., ge=0.0)
    linear_meters_with_waste: float = Field(..., ge=0.0)
    waste_percent_applied: float
    unit_price: float
    pricing_source: Literal["per_linear_unit", "grid"]
    material_cost: float

    @property
    def complete(self) -> bool:
        return True


class WallcoveringQuantity(BaseModel):
    status: Literal["complete"] = "complete"
    pricing_mode: WallcoveringPricing
    strips_needed: int = Field(..., ge=1)
    strip_length_cm: float
    total_length_cm: float
    rolls_needed: Optional[int] = None
    square_meters: float = Field(..., ge=0.0)
    unit: Literal["rolls", "m²"]
    quantity: float
    unit_price: float
    material_cost: float

    @property
    def complete(self) -> bool:
        return True


class BlindQuantity(BaseModel):
    status: Literal["complete"] = "complete"
    effective_width_cm: float
    effective_drop_cm: float
    square_meters: float = Field(..., ge=0.0)
    waste_percent_applied: float
    pricing_source: Literal["per_area_unit", "grid"]
    unit_price: float
    material_cost: float

    @property
    def complete(self) -> bool:
        return True


# ---------------------------------------------------------------------
# Hierarchical options
# ---------------------------------------------------------------------
class OptionNode(BaseModel):
    """One option at any depth (category, subcategory, sub-subcategory, extra ...)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str = ""
    key: Optional[str] = None
    pricing_method: PricingMethod = Field("fixed", alias="pricingMethod")
    base_price: float = Field(0.0, alias="basePrice")
    grid: Optional[PricingGrid] = None
    children: List["OptionNode"] = Field(default_factory=list)
    inventory_ref: Optional[str] = Field(None, alias="inventoryRef")
    applies_to_headings: Optional[FrozenSet[str]] = Field(None, alias="appliesToHeadings")

    @field_validator("pricing_method", mode="before")
    @classmethod
    def _normalize_method(cls, value: Any) -> Any:
        return normalize_pricing_method(value)

    @field_validator("applies_to_headings", mode="before")
    @classmethod
    def _normalize_headings(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        headings = frozenset(str(v).strip().lower() for v in value if str(v).strip())
        # an empty list means "no restriction"
        return headings or None

    @model_validator(mode="after")
    def _check_price_source(self) -> "OptionNode":
        if self.pricing_method == "grid" and self.grid is None:
            raise ValueError(f"Option '{self.id}' uses grid pricing but has no grid table.")
        if self.pricing_method == "percentage" and self.inventory_ref:
            raise ValueError(
                f"Option '{self.id}' is a percentage and cannot be linked to inventory item '{self.inventory_ref}'."
            )
        return self


OptionNode.model_rebuild()


class OptionContext(BaseModel):
    width: float = Field(..., gt=0)
    drop: Optional[float] = Field(None, gt=0)
    panel_count: int = Field(1, ge=0)
    inventory_pricing_mode: InventoryPricingMode = "selling"
    markup_percent: Optional[float] = None
    heading: Optional[str] = None
    base_amount: float = 0.0
    grid_overflow: GridOverflowPolicy = "reject"


class OptionLine(BaseModel):
    id: str
    label: str
    key: str
    pricing_method: PricingMethod
    unit_price: float
    quantity: float
    unit: str
    amount: float


class ExcludedOption(BaseModel):
    id: str
    reason: Literal["heading", "duplicate"]


class OptionsCost(BaseModel):
    lines: List[OptionLine] = Field(default_factory=list)
    excluded: List[ExcludedOption] = Field(default_factory=list)
    non_percentage_subtotal: float = 0.0
    percentage_total: float = 0.0
    total: float = 0.0


# ---------------------------------------------------------------------
# Configuration request / price breakdown
# ---------------------------------------------------------------------
class ConfigurationRequest(BaseModel):
    """Everything needed to price one configured item."""
    family: Family = "fabric"
    template: Optional[TreatmentTemplate] = None
    material: Material
    measurements: Dict[str, Any] = Field(default_factory=dict)
    orientation: Orientation = "vertical"
    options: List[OptionNode] = Field(default_factory=list)
    selected_option_ids: List[str] = Field(default_factory=list)
    inventory_pricing_mode: Optional[InventoryPricingMode] = None
    markup_percent: Optional[float] = Field(None, ge=0.0)

    @model_validator(mode="after")
    def _template_for_fabric(self) -> "ConfigurationRequest":
        if self.family == "fabric" and self.template is None:
            raise ValueError("Fabric treatments require a template.")
        return self

    @property
    def selection(self) -> FrozenSet[str]:
        return frozenset(self.selected_option_ids)


QuantityResult = Union[FabricQuantity, WallcoveringQuantity, BlindQuantity]


class PriceBreakdown(BaseModel):
    status: Literal["complete"] = "complete"
    family: Family
    quantity: QuantityResult
    options: OptionsCost
    material_cost: float
    options_cost: float
    labor_cost: Optional[float] = None
    total_cost: float
    currency: str = "GBP"

    @property
    def complete(self) -> bool:
        return True

    def display(self, decimals: int = 2) -> Dict[str, Any]:
        """Money rounded for presentation; the model itself keeps full precision."""
        def r(v: Optional[float]) -> Optional[float]:
            return None if v is None else round(v, decimals)

        return {
            "currency": self.currency,
            "material_cost": r(self.material_cost),
            "options_cost": r(self.options_cost),
            "labor_cost": r(self.labor_cost),
            "total_cost": r(self.total_cost),
        }


# ---------------------------------------------------------------------
# Outbound (partner) order models
# ---------------------------------------------------------------------
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OptionSelection(_CamelModel):
    """A single selected option as it arrives from the UI layer."""
    option_key: str
    label: str = ""
    value: str = ""

    @field_validator("option_key", "label", "value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()


class CustomField(BaseModel):
    name: str
    value: str


class DraftLineItem(_CamelModel):
    item_number: str
    item_name: str = ""
    location: str = ""
    quantity: int = Field(1, ge=1)
    width: Optional[float] = None
    drop: Optional[float] = None
    material: str = ""
    colour: str = ""
    selected_options: List[OptionSelection] = Field(default_factory=list)
    breakdown_fields: List[OptionSelection] = Field(default_factory=list)

    @field_validator("width", "drop", mode="before")
    @classmethod
    def _parse_dims(cls, value: Any) -> Optional[float]:
        return parse_dimension(value)


class OrderDraft(_CamelModel):
    purchase_order_number: str
    customer_reference: str = ""
    items: List[DraftLineItem] = Field(default_factory=list)


class OrderLineItem(_CamelModel):
    item_number: str
    item_name: str
    location: str
    quantity: int
    width: int
    drop: int
    material: str
    colour: str
    custom_field_values: List[CustomField] = Field(default_factory=list)


class SubmissionGroup(_CamelModel):
    item_number: str
    purchase_order_number: str
    customer_reference: str = ""
    items: List[OrderLineItem] = Field(default_factory=list)

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class GroupResult(BaseModel):
    item_number: str
    purchase_order_number: str
    ok: bool
    order_id: Optional[str] = None
    error: Optional[str] = None


class SubmissionReport(BaseModel):
    results: List[GroupResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[GroupResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[GroupResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return bool(self.results) and not self.failed

    @property
    def partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)
