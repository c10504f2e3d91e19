"""Formatting state carried by every token."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Any

from mtextparser.errors import ColorRangeError, ConfigError
from mtextparser.strings import RGB, int2rgb, rgb2int


class LineAlignment(IntEnum):
    BOTTOM = 0
    MIDDLE = 1
    TOP = 2


class ParagraphAlignment(IntEnum):
    DEFAULT = 0
    LEFT = 1
    RIGHT = 2
    CENTER = 3
    JUSTIFIED = 4
    DISTRIBUTED = 5


class Stroke(IntFlag):
    NONE = 0
    UNDERLINE = 1
    OVERLINE = 2
    STRIKE_THROUGH = 4


class TabStopKind(Enum):
    LEFT = "l"
    RIGHT = "r"
    CENTER = "c"


@dataclass(frozen=True, slots=True)
class FontFace:
    """Font family plus style and numeric weight (400 normal, 700 bold)."""

    family: str = ""
    style: str = "Regular"
    weight: int = 400

    @property
    def is_bold(self) -> bool:
        return self.weight >= 700

    @property
    def is_italic(self) -> bool:
        return self.style == "Italic"


@dataclass(frozen=True, slots=True)
class ScaleFactor:
    """A non-negative scale value, absolute or relative to the previous value."""

    value: float = 1.0
    relative: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", abs(self.value))

    def resolve(self, previous: float) -> float:
        """Return the effective value given the value it is relative to."""
        return previous * self.value if self.relative else self.value


@dataclass(frozen=True, slots=True)
class TabStop:
    position: float
    kind: TabStopKind = TabStopKind.LEFT


@dataclass(frozen=True, slots=True)
class ParagraphProperties:
    """Indent and margins are factors of the entity's base character height."""

    indent: float = 0.0
    left: float = 0.0
    right: float = 0.0
    align: ParagraphAlignment = ParagraphAlignment.DEFAULT
    tab_stops: tuple[TabStop, ...] = ()


DEFAULT_ACI = 7

# Field names compared by FormattingContext.diff(), in report order
CONTEXT_FIELDS = (
    "underline",
    "overline",
    "strike_through",
    "continue_stroke",
    "aci",
    "rgb",
    "align",
    "font_face",
    "cap_height",
    "width_factor",
    "char_tracking_factor",
    "oblique",
    "paragraph",
)


class FormattingContext:
    """Snapshot of all formatting state at one point of an MText string.

    Mutable while the lexer builds it; once attached to a token it is never
    changed again; the lexer always works on a ``copy()``.

    ACI and RGB color are mutually exclusive: assigning ``aci`` clears
    ``rgb`` and assigning an RGB triple sets ``aci`` to None. Clearing
    ``rgb`` without a color index left falls back to the default ACI.
    """

    __slots__ = (
        "_stroke",
        "continue_stroke",
        "_aci",
        "_rgb",
        "align",
        "font_face",
        "cap_height",
        "width_factor",
        "char_tracking_factor",
        "oblique",
        "paragraph",
    )

    def __init__(self) -> None:
        self._stroke = Stroke.NONE
        self.continue_stroke = False
        self._aci: int | None = DEFAULT_ACI
        self._rgb: RGB | None = None
        self.align = LineAlignment.BOTTOM
        self.font_face = FontFace()
        self.cap_height = ScaleFactor()
        self.width_factor = ScaleFactor()
        self.char_tracking_factor = ScaleFactor()
        self.oblique = 0.0
        self.paragraph = ParagraphProperties()

    # ------------------------------------------------------------------
    # Color
    # ------------------------------------------------------------------

    @property
    def aci(self) -> int | None:
        """Color index, None while an RGB color is set."""
        return self._aci

    @aci.setter
    def aci(self, value: int) -> None:
        if not 0 <= value <= 256:
            raise ColorRangeError(value)
        self._aci = value
        self._rgb = None

    @property
    def rgb(self) -> RGB | None:
        return self._rgb

    @rgb.setter
    def rgb(self, value: RGB | None) -> None:
        if value is None:
            self._rgb = None
            if self._aci is None:
                self._aci = DEFAULT_ACI
        else:
            self._rgb = int2rgb(rgb2int(value) & 0xFFFFFF)
            self._aci = None

    # ------------------------------------------------------------------
    # Strokes
    # ------------------------------------------------------------------

    @property
    def stroke(self) -> Stroke:
        return self._stroke

    @property
    def underline(self) -> bool:
        return bool(self._stroke & Stroke.UNDERLINE)

    @underline.setter
    def underline(self, value: bool) -> None:
        self._set_stroke_state(Stroke.UNDERLINE, value)

    @property
    def overline(self) -> bool:
        return bool(self._stroke & Stroke.OVERLINE)

    @overline.setter
    def overline(self, value: bool) -> None:
        self._set_stroke_state(Stroke.OVERLINE, value)

    @property
    def strike_through(self) -> bool:
        return bool(self._stroke & Stroke.STRIKE_THROUGH)

    @strike_through.setter
    def strike_through(self, value: bool) -> None:
        self._set_stroke_state(Stroke.STRIKE_THROUGH, value)

    @property
    def has_any_stroke(self) -> bool:
        return bool(self._stroke)

    def _set_stroke_state(self, stroke: Stroke, state: bool = True) -> None:
        if state:
            self._stroke |= stroke
        else:
            self._stroke &= ~stroke

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def copy(self) -> FormattingContext:
        """Return an independent snapshot of this context."""
        ctx = FormattingContext.__new__(FormattingContext)
        for name in self.__slots__:
            setattr(ctx, name, getattr(self, name))
        return ctx

    def diff(self, other: FormattingContext) -> dict[str, Any]:
        """Return ``{field: new_value}`` for every field that differs in ``other``."""
        changes: dict[str, Any] = {}
        for name in CONTEXT_FIELDS:
            new = getattr(other, name)
            if getattr(self, name) != new:
                changes[name] = new
        return changes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormattingContext):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in CONTEXT_FIELDS)
        return f"FormattingContext({fields})"

    # ------------------------------------------------------------------
    # Construction from configuration
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FormattingContext:
        """Build a context from a plain mapping, e.g. a ``[context]`` TOML table.

        Recognised keys: ``aci``, ``rgb``, ``underline``, ``overline``,
        ``strike_through``, ``align``, ``font`` (table with ``family``,
        ``bold``, ``italic``), ``cap_height``, ``width_factor``,
        ``char_tracking_factor`` and ``oblique``.
        """
        ctx = cls()
        for key, value in data.items():
            try:
                _apply_setting(ctx, key, value)
            except (KeyError, TypeError, ValueError) as exc:
                raise ConfigError(f"invalid context setting {key!r}: {exc}") from exc
        return ctx


_SCALE_KEYS = ("cap_height", "width_factor", "char_tracking_factor")
_STROKE_KEYS = ("underline", "overline", "strike_through")


def _apply_setting(ctx: FormattingContext, key: str, value: Any) -> None:
    if key == "aci":
        ctx.aci = _expect(value, int)
    elif key == "rgb":
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise ValueError("expected three color components")
        ctx.rgb = (_expect(value[0], int), _expect(value[1], int), _expect(value[2], int))
    elif key in _STROKE_KEYS:
        setattr(ctx, key, _expect(value, bool))
        ctx.continue_stroke = ctx.has_any_stroke
    elif key == "align":
        if isinstance(value, str):
            ctx.align = LineAlignment[value.upper()]
        else:
            ctx.align = LineAlignment(_expect(value, int))
    elif key == "font":
        if not isinstance(value, Mapping):
            raise TypeError("expected a table")
        ctx.font_face = FontFace(
            family=str(value.get("family", "")),
            style="Italic" if value.get("italic") else "Regular",
            weight=700 if value.get("bold") else 400,
        )
    elif key in _SCALE_KEYS:
        setattr(ctx, key, ScaleFactor(float(_expect(value, (int, float)))))
    elif key == "oblique":
        ctx.oblique = float(_expect(value, (int, float)))
    else:
        raise ValueError("unknown key")


def _expect(value: Any, types: type | tuple[type, ...]) -> Any:
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and types is not bool:
        raise TypeError(f"expected {types}, got bool")
    if not isinstance(value, types):
        raise TypeError(f"expected {types}, got {type(value).__name__}")
    return value
