"""Price normalizer for ``price:``/``cost:`` metadata values.

Recognizes a single money amount in free text and reports it in a
canonical form.  Nothing is converted or summed here.

Recognition order:

1. ``CODE AMOUNT``   -- ``EUR 25``, ``EUR25``
2. ``AMOUNT CODE``   -- ``25 EUR``, ``24EUR``
3. ``SYMBOL AMOUNT`` -- ``$10.50``, ``A$ 120``, ``€5``
4. fallback: a currency code or symbol anywhere plus a number anywhere,
   then a bare number (default currency), then a lone currency.

Brace arithmetic (``{25*4} EUR``) is evaluated before matching.  Currency
codes are checked against the CLDR data shipped with :mod:`babel`, which
also supplies each currency's minor-unit scale.
"""

from __future__ import annotations

import ast
import logging
import operator
import re
from collections.abc import Callable
from decimal import Decimal, DivisionByZero, InvalidOperation

from babel.numbers import get_currency_precision, is_currency

from itmd.models.price import MoneyFragment, NumberToken, PriceFlags, PriceResult

logger = logging.getLogger(__name__)

SYMBOL_TO_CODE: dict[str, str] = {
    "US$": "USD",
    "NZ$": "NZD",
    "A$": "AUD",
    "C$": "CAD",
    "HK$": "HKD",
    "S$": "SGD",
    "€": "EUR",
    "¥": "JPY",
    "£": "GBP",
    "₩": "KRW",
    "₫": "VND",
    "฿": "THB",
    "₱": "PHP",
    "₽": "RUB",
    "₺": "TRY",
    "$": "USD",
}

DEFAULT_SCALE = 2
MAX_EXPRESSION_LENGTH = 200

# Multi-character symbols first so "HK$" never matches as "$"; a symbol
# glued to a preceding letter ("XS$") is not a symbol.
_SYMBOL_ALT = "|".join(re.escape(sym) for sym in SYMBOL_TO_CODE)
_NUM = r"[+-]?(?:\d{1,3}(?:[.,]\d{3})+|\d+)(?:[.,]\d+)?"

_NUM_RE = re.compile(_NUM)
_CODE_FIRST_RE = re.compile(rf"^(?P<code>[A-Za-z]{{3}})\s*(?P<num>{_NUM})(?=\s|$)")
_NUM_FIRST_RE = re.compile(rf"^(?P<num>{_NUM})\s*(?P<code>[A-Za-z]{{3}})(?=\s|$)")
_SYMBOL_FIRST_RE = re.compile(rf"^(?P<sym>{_SYMBOL_ALT})\s*(?P<num>{_NUM})(?=\s|$)")
_CODE_WORD_RE = re.compile(r"(?<![A-Za-z])([A-Za-z]{3})(?![A-Za-z])")
_SYMBOL_RE = re.compile(rf"(?<![A-Za-z])(?:{_SYMBOL_ALT})")
_BRACE_RE = re.compile(r"\{([^{}]+)\}")

# ---------------------------------------------------------------------------
# Brace arithmetic
# ---------------------------------------------------------------------------

_BINARY_OPS: dict[type[ast.operator], Callable[[Decimal, Decimal], Decimal]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS: dict[type[ast.unaryop], Callable[[Decimal], Decimal]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _eval_node(node: ast.AST) -> Decimal:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return Decimal(str(node.value))
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def evaluate_arithmetic(expression: str) -> Decimal:
    """Evaluate ``+ - * /`` arithmetic over decimal literals.

    Only numbers, the four operators, unary signs and parentheses are
    accepted; names, calls and every other construct are rejected.

    Raises:
        ValueError: If the expression is malformed, uses anything else,
            divides by zero or is longer than
            ``MAX_EXPRESSION_LENGTH`` characters.
    """
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ValueError(f"Expression too long ({len(expression)} characters)")
    try:
        tree = ast.parse(expression.strip(), mode="eval")
        return _eval_node(tree)
    except (
        SyntaxError,
        DivisionByZero,
        InvalidOperation,
        ZeroDivisionError,
        RecursionError,
        MemoryError,
    ) as exc:
        raise ValueError(f"Cannot evaluate {expression!r}") from exc


def _format_decimal(value: Decimal) -> str:
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "0") else text


def _expand_braces(line: str, warnings: list[str]) -> tuple[str, bool]:
    """Replace each ``{expr}`` with its value; keep braces that fail."""
    has_math = False

    def _replace(match: re.Match[str]) -> str:
        nonlocal has_math
        has_math = True
        try:
            return _format_decimal(evaluate_arithmetic(match.group(1)))
        except ValueError:
            logger.debug("Price arithmetic failed for %r", match.group(0))
            if "math-eval-failed" not in warnings:
                warnings.append("math-eval-failed")
            return match.group(0)

    return _BRACE_RE.sub(_replace, line), has_math


# ---------------------------------------------------------------------------
# Amounts and currencies
# ---------------------------------------------------------------------------


def infer_scale(currency: str | None) -> int:
    """Minor-unit digits for *currency* per CLDR (``2`` when unknown)."""
    if not currency:
        return DEFAULT_SCALE
    code = currency.upper()
    if not is_currency(code):
        return DEFAULT_SCALE
    return get_currency_precision(code)


def normalize_amount(raw: str, scale: int = DEFAULT_SCALE) -> str:
    """Canonicalize a written amount.

    The rightmost ``.`` or ``,`` is the decimal separator and every other
    separator is a thousands delimiter, so ``"1.234,56"`` and
    ``"1,234.56"`` both give ``"1234.56"``.  A mark repeated with no
    other mark (``"1,234,567"``) only groups thousands.  A single
    separator followed by exactly three digits is a thousands delimiter
    (``"1,500"`` is ``"1500"``) unless the currency has three minor
    digits or the integer part is zero.  Trailing fractional zeros are
    dropped.

    Returns:
        The canonical decimal string, or ``""`` when *raw* holds no
        digits.
    """
    text = raw.strip()
    sign = ""
    if text[:1] in ("+", "-"):
        sign, text = text[0], text[1:]
    if not any(ch.isdigit() for ch in text):
        return ""

    separators = [idx for idx, ch in enumerate(text) if ch in ".,"]
    if not separators:
        integer, fraction = text, ""
    else:
        cut = separators[-1]
        integer = re.sub(r"[.,]", "", text[:cut])
        fraction = re.sub(r"[.,]", "", text[cut + 1 :])
        marks = {text[idx] for idx in separators}
        repeated_thousands = len(separators) > 1 and len(marks) == 1
        lone_thousands = (
            len(separators) == 1
            and len(fraction) == 3
            and scale < 3
            and integer.strip("0") != ""
        )
        if repeated_thousands or lone_thousands:
            integer, fraction = integer + fraction, ""

    integer = integer.lstrip("0") or "0"
    fraction = fraction.rstrip("0")
    value = f"{integer}.{fraction}" if fraction else integer
    if sign == "-" and value.strip("0.") != "":
        return f"-{value}"
    return value


def _is_code(candidate: str | None) -> bool:
    return bool(candidate) and is_currency(candidate.upper())


def _codes_in(line: str) -> list[str]:
    """Currency codes and symbol currencies mentioned anywhere, in order."""
    found: list[str] = []
    for match in _CODE_WORD_RE.finditer(line):
        code = match.group(1).upper()
        if is_currency(code) and code not in found:
            found.append(code)
    for match in _SYMBOL_RE.finditer(line):
        code = SYMBOL_TO_CODE[match.group(0)]
        if code not in found:
            found.append(code)
    return found


def _detect_currency(line: str) -> tuple[str | None, str | None]:
    """Find a currency anywhere: a leading code, any code, then a symbol."""
    for match in _CODE_WORD_RE.finditer(line):
        if _is_code(match.group(1)):
            return match.group(1).upper(), None
    symbol = _SYMBOL_RE.search(line)
    if symbol:
        return SYMBOL_TO_CODE[symbol.group(0)], symbol.group(0)
    return None, None


def _match_single_term(line: str) -> tuple[str | None, str | None, str] | None:
    """Try the three anchored patterns; return ``(code, symbol, number)``."""
    for pattern in (_CODE_FIRST_RE, _NUM_FIRST_RE):
        match = pattern.match(line)
        if match and _is_code(match.group("code")):
            return match.group("code").upper(), None, match.group("num")
    match = _SYMBOL_FIRST_RE.match(line)
    if match:
        return None, match.group("sym"), match.group("num")
    return None


def _money(
    line: str,
    currency: str,
    raw_number: str,
    source: str | None,
    symbol: str | None = None,
    warnings: list[str] | None = None,
) -> MoneyFragment:
    scale = infer_scale(currency) if currency else DEFAULT_SCALE
    return MoneyFragment(
        raw=line,
        currency=currency.upper(),
        amount=normalize_amount(raw_number, scale),
        scale=scale,
        source=source,
        symbol=symbol,
        warnings=list(warnings or []),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def normalize_price_line(raw_line: str, default_currency: str | None = None) -> PriceResult:
    """Recognize one money amount in a metadata value.

    Args:
        raw_line: The flattened metadata value.
        default_currency: Currency assumed for a bare number.

    Returns:
        A :class:`PriceResult` with at most one token.  Problems are
        reported as warnings (``empty``, ``unrecognized``, ``no-amount``,
        ``currency-not-detected``, ``amount-not-detected``,
        ``math-eval-failed``), never raised.
    """
    line = (raw_line or "").strip()
    if not line:
        return PriceResult(
            raw_line=raw_line,
            flags=PriceFlags(has_number_only_term=True),
            warnings=["empty"],
        )

    warnings: list[str] = []
    evaluated, has_math = _expand_braces(line, warnings)
    cross_currency = len(_codes_in(evaluated)) > 1
    default = (default_currency or "").strip().upper() or None

    term = _match_single_term(evaluated)
    if term is not None:
        code, symbol, raw_number = term
        currency = code or (SYMBOL_TO_CODE[symbol] if symbol else None) or default
        if code:
            source = "inline"
        elif symbol:
            source = "symbolInferred"
        else:
            source = "defaultCurrency" if default else None
        if not currency:
            warnings.append("currency-not-detected")
        money = _money(line, currency or "", raw_number, source, symbol, warnings)
        if not money.amount:
            warnings.append("amount-not-detected")
            money = money.model_copy(update={"warnings": list(warnings)})
        return PriceResult(
            raw_line=raw_line,
            tokens=[money],
            flags=PriceFlags(has_math=has_math, cross_currency=cross_currency),
            currencies=[money.currency] if money.currency else [],
            money_count=1,
            warnings=warnings,
        )

    # Fallback: currency anywhere, number anywhere.  Braces still present
    # failed to evaluate; their operands are not amounts.
    searchable = _BRACE_RE.sub(" ", evaluated)
    currency, symbol = _detect_currency(searchable)
    number = _NUM_RE.search(searchable)

    if number is None:
        warnings.append("no-amount" if currency else "unrecognized")
        return PriceResult(
            raw_line=raw_line,
            flags=PriceFlags(has_math=has_math, cross_currency=cross_currency, has_number_only_term=True),
            currencies=[currency] if currency else [],
            warnings=warnings,
        )

    if currency:
        source = "symbolInferred" if symbol else "inline"
        money = _money(line, currency, number.group(0), source, symbol, warnings)
        return PriceResult(
            raw_line=raw_line,
            tokens=[money],
            flags=PriceFlags(has_math=has_math, cross_currency=cross_currency),
            currencies=[money.currency],
            money_count=1,
            warnings=warnings,
        )

    if default:
        warnings.append("currency-not-detected")
        money = _money(line, default, number.group(0), "defaultCurrency", warnings=warnings)
        return PriceResult(
            raw_line=raw_line,
            tokens=[money],
            flags=PriceFlags(has_math=has_math),
            currencies=[money.currency],
            money_count=1,
            warnings=warnings,
        )

    bare = NumberToken(raw=number.group(0), normalized=normalize_amount(number.group(0)))
    return PriceResult(
        raw_line=raw_line,
        tokens=[bare],
        flags=PriceFlags(has_math=has_math, has_number_only_term=True),
        warnings=warnings,
    )
