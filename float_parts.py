import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from log_factory import LoggerFactory

logger = logging.getLogger(__name__)

# can also be read from np.finfo(np.float32), kept explicit here
BIAS = 127
RADIX = np.float32(2.0)

SIGN_SHIFT = 31
EXPONENT_SHIFT = 23
EXPONENT_MASK = 0xFF
FRACTION_BITS = 23
FRACTION_MASK = 0x7FFFFF
WORD_MASK = 0xFFFFFFFF


# Reinterpret a float32 as its unsigned 32-bit pattern
def float32_to_bits(value) -> int:
    if not isinstance(value, np.float32):
        with np.errstate(over='ignore'):
            value = np.float32(value)
    return int(value.view(np.uint32))


def bits_to_float32(bits: int) -> np.float32:
    if not 0 <= bits <= WORD_MASK:
        raise ValueError(f"bit pattern 0x{bits:x} does not fit in 32 bits")
    return np.uint32(bits).view(np.float32)


# Isolate the sign, biased exponent and fraction fields
def extract_fields(value) -> Tuple[int, int, int]:
    bits = float32_to_bits(value)

    sign = (bits >> SIGN_SHIFT) & 1
    exponent = (bits >> EXPONENT_SHIFT) & EXPONENT_MASK
    fraction = bits & FRACTION_MASK

    logger.debug("0x%08X -> sign=%d exponent=%d fraction=%d", bits, sign, exponent, fraction)
    return sign, exponent, fraction


def assemble_fields(sign: int, exponent: int, fraction: int) -> int:
    if sign & 1 != sign:
        raise ValueError(f"sign {sign} does not fit in 1 bit")
    if exponent & EXPONENT_MASK != exponent:
        raise ValueError(f"exponent {exponent} does not fit in 8 bits")
    if fraction & FRACTION_MASK != fraction:
        raise ValueError(f"fraction {fraction} does not fit in {FRACTION_BITS} bits")
    return (sign << SIGN_SHIFT) | (exponent << EXPONENT_SHIFT) | fraction


def decode_fields(sign: int, exponent: int, fraction: int) -> Tuple[np.float32, np.float32, np.float32]:
    """
    Decode raw fields into real numbers using

        (-1 ** sign) x mantissa x RADIX ** (exponent - BIAS)

    The mantissa is only the fractional sum of the stored bits; the
    implicit leading 1 of normalized values is not added.
    """
    sign_value = np.float32(-1.0) ** np.float32(sign)

    # exponent 255 overflows to inf, exponent 0 lands on a subnormal
    with np.errstate(over='ignore'):
        exponent_value = RADIX ** np.float32(exponent - BIAS)

    mantissa_value = np.float32(0.0)
    for i in range(FRACTION_BITS):
        if fraction & (1 << i):
            mantissa_value += RADIX ** np.float32(i - FRACTION_BITS)

    logger.debug("decoded sign=%r exponent=%r mantissa=%r", sign_value, exponent_value, mantissa_value)
    return sign_value, exponent_value, mantissa_value


def recompose(sign_value: np.float32, exponent_value: np.float32, mantissa_value: np.float32) -> np.float32:
    # inf * 0 gives nan for an all-ones exponent with an empty fraction
    with np.errstate(over='ignore', invalid='ignore'):
        return np.float32(sign_value) * np.float32(exponent_value) * np.float32(mantissa_value)


@dataclass(frozen=True)
class Float32Parts:
    value: np.float32
    sign: int
    exponent: int
    fraction: int
    sign_value: np.float32
    exponent_value: np.float32
    mantissa_value: np.float32
    approximation: np.float32

    # Run the whole extract -> decode -> recompose pipeline
    @staticmethod
    def from_value(value) -> "Float32Parts":
        if not isinstance(value, np.float32):
            with np.errstate(over='ignore'):
                value = np.float32(value)
        sign, exponent, fraction = extract_fields(value)
        decoded = decode_fields(sign, exponent, fraction)
        return Float32Parts(value, sign, exponent, fraction, *decoded, recompose(*decoded))

    @staticmethod
    def from_bits(bits: int) -> "Float32Parts":
        return Float32Parts.from_value(bits_to_float32(bits))

    @property
    def bits(self) -> int:
        return assemble_fields(self.sign, self.exponent, self.fraction)

    def __repr__(self):
        return (f"Float32Parts(bits=0x{self.bits:08x}, sign={self.sign}, exp={self.exponent}, "
                f"frac=0x{self.fraction:06x}, approx={self.approximation!s})")


def format_table(parts: Float32Parts) -> str:
    lines = [
        f"{parts.value!s} -> {parts.approximation!s}",
        "field    |  as bits                   | as real number",
        f"sign     |  {parts.sign:01b}                         | {parts.sign_value!s}",
        f"exponent |  {parts.exponent:08b}                  | {parts.exponent_value!s}",
        f"mantissa |  {parts.fraction:023b}   | {parts.mantissa_value!s}",
    ]
    return "\n".join(lines)


def parse_input(text: str, as_bits: bool = False) -> Float32Parts:
    if as_bits:
        return Float32Parts.from_bits(int(text, 0))
    return Float32Parts.from_value(float(text))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="float-parts",
        description="Show the sign, exponent and mantissa fields of 32-bit floats.")
    parser.add_argument("inputs", nargs="*", default=["42.42"],
                        help="values to decompose (default: 42.42)")
    parser.add_argument("--bits", action="store_true",
                        help="treat inputs as raw 32-bit patterns, e.g. 0x4229ae14")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="logging level (default: WARNING)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    LoggerFactory.LEVEL = getattr(logging, args.log_level)
    LoggerFactory.get_logger(__name__)

    first = True
    for text in args.inputs:
        try:
            parts = parse_input(text, args.bits)
        except ValueError as exc:
            logger.warning("rejected input %r: %s", text, exc)
            print(f"Error: failed to parse input {text!r}", file=sys.stderr)
            return 1

        if not first:
            print()
        first = False
        print(format_table(parts))
    return 0


if __name__ == "__main__":
    sys.exit(main())
