"""A small printf that understands %d, %l, %x, %p, %s, %c and %%."""

_DIGITS = "0123456789ABCDEF"
_UINT32 = (1 << 32) - 1
_UINT64 = (1 << 64) - 1


def _to_int32(value):
    value = int(value) & _UINT32
    return value - (1 << 32) if value & (1 << 31) else value


def _printint(xx, base, signed):
    if signed and xx < 0:
        negative, x = True, -xx
    else:
        negative, x = False, xx & _UINT32
    digits = []
    while True:
        digits.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _printptr(x):
    x = int(x) & _UINT64
    return "0x" + "".join(_DIGITS[(x >> (60 - 4 * i)) & 0xF] for i in range(16))


def _char(value):
    if isinstance(value, str):
        return value[:1]
    return chr(int(value) & 0xFF)


def _string(value):
    if value is None:
        return "(null)"
    return str(value).split("\0", 1)[0]


_CONVERSIONS = {
    "d": lambda v: _printint(_to_int32(v), 10, True),
    "l": lambda v: _printint(_to_int32(v), 10, False),
    "x": lambda v: _printint(_to_int32(v), 16, False),
    "p": _printptr,
    "s": _string,
    "c": _char,
}


def format(fmt, *args):
    """Render ``fmt`` with ``args``; unknown conversions are echoed back."""
    remaining = iter(args)
    out = []
    pending = False
    for c in fmt.split("\0", 1)[0]:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        pending = False
        conversion = _CONVERSIONS.get(c)
        if conversion is not None:
            try:
                value = next(remaining)
            except StopIteration:
                raise TypeError(f"not enough arguments for %{c}") from None
            out.append(conversion(value))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
    return "".join(out)


def fprintf(stream, fmt, *args):
    """Write ``format(fmt, *args)`` to a text stream."""
    stream.write(format(fmt, *args))