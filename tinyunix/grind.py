"""The Park-Miller "minimal standard" generator used by the stress tester."""

_UINT64 = (1 << 64) - 1
_MODULUS = 0x7FFFFFFF


def do_rand(ctx):
    """Advance the state ``ctx`` and return the new state.

    The result, which is also the generated value, lies in
    ``[0, 0x7ffffffd]``.
    """
    x = (ctx & _UINT64) % 0x7FFFFFFE + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += _MODULUS
    return x - 1


class ParkMiller:
    """A stream of pseudo-random numbers from a 64-bit seed."""

    def __init__(self, seed=1):
        self.state = seed & _UINT64

    def next(self):
        """Return the next number and advance the state."""
        self.state = do_rand(self.state)
        return self.state

    def __iter__(self):
        while True:
            yield self.next()