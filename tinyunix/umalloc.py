"""A first-fit free-list allocator over a growable heap address space."""

from dataclasses import dataclass

HEADER_SIZE = 16
_MIN_UNITS = 4096
_BASE = -HEADER_SIZE


@dataclass
class _Header:
    ptr: int
    size: int


class Heap:
    """A simulated data segment with ``sbrk`` and a circular free list.

    Addresses are byte offsets from the start of the heap; the heap may
    grow to at most ``limit`` bytes.
    """

    def __init__(self, limit):
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.limit = limit
        self._brk = 0
        self._headers = {}
        self._allocated = set()
        self._freep = None

    def sbrk(self, n):
        """Move the break by ``n`` bytes and return the previous break."""
        new = self._brk + n
        if new < 0 or new > self.limit:
            raise MemoryError("sbrk: out of heap space")
        old, self._brk = self._brk, new
        return old

    def _morecore(self, nu):
        nu = max(nu, _MIN_UNITS)
        try:
            p = self.sbrk(nu * HEADER_SIZE)
        except MemoryError:
            return None
        self._headers[p] = _Header(ptr=0, size=nu)
        self._allocated.add(p)
        self.free(p + HEADER_SIZE)
        return self._freep

    def malloc(self, nbytes):
        """Allocate ``nbytes`` and return the address of the block."""
        if nbytes < 0:
            raise ValueError("size must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._headers[_BASE] = _Header(ptr=_BASE, size=0)
            self._freep = _BASE
        prevp = self._freep
        p = self._headers[prevp].ptr
        while True:
            hp = self._headers[p]
            if hp.size >= nunits:
                if hp.size == nunits:
                    self._headers[prevp].ptr = hp.ptr
                else:
                    hp.size -= nunits
                    p += hp.size * HEADER_SIZE
                    self._headers[p] = _Header(ptr=0, size=nunits)
                self._freep = prevp
                self._allocated.add(p)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
                if p is None:
                    raise MemoryError("malloc: out of memory")
            prevp, p = p, self._headers[p].ptr

    def free(self, ap):
        """Return a block obtained from ``malloc`` to the free list."""
        bp = ap - HEADER_SIZE
        if bp not in self._allocated:
            raise ValueError(f"free of unallocated address {ap}")
        self._allocated.discard(bp)
        block = self._headers[bp]
        headers = self._headers
        p = self._freep
        while not (p < bp < headers[p].ptr):
            if p >= headers[p].ptr and (bp > p or bp < headers[p].ptr):
                break
            p = headers[p].ptr
        hp = headers[p]
        nxt = hp.ptr
        if bp + block.size * HEADER_SIZE == nxt:
            block.size += headers[nxt].size
            block.ptr = headers[nxt].ptr
            del headers[nxt]
        else:
            block.ptr = nxt
        if p + hp.size * HEADER_SIZE == bp:
            hp.size += block.size
            hp.ptr = block.ptr
            del headers[bp]
        else:
            hp.ptr = bp
        self._freep = p