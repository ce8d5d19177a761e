"""Sv39 page tables built on top of a simulated pool of physical pages."""

from .riscv import (
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    KERNBASE,
    pa2pte,
    pg_round_down,
    pg_round_up,
    pte2pa,
    pte_flags,
    px,
)

_PTES_PER_TABLE = PGSIZE // 8


class KernelPanic(RuntimeError):
    """An invariant of the memory system was violated."""


class OutOfMemory(MemoryError):
    """No physical page was available."""


class BadAddress(ValueError):
    """An address is not mapped, not user-accessible or out of range."""


class PhysicalMemory:
    """A contiguous range of physical pages with a page allocator."""

    def __init__(self, base=KERNBASE, npages=256):
        if base % PGSIZE != 0:
            raise ValueError("physical base must be page aligned")
        if npages <= 0:
            raise ValueError("need at least one page")
        self.base = base
        self.end = base + npages * PGSIZE
        self._data = bytearray(npages * PGSIZE)
        self._free = [base + i * PGSIZE for i in reversed(range(npages))]
        self._free_set = set(self._free)

    def alloc(self):
        """Hand out a zeroed page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        start = pa - self.base
        self._data[start:start + PGSIZE] = bytes(PGSIZE)
        return pa

    def free(self, pa):
        """Return a page to the pool, filling it with junk."""
        if pa % PGSIZE != 0 or not self.base <= pa < self.end or pa in self._free_set:
            raise KernelPanic("kfree")
        start = pa - self.base
        self._data[start:start + PGSIZE] = b"\x01" * PGSIZE
        self._free.append(pa)
        self._free_set.add(pa)

    def _check(self, pa, n):
        if n < 0 or pa < self.base or pa + n > self.end:
            raise BadAddress(f"physical address {pa:#x} out of range")
        return pa - self.base

    def read(self, pa, n):
        """Read ``n`` bytes starting at physical address ``pa``."""
        start = self._check(pa, n)
        return bytes(self._data[start:start + n])

    def write(self, pa, data):
        """Write ``data`` starting at physical address ``pa``."""
        start = self._check(pa, len(data))
        self._data[start:start + len(data)] = data

    def free_pages(self):
        """Number of pages currently available."""
        return len(self._free)


def _load(memory, addr):
    return int.from_bytes(memory.read(addr, 8), "little")


def _store(memory, addr, value):
    memory.write(addr, value.to_bytes(8, "little"))


class PageTable:
    """A three-level Sv39 page table whose root page lives in ``memory``."""

    def __init__(self, memory, root):
        self.memory = memory
        self.root = root

    @classmethod
    def create(cls, memory):
        """Allocate an empty page table."""
        return cls(memory, memory.alloc())

    def _pte(self, addr):
        return _load(self.memory, addr)

    def _set_pte(self, addr, value):
        _store(self.memory, addr, value)

    def walk(self, va, alloc=False):
        """Return the physical address of the leaf PTE for ``va``.

        Missing intermediate tables are created when ``alloc`` is true;
        otherwise, or when no page is free, None is returned.
        """
        if not 0 <= va < MAXVA:
            raise KernelPanic("walk")
        table = self.root
        for level in (2, 1):
            addr = table + 8 * px(level, va)
            pte = self._pte(addr)
            if pte & PTE_V:
                table = pte2pa(pte)
                continue
            if not alloc:
                return None
            try:
                table = self.memory.alloc()
            except OutOfMemory:
                return None
            self._set_pte(addr, pa2pte(table) | PTE_V)
        return table + 8 * px(0, va)

    def walkaddr(self, va):
        """Physical address of a user page, or None if it is not mapped."""
        if not 0 <= va < MAXVA:
            return None
        addr = self.walk(va)
        if addr is None:
            return None
        pte = self._pte(addr)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def map_pages(self, va, size, pa, perm):
        """Map ``[va, va+size)`` to physical memory starting at ``pa``."""
        if size == 0:
            raise KernelPanic("mappages: size")
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            addr = self.walk(a, alloc=True)
            if addr is None:
                raise OutOfMemory("mappages: no page-table page")
            if self._pte(addr) & PTE_V:
                raise KernelPanic("mappages: remap")
            self._set_pte(addr, pa2pte(pa) | perm | PTE_V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va, npages, do_free=False):
        """Remove ``npages`` existing mappings from ``va``, optionally freeing them."""
        if va % PGSIZE != 0:
            raise KernelPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            addr = self.walk(a)
            if addr is None:
                raise KernelPanic("uvmunmap: walk")
            pte = self._pte(addr)
            if not pte & PTE_V:
                raise KernelPanic("uvmunmap: not mapped")
            if pte_flags(pte) == PTE_V:
                raise KernelPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.free(pte2pa(pte))
            self._set_pte(addr, 0)

    def load_first(self, src):
        """Place ``src`` (shorter than a page) at user address 0."""
        if len(src) >= PGSIZE:
            raise KernelPanic("uvmfirst: more than a page")
        mem = self.memory.alloc()
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(mem, bytes(src))

    def grow(self, oldsz, newsz, xperm=0):
        """Grow user memory from ``oldsz`` to ``newsz``; return the new size."""
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.alloc()
            except OutOfMemory:
                self.shrink(a, oldsz)
                raise
            try:
                self.map_pages(a, PGSIZE, mem, PTE_R | PTE_U | xperm)
            except OutOfMemory:
                self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Release user pages to bring the size down to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def free_walk(self):
        """Free all page-table pages; leaf mappings must already be gone."""
        for i in range(_PTES_PER_TABLE):
            addr = self.root + 8 * i
            pte = self._pte(addr)
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                PageTable(self.memory, pte2pa(pte)).free_walk()
                self._set_pte(addr, 0)
            elif pte & PTE_V:
                raise KernelPanic("freewalk: leaf")
        self.memory.free(self.root)

    def free(self, sz):
        """Free ``sz`` bytes of user memory and then the table itself."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self.free_walk()

    def copy_to(self, other, sz):
        """Copy the first ``sz`` bytes of mappings and memory into ``other``."""
        for i in range(0, sz, PGSIZE):
            addr = self.walk(i)
            if addr is None:
                raise KernelPanic("uvmcopy: pte should exist")
            pte = self._pte(addr)
            if not pte & PTE_V:
                raise KernelPanic("uvmcopy: page not present")
            pa = pte2pa(pte)
            try:
                mem = self.memory.alloc()
            except OutOfMemory:
                other.unmap(0, i // PGSIZE, True)
                raise
            self.memory.write(mem, self.memory.read(pa, PGSIZE))
            try:
                other.map_pages(i, PGSIZE, mem, pte_flags(pte))
            except OutOfMemory:
                self.memory.free(mem)
                other.unmap(0, i // PGSIZE, True)
                raise

    def clear_user(self, va):
        """Make the page at ``va`` inaccessible to user mode."""
        addr = self.walk(va)
        if addr is None:
            raise KernelPanic("uvmclear")
        self._set_pte(addr, self._pte(addr) & ~PTE_U)

    def _user_pa(self, va0):
        pa0 = self.walkaddr(va0)
        if pa0 is None:
            raise BadAddress(f"user address {va0:#x} not mapped")
        return pa0

    def copy_out(self, dstva, data):
        """Copy ``data`` into user memory at ``dstva``."""
        data = memoryview(bytes(data))
        while data:
            va0 = pg_round_down(dstva)
            pa0 = self._user_pa(va0)
            n = min(PGSIZE - (dstva - va0), len(data))
            self.memory.write(pa0 + (dstva - va0), data[:n])
            data = data[n:]
            dstva = va0 + PGSIZE

    def copy_in(self, srcva, n):
        """Read ``n`` bytes of user memory starting at ``srcva``."""
        out = bytearray()
        while n > 0:
            va0 = pg_round_down(srcva)
            pa0 = self._user_pa(va0)
            chunk = min(PGSIZE - (srcva - va0), n)
            out += self.memory.read(pa0 + (srcva - va0), chunk)
            n -= chunk
            srcva = va0 + PGSIZE
        return bytes(out)

    def copy_in_str(self, srcva, max):
        """Read a NUL-terminated user string of at most ``max`` bytes.

        The terminator is not included in the result.
        """
        out = bytearray()
        while max > 0:
            va0 = pg_round_down(srcva)
            pa0 = self._user_pa(va0)
            n = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            nul = chunk.find(0)
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            max -= n
            srcva = va0 + PGSIZE
        raise BadAddress("string not terminated within limit")