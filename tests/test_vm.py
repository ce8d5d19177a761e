import pytest

from tinyunix.riscv import KERNBASE, MAXVA, PGSIZE, PTE_R, PTE_U, PTE_V, PTE_W, pa2pte
from tinyunix.vm import BadAddress, KernelPanic, OutOfMemory, PageTable, PhysicalMemory


@pytest.fixture
def memory():
    return PhysicalMemory(KERNBASE, 64)


@pytest.fixture
def table(memory):
    return PageTable.create(memory)


def test_alloc_and_free_track_pages(memory):
    before = memory.free_pages()
    pa = memory.alloc()
    assert pa % PGSIZE == 0
    assert memory.free_pages() == before - 1
    assert memory.read(pa, PGSIZE) == bytes(PGSIZE)
    memory.free(pa)
    assert memory.free_pages() == before


def test_free_misaligned_or_double_panics(memory):
    pa = memory.alloc()
    with pytest.raises(KernelPanic):
        memory.free(pa + 1)
    memory.free(pa)
    with pytest.raises(KernelPanic):
        memory.free(pa)


def test_alloc_exhaustion():
    mem = PhysicalMemory(KERNBASE, 2)
    mem.alloc()
    mem.alloc()
    with pytest.raises(OutOfMemory):
        mem.alloc()


def test_map_pages_writes_pte(memory, table):
    pa = memory.alloc()
    table.map_pages(PGSIZE, PGSIZE, pa, PTE_R | PTE_U)
    addr = table.walk(PGSIZE)
    pte = int.from_bytes(memory.read(addr, 8), "little")
    assert pte == pa2pte(pa) | PTE_R | PTE_U | PTE_V
    assert table.walkaddr(PGSIZE) == pa


def test_walkaddr_requires_user_bit(memory, table):
    pa = memory.alloc()
    table.map_pages(0, PGSIZE, pa, PTE_R | PTE_W)
    assert table.walkaddr(0) is None
    assert table.walkaddr(5 * PGSIZE) is None
    assert table.walkaddr(MAXVA) is None


def test_remap_and_zero_size_panic(memory, table):
    pa = memory.alloc()
    table.map_pages(0, PGSIZE, pa, PTE_R | PTE_U)
    with pytest.raises(KernelPanic, match="remap"):
        table.map_pages(0, PGSIZE, pa, PTE_R | PTE_U)
    with pytest.raises(KernelPanic, match="size"):
        table.map_pages(PGSIZE, 0, pa, PTE_R)


def test_walk_beyond_maxva_panics(table):
    with pytest.raises(KernelPanic, match="walk"):
        table.walk(MAXVA)


def test_copy_round_trip_across_pages(table):
    sz = table.grow(0, 3 * PGSIZE, PTE_W)
    assert sz == 3 * PGSIZE
    data = bytes(range(256)) * 20
    table.copy_out(PGSIZE - 100, data)
    assert table.copy_in(PGSIZE - 100, len(data)) == data


def test_copy_beyond_size_is_bad_address(table):
    table.grow(0, PGSIZE, PTE_W)
    with pytest.raises(BadAddress):
        table.copy_in(PGSIZE - 4, 8)
    with pytest.raises(BadAddress):
        table.copy_out(KERNBASE, b"x")
    with pytest.raises(BadAddress):
        table.copy_in((1 << 64) - 1, 8)


def test_copy_in_str(table):
    table.grow(0, 2 * PGSIZE, PTE_W)
    table.copy_out(PGSIZE - 3, b"hello\0world")
    assert table.copy_in_str(PGSIZE - 3, 100) == b"hello"
    with pytest.raises(BadAddress):
        table.copy_in_str(PGSIZE - 3, 4)


def test_copy_in_str_running_off_last_page(table):
    sz = table.grow(0, 2 * PGSIZE, PTE_W)
    table.copy_out(sz - 1, b"x")
    with pytest.raises(BadAddress):
        table.copy_in_str(sz - 1, 128)


def test_free_returns_every_page(memory):
    before = memory.free_pages()
    table = PageTable.create(memory)
    table.grow(0, 5 * PGSIZE + 7, PTE_W)
    assert memory.free_pages() < before
    table.free(5 * PGSIZE + 7)
    assert memory.free_pages() == before


def test_shrink_releases_pages(memory, table):
    table.grow(0, 4 * PGSIZE, PTE_W)
    mid = memory.free_pages()
    assert table.shrink(4 * PGSIZE, PGSIZE + 1) == PGSIZE + 1
    assert memory.free_pages() == mid + 2
    assert table.walkaddr(3 * PGSIZE) is None
    assert table.shrink(10, 20) == 10


def test_grow_smaller_is_noop(table):
    assert table.grow(2 * PGSIZE, PGSIZE) == 2 * PGSIZE


def test_grow_out_of_memory_cleans_up():
    mem = PhysicalMemory(KERNBASE, 6)
    table = PageTable.create(mem)
    with pytest.raises(OutOfMemory):
        table.grow(0, 10 * PGSIZE, PTE_W)
    assert table.walkaddr(0) is None
    table.free(0)
    assert mem.free_pages() == 6


def test_copy_to_duplicates_memory(memory, table):
    table.grow(0, 2 * PGSIZE, PTE_W)
    table.copy_out(10, b"parent data")
    child = PageTable.create(memory)
    table.copy_to(child, 2 * PGSIZE)
    assert child.copy_in(10, 11) == b"parent data"
    child.copy_out(10, b"CHILD")
    assert table.copy_in(10, 11) == b"parent data"
    assert child.walkaddr(0) != table.walkaddr(0)


def test_copy_to_out_of_memory_frees_child_pages():
    mem = PhysicalMemory(KERNBASE, 8)
    parent = PageTable.create(mem)
    parent.grow(0, 2 * PGSIZE, PTE_W)
    child = PageTable.create(mem)
    with pytest.raises(OutOfMemory):
        parent.copy_to(child, 2 * PGSIZE)
    child.free(0)
    parent.free(2 * PGSIZE)
    assert mem.free_pages() == 8


def test_load_first(table):
    table.load_first(b"initcode")
    assert table.copy_in(0, 8) == b"initcode"
    with pytest.raises(KernelPanic, match="more than a page"):
        PageTable.create(table.memory).load_first(bytes(PGSIZE))


def test_clear_user(table):
    table.grow(0, 2 * PGSIZE, PTE_W)
    table.clear_user(0)
    assert table.walkaddr(0) is None
    with pytest.raises(BadAddress):
        table.copy_in(0, 1)
    with pytest.raises(KernelPanic, match="uvmclear"):
        table.clear_user(1 << 35)


def test_unmap_errors(memory, table):
    with pytest.raises(KernelPanic, match="not aligned"):
        table.unmap(1, 1)
    with pytest.raises(KernelPanic, match="walk"):
        table.unmap(0, 1)
    table.grow(0, PGSIZE, PTE_W)
    with pytest.raises(KernelPanic, match="not mapped"):
        table.unmap(PGSIZE, 1)


def test_free_walk_with_leaf_panics(table):
    table.grow(0, PGSIZE, PTE_W)
    with pytest.raises(KernelPanic, match="leaf"):
        table.free_walk()