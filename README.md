# tinyunix

Pieces of a small teaching Unix, written in plain Python with no
dependencies:

- **Memory management** (`tinyunix.vm`) – a three-level Sv39 page table
  (`PageTable`) on top of a simulated pool of physical pages
  (`PhysicalMemory`): walking, mapping, unmapping, growing and shrinking a
  process, copying an address space, and copying bytes and strings in and
  out of user memory.
- **RISC-V and memory-layout helpers** (`tinyunix.riscv`) – page rounding,
  PTE encoding, page-table index extraction, `satp` values, and the
  addresses of kernel stacks and of CLINT and PLIC registers.
- **ELF headers** (`tinyunix.elf`) – `ElfHeader` and `ProgramHeader` with
  `pack`/`unpack`, and `read_program_headers`.
- **A user library** – a minimal `format`/`fprintf` (`tinyunix.fmt`),
  `atoi`, `strcmp`, `gets` and the `OpenMode` flags (`tinyunix.ulib`), and a
  first-fit free-list heap (`tinyunix.umalloc.Heap`).
- **A shell parser** (`tinyunix.sh`) that turns a command line into a tree
  of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` nodes.
- **Userland tools** – `grep` with `^ . * $`, `cat`, `echo`, `wc`, `ls`,
  `kill`, `ln`, `mkdir` and `rm`.
- **A Park–Miller generator** (`tinyunix.grind`) – `do_rand` and the
  `ParkMiller` iterator.
- **`mkfs`** (`tinyunix.mkfs`) – builds a file-system image holding a root
  directory and the files you give it.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command-line tools

Build a file-system image. The first argument is the image to write, the
rest are host files to put in its root directory. A leading `user/` is
removed from each name, and then a leading underscore, so `user/_cat`
becomes `cat`. The image uses 1024-byte blocks, 2000 blocks, 30 log blocks
and 200 inodes; the command prints the layout and how many blocks were
used:

```
tinyunix-mkfs fs.img README user/_cat user/_echo
```

The small tools work on the host's files and read standard input when no
file is named:

```
tinyunix-grep '^int.*(' main.c
tinyunix-cat notes.txt
tinyunix-echo hello world
tinyunix-wc notes.txt
tinyunix-ls .
```

- `tinyunix-grep` prints only newline-terminated lines that match; a last
  line without a newline is not printed.
- `tinyunix-wc` prints lines, words, characters and the file name.
- `tinyunix-ls` prints, for a file, its name padded to 14 characters, its
  type (1 directory, 2 file, 3 device), inode number and size; for a
  directory it does the same for `.`, `..` and each entry in sorted order.

There are also `tinyunix-kill pid...` (sends SIGKILL, ignoring ids below 1
and failures), `tinyunix-ln old new` (hard link), `tinyunix-mkdir dir...`
and `tinyunix-rm path...` (removes files or empty directories). `mkdir`
and `rm` stop at the first failure and report it on standard error.

## Library use

The pattern matcher supports `^`, `.`, `*` and `$`:

```python
from tinyunix.grep import match

match("^ab*c$", "abbbc")   # True
match("x.z", "wxyz")       # True
```

The formatter understands `%d`, `%l`, `%x`, `%p`, `%s`, `%c` and `%%`;
hexadecimal digits are upper case and unknown conversions are echoed:

```python
from tinyunix.fmt import format

format("%d %x", -5, 255)   # "-5 FF"
```

Parsing a shell command line:

```python
from tinyunix.sh import parse_cmd, PipeCmd

cmd = parse_cmd("cat README | grep kernel > out")
isinstance(cmd, PipeCmd)   # True
```

A syntax error raises `ShellSyntaxError`.

Page tables work on a `PhysicalMemory` pool; running out of pages raises
`OutOfMemory`, bad user addresses raise `BadAddress` and broken invariants
raise `KernelPanic`:

```python
from tinyunix.vm import PhysicalMemory, PageTable

memory = PhysicalMemory(0x80000000, 64)
table = PageTable.create(memory)
table.grow(0, 8192, 0)
table.copy_out(100, b"hello")
table.copy_in(100, 5)      # b"hello"
```

The heap allocator runs over its own `sbrk`-style break and raises
`MemoryError` when the limit is reached:

```python
from tinyunix.umalloc import Heap

heap = Heap(1 << 20)
p = heap.malloc(100)
heap.free(p)
```

Images can also be built from Python with `build_image(path, files)`, laid
out according to an `FsLayout`, or step by step with `ImageBuilder`
(`add_file`, `finish`, `image`).

## What it does not do

There is no kernel to run: no processes, scheduler, system calls, file
system driver or device drivers. The shell module only parses command
lines into trees; it does not run them. `tinyunix.grind` provides only the
random-number generator, not a stress test, and the image built by `mkfs`
can be inspected but not mounted by anything in this package.