"""Build a file system image holding a root directory and a set of files.

Disk layout:
[ boot block | superblock | log | inode blocks | free bitmap | data blocks ]
"""

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import ClassVar, List

from .fmt import fprintf

FSMAGIC = 0x10203040
ROOTINO = 1
T_DIR = 1
T_FILE = 2
T_DEVICE = 3
NINODES = 200

_INODE_HEAD = struct.Struct("<hhhhI")


@dataclass(frozen=True)
class FsLayout:
    """Sizes that fix where everything lives on the disk."""

    bsize: int = 1024
    fssize: int = 2000
    nlog: int = 30
    ninodes: int = NINODES
    ndirect: int = 12
    dirsiz: int = 14

    def __post_init__(self):
        if self.bsize <= 0 or self.bsize % self.dinode_size or self.bsize % self.dirent_size:
            raise ValueError("block size must hold whole inodes and directory entries")
        if self.nblocks <= 0:
            raise ValueError("file system too small for its metadata")

    @property
    def dinode_size(self):
        return _INODE_HEAD.size + 4 * (self.ndirect + 1)

    @property
    def dirent_size(self):
        return 2 + self.dirsiz

    @property
    def ipb(self):
        return self.bsize // self.dinode_size

    @property
    def nindirect(self):
        return self.bsize // 4

    @property
    def maxfile(self):
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self):
        return self.fssize // (self.bsize * 8) + 1

    @property
    def ninodeblocks(self):
        return self.ninodes // self.ipb + 1

    @property
    def nmeta(self):
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self):
        return self.fssize - self.nmeta

    @property
    def logstart(self):
        return 2

    @property
    def inodestart(self):
        return 2 + self.nlog

    @property
    def bmapstart(self):
        return 2 + self.nlog + self.ninodeblocks

    def iblock(self, inum):
        """Block holding inode ``inum``."""
        return inum // self.ipb + self.inodestart


@dataclass
class Superblock:
    """The on-disk description of the file system layout."""

    magic: int = FSMAGIC
    size: int = 0
    nblocks: int = 0
    ninodes: int = 0
    nlog: int = 0
    logstart: int = 0
    inodestart: int = 0
    bmapstart: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<8I")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self):
        """Serialise to little-endian bytes."""
        return self._STRUCT.pack(
            self.magic, self.size, self.nblocks, self.ninodes,
            self.nlog, self.logstart, self.inodestart, self.bmapstart,
        )

    @classmethod
    def unpack(cls, data):
        """Parse a superblock from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError("truncated superblock")
        return cls(*cls._STRUCT.unpack_from(data))


@dataclass
class DiskInode:
    """An on-disk inode: type, device numbers, link count, size and block addresses."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: List[int] = field(default_factory=list)

    def pack(self):
        """Serialise to little-endian bytes."""
        head = _INODE_HEAD.pack(self.type, self.major, self.minor, self.nlink, self.size)
        return head + struct.pack(f"<{len(self.addrs)}I", *self.addrs)

    @classmethod
    def unpack(cls, data):
        """Parse an inode; every whole word after the header is a block address."""
        if len(data) < _INODE_HEAD.size:
            raise ValueError("truncated inode")
        type_, major, minor, nlink, size = _INODE_HEAD.unpack_from(data)
        n = (len(data) - _INODE_HEAD.size) // 4
        addrs = list(struct.unpack_from(f"<{n}I", data, _INODE_HEAD.size))
        return cls(type_, major, minor, nlink, size, addrs)


class ImageBuilder:
    """Lays out a fresh file system in memory, starting with the root directory."""

    def __init__(self, layout=None):
        self.layout = layout if layout is not None else FsLayout()
        lay = self.layout
        self._disk = bytearray(lay.fssize * lay.bsize)
        self.superblock = Superblock(
            FSMAGIC, lay.fssize, lay.nblocks, lay.ninodes, lay.nlog,
            lay.logstart, lay.inodestart, lay.bmapstart,
        )
        self._write_block(1, self.superblock.pack())
        self._next_inode = 1
        self.free_block = lay.nmeta
        self._finished = False
        self.root = self.ialloc(T_DIR)
        self._add_entry(".", self.root)
        self._add_entry("..", self.root)

    def _read_block(self, bn):
        bs = self.layout.bsize
        return bytes(self._disk[bn * bs:(bn + 1) * bs])

    def _write_block(self, bn, data):
        bs = self.layout.bsize
        if len(data) > bs:
            raise ValueError("block data too long")
        self._disk[bn * bs:(bn + 1) * bs] = bytes(data).ljust(bs, b"\0")

    def _alloc_block(self):
        if self.free_block >= self.layout.fssize:
            raise ValueError("out of blocks")
        bn = self.free_block
        self.free_block += 1
        return bn

    def _inode_offset(self, inum):
        lay = self.layout
        return lay.iblock(inum) * lay.bsize + (inum % lay.ipb) * lay.dinode_size

    def read_inode(self, inum):
        """Return the inode numbered ``inum``."""
        off = self._inode_offset(inum)
        return DiskInode.unpack(bytes(self._disk[off:off + self.layout.dinode_size]))

    def write_inode(self, inum, inode):
        """Store ``inode`` as inode number ``inum``."""
        data = inode.pack()
        if len(data) != self.layout.dinode_size:
            raise ValueError("inode has the wrong number of block addresses")
        off = self._inode_offset(inum)
        self._disk[off:off + len(data)] = data

    def ialloc(self, type):
        """Allocate the next inode with the given type and one link."""
        inum = self._next_inode
        if inum >= self.layout.ninodes:
            raise ValueError("out of inodes")
        self._next_inode += 1
        self.write_inode(inum, DiskInode(
            type=type, nlink=1, size=0, addrs=[0] * (self.layout.ndirect + 1),
        ))
        return inum

    def iappend(self, inum, data):
        """Append ``data`` to the contents of inode ``inum``."""
        lay = self.layout
        bs = lay.bsize
        din = self.read_inode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // bs
            if fbn >= lay.maxfile:
                raise ValueError("file too large")
            if fbn < lay.ndirect:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._alloc_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[lay.ndirect] == 0:
                    din.addrs[lay.ndirect] = self._alloc_block()
                ind_bn = din.addrs[lay.ndirect]
                indirect = list(struct.unpack(f"<{lay.nindirect}I", self._read_block(ind_bn)))
                if indirect[fbn - lay.ndirect] == 0:
                    indirect[fbn - lay.ndirect] = self._alloc_block()
                    self._write_block(ind_bn, struct.pack(f"<{lay.nindirect}I", *indirect))
                x = indirect[fbn - lay.ndirect]
            n1 = min(len(view), (fbn + 1) * bs - off)
            start = x * bs + off - fbn * bs
            self._disk[start:start + n1] = view[:n1]
            view = view[n1:]
            off += n1
        din.size = off
        self.write_inode(inum, din)

    def _add_entry(self, name, inum):
        raw = os.fsencode(name)
        self.iappend(self.root, struct.pack(f"<H{self.layout.dirsiz}s", inum, raw))

    def add_file(self, name, data):
        """Add a file to the root directory and return its inode number.

        A leading "user/" and then a leading "_" are dropped from ``name``.
        """
        if self._finished:
            raise RuntimeError("image already finished")
        short = name[5:] if name.startswith("user/") else name
        if "/" in short:
            raise ValueError(f"{name}: file names may not contain '/'")
        if short.startswith("_"):
            short = short[1:]
        inum = self.ialloc(T_FILE)
        self._add_entry(short, inum)
        self.iappend(inum, data)
        return inum

    def finish(self):
        """Round up the root directory size and write the free bitmap.

        Returns the number of blocks in use.
        """
        if self._finished:
            raise RuntimeError("image already finished")
        bs = self.layout.bsize
        din = self.read_inode(self.root)
        din.size = (din.size // bs + 1) * bs
        self.write_inode(self.root, din)

        used = self.free_block
        if used >= bs * 8:
            raise ValueError("too many blocks for one bitmap block")
        bitmap = bytearray(bs)
        for i in range(used):
            bitmap[i // 8] |= 1 << (i % 8)
        self._write_block(self.superblock.bmapstart, bitmap)
        self._finished = True
        return used

    def image(self):
        """The disk image as bytes."""
        return bytes(self._disk)


def build_image(path, files, layout=None):
    """Write an image at ``path`` holding the named host files; return the builder."""
    with open(path, "wb") as out:
        builder = ImageBuilder(layout)
        for name in files:
            with open(name, "rb") as f:
                data = f.read()
            builder.add_file(name, data)
        builder.finish()
        out.write(builder.image())
    return builder


def main(argv=None):
    """Create a file system image: mkfs fs.img files..."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        fprintf(sys.stderr, "Usage: mkfs fs.img files...\n")
        return 1
    path, files = argv[0], argv[1:]
    layout = FsLayout()
    fprintf(
        sys.stdout,
        "nmeta %d (boot, super, log blocks %d inode blocks %d, bitmap blocks %d) blocks %d total %d\n",
        layout.nmeta, layout.nlog, layout.ninodeblocks, layout.nbitmap,
        layout.nblocks, layout.fssize,
    )
    try:
        builder = build_image(path, files, layout)
    except OSError as exc:
        fprintf(sys.stderr, "%s: %s\n", exc.filename or path, exc.strerror or str(exc))
        return 1
    except ValueError as exc:
        fprintf(sys.stderr, "mkfs: %s\n", str(exc))
        return 1
    fprintf(sys.stdout, "balloc: first %d blocks have been allocated\n", builder.free_block)
    fprintf(sys.stdout, "balloc: write bitmap block at sector %d\n", builder.superblock.bmapstart)
    return 0