"""Pieces of a small teaching Unix: page tables, user library, shell parser, tools and mkfs."""

__version__ = "0.1.0"

__all__ = [
    "coreutils",
    "elf",
    "fileutils",
    "fmt",
    "grep",
    "grind",
    "mkfs",
    "riscv",
    "sh",
    "ulib",
    "umalloc",
    "vm",
]