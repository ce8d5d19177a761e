[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyunix"
version = "0.1.0"
description = "A small teaching Unix in Python: Sv39 page tables, a free-list heap, a shell parser, userland tools and a file-system image builder"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "unix",
    "teaching",
    "risc-v",
    "sv39",
    "page-table",
    "mkfs",
    "shell",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tinyunix-mkfs = "tinyunix.mkfs:main"
tinyunix-grep = "tinyunix.grep:main"
tinyunix-cat = "tinyunix.coreutils:cat_main"
tinyunix-echo = "tinyunix.coreutils:echo_main"
tinyunix-wc = "tinyunix.coreutils:wc_main"
tinyunix-ls = "tinyunix.coreutils:ls_main"
tinyunix-kill = "tinyunix.fileutils:kill_main"
tinyunix-ln = "tinyunix.fileutils:ln_main"
tinyunix-mkdir = "tinyunix.fileutils:mkdir_main"
tinyunix-rm = "tinyunix.fileutils:rm_main"

[tool.hatch.build.targets.wheel]
packages = ["tinyunix"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
