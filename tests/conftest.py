import pytest

SAMPLE_MAP = """\
# Path: /Users/dev/Build/Products/Debug/demo
# Arch: arm64
# Object files:
[  0] linker synthesized
[  1] /Users/dev/Build/demo.build/main.o
[  2] /usr/lib/libSystem.tbd
# Sections:
# Address\tSize    \tSegment\tSection
0x100003F54\t0x00000048\t__TEXT\t__text
0x100003F9C\t0x0000000C\t__TEXT\t__stubs
0x100004000\t0x00000008\t__DATA_CONST\t__got
# Symbols:
# Address\tSize    \tFile  Name
0x100003F54\t0x00000020\t[  1] _main
0x100003F74\t0x00000028\t[  1] __ZN3foo3barEv
0x100003F9C\t0x0000000C\t[  2] _printf
# Dead Stripped Symbols:
#        \tSize    \tFile  Name
<<dead>> \t0x00000010\t[  1] _unused_helper
<<dead>> \t0x00000004\t[  1] __ZN3foo6unusedEi
"""


@pytest.fixture
def sample_map(tmp_path):
    path = tmp_path / "demo-LinkMap-normal-arm64.txt"
    path.write_text(SAMPLE_MAP)
    return path
