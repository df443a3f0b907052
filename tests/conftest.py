import pytest

WORKED_EXAMPLE = """\
a b c
0 1
0 1 _
a
b
c
a 0 a 1 R
"""

EVEN_ZEROS = """\
# Acepta las cadenas binarias con un número par de ceros.
even odd accept reject
0 1
0 1 _
even
accept
reject

even 0 odd 0 R
even 1 even 1 R
odd 0 even 0 R
odd 1 odd 1 R
even _ accept _ R
odd _ reject _ R
"""


@pytest.fixture
def worked_example_text():
    return WORKED_EXAMPLE


@pytest.fixture
def even_zeros_text():
    return EVEN_ZEROS
