from pathlib import Path

import pytest

from khukuri import run_file


EXAMPLES_DIR = Path(__file__).parent.parent / 'examples'

EXPECTED_OUTPUT = {
    'program_1.nep': ['8'],
    'program_2.nep': ['5', 'jodh: 10.5'],
    'program_3.nep': ['1', '2', 'Fizz', '4', 'Buzz', 'Fizz', '7', '8', 'Fizz', 'Buzz',
                      '11', 'Fizz', '13', '14', 'FizzBuzz'],
    'program_4.nep': ['aanp', 'kera', 'suntala', 'a', 'b', 'ram 20'],
    'program_5.nep': ['120', '2', '-1'],
    'program_6.nep': ['25'],
    'program_7.nep': ['[1, 2, 3]', '[100, 2, 3]', '2', '{"k": 2, "naya": sahi}'],
    'program_8.nep': ['16', '6.28'],
}


@pytest.mark.parametrize('name', sorted(EXPECTED_OUTPUT))
def test_example_program(name, monkeypatch, capsys):
    # Imports resolve against the working directory.
    monkeypatch.chdir(EXAMPLES_DIR)
    run_file(name)
    captured = capsys.readouterr()
    assert captured.out.splitlines() == EXPECTED_OUTPUT[name]
