import pytest

from khukuri import Interpreter, KhukuriRuntimeError, run_source


def write(directory, name, text):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


def test_import_shares_globals_and_functions(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    write(tmp_path, 'lib.nep', 'maanau naam = "khukuri"\nkaam namaste(x) { pathau "namaste " + x }')
    run_source('aayaat "lib.nep"\nbhan namaste(naam)')
    assert capsys.readouterr().out == 'namaste khukuri\n'


def test_relative_paths_resolve_against_working_directory(tmp_path, monkeypatch, capsys):
    write(tmp_path, 'pkg/util.nep', 'bhan "util loaded"')
    monkeypatch.chdir(tmp_path)
    run_source('aayaat "pkg/util.nep"')
    assert capsys.readouterr().out == 'util loaded\n'


def test_same_file_runs_once(capsys):
    loads = []

    def loader(filename):
        loads.append(filename)
        return 'bhan "loaded"\nmaanau counter = 0'

    interpreter = Interpreter(source_loader=loader)
    run_source('aayaat "lib.nep"\ncounter = counter + 1\naayaat "lib.nep"\nbhan counter', interpreter)
    assert loads == ['lib.nep']
    assert capsys.readouterr().out == 'loaded\n1\n'
    assert interpreter.imported == {'lib.nep'}


def test_circular_import_is_detected(capsys):
    files = {
        'a.nep': 'bhan "a"\naayaat "b.nep"',
        'b.nep': 'bhan "b"\naayaat "a.nep"',
    }
    interpreter = Interpreter(source_loader=files.__getitem__)
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "a.nep"', interpreter)
    assert 'Circular import detected: a.nep' in exc.value.message
    assert exc.value.message.startswith("Runtime error in imported file 'a.nep'")
    assert capsys.readouterr().out == 'a\nb\n'
    assert interpreter.importing == []
    assert interpreter.imported == set()


def test_self_import_is_circular():
    interpreter = Interpreter(source_loader=lambda name: 'aayaat "self.nep"')
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "self.nep"', interpreter)
    assert exc.value.message == (
        "Runtime error in imported file 'self.nep': Circular import detected: self.nep")


def test_missing_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "chaina.nep"')
    assert exc.value.message.startswith("Import error: cannot read file 'chaina.nep'")
    assert exc.value.line == 1


def test_syntax_error_in_imported_file():
    interpreter = Interpreter(source_loader=lambda name: 'maanau = 5')
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "kharab.nep"', interpreter)
    assert exc.value.message.startswith("Import error in 'kharab.nep': Syntax Error line 1 ma")
    assert interpreter.importing == []


def test_runtime_error_in_imported_file():
    interpreter = Interpreter(source_loader=lambda name: 'bhan 1 / 0')
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "bigriyo.nep"', interpreter)
    assert exc.value.message == "Runtime error in imported file 'bigriyo.nep': Division by zero"


def test_failed_import_can_be_retried(capsys):
    attempts = []

    def loader(filename):
        attempts.append(filename)
        if len(attempts) == 1:
            return 'bhan ghost'
        return 'bhan "thik"'

    interpreter = Interpreter(source_loader=loader)
    with pytest.raises(KhukuriRuntimeError):
        run_source('aayaat "lib.nep"', interpreter)
    run_source('aayaat "lib.nep"', interpreter)
    assert attempts == ['lib.nep', 'lib.nep']
    assert capsys.readouterr().out == 'thik\n'


def test_break_at_top_level_of_import():
    interpreter = Interpreter(source_loader=lambda name: 'rok')
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "lib.nep"', interpreter)
    assert exc.value.message == (
        "Runtime error in imported file 'lib.nep': Break statement outside loop")


def test_undecodable_file_is_an_import_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'kharab.nep').write_bytes(b'bhan "\xff\xfe"\n')
    interpreter = Interpreter()
    with pytest.raises(KhukuriRuntimeError) as exc:
        run_source('aayaat "kharab.nep"', interpreter)
    assert exc.value.message.startswith("Import error: cannot read file 'kharab.nep': ")
    assert "can't decode" in exc.value.message
    assert interpreter.importing == []
