import pytest

from pktbench.cli import BANNER, COMMANDS, main, run_command


def test_run_command_unknown_name(capsys):
    assert run_command(["bogus"]) == 1
    err = capsys.readouterr().err
    assert "Wrong command name: bogus." in err


def test_run_command_empty_raises():
    with pytest.raises(ValueError):
        run_command([])


@pytest.mark.parametrize("name", sorted(COMMANDS))
def test_every_command_reports_usage_on_bad_option(name, capsys):
    assert run_command([name, "-x"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("USAGE\n")
    assert f"\t{name} <program-options-unordered-list>" in err


def test_run_command_missing_option_argument(capsys):
    assert run_command(["server", "-p"]) == 1
    assert "PARAMETERS" in capsys.readouterr().err


def test_main_without_arguments_does_nothing(capsys):
    assert main([]) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_main_prints_banner_before_dispatch(capsys):
    assert main(["nothing-here"]) == 1
    captured = capsys.readouterr()
    assert captured.out.splitlines()[0] == BANNER
    assert "Wrong command name: nothing-here." in captured.err


def test_main_dispatches_to_program(capsys):
    assert main(["recv", "-z"]) == 1
    captured = capsys.readouterr()
    assert captured.out.startswith(BANNER)
    assert "\trecv <program-options-unordered-list>" in captured.err


@pytest.mark.parametrize("name", ["server", "client", "clientst", "send", "recv"])
def test_dpdk_names_behave_like_plain_names(name, capsys):
    assert run_command([name, "-x"]) == 1
    plain = capsys.readouterr()
    assert run_command([f"dpdk-{name}", "-x"]) == 1
    prefixed = capsys.readouterr()
    assert prefixed.err == plain.err.replace(f"\t{name} ", f"\tdpdk-{name} ")
    assert prefixed.out == plain.out