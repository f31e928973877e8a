import glob
import os
import zipfile

import pytest

import vapt_runner
from vapt_runner import main


@pytest.fixture
def no_tools(monkeypatch):
    monkeypatch.setattr(vapt_runner, "check_tool", lambda name: None)


@pytest.fixture
def no_spawn(monkeypatch):
    def forbidden(cmd, **kwargs):
        raise AssertionError(f"nothing should be spawned, got {cmd}")
    monkeypatch.setattr(vapt_runner.subprocess, "run", forbidden)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(vapt_runner.WPSCAN_TOKEN_ENV, raising=False)
    return tmp_path


@pytest.mark.parametrize("target", ["", "   ", "\t", "https://", "http:///"])
def test_empty_target_exits_without_output(workdir, answers, no_tools, target):
    answers(target, "yes")
    with pytest.raises(SystemExit) as exc:
        main(["--output-root", str(workdir)])
    assert exc.value.code == 1
    assert os.listdir(workdir) == []


def test_cli_options_reach_the_run(workdir, answers, no_tools, monkeypatch):
    seen = []
    monkeypatch.setattr(vapt_runner, "run_steps", seen.append)
    answers("example.com", "yes")

    main(["--output-root", str(workdir), "--wordlist", "/tmp/words.txt",
          "--timeout", "30", "--builtin-fallbacks"])

    state, = seen
    assert state.wordlist == "/tmp/words.txt"
    assert state.timeout == 30.0
    assert state.builtin_fallbacks is True


def test_defaults_when_no_options_given(workdir, answers, no_tools, monkeypatch):
    seen = []
    monkeypatch.setattr(vapt_runner, "run_steps", seen.append)
    answers("example.com", "yes")

    main(["--output-root", str(workdir)])

    state, = seen
    assert state.wordlist == vapt_runner.DEFAULT_WORDLIST
    assert state.timeout is None
    assert state.builtin_fallbacks is False


@pytest.mark.parametrize("reply", ["no", "", "y", "yes please", "ja"])
def test_declined_consent_exits_before_scanning(workdir, answers, monkeypatch, reply):
    def must_not_probe(name):
        raise AssertionError("tool inventory must not run without consent")
    monkeypatch.setattr(vapt_runner, "check_tool", must_not_probe)
    answers("example.com", reply)

    with pytest.raises(SystemExit) as exc:
        main(["--output-root", str(workdir)])

    assert exc.value.code == 1
    assert os.listdir(workdir) == []


def test_eof_at_prompt_is_an_empty_answer(workdir, monkeypatch, no_tools):
    def eof(prompt=""):
        raise EOFError
    monkeypatch.setattr("builtins.input", eof)
    with pytest.raises(SystemExit) as exc:
        main(["--output-root", str(workdir)])
    assert exc.value.code == 1


EXPECTED_FILES = {
    "env_uname.txt", "env_lsb.txt", "README.txt",
    "whois.txt", "dig_any.txt", "dig_ns.txt", "subdomains.txt",
    "nmap_full.txt", "nmap_scripts.txt",
    "nikto_note.txt", "wapiti_note.txt", "gobuster_note.txt",
    "headers_https.txt", "headers_http.txt", "nmap_ssl_enum.txt",
    "sqlmap_note.txt", "whatweb_note.txt", "wpscan_note.txt",
    "zap_instructions.txt", "SUMMARY.txt", "run_log.json",
}


def test_end_to_end_with_no_tools_installed(workdir, answers, no_tools, no_spawn, capsys):
    answers("example.com", "YES")

    main(["--output-root", str(workdir)])

    dirs = [d for d in glob.glob(str(workdir / "VAPT_example.com_*")) if os.path.isdir(d)]
    archives = glob.glob(str(workdir / "VAPT_example.com_*.zip"))
    assert len(dirs) == 1 and len(archives) == 1
    outdir = dirs[0]

    assert set(os.listdir(outdir)) == EXPECTED_FILES

    with open(os.path.join(outdir, "SUMMARY.txt"), encoding="utf-8") as fh:
        summary = fh.read()
    assert "Target: example.com" in summary
    for tool in vapt_runner.TOOLS + ["zaproxy"]:
        assert f"{tool} : 0" in summary

    dirname = os.path.basename(outdir)
    with zipfile.ZipFile(archives[0]) as zf:
        names = set(zf.namelist())
    assert {f"{dirname}/{name}" for name in EXPECTED_FILES} <= names

    assert "100%  Finished" in capsys.readouterr().out


def test_strict_mode_fails_on_nonzero_exit(workdir, answers, monkeypatch, fake_run):
    monkeypatch.setattr(vapt_runner, "check_tool",
                        lambda name: "/usr/bin/whois" if name == "whois" else None)
    fake_run.outputs["whois"] = ("error\n", 1)
    answers("example.com", "yes")

    with pytest.raises(SystemExit) as exc:
        main(["--output-root", str(workdir), "--strict"])
    assert exc.value.code == 2


def test_lenient_by_default_on_nonzero_exit(workdir, answers, monkeypatch, fake_run):
    monkeypatch.setattr(vapt_runner, "check_tool",
                        lambda name: "/usr/bin/whois" if name == "whois" else None)
    fake_run.outputs["whois"] = ("error\n", 1)
    answers("example.com", "yes")

    assert main(["--output-root", str(workdir)]) is None


def test_interrupt_stops_the_sweep(workdir, answers, monkeypatch):
    monkeypatch.setattr(vapt_runner, "check_tool",
                        lambda name: "/usr/bin/whois" if name == "whois" else None)

    def interrupted(cmd, **kwargs):
        raise KeyboardInterrupt
    monkeypatch.setattr(vapt_runner.subprocess, "run", interrupted)
    answers("example.com", "yes")

    with pytest.raises(SystemExit) as exc:
        main(["--output-root", str(workdir)])
    assert exc.value.code == 130
    assert glob.glob(str(workdir / "VAPT_example.com_*.zip")) == []


def test_token_comes_from_environment(workdir, answers, monkeypatch, fake_run):
    monkeypatch.setattr(vapt_runner, "check_tool",
                        lambda name: f"/usr/bin/{name}" if name in ("whatweb", "wpscan") else None)
    monkeypatch.setenv(vapt_runner.WPSCAN_TOKEN_ENV, "env-token")
    fake_run.outputs["whatweb"] = ("WordPress[6.4]\n", 0)
    answers("https://example.com", "yes")

    main(["--output-root", str(workdir)])

    wpscan = [cmd for cmd in fake_run.calls if cmd[0].endswith("wpscan")]
    assert len(wpscan) == 1
    assert wpscan[0][wpscan[0].index("--api-token") + 1] == "env-token"
    assert wpscan[0][wpscan[0].index("--url") + 1] == "https://example.com"


def test_archive_path_is_printed_once(workdir, answers, no_tools, no_spawn, capsys):
    answers("example.com", "yes")

    main(["--output-root", str(workdir)])

    assert capsys.readouterr().out.count("Archive:") == 1
